from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from .memory import InMemoryDatabase

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InMemoryTable(Generic[T]):
    """Shared CRUD helpers for repositories backed by one InMemoryDatabase table.

    Entities are frozen dataclasses carrying `is_active` and `updated_at`.
    Lookups by id include inactive rows; callers filter when they need to.
    """

    table_name: str = ""

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def _rows(self) -> dict[int, T]:
        return self._db.tables[self.table_name]

    def _scan(self, predicate: Callable[[T], bool]) -> list[T]:
        with self._db.session():
            return [row for row in self._rows().values() if predicate(row)]

    def _insert(self, build: Callable[[int, datetime], T]) -> T:
        with self._db.session():
            new_id = self._db.next_id(self.table_name)
            row = build(new_id, self._db.now())
            self._rows()[new_id] = row
        logger.debug("%s: inserted id=%s", self.table_name, new_id)
        return row

    def _replace(self, record_id: int, changes: dict[str, Any]) -> Optional[T]:
        with self._db.session():
            row = self._rows().get(int(record_id))
            if row is None:
                return None
            updated = replace(row, **changes, updated_at=self._db.now())
            self._rows()[int(record_id)] = updated
        logger.debug("%s: updated id=%s fields=%s", self.table_name, record_id, sorted(changes))
        return updated

    def get_by_id(self, record_id: int) -> Optional[T]:
        with self._db.session():
            return self._rows().get(int(record_id))

    def soft_delete(self, record_id: int) -> bool:
        """Flag the row inactive. Repeating the call on an inactive row is fine."""
        return self._replace(record_id, {"is_active": False}) is not None


def reject_fields(changes: dict[str, Any], forbidden: Iterable[str], entity: str) -> None:
    """Guard against generic updates touching fields owned by a dedicated path."""
    blocked = sorted(set(changes) & set(forbidden))
    if blocked:
        raise TypeError(f"{entity} update cannot change {', '.join(blocked)}")
