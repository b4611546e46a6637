from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Callable, Iterator

from ..common.datetime_utils import utc_now
from ..settings.model import SchoolSettings

logger = logging.getLogger(__name__)

TABLES = ("users", "classes", "subjects", "schedules", "attendance")
COUNTERS = TABLES + ("students",)


class InMemoryDatabase:
    """Process-local store for every collection plus the settings record.

    Each table maps id -> frozen entity and keeps insertion order. All access
    goes through `session()`, which holds one re-entrant lock for the whole
    store, so a repository method (or a group of them) runs as one unit.

    Note: Constructed by the composition root (see container.py), never as a
    module-level global, so tests get an isolated instance each.
    """

    def __init__(self, *, clock: Callable[[], datetime] = utc_now):
        self._lock = threading.RLock()
        self._clock = clock
        self.tables: dict[str, dict[int, Any]] = {}
        self.counters: dict[str, int] = {}
        self.attendance_keys: dict[tuple[int, int, date], int] = {}
        self.settings = SchoolSettings()
        self.reset()

    @contextmanager
    def session(self) -> Iterator["InMemoryDatabase"]:
        with self._lock:
            yield self

    def now(self) -> datetime:
        return self._clock()

    def reset(self) -> None:
        """Drop every record, restart the id counters and restore default settings."""
        with self._lock:
            self.tables = {name: {} for name in TABLES}
            self.counters = {name: 0 for name in COUNTERS}
            self.attendance_keys = {}
            self.settings = SchoolSettings()
        logger.debug("In-memory database reset")

    def next_id(self, counter: str) -> int:
        with self._lock:
            self.counters[counter] += 1
            return self.counters[counter]

    def rebuild_counters(self) -> None:
        """Set each counter to the highest id present so new ids never collide."""
        with self._lock:
            for name in TABLES:
                self.counters[name] = max(self.tables[name].keys(), default=0)
            self.counters["students"] = max(
                (s.student_id for c in self.tables["classes"].values() for s in c.students),
                default=0,
            )
            self.attendance_keys = {r.key: r.attendance_id for r in self.tables["attendance"].values()}

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {name: len(rows) for name, rows in self.tables.items()}
