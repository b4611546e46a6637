"""Export and import the whole store as one JSON-serialisable snapshot."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..attendance.model import AttendanceRecord
from ..classes.model import SchoolClass
from ..common.datetime_utils import to_iso
from ..core.constants import EXPORT_FORMAT_VERSION
from ..core.exceptions import ValidationError
from ..schedules.model import Schedule
from ..settings.model import SchoolSettings
from ..subjects.model import Subject
from ..users.model import User
from .memory import InMemoryDatabase

logger = logging.getLogger(__name__)

_ENTITY_TYPES = {
    "users": User,
    "classes": SchoolClass,
    "subjects": Subject,
    "schedules": Schedule,
    "attendance": AttendanceRecord,
}


def export_snapshot(db: InMemoryDatabase) -> dict[str, Any]:
    with db.session():
        data: dict[str, Any] = {
            name: [row.to_dict() for row in db.tables[name].values()] for name in _ENTITY_TYPES
        }
        data["settings"] = db.settings.to_dict()
        data["exportedAt"] = to_iso(db.now())
    data["version"] = EXPORT_FORMAT_VERSION
    return data


def _parse_table(name: str, rows: Any) -> dict[int, Any]:
    if rows is None:
        return {}
    if not isinstance(rows, list):
        raise ValidationError(f"Invalid import data: '{name}' must be a list")
    entity = _ENTITY_TYPES[name]
    parsed: dict[int, Any] = {}
    for raw in rows:
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Invalid import data in '{name}': rows must be objects")
        try:
            row_id = int(raw["id"])
            row = entity.from_dict(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid import data in '{name}': {e}") from e
        if row_id in parsed:
            raise ValidationError(f"Invalid import data in '{name}': duplicate id {row_id}")
        parsed[row_id] = row
    return parsed


def _check_attendance_keys(records: dict[int, AttendanceRecord]) -> None:
    seen: set = set()
    for record in records.values():
        if record.key in seen:
            class_id, subject_id, day = record.key
            raise ValidationError(
                f"Invalid import data in 'attendance': more than one record for "
                f"class {class_id}, subject {subject_id} on {day.isoformat()}"
            )
        seen.add(record.key)


def import_snapshot(db: InMemoryDatabase, data: Any) -> dict[str, int]:
    """Replace the entire store with the snapshot contents.

    Everything is parsed before the store is touched, so a malformed snapshot
    leaves the current contents in place. Returns the per-table row counts.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Invalid import data")

    tables = {name: _parse_table(name, data.get(name)) for name in _ENTITY_TYPES}
    _check_attendance_keys(tables["attendance"])

    raw_settings = data.get("settings")
    if raw_settings and not isinstance(raw_settings, Mapping):
        raise ValidationError("Invalid import data: 'settings' must be an object")
    try:
        settings = SchoolSettings.from_dict(raw_settings) if raw_settings else None
    except (AttributeError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid import data in 'settings': {e}") from e

    with db.session():
        db.tables = tables
        if settings is not None:
            db.settings = settings
        db.rebuild_counters()
        counts = db.counts()

    logger.info("Snapshot imported (version=%s): %s", data.get("version", "unknown"), counts)
    return counts


def load_snapshot_file(db: InMemoryDatabase, path: Path) -> dict[str, int]:
    with Path(path).open("r", encoding="utf-8") as f:
        return import_snapshot(db, json.load(f))
