from __future__ import annotations

import logging
from typing import Any, Mapping

from ..common.validators import require_hhmm, require_non_empty
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.store import AttendanceStore
from ..users.service import require_principal
from .model import SchoolSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

_TEXT_FIELDS = {
    "schoolName": ("school_name", "School name"),
    "academicYear": ("academic_year", "Academic year"),
    "currentSemester": ("current_semester", "Current semester"),
    "timezone": ("timezone", "Timezone"),
}


class SettingsService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get(self) -> SchoolSettings:
        return self._settings.get()

    def update(self, *, current_role: Role, values: Mapping[str, Any]) -> SchoolSettings:
        require_principal(current_role)

        changes: dict[str, Any] = {}
        for key, (attr, label) in _TEXT_FIELDS.items():
            if values.get(key) is not None:
                changes[attr] = require_non_empty(values[key], label)
        if values.get("attendanceDeadline") is not None:
            changes["attendance_deadline"] = require_hhmm(values["attendanceDeadline"], "Attendance deadline")

        if not changes:
            raise ValidationError("Nothing to update")
        return self._settings.update(**changes)


class BackupService:
    """Use case: export / import the whole store (principal only)."""

    def __init__(self, store: AttendanceStore):
        self._store = store

    def export(self, *, current_role: Role) -> dict[str, Any]:
        require_principal(current_role)
        data = self._store.export_snapshot()
        logger.info("Snapshot exported")
        return data

    def restore(self, *, current_role: Role, data: Any) -> dict[str, int]:
        require_principal(current_role)
        return self._store.import_snapshot(data)
