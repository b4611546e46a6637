from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from .attendance.service import AttendanceService
from .classes.service import ClassService
from .common.datetime_utils import utc_now
from .database.store import AttendanceStore
from .schedules.service import ScheduleService
from .settings.service import BackupService, SettingsService
from .subjects.service import SubjectService
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    store: AttendanceStore

    auth_service: AuthService
    user_service: UserService
    class_service: ClassService
    subject_service: SubjectService
    schedule_service: ScheduleService
    attendance_service: AttendanceService
    settings_service: SettingsService
    backup_service: BackupService


def build_container(*, store: AttendanceStore | None = None, clock: Callable[[], datetime] = utc_now) -> Container:
    store = store or AttendanceStore.create(clock=clock)

    auth_service = AuthService(store.users)
    user_service = UserService(store.users)
    class_service = ClassService(store.classes, store.users, store.schedules, store.attendance)
    subject_service = SubjectService(store.subjects, store.schedules, store.attendance)
    schedule_service = ScheduleService(store.schedules, store.users, store.classes, store.subjects)
    attendance_service = AttendanceService(
        store.attendance,
        store.classes,
        store.subjects,
        store.users,
        schedule_service,
        clock=store.db.now,
    )
    settings_service = SettingsService(store.settings)
    backup_service = BackupService(store)

    return Container(
        store=store,
        auth_service=auth_service,
        user_service=user_service,
        class_service=class_service,
        subject_service=subject_service,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
        settings_service=settings_service,
        backup_service=backup_service,
    )
