from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..database.memory_base import InMemoryTable
from .model import (
    AttendanceFilter,
    AttendanceRecord,
    AttendanceStatistics,
    HistoryEntry,
    SummaryBucket,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class InMemoryAttendanceRepository(InMemoryTable[AttendanceRecord], AttendanceRepository):
    """Attendance records keyed by id, with a secondary (class, subject, date) index.

    Present/total are recomputed against the class's *current* active roster
    on every write, so roster edits show up in old records the next time they
    are rewritten.
    """

    table_name = "attendance"

    def _roster_ids(self, class_id: int) -> list[int]:
        cls = self._db.tables["classes"].get(class_id)
        return cls.active_student_ids if cls else []

    def get_by_triple(self, class_id: int, subject_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with self._db.session():
            record_id = self._db.attendance_keys.get((int(class_id), int(subject_id), attendance_date))
            return self._rows().get(record_id) if record_id is not None else None

    def submit(
        self,
        *,
        teacher_id: int,
        class_id: int,
        subject_id: int,
        attendance_date: date,
        absent_student_ids: Sequence[int],
        notes: str = "",
        submitted_by: Optional[int] = None,
    ) -> AttendanceRecord:
        key = (int(class_id), int(subject_id), attendance_date)
        absent = tuple(dict.fromkeys(int(s) for s in absent_student_ids))
        submitter = int(submitted_by if submitted_by is not None else teacher_id)

        # Look-up and write happen under one lock acquisition so two
        # submissions for the same key can never both insert.
        with self._db.session():
            now = self._db.now()
            roster = self._roster_ids(key[0])
            absent_set = set(absent)
            present = tuple(s for s in roster if s not in absent_set)

            existing_id = self._db.attendance_keys.get(key)
            if existing_id is not None:
                existing = self._rows()[existing_id]
                record = replace(
                    existing,
                    teacher_id=int(teacher_id),
                    absent_student_ids=absent,
                    present_student_ids=present,
                    total_students=len(roster),
                    notes=notes,
                    submitted_at=now,
                    submitted_by=submitter,
                    updated_at=now,
                )
                action = "updated"
            else:
                record = AttendanceRecord(
                    attendance_id=self._db.next_id(self.table_name),
                    teacher_id=int(teacher_id),
                    class_id=key[0],
                    subject_id=key[1],
                    attendance_date=attendance_date,
                    absent_student_ids=absent,
                    present_student_ids=present,
                    total_students=len(roster),
                    notes=notes,
                    submitted_at=now,
                    submitted_by=submitter,
                    created_at=now,
                    updated_at=now,
                )
                self._db.attendance_keys[key] = record.attendance_id
                action = "created"

            self._rows()[record.attendance_id] = record

        logger.debug("attendance: %s id=%s key=%s", action, record.attendance_id, key)
        return record

    def update_record(
        self,
        attendance_id: int,
        *,
        absent_student_ids: Optional[Sequence[int]] = None,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        with self._db.session():
            current = self._rows().get(int(attendance_id))
            if current is None:
                return None

            absent = (
                tuple(dict.fromkeys(int(s) for s in absent_student_ids))
                if absent_student_ids is not None
                else current.absent_student_ids
            )
            roster = self._roster_ids(current.class_id)
            absent_set = set(absent)
            updated = replace(
                current,
                absent_student_ids=absent,
                present_student_ids=tuple(s for s in roster if s not in absent_set),
                total_students=len(roster),
                notes=current.notes if notes is None else notes,
                updated_at=self._db.now(),
            )
            self._rows()[updated.attendance_id] = updated
            return updated

    def delete_record(self, attendance_id: int) -> bool:
        with self._db.session():
            record = self._rows().pop(int(attendance_id), None)
            if record is None:
                return False
            self._db.attendance_keys.pop(record.key, None)
        logger.debug("attendance: deleted id=%s", attendance_id)
        return True

    def soft_delete(self, attendance_id: int) -> bool:
        raise TypeError("Attendance records are hard-deleted; use delete_record")

    def list_records(self, filters: Optional[AttendanceFilter] = None) -> Sequence[AttendanceRecord]:
        criteria = filters or AttendanceFilter()
        if not isinstance(criteria, AttendanceFilter):
            raise TypeError(f"filters must be AttendanceFilter, got {type(criteria).__name__}")
        return self._scan(criteria.matches)

    def get_statistics(self, filters: Optional[AttendanceFilter] = None) -> AttendanceStatistics:
        with self._db.session():
            records = self.list_records(filters)
            classes = self._db.tables["classes"]
            subjects = self._db.tables["subjects"]

            total_students = total_present = total_absent = 0
            by_class: dict[int, SummaryBucket] = {}
            by_subject: dict[int, SummaryBucket] = {}
            by_date: dict[date, SummaryBucket] = {}

            for r in records:
                total_students += r.total_students
                total_present += r.present_count
                total_absent += r.absent_count

                if r.class_id not in by_class:
                    cls = classes.get(r.class_id)
                    by_class[r.class_id] = SummaryBucket(name=cls.name if cls else None)
                by_class[r.class_id].add(r)

                if r.subject_id not in by_subject:
                    subject = subjects.get(r.subject_id)
                    by_subject[r.subject_id] = SummaryBucket(name=subject.name if subject else None)
                by_subject[r.subject_id].add(r)

                by_date.setdefault(r.attendance_date, SummaryBucket()).add(r)

        rate = round(total_present / total_students * 100, 2) if total_students > 0 else 0.0
        return AttendanceStatistics(
            total_records=len(records),
            total_students=total_students,
            total_present=total_present,
            total_absent=total_absent,
            attendance_rate=rate,
            class_summary=by_class,
            subject_summary=by_subject,
            daily_summary=by_date,
        )

    def get_student_history(self, student_id: int, filters: Optional[AttendanceFilter] = None) -> Sequence[HistoryEntry]:
        history: list[HistoryEntry] = []
        with self._db.session():
            classes = self._db.tables["classes"]
            subjects = self._db.tables["subjects"]
            for r in self.list_records(filters):
                mark = r.mark_for(int(student_id))
                if mark is None:
                    continue
                cls = classes.get(r.class_id)
                subject = subjects.get(r.subject_id)
                history.append(
                    HistoryEntry(
                        attendance_date=r.attendance_date,
                        class_id=r.class_id,
                        class_name=cls.name if cls else None,
                        subject_id=r.subject_id,
                        subject_name=subject.name if subject else None,
                        status=mark,
                        submitted_at=r.submitted_at,
                    )
                )

        history.sort(key=lambda h: h.attendance_date, reverse=True)
        return history
