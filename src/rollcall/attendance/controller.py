from __future__ import annotations

import logging

from flask import Flask, request

from ..common.web import current_user, json_body, login_required, ok
from ..container import Container
from ..core.enums import AttendanceMark
from .service import filter_from_params

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _announce(action: str, record) -> None:
        # One change-event line per attendance write.
        logger.info(
            "attendance_%s id=%s class=%s subject=%s date=%s",
            action, record.attendance_id, record.class_id, record.subject_id, record.attendance_date.isoformat(),
        )

    @app.route("/api/attendance", endpoint="list_attendance")
    @login_required
    def list_attendance():
        user_id, role = current_user()
        records = service.list_records(
            current_user_id=user_id,
            current_role=role,
            filters=filter_from_params(request.args),
        )
        return ok([service.format_record(r) for r in records], count=len(records))

    @app.route("/api/attendance", methods=["POST"], endpoint="submit_attendance")
    @login_required
    def submit_attendance():
        user_id, role = current_user()
        data = json_body()
        record = service.submit(
            current_user_id=user_id,
            current_role=role,
            class_id=data.get("classId"),
            subject_id=data.get("subjectId"),
            attendance_date=data.get("date"),
            absent_student_ids=data.get("absentStudents"),
            notes=data.get("notes"),
        )
        _announce("submitted", record)
        return ok(service.format_record(record), 201, message="Attendance submitted successfully")

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="bulk_attendance")
    @login_required
    def bulk_attendance():
        user_id, role = current_user()
        data = json_body()
        result = service.bulk_submit(current_user_id=user_id, current_role=role, records=data.get("records"))
        for record in result.successful:
            _announce("submitted", record)
        return ok(
            {
                "successful": [service.format_record(r) for r in result.successful],
                "failed": result.failed,
            },
            message=f"Bulk attendance: {len(result.successful)} successful, {len(result.failed)} failed",
        )

    @app.route("/api/attendance/statistics", endpoint="attendance_statistics")
    @login_required
    def attendance_statistics():
        user_id, role = current_user()
        stats = service.statistics(
            current_user_id=user_id,
            current_role=role,
            filters=filter_from_params(request.args),
        )
        return ok(stats.to_dict())

    @app.route("/api/attendance/student/<int:student_id>", endpoint="student_attendance")
    @login_required
    def student_attendance(student_id: int):
        match, history = service.student_history(student_id, filter_from_params(request.args))
        present = sum(1 for h in history if h.status == AttendanceMark.PRESENT)
        return ok(
            {
                "student": match.to_dict(),
                "history": [h.to_dict() for h in history],
                "summary": {
                    "totalRecords": len(history),
                    "present": present,
                    "absent": len(history) - present,
                    "attendanceRate": round(present / len(history) * 100) if history else 0,
                },
            }
        )

    @app.route("/api/attendance/<int:attendance_id>", endpoint="get_attendance")
    @login_required
    def get_attendance(attendance_id: int):
        user_id, role = current_user()
        record = service.get_record(current_user_id=user_id, current_role=role, attendance_id=attendance_id)
        return ok(service.format_record(record))

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="update_attendance")
    @login_required
    def update_attendance(attendance_id: int):
        user_id, role = current_user()
        data = json_body()
        record = service.update(
            current_user_id=user_id,
            current_role=role,
            attendance_id=attendance_id,
            absent_student_ids=data.get("absentStudents"),
            notes=data.get("notes"),
        )
        _announce("updated", record)
        return ok(service.format_record(record), message="Attendance updated successfully")

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="delete_attendance")
    @login_required
    def delete_attendance(attendance_id: int):
        user_id, role = current_user()
        record = service.delete(current_user_id=user_id, current_role=role, attendance_id=attendance_id)
        _announce("deleted", record)
        return ok(message="Attendance record deleted successfully")
