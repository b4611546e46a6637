from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_int
from ..common.web import current_user, json_body, login_required, ok, principal_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.route("/api/schedules", endpoint="list_schedules")
    @login_required
    def list_schedules():
        user_id, role = current_user()
        teacher_id = request.args.get("teacherId")
        class_id = request.args.get("classId")
        if role == Role.TEACHER:
            teacher_id = user_id
        schedules = service.list_schedules(
            teacher_id=require_int(teacher_id, "Teacher ID") if teacher_id else None,
            class_id=require_int(class_id, "Class ID") if class_id else None,
            day_of_week=request.args.get("day") or None,
        )
        return ok([s.to_dict() for s in schedules])

    @app.route("/api/schedules/teacher/<int:teacher_id>", endpoint="teacher_schedule")
    @login_required
    def teacher_schedule(teacher_id: int):
        user_id, role = current_user()
        rows = service.teacher_schedule(
            current_user_id=user_id,
            current_role=role,
            teacher_id=teacher_id,
            day_of_week=request.args.get("day") or None,
        )
        return ok([r.to_dict() for r in rows])

    @app.route("/api/schedules", methods=["POST"], endpoint="create_schedule")
    @principal_required
    def create_schedule():
        _, role = current_user()
        data = json_body()
        schedule = service.create(
            current_role=role,
            teacher_id=data.get("teacherId"),
            class_id=data.get("classId"),
            subject_id=data.get("subjectId"),
            day_of_week=data.get("dayOfWeek", ""),
            start_time=data.get("startTime", ""),
            end_time=data.get("endTime", ""),
            room=data.get("room"),
        )
        return ok(schedule.to_dict(), 201, message="Schedule created successfully")

    @app.route("/api/schedules/<int:schedule_id>", methods=["PUT"], endpoint="update_schedule")
    @principal_required
    def update_schedule(schedule_id: int):
        _, role = current_user()
        data = json_body()
        fields = {
            "teacher_id": data.get("teacherId"),
            "class_id": data.get("classId"),
            "subject_id": data.get("subjectId"),
            "day_of_week": data.get("dayOfWeek"),
            "start_time": data.get("startTime"),
            "end_time": data.get("endTime"),
        }
        if "room" in data:
            fields["room"] = data["room"]
        schedule = service.update(current_role=role, schedule_id=schedule_id, **fields)
        return ok(schedule.to_dict(), message="Schedule updated successfully")

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="delete_schedule")
    @principal_required
    def delete_schedule(schedule_id: int):
        _, role = current_user()
        service.delete(current_role=role, schedule_id=schedule_id)
        return ok(message="Schedule deleted successfully")
