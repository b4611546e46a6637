from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user, json_body, login_required, ok, principal_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.subject_service

    @app.route("/api/subjects", endpoint="list_subjects")
    @login_required
    def list_subjects():
        subjects = service.list_subjects(code=request.args.get("code") or None)
        return ok([s.to_dict() for s in subjects])

    @app.route("/api/subjects", methods=["POST"], endpoint="create_subject")
    @principal_required
    def create_subject():
        _, role = current_user()
        data = json_body()
        subject = service.create(
            current_role=role,
            name=data.get("name", ""),
            code=data.get("code", ""),
            description=data.get("description"),
        )
        return ok(subject.to_dict(), 201, message="Subject created successfully")

    @app.route("/api/subjects/<int:subject_id>", endpoint="get_subject")
    @login_required
    def get_subject(subject_id: int):
        return ok(service.get_subject(subject_id).to_dict())

    @app.route("/api/subjects/<int:subject_id>", methods=["PUT"], endpoint="update_subject")
    @principal_required
    def update_subject(subject_id: int):
        _, role = current_user()
        data = json_body()
        subject = service.update(
            current_role=role,
            subject_id=subject_id,
            name=data.get("name"),
            code=data.get("code"),
            description=data.get("description"),
        )
        return ok(subject.to_dict(), message="Subject updated successfully")

    @app.route("/api/subjects/<int:subject_id>", methods=["DELETE"], endpoint="delete_subject")
    @principal_required
    def delete_subject(subject_id: int):
        _, role = current_user()
        service.delete(current_role=role, subject_id=subject_id)
        return ok(message="Subject deleted successfully")
