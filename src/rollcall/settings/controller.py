from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user, json_body, login_required, ok, principal_required
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/settings", endpoint="get_settings")
    @login_required
    def get_settings():
        return ok(container.settings_service.get().to_dict())

    @app.route("/api/settings", methods=["PUT"], endpoint="update_settings")
    @principal_required
    def update_settings():
        _, role = current_user()
        settings = container.settings_service.update(current_role=role, values=json_body())
        return ok(settings.to_dict(), message="Settings updated successfully")

    @app.route("/api/backup/export", endpoint="export_backup")
    @principal_required
    def export_backup():
        _, role = current_user()
        return ok(container.backup_service.export(current_role=role))

    @app.route("/api/backup/import", methods=["POST"], endpoint="import_backup")
    @principal_required
    def import_backup():
        _, role = current_user()
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("Request body must be JSON")
        counts = container.backup_service.restore(current_role=role, data=data)
        return ok(counts, message="Data imported successfully")
