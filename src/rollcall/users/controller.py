from __future__ import annotations

from flask import Flask, request, session

from ..common.web import current_user, json_body, login_required, ok, principal_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError


def _parse_role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError("Invalid role") from None


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("rememberMe"))
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        user = container.user_service.get_user(s_user.user_id)
        return ok(user.to_public_dict(), message="Login successful")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logout successful")

    @app.route("/api/auth/me", endpoint="me")
    @login_required
    def me():
        user_id, _ = current_user()
        return ok(container.user_service.get_user(user_id).to_public_dict())

    @app.route("/api/auth/change-password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        user_id, _ = current_user()
        data = json_body()
        container.auth_service.change_password(
            user_id=user_id,
            current_password=data.get("currentPassword", ""),
            new_password=data.get("newPassword", ""),
        )
        return ok(message="Password changed successfully")

    @app.route("/api/users", endpoint="list_users")
    @principal_required
    def list_users():
        role_s = request.args.get("role")
        users = container.user_service.list_users(
            role=_parse_role(role_s) if role_s else None,
            include_inactive=request.args.get("includeInactive") == "true",
        )
        return ok([u.to_public_dict() for u in users])

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @principal_required
    def create_user():
        _, role = current_user()
        data = json_body()
        user = container.user_service.register(
            current_role=role,
            username=data.get("username", ""),
            password=data.get("password", ""),
            role=_parse_role(data.get("role")),
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone"),
            subject_ids=data.get("subjects"),
        )
        return ok(user.to_public_dict(), 201, message="User created successfully")

    @app.route("/api/users/<int:user_id>", endpoint="get_user")
    @login_required
    def get_user(user_id: int):
        current_id, role = current_user()
        if role != Role.PRINCIPAL and current_id != user_id:
            raise AuthorizationError("You can only view your own profile")
        return ok(container.user_service.get_user(user_id).to_public_dict())

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_user")
    @login_required
    def update_user(user_id: int):
        current_id, role = current_user()
        data = json_body()
        user = container.user_service.update_profile(
            current_user_id=current_id,
            current_role=role,
            user_id=user_id,
            name=data.get("name"),
            email=data.get("email"),
            phone=data.get("phone"),
            subject_ids=data.get("subjects"),
        )
        return ok(user.to_public_dict(), message="User updated successfully")

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    @principal_required
    def delete_user(user_id: int):
        current_id, role = current_user()
        container.user_service.deactivate(current_user_id=current_id, current_role=role, user_id=user_id)
        return ok(message="User deactivated successfully")
