import pytest

from rollcall.core.enums import Role
from rollcall.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


def _register(container, **overrides):
    values = {
        "current_role": Role.PRINCIPAL,
        "username": "newteacher",
        "password": "secret1",
        "role": Role.TEACHER,
        "name": "New Teacher",
        "email": "New@School.test",
        "phone": "+1 555 010 9999",
        "subject_ids": ["1", 2],
    }
    values.update(overrides)
    return container.user_service.register(**values)


def test_login_records_count_and_time(container, school, clock):
    s_user = container.auth_service.authenticate("TEACHER1", "teacher123")
    clock.advance(hours=1)
    container.auth_service.authenticate("teacher1", "teacher123")

    user = container.user_service.get_user(s_user.user_id)
    assert s_user.role == Role.TEACHER
    assert user.login_count == 2
    assert user.last_login == clock.now
    # Logging in is not a profile edit.
    assert user.updated_at == school.teacher.updated_at


@pytest.mark.parametrize("username,password", [("teacher1", "wrong"), ("ghost", "teacher123"), ("", "")])
def test_bad_credentials_are_rejected(container, school, username, password):
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate(username, password)


def test_inactive_user_cannot_log_in(container, school):
    container.user_service.deactivate(
        current_user_id=school.principal.user_id, current_role=Role.PRINCIPAL, user_id=school.teacher.user_id
    )

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("teacher1", "teacher123")


def test_corrupt_password_hash_is_a_failed_login(container, store):
    store.users.create_user(username="legacy", password_hash="plain", role=Role.TEACHER, name="L", email="l@x.io")

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("legacy", "plain")


def test_change_password(container, school):
    auth = container.auth_service
    with pytest.raises(AuthenticationError):
        auth.change_password(user_id=school.teacher.user_id, current_password="nope", new_password="brandnew")
    with pytest.raises(ValidationError):
        auth.change_password(user_id=school.teacher.user_id, current_password="teacher123", new_password="short")

    auth.change_password(user_id=school.teacher.user_id, current_password="teacher123", new_password="brandnew")

    assert auth.authenticate("teacher1", "brandnew").user_id == school.teacher.user_id


def test_register_normalizes_and_hashes(container, school):
    user = _register(container)

    assert user.email == "new@school.test"
    assert user.subject_ids == (1, 2)
    assert user.password_hash != "secret1"
    assert "password" not in user.to_public_dict()
    assert container.auth_service.authenticate("newteacher", "secret1").user_id == user.user_id


def test_principal_accounts_carry_no_subjects(container, school):
    user = _register(container, username="vice", email="vice@school.test", role=Role.PRINCIPAL)

    assert user.subject_ids == ()


def test_register_enforces_uniqueness(container, school):
    with pytest.raises(ConflictError):
        _register(container, username="Teacher1")
    with pytest.raises(ConflictError):
        _register(container, email="T1@school.test")


def test_concurrent_registrations_keep_username_unique(container, school, race):
    results, errors = race(lambda i: _register(container, email=f"new{i}@school.test"))

    assert len(results) == 1
    assert len(errors) == 3 and all(isinstance(e, ConflictError) for e in errors)
    assert sum(u.username == "newteacher" for u in container.user_service.list_users()) == 1


def test_concurrent_registrations_keep_email_unique(container, school, race):
    results, errors = race(lambda i: _register(container, username=f"newteacher{i}"))

    assert len(results) == 1
    assert all(isinstance(e, ConflictError) for e in errors)
    assert sum(u.email == "new@school.test" for u in container.user_service.list_users()) == 1


@pytest.mark.parametrize(
    "overrides",
    [{"username": "ab"}, {"password": "12345"}, {"name": "  "}, {"email": "not-an-email"}, {"phone": "12"}],
)
def test_register_validates(container, school, overrides):
    with pytest.raises(ValidationError):
        _register(container, **overrides)


def test_only_principal_registers(container, school):
    with pytest.raises(AuthorizationError):
        _register(container, current_role=Role.TEACHER)


def test_teacher_edits_only_own_profile_and_not_subjects(container, school):
    svc = container.user_service
    me = school.teacher.user_id

    updated = svc.update_profile(current_user_id=me, current_role=Role.TEACHER, user_id=me, name="T. One")
    assert updated.name == "T. One"

    with pytest.raises(AuthorizationError):
        svc.update_profile(current_user_id=me, current_role=Role.TEACHER, user_id=school.other_teacher.user_id, name="x")
    with pytest.raises(AuthorizationError):
        svc.update_profile(current_user_id=me, current_role=Role.TEACHER, user_id=me, subject_ids=[1])
    with pytest.raises(ConflictError):
        svc.update_profile(current_user_id=me, current_role=Role.TEACHER, user_id=me, email="t2@school.test")
    with pytest.raises(ValidationError):
        svc.update_profile(current_user_id=me, current_role=Role.TEACHER, user_id=me)


def test_deactivate_rules(container, school):
    svc = container.user_service
    with pytest.raises(ValidationError):
        svc.deactivate(current_user_id=school.principal.user_id, current_role=Role.PRINCIPAL, user_id=school.principal.user_id)
    with pytest.raises(NotFoundError):
        svc.deactivate(current_user_id=school.principal.user_id, current_role=Role.PRINCIPAL, user_id=404)

    svc.deactivate(current_user_id=school.principal.user_id, current_role=Role.PRINCIPAL, user_id=school.teacher.user_id)

    assert [u.username for u in svc.list_users(role=Role.TEACHER)] == ["teacher2"]
    assert len(svc.list_users(include_inactive=True)) == 3
