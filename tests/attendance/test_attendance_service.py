from datetime import date, datetime, timezone

import pytest

from rollcall.attendance.model import AttendanceFilter
from rollcall.attendance.service import filter_from_params
from rollcall.core.enums import Role
from rollcall.core.exceptions import AuthorizationError, NotFoundError, ValidationError

NOW = datetime(2024, 11, 10, 8, 0, tzinfo=timezone.utc)


def _submit(container, school, *, user=None, role=Role.TEACHER, **overrides):
    user = user or school.teacher
    values = {
        "class_id": school.cls.class_id,
        "subject_id": school.math.subject_id,
        "attendance_date": "2024-11-04",
        "absent_student_ids": [],
        "notes": None,
    }
    values.update(overrides)
    return container.attendance_service.submit(current_user_id=user.user_id, current_role=role, now=NOW, **values)


def test_scheduled_teacher_can_submit(container, school):
    record = _submit(container, school, absent_student_ids=[school.students[0].student_id], notes="  rainy  ")

    assert record.teacher_id == school.teacher.user_id
    assert record.submitted_by == school.teacher.user_id
    assert record.attendance_date == date(2024, 11, 4)
    assert record.notes == "rainy"
    assert record.present_count == 4


def test_teacher_without_slot_is_refused(container, school):
    with pytest.raises(AuthorizationError):
        _submit(container, school, user=school.other_teacher)
    with pytest.raises(AuthorizationError):
        _submit(container, school, subject_id=school.physics.subject_id)


def test_class_teacher_may_submit_any_subject(container, school):
    container.store.classes.update_class(school.cls.class_id, class_teacher_id=school.other_teacher.user_id)

    record = _submit(container, school, user=school.other_teacher, subject_id=school.physics.subject_id)

    assert record.subject_id == school.physics.subject_id


def test_principal_bypasses_schedule_check(container, school):
    record = _submit(container, school, user=school.principal, role=Role.PRINCIPAL, subject_id=school.physics.subject_id)

    assert record.teacher_id == school.principal.user_id


@pytest.mark.parametrize(
    "overrides",
    [
        {"class_id": None},
        {"subject_id": ""},
        {"attendance_date": ""},
        {"attendance_date": "04/11/2024"},
        {"attendance_date": "2024-02-30"},
        {"attendance_date": "2024-11-11"},
        {"absent_student_ids": "1,2"},
        {"absent_student_ids": [999]},
    ],
)
def test_submit_rejects_invalid_input(container, school, overrides):
    with pytest.raises(ValidationError):
        _submit(container, school, **overrides)


def test_removed_student_cannot_be_marked_absent(container, school):
    sid = school.students[0].student_id
    container.store.classes.remove_student(school.cls.class_id, sid)

    with pytest.raises(ValidationError):
        _submit(container, school, absent_student_ids=[sid])


def test_unknown_class_or_subject_is_not_found(container, school):
    with pytest.raises(NotFoundError):
        _submit(container, school, class_id=404)
    container.store.subjects.soft_delete(school.physics.subject_id)
    with pytest.raises(NotFoundError):
        _submit(container, school, subject_id=school.physics.subject_id)


def test_bulk_submit_collects_failures(container, school):
    result = container.attendance_service.bulk_submit(
        current_user_id=school.teacher.user_id,
        current_role=Role.TEACHER,
        now=NOW,
        records=[
            {"classId": school.cls.class_id, "subjectId": school.math.subject_id, "date": "2024-11-04"},
            {"classId": school.cls.class_id, "subjectId": school.math.subject_id, "date": "2024-11-05",
             "absentStudents": [school.students[1].student_id]},
            {"classId": school.cls.class_id, "subjectId": school.physics.subject_id, "date": "2024-11-05"},
            "garbage",
        ],
    )

    assert len(result.successful) == 2
    assert [f["error"] for f in result.failed] == [
        "You do not have permission to take attendance for this class/subject",
        "Each attendance record must be an object",
    ]


def test_bulk_submit_requires_records(container, school):
    with pytest.raises(ValidationError):
        container.attendance_service.bulk_submit(
            current_user_id=school.teacher.user_id, current_role=Role.TEACHER, records=[]
        )


def test_only_the_owner_or_principal_can_change_a_record(container, school):
    svc = container.attendance_service
    record = _submit(container, school)

    with pytest.raises(AuthorizationError):
        svc.update(
            current_user_id=school.other_teacher.user_id,
            current_role=Role.TEACHER,
            attendance_id=record.attendance_id,
            notes="mine now",
        )
    with pytest.raises(AuthorizationError):
        svc.delete(current_user_id=school.other_teacher.user_id, current_role=Role.TEACHER, attendance_id=record.attendance_id)

    updated = svc.update(
        current_user_id=school.principal.user_id,
        current_role=Role.PRINCIPAL,
        attendance_id=record.attendance_id,
        absent_student_ids=[school.students[4].student_id],
    )
    assert updated.absent_student_ids == (school.students[4].student_id,)

    svc.delete(current_user_id=school.teacher.user_id, current_role=Role.TEACHER, attendance_id=record.attendance_id)
    with pytest.raises(NotFoundError):
        svc.get_record(current_user_id=school.teacher.user_id, current_role=Role.TEACHER, attendance_id=record.attendance_id)


def test_update_needs_something_to_change(container, school):
    record = _submit(container, school)

    with pytest.raises(ValidationError):
        container.attendance_service.update(
            current_user_id=school.teacher.user_id, current_role=Role.TEACHER, attendance_id=record.attendance_id
        )


def test_teacher_listing_is_scoped_to_own_records(container, school):
    svc = container.attendance_service
    mine = _submit(container, school, attendance_date="2024-11-04")
    _submit(container, school, user=school.principal, role=Role.PRINCIPAL, attendance_date="2024-11-05")

    teacher_view = svc.list_records(
        current_user_id=school.teacher.user_id,
        current_role=Role.TEACHER,
        filters=AttendanceFilter(teacher_id=school.principal.user_id),
    )
    principal_view = svc.list_records(current_user_id=school.principal.user_id, current_role=Role.PRINCIPAL)

    assert [r.attendance_id for r in teacher_view] == [mine.attendance_id]
    assert [r.attendance_date for r in principal_view] == [date(2024, 11, 5), date(2024, 11, 4)]


def test_student_history_for_unknown_student(container, school):
    with pytest.raises(NotFoundError):
        container.attendance_service.student_history(999)

    match, history = container.attendance_service.student_history(str(school.students[0].student_id))
    assert match.class_id == school.cls.class_id
    assert history == []


def test_format_record_joins_display_names(container, school):
    record = _submit(container, school, absent_student_ids=[school.students[0].student_id])

    data = container.attendance_service.format_record(record)

    assert data["teacherName"] == "Teacher One"
    assert data["className"] == "10A"
    assert data["subjectName"] == "Mathematics"
    assert data["date"] == "2024-11-04"
    assert (data["presentCount"], data["absentCount"], data["attendanceRate"]) == (4, 1, 80)


def test_filter_from_params():
    filters = filter_from_params({"classId": "3", "startDate": "2024-11-01", "endDate": "2024-11-30", "subjectId": ""})

    assert filters == AttendanceFilter(class_id=3, start_date=date(2024, 11, 1), end_date=date(2024, 11, 30))
    with pytest.raises(ValidationError):
        filter_from_params({"startDate": "2024-12-01", "endDate": "2024-11-01"})
    with pytest.raises(ValidationError):
        filter_from_params({"classId": "ten"})


@pytest.mark.parametrize(
    "overrides",
    [{"absent_student_ids": [1.9]}, {"absent_student_ids": [True]}, {"class_id": True}, {"subject_id": 1.5}],
)
def test_submit_rejects_non_integer_ids(container, school, overrides):
    with pytest.raises(ValidationError):
        _submit(container, school, **overrides)

    assert container.store.attendance.list_records() == []


def test_future_date_check_uses_the_store_clock(container, school, clock):
    svc = container.attendance_service
    args = dict(
        current_user_id=school.teacher.user_id,
        current_role=Role.TEACHER,
        class_id=school.cls.class_id,
        subject_id=school.math.subject_id,
        attendance_date="2024-11-11",
    )

    with pytest.raises(ValidationError):
        svc.submit(**args)

    clock.advance(days=1)
    assert svc.submit(**args).attendance_date == date(2024, 11, 11)


def test_removed_student_keeps_history(container, school):
    student = school.students[0]
    _submit(container, school, absent_student_ids=[student.student_id])
    container.store.classes.remove_student(school.cls.class_id, student.student_id)

    match, history = container.attendance_service.student_history(student.student_id)

    assert match.student.is_active is False
    assert match.class_name == "10A"
    assert [h.attendance_date for h in history] == [date(2024, 11, 4)]


def test_unknown_student_history_is_not_found(container, school):
    with pytest.raises(NotFoundError):
        container.attendance_service.student_history(404)
