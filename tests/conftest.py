from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone

import pytest
from werkzeug.security import generate_password_hash

from rollcall.classes.model import SchoolClass, Student
from rollcall.container import Container, build_container
from rollcall.core.enums import DayOfWeek, Role
from rollcall.database.store import AttendanceStore
from rollcall.subjects.model import Subject
from rollcall.users.model import User

# Every test runs "now" at this instant unless it advances the clock.
START = datetime(2024, 11, 10, 8, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


@dataclass
class School:
    principal: User
    teacher: User
    other_teacher: User
    math: Subject
    physics: Subject
    cls: SchoolClass
    students: list[Student]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> AttendanceStore:
    return AttendanceStore.create(clock=clock)


@pytest.fixture
def container(store) -> Container:
    return build_container(store=store)


@pytest.fixture
def school(store) -> School:
    """A principal, two teachers, two subjects and one class of five students.

    `teacher` is scheduled for MATH in the class on Mondays; `other_teacher`
    has no slot and is not the class teacher.
    """
    principal = store.users.create_user(
        username="admin",
        password_hash=generate_password_hash("admin123"),
        role=Role.PRINCIPAL,
        name="Principal",
        email="principal@school.test",
    )
    teacher = store.users.create_user(
        username="teacher1",
        password_hash=generate_password_hash("teacher123"),
        role=Role.TEACHER,
        name="Teacher One",
        email="t1@school.test",
    )
    other_teacher = store.users.create_user(
        username="teacher2",
        password_hash=generate_password_hash("teacher123"),
        role=Role.TEACHER,
        name="Teacher Two",
        email="t2@school.test",
    )
    math = store.subjects.create_subject(name="Mathematics", code="MATH")
    physics = store.subjects.create_subject(name="Physics", code="PHYS")

    cls = store.classes.create_class(
        name="10A", grade=10, section="A", academic_year="2024-2025", max_students=30
    )
    students = [
        store.classes.add_student(cls.class_id, name=f"Student {n}", student_code=f"ST{n:03d}")
        for n in range(1, 6)
    ]
    store.schedules.create_schedule(
        teacher_id=teacher.user_id,
        class_id=cls.class_id,
        subject_id=math.subject_id,
        day_of_week=DayOfWeek.MONDAY,
        start_time=time(9, 0),
        end_time=time(9, 50),
        room="Room 101",
    )

    return School(
        principal=principal,
        teacher=teacher,
        other_teacher=other_teacher,
        math=math,
        physics=physics,
        cls=store.classes.get_by_id(cls.class_id),
        students=students,
    )


@pytest.fixture
def race():
    """Run `fn(i)` on several threads released together; returns (results, errors)."""

    def run(fn, workers=4):
        barrier = threading.Barrier(workers)
        results, errors = [], []

        def worker(i):
            barrier.wait()
            try:
                results.append(fn(i))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return results, errors

    return run
