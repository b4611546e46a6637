"""Demo data for development: subjects, staff accounts, classes, timetable, attendance."""

from __future__ import annotations

import logging
import random
from datetime import date, time

from werkzeug.security import generate_password_hash

from ..core.enums import DayOfWeek, Role
from .store import AttendanceStore

logger = logging.getLogger(__name__)

DEMO_SUBJECTS = [
    ("Mathematics", "MATH", "Advanced Mathematics"),
    ("Physics", "PHYS", "Classical and Modern Physics"),
    ("Chemistry", "CHEM", "Organic and Inorganic Chemistry"),
    ("English", "ENG", "English Language and Literature"),
    ("History", "HIST", "World History and Civilization"),
    ("Biology", "BIO", "Life Sciences and Biology"),
    ("Geography", "GEO", "Physical and Human Geography"),
    ("Computer Science", "CS", "Programming and Computer Science"),
]

# username, password, role, name, email, phone, subject codes
DEMO_USERS = [
    ("admin", "admin123", Role.PRINCIPAL, "Dr. Sarah Johnson", "principal@virtualacademy.edu", "+1-555-0101", ()),
    ("teacher1", "teacher123", Role.TEACHER, "Ms. Emily Rodriguez", "erodriguez@virtualacademy.edu", "+1-555-0102", ("MATH", "PHYS")),
    ("teacher2", "teacher123", Role.TEACHER, "Mr. David Chen", "dchen@virtualacademy.edu", "+1-555-0103", ("CHEM", "ENG")),
    ("teacher3", "teacher123", Role.TEACHER, "Dr. Maria Garcia", "mgarcia@virtualacademy.edu", "+1-555-0104", ("HIST", "BIO", "GEO")),
]

# class name, grade, section, class teacher username, roster (name, student id, birth date)
DEMO_CLASSES = [
    ("10A", 10, "A", "teacher1", [
        ("John Smith", "ST24001", "2009-05-15"),
        ("Emma Johnson", "ST24002", "2009-03-22"),
        ("Michael Brown", "ST24003", "2009-07-08"),
        ("Sophia Davis", "ST24004", "2009-01-30"),
        ("William Wilson", "ST24005", "2009-04-12"),
        ("Olivia Miller", "ST24006", "2009-06-25"),
        ("James Garcia", "ST24007", "2009-08-18"),
    ]),
    ("10B", 10, "B", "teacher2", [
        ("Charlotte Martinez", "ST24008", "2009-02-14"),
        ("Benjamin Anderson", "ST24009", "2009-09-07"),
        ("Amelia Taylor", "ST24010", "2009-11-03"),
        ("Lucas Thomas", "ST24011", "2009-05-28"),
        ("Harper Jackson", "ST24012", "2009-03-16"),
        ("Ethan White", "ST24013", "2009-07-21"),
    ]),
    ("11A", 11, "A", "teacher3", [
        ("Alexander Harris", "ST24014", "2008-12-10"),
        ("Mia Clark", "ST24015", "2008-10-05"),
        ("Daniel Lewis", "ST24016", "2008-08-19"),
        ("Abigail Robinson", "ST24017", "2008-04-27"),
        ("Matthew Walker", "ST24018", "2008-06-11"),
    ]),
]

# teacher username, class, subject code, day, start, end, room
DEMO_SCHEDULES = [
    ("teacher1", "10A", "MATH", DayOfWeek.MONDAY, time(9, 0), time(9, 50), "Room 101"),
    ("teacher1", "10A", "PHYS", DayOfWeek.TUESDAY, time(10, 0), time(10, 50), "Physics Lab"),
    ("teacher1", "10A", "MATH", DayOfWeek.WEDNESDAY, time(11, 0), time(11, 50), "Room 101"),
    ("teacher1", "10B", "MATH", DayOfWeek.THURSDAY, time(9, 0), time(9, 50), "Room 101"),
    ("teacher1", "10B", "PHYS", DayOfWeek.FRIDAY, time(10, 0), time(10, 50), "Physics Lab"),
    ("teacher2", "10B", "CHEM", DayOfWeek.MONDAY, time(11, 0), time(11, 50), "Chemistry Lab"),
    ("teacher2", "10B", "ENG", DayOfWeek.TUESDAY, time(9, 0), time(9, 50), "Room 102"),
    ("teacher2", "11A", "ENG", DayOfWeek.WEDNESDAY, time(10, 0), time(10, 50), "Room 102"),
    ("teacher2", "11A", "CHEM", DayOfWeek.THURSDAY, time(11, 0), time(11, 50), "Chemistry Lab"),
    ("teacher3", "11A", "HIST", DayOfWeek.MONDAY, time(8, 0), time(8, 50), "Room 103"),
    ("teacher3", "11A", "BIO", DayOfWeek.TUESDAY, time(11, 0), time(11, 50), "Biology Lab"),
    ("teacher3", "10A", "GEO", DayOfWeek.FRIDAY, time(9, 0), time(9, 50), "Room 103"),
]

DEMO_ATTENDANCE_DATES = [date(2024, 11, d) for d in range(1, 6)]
DEMO_ACADEMIC_YEAR = "2024-2025"


def seed_demo_data(store: AttendanceStore, *, seed: int = 1318) -> dict[str, int]:
    """Reset the store and fill it with the demo school.

    Absences in the sample attendance are pseudo-random but reproducible for a
    given seed. Returns the per-table row counts.
    """
    store.reset()
    rng = random.Random(seed)

    subjects = {}
    for name, code, description in DEMO_SUBJECTS:
        subjects[code] = store.subjects.create_subject(name=name, code=code, description=description)

    users = {}
    for username, password, role, name, email, phone, codes in DEMO_USERS:
        users[username] = store.users.create_user(
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            name=name,
            email=email,
            phone=phone,
            subject_ids=[subjects[c].subject_id for c in codes],
        )

    classes = {}
    for name, grade, section, teacher, roster in DEMO_CLASSES:
        cls = store.classes.create_class(
            name=name,
            grade=grade,
            section=section,
            academic_year=DEMO_ACADEMIC_YEAR,
            max_students=35,
            class_teacher_id=users[teacher].user_id,
        )
        for student_name, code, birth in roster:
            store.classes.add_student(
                cls.class_id,
                name=student_name,
                student_code=code,
                email=f"{student_name.lower().replace(' ', '.')}@student.edu",
                date_of_birth=birth,
            )
        classes[name] = store.classes.get_by_id(cls.class_id)

    for teacher, class_name, code, day, start, end, room in DEMO_SCHEDULES:
        store.schedules.create_schedule(
            teacher_id=users[teacher].user_id,
            class_id=classes[class_name].class_id,
            subject_id=subjects[code].subject_id,
            day_of_week=day,
            start_time=start,
            end_time=end,
            room=room,
        )

    for day in DEMO_ATTENDANCE_DATES:
        for cls in classes.values():
            absent: list[int] = []
            if rng.random() > 0.7:
                for _ in range(rng.randint(1, 2)):
                    student_id = rng.choice(cls.students).student_id
                    if student_id not in absent:
                        absent.append(student_id)

            store.attendance.submit(
                teacher_id=cls.class_teacher_id,
                class_id=cls.class_id,
                subject_id=subjects["MATH"].subject_id,
                attendance_date=day,
                absent_student_ids=absent,
                notes="Regular attendance check" if absent else "Full attendance today",
            )

    counts = store.db.counts()
    logger.info("Demo data seeded: %s", counts)
    return counts
