from rollcall.database.bootstrap import DEMO_ATTENDANCE_DATES, seed_demo_data
from rollcall.database.store import AttendanceStore
from rollcall.users.service import AuthService


def test_seed_populates_every_collection(store):
    counts = seed_demo_data(store)

    assert counts == {"users": 4, "classes": 3, "subjects": 8, "schedules": 12, "attendance": 15}
    assert [c.name for c in store.classes.list_classes()] == ["10A", "10B", "11A"]
    assert sum(len(c.active_students) for c in store.classes.list_classes()) == 18
    assert {r.attendance_date for r in store.attendance.list_records()} == set(DEMO_ATTENDANCE_DATES)


def test_seed_is_reproducible(clock):
    first, second = AttendanceStore.create(clock=clock), AttendanceStore.create(clock=clock)
    seed_demo_data(first)
    seed_demo_data(second)

    # Password hashes are salted; rosters and attendance must match exactly.
    assert first.db.tables["attendance"] == second.db.tables["attendance"]
    assert first.db.tables["classes"] == second.db.tables["classes"]


def test_seed_replaces_previous_contents(store, school):
    seed_demo_data(store)

    assert store.users.get_by_username("teacher3") is not None
    assert store.subjects.get_by_code("MATH").subject_id == 1


def test_demo_accounts_can_log_in(store):
    seed_demo_data(store)
    auth = AuthService(store.users)

    assert auth.authenticate("admin", "admin123").name == "Dr. Sarah Johnson"
    assert auth.authenticate("teacher2", "teacher123").subject_ids == (3, 4)
