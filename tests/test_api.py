import pytest

from rollcall.container import build_container
from rollcall.database.bootstrap import seed_demo_data
from rollcall.main import create_app


@pytest.fixture
def app():
    container = build_container()
    seed_demo_data(container.store)
    return create_app("config.testing", container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, username, password):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def test_login_and_me(client):
    res = _login(client, "admin", "admin123")
    assert res.status_code == 200
    assert res.get_json()["data"]["role"] == "principal"

    me = client.get("/api/auth/me").get_json()["data"]
    assert me["username"] == "admin"
    assert me["loginCount"] == 1
    assert "password" not in me


def test_bad_login_is_401(client):
    res = _login(client, "admin", "nope")

    assert res.status_code == 401
    assert res.get_json() == {"success": False, "error": "Invalid username or password"}


def test_endpoints_need_a_session(client):
    assert client.get("/api/classes").status_code == 401

    _login(client, "admin", "admin123")
    client.post("/api/auth/logout")
    assert client.get("/api/classes").status_code == 401


def test_principal_only_endpoints_refuse_teachers(client):
    _login(client, "teacher1", "teacher123")

    assert client.get("/api/backup/export").status_code == 403
    assert client.post("/api/subjects", json={"name": "Art", "code": "ART"}).status_code == 403
    assert client.get("/api/users").status_code == 403


def test_teacher_submits_and_lists_attendance(client, app):
    _login(client, "teacher1", "teacher123")

    res = client.post(
        "/api/attendance",
        json={"classId": 1, "subjectId": 1, "date": "2024-11-06", "absentStudents": [2], "notes": "quiz"},
    )
    assert res.status_code == 201
    body = res.get_json()["data"]
    assert (body["className"], body["presentCount"], body["absentCount"]) == ("10A", 6, 1)

    listing = client.get("/api/attendance?date=2024-11-06").get_json()
    assert listing["count"] == 1
    assert listing["data"][0]["id"] == body["id"]


def test_teacher_without_slot_gets_403(client):
    _login(client, "teacher2", "teacher123")

    res = client.post("/api/attendance", json={"classId": 1, "subjectId": 1, "date": "2024-11-06"})

    assert res.status_code == 403
    assert res.get_json()["success"] is False


def test_validation_errors_are_400(client):
    _login(client, "teacher1", "teacher123")

    res = client.post("/api/attendance", json={"classId": 1, "subjectId": 1, "date": "2024-11-06", "absentStudents": [99]})

    assert res.status_code == 400
    assert "Invalid student IDs" in res.get_json()["error"]


def test_not_found_and_conflict_codes(client):
    _login(client, "admin", "admin123")

    assert client.get("/api/classes/999").status_code == 404
    assert client.delete("/api/classes/1").status_code == 409
    assert client.get("/api/nowhere").status_code == 404


def test_class_roster_via_api(client):
    _login(client, "admin", "admin123")

    res = client.post("/api/classes/3/students", json={"name": "New Pupil", "studentId": "ST24099"})
    assert res.status_code == 201

    students = client.get("/api/classes/3/students").get_json()["data"]
    assert [s["studentId"] for s in students][-1] == "ST24099"

    dup = client.post("/api/classes/3/students", json={"name": "Copy", "studentId": "ST24099"})
    assert dup.status_code == 409


def test_statistics_and_student_history(client):
    _login(client, "admin", "admin123")

    stats = client.get("/api/attendance/statistics?classId=1").get_json()["data"]
    assert stats["totalRecords"] == 5
    assert stats["totalPresent"] + stats["totalAbsent"] == stats["totalStudents"] == 35

    history = client.get("/api/attendance/student/1").get_json()["data"]
    assert history["student"]["studentId"] == "ST24001"
    assert history["summary"]["totalRecords"] == 5
    dates = [h["date"] for h in history["history"]]
    assert dates == sorted(dates, reverse=True)


def test_backup_round_trip_via_api(client):
    _login(client, "admin", "admin123")

    backup = client.get("/api/backup/export").get_json()["data"]
    assert backup["version"] == "1.0.0"

    res = client.post("/api/backup/import", json=backup)
    assert res.status_code == 200
    assert res.get_json()["data"]["attendance"] == 15

    # Session user still exists after the restore.
    assert client.get("/api/auth/me").status_code == 200


def test_settings_via_api(client):
    _login(client, "admin", "admin123")

    res = client.put("/api/settings", json={"attendanceDeadline": "09:30"})

    assert res.status_code == 200
    assert client.get("/api/settings").get_json()["data"]["attendanceDeadline"] == "09:30"


def test_student_history_rate_is_a_whole_percentage(client):
    _login(client, "teacher1", "teacher123")
    client.post("/api/attendance", json={"classId": 1, "subjectId": 1, "date": "2024-11-06", "absentStudents": [1]})
    client.post("/api/attendance", json={"classId": 1, "subjectId": 1, "date": "2024-11-07"})

    _login(client, "admin", "admin123")
    summary = client.get("/api/attendance/student/1").get_json()["data"]["summary"]

    assert summary["totalRecords"] == 7
    assert isinstance(summary["attendanceRate"], int)
    assert summary["attendanceRate"] == round(summary["present"] / 7 * 100)


def test_float_ids_in_body_are_rejected(client):
    _login(client, "teacher1", "teacher123")

    res = client.post("/api/attendance", json={"classId": 1, "subjectId": 1, "date": "2024-11-06", "absentStudents": [1.9]})

    assert res.status_code == 400
