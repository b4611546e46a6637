import pytest

from rollcall.core.exceptions import CapacityExceededError, ConflictError, UniquenessViolationError, ValidationError


def _small_class(store, capacity=2):
    return store.classes.create_class(
        name="9C", grade=9, section="C", academic_year="2024-2025", max_students=capacity
    )


def test_add_beyond_capacity_is_rejected_and_roster_unchanged(store):
    cls = _small_class(store)
    store.classes.add_student(cls.class_id, name="Ann", student_code="ST001")
    store.classes.add_student(cls.class_id, name="Bob", student_code="ST002")
    before = store.classes.get_by_id(cls.class_id)

    with pytest.raises(CapacityExceededError):
        store.classes.add_student(cls.class_id, name="Cid", student_code="ST003")

    assert store.classes.get_by_id(cls.class_id) == before
    assert len(before.active_students) == 2


def test_removed_students_free_a_seat(store):
    cls = _small_class(store)
    ann = store.classes.add_student(cls.class_id, name="Ann", student_code="ST001")
    store.classes.add_student(cls.class_id, name="Bob", student_code="ST002")

    assert store.classes.remove_student(cls.class_id, ann.student_id) is True
    store.classes.add_student(cls.class_id, name="Cid", student_code="ST003")

    assert [s.name for s in store.classes.get_by_id(cls.class_id).active_students] == ["Bob", "Cid"]


def test_student_code_unique_among_active_students_of_one_class(store):
    cls = _small_class(store, capacity=5)
    other = store.classes.create_class(name="9D", grade=9, section="D", academic_year="2024-2025", max_students=5)
    ann = store.classes.add_student(cls.class_id, name="Ann", student_code="ST001")

    with pytest.raises(UniquenessViolationError):
        store.classes.add_student(cls.class_id, name="Ann Again", student_code="ST001")

    # Different class: allowed. Same class after removal: allowed.
    store.classes.add_student(other.class_id, name="Ann Elsewhere", student_code="ST001")
    store.classes.remove_student(cls.class_id, ann.student_id)
    store.classes.add_student(cls.class_id, name="Ann Returns", student_code="ST001")


def test_capacity_and_uniqueness_errors_are_conflicts():
    assert issubclass(CapacityExceededError, ConflictError)
    assert issubclass(UniquenessViolationError, ConflictError)


def test_student_ids_are_global_across_classes(store):
    a = _small_class(store)
    b = store.classes.create_class(name="9D", grade=9, section="D", academic_year="2024-2025", max_students=5)

    s1 = store.classes.add_student(a.class_id, name="Ann", student_code="ST001")
    s2 = store.classes.add_student(b.class_id, name="Bob", student_code="ST002")

    assert (s1.student_id, s2.student_id) == (1, 2)
    assert store.classes.get_student(s2.student_id).class_name == "9D"


def test_add_student_to_unknown_class_returns_none(store):
    assert store.classes.add_student(99, name="Ann", student_code="ST001") is None


def test_soft_deleted_class_is_hidden_from_listing_and_search(store):
    cls = _small_class(store)
    store.classes.add_student(cls.class_id, name="Ann Lee", student_code="ST001")

    store.classes.soft_delete(cls.class_id)
    store.classes.soft_delete(cls.class_id)

    assert store.classes.get_by_id(cls.class_id).is_active is False
    assert store.classes.list_classes() == []
    assert store.classes.search_students("ann") == []
    assert store.classes.search_classes("9C") == []


def test_search_students_matches_name_code_or_email(store, school):
    store.classes.update_student(school.cls.class_id, school.students[2].student_id, email="star@school.test")

    by_name = store.classes.search_students("student 1")
    by_code = store.classes.search_students("st002")
    by_email = store.classes.search_students("star@")

    assert [m.student.student_code for m in by_name] == ["ST001"]
    assert [m.student.student_code for m in by_code] == ["ST002"]
    assert [m.student.student_code for m in by_email] == ["ST003"]
    assert by_name[0].class_name == "10A" and by_name[0].grade == 10


def test_update_student_cannot_touch_identity(store, school):
    with pytest.raises(TypeError):
        store.classes.update_student(school.cls.class_id, school.students[0].student_id, student_id=77)


def test_update_class_cannot_replace_roster(store, school):
    with pytest.raises(TypeError):
        store.classes.update_class(school.cls.class_id, students=())


def test_list_classes_filters(store, school):
    store.classes.create_class(
        name="11B", grade=11, section="B", academic_year="2024-2025", max_students=30,
        class_teacher_id=school.teacher.user_id,
    )

    assert [c.name for c in store.classes.list_classes(grade=11)] == ["11B"]
    assert [c.name for c in store.classes.list_classes(teacher_id=school.teacher.user_id)] == ["11B"]


def test_capacity_cannot_drop_below_live_roster(store):
    cls = _small_class(store, capacity=5)
    for n in range(3):
        store.classes.add_student(cls.class_id, name=f"Kid {n}", student_code=f"ST10{n}")

    with pytest.raises(ValidationError):
        store.classes.update_class(cls.class_id, max_students=2)

    assert store.classes.update_class(cls.class_id, max_students=3).max_students == 3
    with pytest.raises(CapacityExceededError):
        store.classes.add_student(cls.class_id, name="Late", student_code="ST199")


def test_roster_never_exceeds_capacity_under_concurrent_changes(store, race):
    cls = _small_class(store, capacity=4)
    store.classes.add_student(cls.class_id, name="Ann", student_code="ST001")
    store.classes.add_student(cls.class_id, name="Bob", student_code="ST002")

    def work(i):
        if i == 0:
            return store.classes.update_class(cls.class_id, max_students=2)
        return store.classes.add_student(cls.class_id, name=f"Kid {i}", student_code=f"ST10{i}")

    race(work)

    final = store.classes.get_by_id(cls.class_id)
    assert len(final.active_students) <= final.max_students


def test_concurrent_creates_keep_class_name_unique_per_year(store, race):
    results, errors = race(
        lambda i: store.classes.create_class(
            name="12A", grade=12, section="A", academic_year="2024-2025", max_students=30
        )
    )

    assert len(results) == 1
    assert all(isinstance(e, UniquenessViolationError) for e in errors)
    assert [c.name for c in store.classes.list_classes()] == ["12A"]
