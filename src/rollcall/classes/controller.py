from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_int
from ..common.web import current_user, json_body, login_required, ok, principal_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.class_service

    @app.route("/api/classes", endpoint="list_classes")
    @login_required
    def list_classes():
        user_id, role = current_user()
        grade = request.args.get("grade")
        teacher_id = request.args.get("teacherId")
        classes = service.list_classes(
            current_user_id=user_id,
            current_role=role,
            grade=require_int(grade, "Grade") if grade else None,
            teacher_id=require_int(teacher_id, "Teacher ID") if teacher_id else None,
        )
        return ok([c.to_summary_dict() for c in classes])

    @app.route("/api/classes", methods=["POST"], endpoint="create_class")
    @principal_required
    def create_class():
        _, role = current_user()
        data = json_body()
        cls = service.create_class(
            current_role=role,
            name=data.get("name", ""),
            grade=data.get("grade"),
            section=data.get("section", ""),
            academic_year=data.get("academicYear", ""),
            max_students=data.get("maxStudents"),
            class_teacher_id=data.get("classTeacher"),
        )
        return ok(cls.to_dict(), 201, message="Class created successfully")

    @app.route("/api/classes/search", endpoint="search_classes")
    @login_required
    def search_classes():
        classes = service.search_classes(request.args.get("q", ""))
        return ok([c.to_summary_dict() for c in classes])

    @app.route("/api/classes/statistics", endpoint="class_statistics")
    @principal_required
    def class_statistics():
        return ok(service.statistics().to_dict())

    @app.route("/api/students/search", endpoint="search_students")
    @login_required
    def search_students():
        matches = service.search_students(request.args.get("q", ""))
        return ok([m.to_dict() for m in matches])

    @app.route("/api/classes/<int:class_id>", endpoint="get_class")
    @login_required
    def get_class(class_id: int):
        user_id, role = current_user()
        return ok(service.get_class(current_user_id=user_id, current_role=role, class_id=class_id).to_dict())

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="update_class")
    @principal_required
    def update_class(class_id: int):
        _, role = current_user()
        data = json_body()
        fields = {
            "name": data.get("name"),
            "grade": data.get("grade"),
            "section": data.get("section"),
            "academic_year": data.get("academicYear"),
            "max_students": data.get("maxStudents"),
        }
        if "classTeacher" in data:
            fields["class_teacher_id"] = data["classTeacher"]
        cls = service.update_class(current_role=role, class_id=class_id, **fields)
        return ok(cls.to_dict(), message="Class updated successfully")

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="delete_class")
    @principal_required
    def delete_class(class_id: int):
        _, role = current_user()
        service.delete_class(current_role=role, class_id=class_id)
        return ok(message="Class deleted successfully")

    @app.route("/api/classes/<int:class_id>/students", endpoint="list_students")
    @login_required
    def list_students(class_id: int):
        user_id, role = current_user()
        students = service.list_students(current_user_id=user_id, current_role=role, class_id=class_id)
        return ok([s.to_dict() for s in students])

    @app.route("/api/classes/<int:class_id>/students", methods=["POST"], endpoint="add_student")
    @principal_required
    def add_student(class_id: int):
        _, role = current_user()
        data = json_body()
        student = service.add_student(
            current_role=role,
            class_id=class_id,
            name=data.get("name", ""),
            student_code=data.get("studentId", ""),
            email=data.get("email"),
            date_of_birth=data.get("dateOfBirth"),
            parent_contact=data.get("parentContact"),
        )
        return ok(student.to_dict(), 201, message="Student added successfully")

    @app.route("/api/classes/<int:class_id>/students/<int:student_id>", methods=["PUT"], endpoint="update_student")
    @principal_required
    def update_student(class_id: int, student_id: int):
        _, role = current_user()
        data = json_body()
        student = service.update_student(
            current_role=role,
            class_id=class_id,
            student_id=student_id,
            name=data.get("name"),
            email=data.get("email"),
            date_of_birth=data.get("dateOfBirth"),
            parent_contact=data.get("parentContact"),
        )
        return ok(student.to_dict(), message="Student updated successfully")

    @app.route("/api/classes/<int:class_id>/students/<int:student_id>", methods=["DELETE"], endpoint="remove_student")
    @principal_required
    def remove_student(class_id: int, student_id: int):
        _, role = current_user()
        service.remove_student(current_role=role, class_id=class_id, student_id=student_id)
        return ok(message="Student removed successfully")
