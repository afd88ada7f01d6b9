from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from campusconnect.models import FeeRecord, Student
from campusconnect.students import crud


def test_add_and_list_students(admin_client: TestClient):
    for name, class_name, roll in [("Zara", "9B", 2), ("Asha", "10A", 1), ("Yusuf", "9B", 1)]:
        response = admin_client.post(
            "/api/admin/students",
            json={"full_name": name, "class_name": class_name, "roll_no": roll},
        )
        assert response.status_code == 201, f"Failed to add student. Response: {response.text}"

    response = admin_client.get("/api/admin/students")
    assert response.status_code == 200
    body = response.json()
    assert [s["full_name"] for s in body["students"]] == ["Asha", "Yusuf", "Zara"]
    assert body["class_counts"] == {"10A": 1, "9B": 2}
    assert [s["roll_no"] for s in body["by_class"]["9B"]] == [1, 2]


def test_add_student_requires_all_fields(admin_client: TestClient):
    response = admin_client.post(
        "/api/admin/students",
        json={"full_name": " ", "class_name": "10A", "roll_no": 1},
    )
    assert response.status_code == 422


def test_update_student(admin_client: TestClient, class_roster):
    student = class_roster[0]
    response = admin_client.put(
        f"/api/admin/students/{student.id}",
        json={"full_name": "Asha R.", "class_name": "10A", "roll_no": 7},
    )
    assert response.status_code == 200
    assert response.json()["full_name"] == "Asha R."
    assert response.json()["roll_no"] == 7

    response = admin_client.put(
        "/api/admin/students/9999",
        json={"full_name": "Nobody", "class_name": "10A", "roll_no": 1},
    )
    assert response.status_code == 404


def test_classes_are_trimmed_unique_first_seen(student_client: TestClient, db_session):
    db_session.add_all([
        Student(full_name="A", class_name=" 8C ", roll_no=1),
        Student(full_name="B", class_name="7A", roll_no=1),
        Student(full_name="C", class_name="8C", roll_no=2),
    ])
    db_session.commit()

    response = student_client.get("/api/classes")
    assert response.status_code == 200
    assert response.json() == ["8C", "7A"]


def test_students_of_class_by_roll(office_client: TestClient, class_roster):
    response = office_client.get("/api/classes/10A/students")
    assert response.status_code == 200
    assert [s["roll_no"] for s in response.json()] == [1, 2, 3]


def test_delete_student_removes_fee_records(admin_client: TestClient, class_roster, db_session):
    student, other = class_roster[0], class_roster[1]
    db_session.add_all([
        FeeRecord(student_id=student.id, class_name="10A", year="2023", total=100, paid=100, due=0),
        FeeRecord(student_id=student.id, class_name="10A", year="2024", total=100, paid=0, due=100),
        FeeRecord(student_id=other.id, class_name="10A", year="2024", total=100, paid=0, due=100),
    ])
    db_session.commit()

    response = admin_client.delete(f"/api/admin/students/{student.id}")
    assert response.status_code == 200, f"Delete failed. Response: {response.text}"
    assert response.json()["deleted_fee_records"] == 2

    db_session.expire_all()
    assert db_session.query(Student).filter(Student.id == student.id).first() is None
    remaining = db_session.query(FeeRecord).all()
    assert [f.student_id for f in remaining] == [other.id]


def test_failed_fee_delete_keeps_student(admin_client: TestClient, class_roster, db_session, monkeypatch):
    student = class_roster[0]
    db_session.add(FeeRecord(student_id=student.id, class_name="10A", year="2024", total=10, paid=0, due=10))
    db_session.commit()

    def failing_delete(db, student_id):
        raise SQLAlchemyError("fees table locked")

    monkeypatch.setattr(crud, "delete_fees_for_student", failing_delete)

    response = admin_client.delete(f"/api/admin/students/{student.id}")
    assert response.status_code == 500
    assert "fee records" in response.json()["detail"]

    db_session.expire_all()
    assert db_session.query(Student).filter(Student.id == student.id).first() is not None
    assert db_session.query(FeeRecord).count() == 1


def test_delete_unknown_student(admin_client: TestClient):
    assert admin_client.delete("/api/admin/students/4242").status_code == 404
