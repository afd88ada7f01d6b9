from datetime import date

from fastapi.testclient import TestClient

from campusconnect.attendance.service import AttendanceSheet
from campusconnect.models import AttendanceEntry, Student


def _save_sheet(admin_client, roster, on="2024-03-05", subjects=("Maths", "Science", "")):
    asha, bilal, chen = roster[0], roster[1], roster[2]
    payload = {
        "class_name": "10A",
        "date": on,
        "subjects": list(subjects),
        "statuses": {
            str(asha.id): {"Maths": "present", "Science": "absent"},
            str(bilal.id): {"Maths": "absent"},
            str(chen.id): {},
        },
    }
    return admin_client.post("/api/admin/attendance", json=payload)


def test_save_sheet_writes_row_per_student_per_subject(admin_client: TestClient, class_roster, db_session):
    response = _save_sheet(admin_client, class_roster)
    assert response.status_code == 200, f"Save failed. Response: {response.text}"
    # three students x two non-blank subjects
    assert response.json()["saved"] == 6

    rows = db_session.query(AttendanceEntry).all()
    assert len(rows) == 6
    unset = [r for r in rows if r.status is None]
    assert {(r.student, r.subject) for r in unset} == {
        ("Bilal Khan", "Science"), ("Chen Li", "Maths"), ("Chen Li", "Science"),
    }


def test_save_without_subjects_is_rejected(admin_client: TestClient, class_roster, db_session):
    response = _save_sheet(admin_client, class_roster, subjects=("", " "))
    assert response.status_code == 400
    assert db_session.query(AttendanceEntry).count() == 0


def test_save_for_class_without_students(admin_client: TestClient, class_roster):
    response = admin_client.post(
        "/api/admin/attendance",
        json={"class_name": "12Z", "date": "2024-03-05", "subjects": ["Maths"]},
    )
    assert response.status_code == 400


def test_invalid_status_fails_validation(admin_client: TestClient, class_roster):
    response = admin_client.post(
        "/api/admin/attendance",
        json={
            "class_name": "10A",
            "date": "2024-03-05",
            "subjects": ["Maths"],
            "statuses": {str(class_roster[0].id): {"Maths": "late"}},
        },
    )
    assert response.status_code == 422


def test_view_groups_by_date_with_not_marked(admin_client: TestClient, class_roster, db_session):
    _save_sheet(admin_client, class_roster, on="2024-03-04")
    _save_sheet(admin_client, class_roster, on="2024-03-05", subjects=("History",))
    # A stray record for a subject only one student has on that date
    db_session.add(AttendanceEntry(student="Asha Rao", roll_no=1, class_name="10A",
                                   date=date(2024, 3, 4),
                                   subject="Art", status="present"))
    db_session.commit()

    response = admin_client.get("/api/admin/attendance/view", params={"class_name": "10A"})
    assert response.status_code == 200
    groups = response.json()["groups"]
    assert [g["date"] for g in groups] == ["2024-03-05", "2024-03-04"]

    older = groups[1]
    assert set(older["subjects"]) == {"Maths", "Science", "Art"}
    assert [r["student"] for r in older["rows"]] == ["Asha Rao", "Bilal Khan", "Chen Li"]
    bilal = older["rows"][1]
    assert bilal["statuses"]["Maths"] == "absent"
    assert bilal["statuses"]["Science"] == "Not Marked"
    assert bilal["statuses"]["Art"] == "Not Marked"


def test_admin_view_ignores_case_of_class(admin_client: TestClient, class_roster):
    _save_sheet(admin_client, class_roster)
    response = admin_client.get("/api/admin/attendance/view", params={"class_name": " 10a "})
    assert response.status_code == 200
    groups = response.json()["groups"]
    assert [g["date"] for g in groups] == ["2024-03-05"]
    assert [r["student"] for r in groups[0]["rows"]] == ["Asha Rao", "Bilal Khan", "Chen Li"]


def test_delete_date_group_matches_class_exactly(admin_client: TestClient, class_roster, db_session):
    _save_sheet(admin_client, class_roster)
    response = admin_client.delete(
        "/api/admin/attendance/view",
        params={"class_name": "10a", "date": "2024-03-05"},
    )
    assert response.json()["deleted"] == 0
    assert db_session.query(AttendanceEntry).count() == 6


def test_whitespace_subject_columns_are_ignored(admin_client: TestClient, class_roster, db_session):
    response = _save_sheet(admin_client, class_roster, subjects=("Maths", "  "))
    assert response.status_code == 200
    assert response.json()["saved"] == 3
    assert {r.subject for r in db_session.query(AttendanceEntry).all()} == {"Maths"}


def test_student_view_ignores_case_and_sorts_subjects(admin_client: TestClient, student_client: TestClient, class_roster):
    _save_sheet(admin_client, class_roster, subjects=("Science", "Maths"))

    response = student_client.get("/api/student/attendance", params={"class_name": "10a"})
    assert response.status_code == 200
    groups = response.json()["groups"]
    assert len(groups) == 1
    assert groups[0]["subjects"] == ["Maths", "Science"]


def test_delete_date_group_only_touches_that_date(admin_client: TestClient, class_roster, db_session):
    _save_sheet(admin_client, class_roster, on="2024-03-04")
    _save_sheet(admin_client, class_roster, on="2024-03-05")

    response = admin_client.delete(
        "/api/admin/attendance/view",
        params={"class_name": "10A", "date": "2024-03-04"},
    )
    assert response.status_code == 200
    assert response.json()["deleted"] == 6

    db_session.expire_all()
    dates = {str(r.date) for r in db_session.query(AttendanceEntry).all()}
    assert dates == {"2024-03-05"}


def test_sheet_treats_whitespace_subjects_as_blank():
    students = [Student(id=1, full_name="Asha Rao", class_name="10A", roll_no=1)]
    sheet = AttendanceSheet(students, ["Maths", "  ", ""])
    assert sheet.statuses == {1: {"Maths": None}}

    sheet.mark(1, "Maths", "present")
    records = sheet.to_records("10A", date(2024, 3, 5))
    assert [(r.subject, r.status) for r in records] == [("Maths", "present")]
