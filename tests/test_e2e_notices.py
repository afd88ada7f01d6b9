from datetime import date

import pytest

from fastapi.testclient import TestClient

from conftest import encode_file
from campusconnect.models import Notice
from campusconnect.storage.service import StorageError


def test_post_text_notice(admin_client: TestClient):
    response = admin_client.post("/api/admin/noticeboard", json={
        "class_name": "10A", "date": "2024-03-01", "notice": "School closed on Friday",
    })
    assert response.status_code == 201, f"Post failed. Response: {response.text}"
    body = response.json()
    assert body["notice"] == "School closed on Friday"
    assert body["file_url"] is None
    assert body["file_type"] is None


def test_notice_needs_class(admin_client: TestClient):
    response = admin_client.post("/api/admin/noticeboard", json={"class_name": "", "date": "2024-03-01"})
    assert response.status_code == 422
    response = admin_client.post("/api/admin/noticeboard", json={"class_name": "10A"})
    assert response.status_code == 422


def test_attachment_type_and_location(admin_client: TestClient, storage):
    image = admin_client.post("/api/admin/noticeboard", json={
        "class_name": "10A", "date": "2024-03-01",
        "attachment": {"file_name": "poster.PNG", "content_type": "image/png", "content": encode_file(b"png")},
    }).json()
    assert image["file_type"] == "image"
    assert image["file_url"].startswith("/files/notices/notices/")
    assert image["file_url"].endswith(".png")

    pdf = admin_client.post("/api/admin/noticeboard", json={
        "class_name": "10A", "date": "2024-03-02",
        "attachment": {"file_name": "circular.pdf", "content_type": "application/pdf", "content": encode_file(b"pdf")},
    }).json()
    assert pdf["file_type"] == "pdf"


def test_failed_upload_inserts_nothing(admin_client: TestClient, storage, db_session, monkeypatch):
    def broken_upload(*args, **kwargs):
        raise StorageError("bucket unavailable")

    monkeypatch.setattr(storage, "upload", broken_upload)
    response = admin_client.post("/api/admin/noticeboard", json={
        "class_name": "10A", "date": "2024-03-01", "notice": "x",
        "attachment": {"file_name": "a.pdf", "content": encode_file(b"a")},
    })
    assert response.status_code == 502
    assert db_session.query(Notice).count() == 0


def test_view_newest_first_per_class(admin_client: TestClient, student_client: TestClient):
    for class_name, on in [("10A", "2024-03-01"), ("10A", "2024-03-09"), ("9B", "2024-03-05")]:
        admin_client.post("/api/admin/noticeboard", json={"class_name": class_name, "date": on, "notice": on})

    response = admin_client.get("/api/admin/noticeboard/view", params={"class_name": "10A"})
    assert [n["date"] for n in response.json()["notices"]] == ["2024-03-09", "2024-03-01"]

    response = student_client.get("/api/student/noticeboard", params={"class_name": "9B"})
    assert response.status_code == 200
    assert [n["notice"] for n in response.json()["notices"]] == ["2024-03-05"]


def test_delete_removes_file_and_row(admin_client: TestClient, storage, db_session):
    created = admin_client.post("/api/admin/noticeboard", json={
        "class_name": "10A", "date": "2024-03-01",
        "attachment": {"file_name": "a.pdf", "content_type": "application/pdf", "content": encode_file(b"a")},
    }).json()
    path = storage.path_from_public_url("notices", created["file_url"])
    assert (storage.local_root / "notices" / path).exists()

    response = admin_client.delete(f"/api/admin/noticeboard/{created['id']}")
    assert response.status_code == 200
    assert response.json()["file_removed"] is True
    assert not (storage.local_root / "notices" / path).exists()
    assert db_session.query(Notice).count() == 0


def test_delete_proceeds_when_storage_fails(admin_client: TestClient, storage, db_session, monkeypatch):
    created = admin_client.post("/api/admin/noticeboard", json={
        "class_name": "10A", "date": "2024-03-01",
        "attachment": {"file_name": "a.pdf", "content_type": "application/pdf", "content": encode_file(b"a")},
    }).json()

    def broken_remove(*args, **kwargs):
        raise StorageError("delete denied")

    monkeypatch.setattr(storage, "remove", broken_remove)
    response = admin_client.delete(f"/api/admin/noticeboard/{created['id']}")
    assert response.status_code == 200
    assert response.json()["file_removed"] is False
    assert db_session.query(Notice).count() == 0

    assert admin_client.delete(f"/api/admin/noticeboard/{created['id']}").status_code == 404


def test_delete_leaves_files_outside_notices_bucket(admin_client: TestClient, storage, db_session, monkeypatch):
    outside = storage.local_root / "school-files" / "keep.pdf"
    outside.parent.mkdir(parents=True)
    outside.write_bytes(b"keep")
    db_notice = Notice(class_name="10A", date=date(2024, 3, 1), notice="",
                       file_url="/files/school-files/keep.pdf", file_type="pdf")
    db_session.add(db_notice)
    db_session.commit()

    removed = []
    monkeypatch.setattr(storage, "remove", lambda bucket, paths: removed.extend(paths) or list(paths))
    response = admin_client.delete(f"/api/admin/noticeboard/{db_notice.id}")
    assert response.status_code == 200
    assert response.json()["file_removed"] is False
    assert removed == []
    assert outside.exists()
    assert db_session.query(Notice).count() == 0


def test_public_url_outside_bucket_has_no_path(storage):
    assert storage.path_from_public_url("notices", "/files/notices/notices/a.pdf") == "notices/a.pdf"
    assert storage.path_from_public_url("notices", "https://elsewhere.example/a.pdf") is None
    assert storage.path_from_public_url("notices", "/files/school-files/a.pdf") is None


def test_local_storage_rejects_paths_escaping_bucket(storage):
    with pytest.raises(StorageError):
        storage.upload("notices", "../school-files/x.pdf", b"x")
    with pytest.raises(StorageError):
        storage.remove("notices", ["../school-files/x.pdf"])
