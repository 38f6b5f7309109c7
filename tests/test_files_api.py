from fastapi import status
from fastapi.testclient import TestClient

from drive_service.services.storage import StorageEngine
from tests.utils import (
    KIB,
    TEST_FILE_CONTENT,
    TEST_FILE_CONTENT_TYPE,
    TEST_PDF_CONTENT,
    TEST_PDF_CONTENT_TYPE,
    create_folder,
    upload,
)


def test_get_current_user(client: TestClient):
    response = client.get("/api/user")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body == {
        "id": 1,
        "username": "demo",
        "storageLimit": 104857600,
        "storageUsed": 0,
    }


def test_get_current_user_missing(client: TestClient, settings):
    settings.DEMO_USERNAME = "someone-else"
    response = client.get("/api/user")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "User not found"


def test_upload_file(client: TestClient, demo_user):
    response = upload(client, "hello.txt", TEST_FILE_CONTENT)

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["name"] == "hello.txt"
    assert body["type"] == TEST_FILE_CONTENT_TYPE
    assert body["size"] == len(TEST_FILE_CONTENT)
    assert body["folderId"] is None
    assert body["isStarred"] is False
    assert body["isDeleted"] is False
    assert body["path"]
    assert "content" not in body
    assert "dataUrl" not in body
    assert demo_user.storage_used == len(TEST_FILE_CONTENT)


def test_upload_without_file(client: TestClient):
    response = client.post("/api/files/upload", data={"folderId": ""})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "No file uploaded"


def test_upload_into_folder(client: TestClient):
    folder = create_folder(client, "Docs")

    response = upload(client, "a.txt", b"abc", folder_id=folder["id"])
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["folderId"] == folder["id"]

    listed = client.get("/api/files", params={"folderId": folder["id"]}).json()
    assert [f["name"] for f in listed] == ["a.txt"]
    assert client.get("/api/files").json() == []


def test_upload_into_unknown_folder(client: TestClient, demo_user):
    response = upload(client, "a.txt", b"abc", folder_id=42)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert demo_user.storage_used == 0


def test_upload_over_size_ceiling(client: TestClient, settings, demo_user):
    settings.MAX_UPLOAD_SIZE = 1 * KIB

    response = upload(client, "big.bin", b"x" * (2 * KIB), mime="application/octet-stream")

    assert response.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    assert demo_user.storage_used == 0


def test_size_ceiling_checked_before_quota(client: TestClient, settings, demo_user):
    settings.MAX_UPLOAD_SIZE = 1 * KIB
    demo_user.storage_limit = 10

    response = upload(client, "big.bin", b"x" * (2 * KIB))

    assert response.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


def test_quota_rejection_does_not_charge(client: TestClient, demo_user):
    demo_user.storage_limit = 100 * KIB

    first = upload(client, "A.bin", b"a" * (60 * KIB), mime="application/octet-stream")
    second = upload(client, "B.bin", b"b" * (50 * KIB), mime="application/octet-stream")

    assert first.status_code == status.HTTP_201_CREATED
    assert second.status_code == status.HTTP_400_BAD_REQUEST
    assert "Storage limit exceeded" in second.json()["message"]
    assert demo_user.storage_used == 60 * KIB
    assert [f["name"] for f in client.get("/api/files").json()] == ["A.bin"]


def test_upload_exactly_filling_quota(client: TestClient, demo_user):
    demo_user.storage_limit = 10

    assert upload(client, "ten.txt", b"0123456789").status_code == status.HTTP_201_CREATED
    assert upload(client, "one.txt", b"x").status_code == status.HTTP_400_BAD_REQUEST


def test_download_round_trip(client: TestClient):
    file_id = upload(client, "doc.pdf", TEST_PDF_CONTENT, mime=TEST_PDF_CONTENT_TYPE).json()["id"]

    response = client.get(f"/api/files/{file_id}/download")

    assert response.status_code == status.HTTP_200_OK
    assert response.content == TEST_PDF_CONTENT
    assert response.headers["content-type"] == TEST_PDF_CONTENT_TYPE
    assert response.headers["content-disposition"] == 'attachment; filename="doc.pdf"'


def test_download_binary_round_trip(client: TestClient):
    payload = bytes(range(256)) * 4
    file_id = upload(client, "blob.bin", payload, mime="application/octet-stream").json()["id"]

    response = client.get(f"/api/files/{file_id}/download")

    assert response.content == payload
    assert response.headers["content-type"] == "application/octet-stream"


def test_download_non_ascii_name(client: TestClient):
    file_id = upload(client, "résumé.txt", b"cv").json()["id"]

    disposition = client.get(f"/api/files/{file_id}/download").headers["content-disposition"]

    assert disposition.startswith('attachment; filename="rsum.txt"')
    assert "filename*=UTF-8''r%C3%A9sum%C3%A9.txt" in disposition


def test_download_malformed_content(client: TestClient, engine: StorageEngine):
    file_id = upload(client, "a.txt", b"abc").json()["id"]
    engine.set_file_content(file_id, "garbage")

    response = client.get(f"/api/files/{file_id}/download")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["message"] == "Invalid file content format"


def test_download_missing_file(client: TestClient):
    assert client.get("/api/files/99/download").status_code == status.HTTP_404_NOT_FOUND


def test_get_file_with_data_url(client: TestClient):
    file_id = upload(client, "hi.txt", b"hi").json()["id"]

    response = client.get(f"/api/files/{file_id}")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["id"] == file_id
    assert body["dataUrl"] == "data:text/plain;base64,aGk="


def test_get_missing_file(client: TestClient):
    response = client.get("/api/files/123")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Not Found", "message": "File not found", "status": 404}


def test_file_of_another_user_is_hidden(client: TestClient, engine: StorageEngine):
    other = engine.create_user("bob", "b")
    foreign = engine.create_file(name="secret", type="text/plain", size=1, user_id=other.id)

    assert client.get(f"/api/files/{foreign.id}").status_code == status.HTTP_404_NOT_FOUND
    assert client.delete(f"/api/files/{foreign.id}").status_code == status.HTTP_404_NOT_FOUND
    assert engine.get_file_by_id(foreign.id).is_deleted is False


def test_list_files_with_empty_folder_id_means_root(client: TestClient):
    upload(client, "root.txt", b"r")

    response = client.get("/api/files?folderId=")

    assert [f["name"] for f in response.json()] == ["root.txt"]


def test_list_files_with_invalid_folder_id(client: TestClient):
    response = client.get("/api/files", params={"folderId": "abc"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["message"] == "Validation error"
    assert body["errors"][0]["loc"] == ["query", "folderId"]


def test_recent_files_default_limit(client: TestClient):
    for i in range(6):
        upload(client, f"f{i}.txt", b"x")

    response = client.get("/api/files/recent")

    assert response.status_code == status.HTTP_200_OK
    assert len(response.json()) == 4


def test_recent_files_limit_and_order(client: TestClient):
    ids = [upload(client, f"f{i}.txt", b"x").json()["id"] for i in range(3)]
    client.put(f"/api/files/{ids[0]}", json={"isStarred": True})

    recent = client.get("/api/files/recent", params={"limit": 2}).json()

    assert len(recent) == 2
    assert recent[0]["id"] == ids[0]


def test_update_file(client: TestClient):
    file_id = upload(client, "old.txt", b"x").json()["id"]

    response = client.put(f"/api/files/{file_id}", json={"name": "new.txt", "isStarred": True})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["name"] == "new.txt"
    assert body["isStarred"] is True


def test_move_file_between_folders(client: TestClient):
    folder = create_folder(client, "Docs")
    file_id = upload(client, "a.txt", b"x").json()["id"]

    moved = client.put(f"/api/files/{file_id}", json={"folderId": folder["id"]}).json()
    assert moved["folderId"] == folder["id"]

    back = client.put(f"/api/files/{file_id}", json={"folderId": None}).json()
    assert back["folderId"] is None


def test_update_file_validation_error(client: TestClient):
    file_id = upload(client, "a.txt", b"x").json()["id"]

    response = client.put(f"/api/files/{file_id}", json={"name": ""})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"]


def test_update_missing_file(client: TestClient):
    response = client.put("/api/files/55", json={"name": "x"})
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_delete_file(client: TestClient, demo_user):
    file_id = upload(client, "a.txt", b"12345").json()["id"]

    response = client.delete(f"/api/files/{file_id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "File deleted successfully"}
    assert demo_user.storage_used == 0
    assert client.get("/api/files").json() == []
    assert client.get(f"/api/files/{file_id}").status_code == status.HTTP_404_NOT_FOUND
    assert client.get(f"/api/files/{file_id}/download").status_code == status.HTTP_404_NOT_FOUND


def test_delete_file_twice(client: TestClient, demo_user):
    upload(client, "keep.txt", b"123")
    file_id = upload(client, "a.txt", b"12345").json()["id"]

    assert client.delete(f"/api/files/{file_id}").status_code == status.HTTP_200_OK
    assert client.delete(f"/api/files/{file_id}").status_code == status.HTTP_200_OK
    assert demo_user.storage_used == 3


def test_delete_missing_file(client: TestClient):
    response = client.delete("/api/files/8")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "File not found"


def test_storage_stats(client: TestClient, demo_user):
    demo_user.storage_limit = 1000
    upload(client, "a.txt", b"x" * 250)

    response = client.get("/api/storage/stats")

    assert response.json() == {
        "quota": 1000,
        "used": 250,
        "available": 750,
        "percentageUsed": 25.0,
        "totalFiles": 1,
    }


def test_unknown_route(client: TestClient):
    response = client.get("/api/nothing-here")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "The path /api/nothing-here was not found"


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "healthy"
