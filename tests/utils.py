"""Shared helpers for the API tests."""
from fastapi.testclient import TestClient

KIB = 1024
MIB = 1024 * 1024

TEST_FILE_CONTENT = b"Hello, world!"
TEST_FILE_CONTENT_TYPE = "text/plain"
TEST_PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"
TEST_PDF_CONTENT_TYPE = "application/pdf"


def upload(client: TestClient, name: str, content: bytes, mime: str = TEST_FILE_CONTENT_TYPE, folder_id=None):
    data = {} if folder_id is None else {"folderId": str(folder_id)}
    return client.post(
        "/api/files/upload",
        files={"file": (name, content, mime)},
        data=data,
    )


def create_folder(client: TestClient, name: str, parent_id=None) -> dict:
    response = client.post("/api/folders", json={"name": name, "parentId": parent_id})
    assert response.status_code == 201, response.text
    return response.json()
