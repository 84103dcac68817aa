# backend/tests/api/test_documents.py
import pytest
from fastapi import status

@pytest.fixture
def scanned_document(client, upload_scan):
    response = upload_scan(client, count=3, title="Test Document")
    assert response.status_code == status.HTTP_200_OK
    return response.json()

def test_get_document(client, scanned_document):
    response = client.get(f"/api/documents/{scanned_document['id']}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["title"] == "Test Document"
    assert data["page_count"] == 3
    assert [p["id"] for p in data["pages"]] == [p["id"] for p in scanned_document["pages"]]

def test_list_documents(client, upload_scan, scanned_document):
    second = upload_scan(client, count=1, title="Second").json()

    response = client.get("/api/documents")

    assert response.status_code == status.HTTP_200_OK
    ids = [d["id"] for d in response.json()]
    assert set(ids) == {scanned_document["id"], second["id"]}

def test_update_document(client, scanned_document):
    response = client.put(
        f"/api/documents/{scanned_document['id']}",
        json={"title": "Updated Document"}
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["title"] == "Updated Document"
    assert data["updated_at"] >= scanned_document["updated_at"]

def test_update_document_blank_title(client, scanned_document):
    response = client.put(f"/api/documents/{scanned_document['id']}", json={"title": "  "})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "ValidationError"

def test_delete_document(client, scanned_document):
    response = client.delete(f"/api/documents/{scanned_document['id']}")

    assert response.status_code == status.HTTP_200_OK

    get_response = client.get(f"/api/documents/{scanned_document['id']}")
    assert get_response.status_code == status.HTTP_404_NOT_FOUND
    page_response = client.get(f"/api/pages/{scanned_document['pages'][0]['id']}")
    assert page_response.status_code == status.HTTP_404_NOT_FOUND

def test_get_nonexistent_document(client):
    response = client.get("/api/documents/doc_99999")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "NotFoundError"

def test_update_page_order(client, scanned_document):
    id0, id1, id2 = [p["id"] for p in scanned_document["pages"]]

    response = client.put(
        f"/api/documents/{scanned_document['id']}/pages/order",
        json={"page_ids": [id2, id0, id1]}
    )

    assert response.status_code == status.HTTP_200_OK
    pages = response.json()["pages"]
    assert [p["id"] for p in pages] == [id2, id0, id1]
    assert [p["order"] for p in pages] == [0, 1, 2]

def test_update_page_order_mismatch(client, scanned_document):
    ids = [p["id"] for p in scanned_document["pages"]]

    response = client.put(
        f"/api/documents/{scanned_document['id']}/pages/order",
        json={"page_ids": ids[:2]}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_delete_page(client, scanned_document):
    ids = [p["id"] for p in scanned_document["pages"]]

    response = client.delete(f"/api/documents/{scanned_document['id']}/pages/{ids[0]}")

    assert response.status_code == status.HTTP_200_OK
    pages = response.json()["pages"]
    assert [p["id"] for p in pages] == ids[1:]
    assert [p["order"] for p in pages] == [0, 1]

def test_delete_last_page_conflict(client, upload_scan):
    document = upload_scan(client, count=1).json()

    response = client.delete(f"/api/documents/{document['id']}/pages/{document['pages'][0]['id']}")

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"] == "InvariantViolation"
    assert client.get(f"/api/documents/{document['id']}").json()["page_count"] == 1

def test_export_document(client, scanned_document):
    response = client.get(f"/api/documents/{scanned_document['id']}/export?page_size=A4&margins=10")

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert b"/Count 3" in response.content

def test_export_unknown_page_size(client, scanned_document):
    response = client.get(f"/api/documents/{scanned_document['id']}/export?page_size=Tabloid")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "ConfigurationError"

def test_export_missing_document(client):
    response = client.get("/api/documents/doc_missing/export")
    assert response.status_code == status.HTTP_404_NOT_FOUND
