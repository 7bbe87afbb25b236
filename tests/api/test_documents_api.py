"""
Tests for the document endpoints.
"""

import json

from src.shared.identifiers import encode_folder_id


async def _create_folder(client, name: str) -> str:
    response = await client.post("/v1/folders", json={"name": name})
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _upload(client, name="notes.txt", body=b"hello", metadata=None):
    data = {"metadata": json.dumps(metadata)} if metadata is not None else None
    return await client.post(
        "/v1/documents/upload",
        files={"file": (name, body, "text/plain")},
        data=data,
    )


class TestSingleUpload:
    async def test_upload_to_general(self, client, storage):
        response = await _upload(client)

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["id"].startswith("doc_")
        assert body["category"] == "General"
        assert body["folder_id"] == encode_folder_id("General")
        assert body["file_size"] == 5
        assert body["status"] == "draft"
        assert len(storage.objects) == 1

    async def test_upload_with_metadata(self, client):
        folder_id = await _create_folder(client, "Notes")

        response = await _upload(
            client, metadata={"title": "Meeting", "tags": ["q1"], "folder_id": folder_id}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Meeting"
        assert body["tags"] == ["q1"]
        assert body["category"] == "Notes"

    async def test_empty_file_is_rejected(self, client):
        response = await _upload(client, body=b"")

        assert response.status_code == 400

    async def test_bad_metadata_json(self, client):
        response = await client.post(
            "/v1/documents/upload",
            files={"file": ("a.txt", b"abc", "text/plain")},
            data={"metadata": "{not json"},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestBulkUpload:
    async def test_partial_failure_is_reported_per_file(self, client):
        folder_id = await _create_folder(client, "Batch")
        files = [
            ("files", ("a.txt", b"aaa", "text/plain")),
            ("files", ("empty.txt", b"", "text/plain")),
            ("files", ("c.txt", b"ccc", "text/plain")),
        ]

        response = await client.post(
            "/v1/documents/bulk-upload",
            files=files,
            data={"metadata": json.dumps({"folder_id": folder_id, "tags": ["bulk"]})},
        )

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["category"] == "Batch"
        assert body["summary"] == {"total": 3, "successful": 2, "failed": 1, "success_rate": 67}
        assert [r["status"] for r in body["results"]] == ["success", "error", "success"]
        assert body["results"][1]["error"]
        assert body["results"][0]["document"]["tags"] == ["bulk"]

        listed = await client.get("/v1/documents", params={"folder_id": folder_id})
        assert sorted(d["title"] for d in listed.json()) == ["a.txt", "c.txt"]

    async def test_bulk_upload_by_category_name(self, client):
        await _create_folder(client, "Receipts")

        response = await client.post(
            "/v1/documents/bulk-upload",
            files=[("files", ("r.txt", b"r", "text/plain"))],
            data={"metadata": json.dumps({"category": "receipts"})},
        )

        assert response.status_code == 201
        assert response.json()["category"] == "Receipts"

    async def test_no_files_is_bad_request(self, client):
        response = await client.post("/v1/documents/bulk-upload", data={"metadata": "{}"})

        assert response.status_code == 400

    async def test_unknown_folder_is_not_found(self, client):
        response = await client.post(
            "/v1/documents/bulk-upload",
            files=[("files", ("r.txt", b"r", "text/plain"))],
            data={"metadata": json.dumps({"folder_id": encode_folder_id("Nope")})},
        )

        assert response.status_code == 404


class TestManageDocuments:
    async def test_update_move_download_delete(self, client, storage):
        document = (await _upload(client, body=b"payload")).json()
        target = await _create_folder(client, "Archive")

        response = await client.patch(
            f"/v1/documents/{document['id']}", json={"starred": True, "status": "review"}
        )
        assert response.status_code == 200
        assert response.json()["starred"] is True
        assert response.json()["status"] == "review"

        response = await client.post(
            f"/v1/documents/{document['id']}/move", json={"folder_id": target}
        )
        assert response.status_code == 200
        assert response.json()["category"] == "Archive"

        response = await client.get(f"/v1/documents/{document['id']}/download")
        assert response.status_code == 200
        assert response.content == b"payload"
        assert "notes.txt" in response.headers["content-disposition"]

        response = await client.delete(f"/v1/documents/{document['id']}")
        assert response.status_code == 204
        assert storage.objects == {}

        response = await client.get(f"/v1/documents/{document['id']}")
        assert response.status_code == 404

    async def test_download_with_missing_blob(self, client, storage):
        document = (await _upload(client)).json()
        storage.objects.clear()

        response = await client.get(f"/v1/documents/{document['id']}/download")

        assert response.status_code == 404

    async def test_documents_of_other_owner_are_not_found(self, client):
        document = (await _upload(client)).json()

        response = await client.get(
            f"/v1/documents/{document['id']}", headers={"X-Owner-Id": "someone-else"}
        )

        assert response.status_code == 404
