import pytest
from httpx import ASGITransport, AsyncClient

from velion_dkn.api.fastapi import create_app
from velion_dkn.app.settings import AppSettings

PDF = ("report.pdf", b"%PDF-1.4 api body", "application/pdf")


async def _upload(client, headers, title="Quarterly review", **form):
    return await client.post(
        "/api/documents/upload",
        headers=headers,
        files={"file": PDF},
        data={"title": title, **form},
    )


@pytest.mark.asyncio
class TestAuthGate:
    async def test_no_token(self, client):
        r = await client.get("/api/documents")
        assert r.status_code == 401
        assert r.json() == {"success": False, "message": "Not authorized, no token"}
        assert r.headers["www-authenticate"] == "Bearer"

    async def test_bad_token(self, client):
        r = await client.get("/api/documents", headers={"Authorization": "Bearer nope"})
        assert r.status_code == 401
        assert r.json()["message"] == "Not authorized, token failed"

    async def test_token_for_unknown_user(self, client, users, auth_headers):
        r = await client.get("/api/documents", headers=auth_headers(9999))
        assert r.status_code == 401
        assert r.json()["message"] == "Not authorized, user not found"


@pytest.mark.asyncio
class TestUpload:
    async def test_upload(self, client, users, auth_headers, upload_dir):
        r = await _upload(client, auth_headers(users["ben"]), tags="pricing", region="APAC")

        assert r.status_code == 201
        body = r.json()
        assert body["success"] is True
        assert body["message"] == "Document uploaded successfully"
        doc = body["document"]
        assert doc["title"] == "Quarterly review"
        assert doc["status"] == "pending"
        assert doc["file_name"] == "report.pdf"
        assert doc["uploader_name"] == "Ben Consultant"
        assert (upload_dir / doc["file_path"]).read_bytes() == PDF[1]

    async def test_upload_without_file(self, client, users, auth_headers):
        r = await client.post("/api/documents/upload", headers=auth_headers(users["ben"]), data={"title": "x"})
        assert r.status_code == 400
        assert r.json() == {"success": False, "message": "Please upload a file"}

    async def test_upload_without_title(self, client, users, auth_headers, upload_dir):
        r = await client.post("/api/documents/upload", headers=auth_headers(users["ben"]), files={"file": PDF})
        assert r.status_code == 400
        assert r.json()["message"] == "Document title is required"
        assert list(upload_dir.iterdir()) == []

    async def test_file_just_over_the_limit(self, engine, storage, auth_settings, users, auth_headers, upload_dir):
        app = create_app(
            app_settings=AppSettings(upload_dir=str(upload_dir), max_upload_bytes=1024 * 1024),
            auth_settings=auth_settings,
            db_engine=engine,
            storage=storage,
        )
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
            for size in (1024 * 1024 + 1, 2 * 1024 * 1024):
                r = await c.post(
                    "/api/documents/upload",
                    headers=auth_headers(users["ben"]),
                    files={"file": ("big.bin", b"0" * size, "application/octet-stream")},
                    data={"title": "Too big"},
                )
                assert r.status_code == 400
                assert r.json() == {"success": False, "message": "File size too large. Maximum size is 1MB."}
        assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
class TestReadRoutes:
    async def test_list_recent_and_get(self, client, users, auth_headers):
        ben = auth_headers(users["ben"])
        first = (await _upload(client, ben, title="First")).json()["document"]
        await _upload(client, ben, title="Second")

        r = await client.get("/api/documents", headers=ben)
        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert body["count"] == 2
        assert body["is_reviewer"] is False
        assert [d["title"] for d in body["documents"]] == ["Second", "First"]

        r = await client.get("/api/documents/recent", params={"limit": 1}, headers=ben)
        assert [d["title"] for d in r.json()["documents"]] == ["Second"]

        r = await client.get(f"/api/documents/{first['id']}", headers=ben)
        assert r.json() == {"success": True, "document": first}

    async def test_get_missing(self, client, users, auth_headers):
        r = await client.get("/api/documents/999", headers=auth_headers(users["ben"]))
        assert r.status_code == 404
        assert r.json() == {"success": False, "message": "Document not found"}

    async def test_status_filter_is_ignored_for_consultants(self, client, users, auth_headers):
        ben, ada = auth_headers(users["ben"]), auth_headers(users["ada"])
        await _upload(client, ben, title="Pending one")

        r = await client.get("/api/documents", params={"status": "approved"}, headers=ben)
        assert r.json()["count"] == 1

        r = await client.get("/api/documents", params={"status": "approved"}, headers=ada)
        assert r.json()["count"] == 0
        assert r.json()["is_reviewer"] is True

    async def test_bad_pagination(self, client, users, auth_headers):
        r = await client.get("/api/documents", params={"limit": 0}, headers=auth_headers(users["ben"]))
        assert r.status_code == 400
        assert r.json()["success"] is False
        assert r.json()["message"].startswith("Invalid value for limit")

    async def test_pending_requires_reviewer(self, client, users, auth_headers):
        await _upload(client, auth_headers(users["ben"]))

        r = await client.get("/api/documents/pending", headers=auth_headers(users["ben"]))
        assert r.status_code == 403
        assert r.json()["message"] == "Only Knowledge Champions can access pending documents"

        r = await client.get("/api/documents/pending", headers=auth_headers(users["ada"]))
        assert r.status_code == 200
        assert r.json()["count"] == 1


@pytest.mark.asyncio
class TestReview:
    async def test_review_flow(self, client, users, auth_headers):
        ben, ada = auth_headers(users["ben"]), auth_headers(users["ada"])
        doc = (await _upload(client, ben)).json()["document"]
        url = f"/api/documents/{doc['id']}/review"

        r = await client.put(url, json={"status": "approved"}, headers=ben)
        assert r.status_code == 403
        assert r.json()["message"] == "Only Knowledge Champions can review documents"

        r = await client.put(url, json={"status": "maybe"}, headers=ada)
        assert r.status_code == 400
        assert r.json()["message"] == "Status must be either approved or rejected"

        r = await client.put(url, json={"status": "approved", "comment": "Great"}, headers=ada)
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Document approved successfully"}

        after = (await client.get(f"/api/documents/{doc['id']}", headers=ben)).json()["document"]
        assert after["status"] == "approved"
        assert after["reviewer_name"] == "Ada Reviewer"
        assert after["review_comment"] == "Great"

    async def test_consultant_without_body_gets_403(self, client, users, auth_headers):
        r = await client.put("/api/documents/1/review", headers=auth_headers(users["ben"]))
        assert r.status_code == 403

    async def test_review_missing_document(self, client, users, auth_headers):
        r = await client.put("/api/documents/999/review", json={"status": "rejected"}, headers=auth_headers(users["ada"]))
        assert r.status_code == 404


@pytest.mark.asyncio
class TestDownloadAndDelete:
    async def test_download(self, client, users, auth_headers):
        doc = (await _upload(client, auth_headers(users["ben"]))).json()["document"]
        cleo = auth_headers(users["cleo"])

        r = await client.get(f"/api/documents/{doc['id']}/download", headers=cleo)
        assert r.status_code == 200
        assert r.content == PDF[1]
        assert "report.pdf" in r.headers["content-disposition"]
        assert r.headers["content-type"] == "application/pdf"

        after = (await client.get(f"/api/documents/{doc['id']}", headers=cleo)).json()["document"]
        assert after["download_count"] == 1

    async def test_download_missing_file(self, client, users, auth_headers, upload_dir):
        doc = (await _upload(client, auth_headers(users["ben"]))).json()["document"]
        (upload_dir / doc["file_path"]).unlink()

        r = await client.get(f"/api/documents/{doc['id']}/download", headers=auth_headers(users["ben"]))
        assert r.status_code == 404
        assert r.json()["message"] == "File not found on server"

    async def test_static_copy_is_served(self, client, users, auth_headers):
        doc = (await _upload(client, auth_headers(users["ben"]))).json()["document"]
        r = await client.get(f"/uploads/{doc['file_path']}")
        assert r.status_code == 200
        assert r.content == PDF[1]

    async def test_delete(self, client, users, auth_headers, upload_dir):
        ben = auth_headers(users["ben"])
        doc = (await _upload(client, ben)).json()["document"]

        r = await client.delete(f"/api/documents/{doc['id']}", headers=auth_headers(users["ada"]))
        assert r.status_code == 403
        assert r.json()["message"] == "You can only delete your own documents"

        r = await client.delete(f"/api/documents/{doc['id']}", headers=ben)
        assert r.json() == {"success": True, "message": "Document deleted successfully"}
        assert not (upload_dir / doc["file_path"]).exists()

        r = await client.get(f"/api/documents/{doc['id']}", headers=ben)
        assert r.status_code == 404
