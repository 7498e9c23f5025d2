"""
Integration tests for the HTTP host (main.py, routers/).
"""

import base64
import io
import zipfile

import httpx
import pytest
from fastapi.testclient import TestClient

from inspection_export import deps
from inspection_export.main import app, status_for
from inspection_export.exceptions import DeliveryFailure, InvalidState, RangeError, UnknownSession
from inspection_export.services import ExportTool


@pytest.fixture
def tool():
    tool = ExportTool()
    app.dependency_overrides[deps.get_export_tool] = lambda: tool
    yield tool
    app.dependency_overrides.clear()
    tool.close()


@pytest.fixture
def client(tool):
    return TestClient(app)


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["live_documents"] == 0
        assert data["live_archives"] == 0

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/health"


class TestDocumentRoutes:

    def create(self, client) -> str:
        resp = client.post("/api/export/documents")
        assert resp.status_code == 201
        return resp.json()["document_id"]

    def test_full_document_flow(self, client, png_payload):
        document_id = self.create(client)

        resp = client.post(f"/api/export/documents/{document_id}/operations", json={"operations": [
            {"op": "line", "cap_style": "round", "x1": 72, "y1": 72, "x2": 540, "y2": 72, "color": "#44546a"},
            {"op": "content_at", "text": "Summary", "size": 20, "font": "Times-Roman",
             "alignment": "center", "color": "#44546a", "x": 72, "y": 87, "advance_lines": 0.5},
            {"op": "sliced_text", "text": "Inspector: Jane", "split_index": 11, "total_length": 15,
             "font_a": "Times-Bold", "font_b": "Times-Roman"},
            {"op": "page"},
            {"op": "set_font", "font": "Times-Roman", "size": 12},
            {"op": "list_item", "number": 1, "text": "Exit signs lit"},
            {"op": "move_down", "lines": 2},
            {"op": "content", "text": "Done", "size": 11, "font": "Times-Roman"},
        ]})
        assert resp.status_code == 200
        assert resp.json()["applied"] == 8
        assert resp.json()["page_count"] == 2

        resp = client.post(f"/api/export/documents/{document_id}/header", json={
            "date_time_text": "Tue Mar 5 2024 14:03:09 EST", "image_payload": png_payload,
        })
        assert resp.json()["pages"] == 2

        resp = client.post(f"/api/export/documents/{document_id}/footer", json={
            "text": "Centre for Virtual Reality Innovation",
        })
        assert resp.json()["pages"] == 2

        resp = client.post(f"/api/export/documents/{document_id}/download", json={"filename": "Summary #1.pdf"})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert 'filename="Summary _1.pdf"' in resp.headers["content-disposition"]
        assert resp.content.startswith(b"%PDF")

        resp = client.post(f"/api/export/documents/{document_id}/operations", json={"operations": [{"op": "page"}]})
        assert resp.status_code == 409

    def test_download_non_ascii_filename(self, client, tool):
        document_id = client.post("/api/export/documents").json()["document_id"]
        client.post(f"/api/export/documents/{document_id}/operations", json={
            "operations": [{"op": "content", "text": "Learner report", "size": 12, "font": "Times-Roman"}],
        })

        resp = client.post(
            f"/api/export/documents/{document_id}/download",
            json={"filename": "Inspection Summary_Nguyễn Văn_05Mar2024.pdf"},
        )

        assert resp.status_code == 200
        assert resp.content.startswith(b"%PDF")
        disposition = resp.headers["content-disposition"]
        assert 'filename="Inspection Summary_Nguyen Van_05Mar2024.pdf"' in disposition
        assert "filename*=UTF-8''Inspection%20Summary_Nguy%E1%BB%85n%20V%C4%83n_05Mar2024.pdf" in disposition
        assert len(tool.documents) == 0

    def test_line_height(self, client):
        document_id = self.create(client)
        client.post(f"/api/export/documents/{document_id}/operations", json={"operations": [
            {"op": "set_font", "font": "Times-Roman", "size": 12},
        ]})
        resp = client.get(f"/api/export/documents/{document_id}/line-height")
        assert resp.status_code == 200
        assert resp.json()["line_height"] > 0

    def test_batch_stops_at_first_failure(self, client, tool):
        document_id = self.create(client)
        resp = client.post(f"/api/export/documents/{document_id}/operations", json={"operations": [
            {"op": "content", "text": "kept", "size": 12, "font": "Times-Roman"},
            {"op": "content", "text": "bad", "size": 12, "font": "No Such Font"},
            {"op": "content", "text": "never", "size": 12, "font": "Times-Roman"},
        ]})
        assert resp.status_code == 422
        assert resp.json()["type"] == "InvalidStyle"
        assert len(tool.documents.get(document_id).operations) == 1

    def test_slice_out_of_range(self, client):
        document_id = self.create(client)
        resp = client.post(f"/api/export/documents/{document_id}/operations", json={"operations": [
            {"op": "sliced_text", "text": "abc", "split_index": 2, "total_length": 9,
             "font_a": "Times-Bold", "font_b": "Times-Roman"},
        ]})
        assert resp.status_code == 422
        assert resp.json()["type"] == "RangeError"

    def test_unknown_op_rejected_by_validation(self, client):
        document_id = self.create(client)
        resp = client.post(f"/api/export/documents/{document_id}/operations", json={"operations": [{"op": "circle"}]})
        assert resp.status_code == 422

    def test_malformed_header_image(self, client):
        document_id = self.create(client)
        resp = client.post(f"/api/export/documents/{document_id}/header", json={
            "date_time_text": "now", "image_payload": "###",
        })
        assert resp.status_code == 422
        assert resp.json()["type"] == "MalformedPayload"

    def test_unknown_document(self, client):
        resp = client.get("/api/export/documents/doc_missing/line-height")
        assert resp.status_code == 409

    def test_discard(self, client):
        document_id = self.create(client)
        assert client.delete(f"/api/export/documents/{document_id}").json()["discarded"] is True
        assert client.delete(f"/api/export/documents/{document_id}").json()["discarded"] is False


class TestArchiveRoutes:

    def test_archive_flow(self, client):
        assert client.post("/api/export/archives/zip_0").status_code == 201

        resp = client.post("/api/export/archives/zip_0/entries", json={"name": "a.png", "data": b64(b"one")})
        assert resp.json()["entries"] == 1
        resp = client.post("/api/export/archives/zip_0/entries", json={"name": "a.png", "data": b64(b"two!")})
        assert resp.json() == {"session_id": "zip_0", "entries": 1, "total_bytes": 4}

        resp = client.post("/api/export/archives/zip_0/download", json={"filename": "Inspection_Photos.zip"})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/zip"
        with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
            assert zf.read("a.png") == b"two!"

        resp = client.post("/api/export/archives/zip_0/download", json={"filename": "again.zip"})
        assert resp.status_code == 404

    def test_download_non_ascii_filename(self, client):
        client.post("/api/export/archives/zip_0")
        client.post("/api/export/archives/zip_0/entries", json={"name": "a.png", "data": b64(b"one")})

        resp = client.post("/api/export/archives/zip_0/download", json={"filename": "Ảnh_kiểm_tra.zip"})

        assert resp.status_code == 200
        assert 'filename="Anh_kiem_tra.zip"' in resp.headers["content-disposition"]
        assert "filename*=UTF-8''%E1%BA%A2nh_ki%E1%BB%83m_tra.zip" in resp.headers["content-disposition"]
        with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
            assert zf.read("a.png") == b"one"

    def test_duplicate_session(self, client):
        client.post("/api/export/archives/dup")
        resp = client.post("/api/export/archives/dup")
        assert resp.status_code == 409
        assert resp.json()["type"] == "DuplicateSession"

    def test_unknown_session_entry(self, client):
        resp = client.post("/api/export/archives/nope/entries", json={"name": "a", "data": b64(b"x")})
        assert resp.status_code == 404

    def test_bad_entry_payload(self, client):
        client.post("/api/export/archives/s")
        resp = client.post("/api/export/archives/s/entries", json={"name": "a", "data": "***"})
        assert resp.status_code == 422

    def test_discard(self, client):
        client.post("/api/export/archives/s")
        assert client.delete("/api/export/archives/s").json()["discarded"] is True


class TestStatusMapping:

    def test_status_codes(self):
        assert status_for(InvalidState("x")) == 409
        assert status_for(RangeError(3, 2, 1)) == 422
        assert status_for(UnknownSession("s")) == 404
        assert status_for(DeliveryFailure("x")) == 502


@pytest.mark.asyncio
async def test_async_client_health(tool):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["version"] == "1.0.0"
