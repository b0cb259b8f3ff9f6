import io

from starlette.datastructures import UploadFile

from app.api.deps import get_extraction_service
from app.llm.errors import LLMNonRetryableError
from app.main import app
from app.services.extraction_service import ExtractionService

from conftest import LONG_TEXT, build_pdf


def _upload(client, name, data, content_type):
    files = {"file": (name, io.BytesIO(data), content_type)}
    return client.post("/api/extract", files=files)


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}
    assert client.get("/api/").status_code == 200


def test_ocr_health_reports_mode(client, recognizer):
    body = client.get("/api/ocr/health").json()
    assert body["mode"] == "live"

    recognizer.configured = False
    assert client.get("/api/ocr/health").json()["mode"] == "simulated"


def test_extract_pdf_and_download_outputs(client, recognizer):
    recognizer.texts = {2: "from the scan"}
    resp = _upload(client, "report.pdf", build_pdf([LONG_TEXT, ""]), "application/pdf")
    assert resp.status_code == 200, resp.text
    assert "x-request-id" in resp.headers

    body = resp.json()
    assert body["status"] == "DONE"
    assert body["degraded"] is False
    assert body["page_count"] == 2
    assert body["chunks"] == [{"index": 1, "pages": [1, 2]}]
    assert [p["source"] for p in body["pages"]] == ["text", "ocr"]
    assert body["logs"][-1]["message"] == "Processing complete!"
    assert [o["name"] for o in body["outputs"]] == ["saida.txt", "saida.json", "saida.html"]

    txt = client.get(body["outputs"][0]["url"])
    assert txt.status_code == 200
    assert txt.headers["content-type"].startswith("text/plain")
    assert 'filename="saida.txt"' in txt.headers["content-disposition"]
    assert txt.text.endswith("2\nfrom the scan")

    js = client.get(body["outputs"][1]["url"]).json()
    assert js["paginas"]["2"] == "from the scan"


def test_extract_reports_degraded_run(client, recognizer):
    recognizer.configured = False
    body = _upload(client, "scan.pdf", build_pdf([""]), "application/pdf").json()
    assert body["status"] == "DONE"
    assert body["degraded"] is True
    assert body["pages"][0]["source"] == "simulated"


def test_unsupported_type_is_rejected(client):
    resp = _upload(client, "notes.txt", b"plain text", "text/plain")
    assert resp.status_code == 415
    assert resp.json()["error"]["code"] == "INVALID_FILE_TYPE"


def test_missing_file_is_rejected(client):
    resp = client.post("/api/extract")
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "FILE_MISSING"


def test_fatal_ocr_error_surfaces_message(client, recognizer, run_store):
    recognizer.errors = {1: LLMNonRetryableError("Gemini rejected the request (400): unreadable image")}
    resp = _upload(client, "scan.pdf", build_pdf([""]), "application/pdf")
    assert resp.status_code == 502
    err = resp.json()["error"]
    assert err["code"] == "OCR_FAILED"
    assert err["message"] == "Gemini rejected the request (400): unreadable image"
    assert len(run_store) == 0


def test_reset_releases_run(client):
    body = _upload(client, "a.pdf", build_pdf([LONG_TEXT]), "application/pdf").json()
    run_url = f"/api/runs/{body['run_id']}"

    assert client.get(run_url).status_code == 200
    assert client.delete(run_url).status_code == 204
    assert client.get(run_url).status_code == 404
    assert client.get(body["outputs"][0]["url"]).status_code == 404


def test_unknown_output_file_is_404(client):
    body = _upload(client, "a.pdf", build_pdf([LONG_TEXT]), "application/pdf").json()
    resp = client.get(f"/api/runs/{body['run_id']}/files/other.txt")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


def test_oversized_upload_is_refused_before_it_is_read(client, recognizer, run_store, monkeypatch):
    app.dependency_overrides[get_extraction_service] = lambda: ExtractionService(
        recognizer, run_store, max_upload_bytes=100
    )
    reads = []
    original_read = UploadFile.read

    async def spy_read(self, *args, **kwargs):
        reads.append(self.filename)
        return await original_read(self, *args, **kwargs)

    monkeypatch.setattr(UploadFile, "read", spy_read)

    resp = _upload(client, "big.pdf", build_pdf([LONG_TEXT] * 5), "application/pdf")
    assert resp.status_code == 413
    assert resp.json()["error"]["code"] == "FILE_TOO_LARGE"
    assert reads == []
