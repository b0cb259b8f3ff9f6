import asyncio
import json
import time

import pytest

import app.services.extraction_service as svc_mod
from app.constants.statuses import ProcessState
from app.core import AppError, ErrorCode
from app.extraction.chunking import MIB, plan_chunks
from app.extraction.errors import RenderError
from app.extraction.sources import PyMuPDFSource
from app.extraction.types import RenderedImage
from app.llm.errors import LLMRetryableError
from app.services.extraction_service import ExtractionService
from app.services.run_store import RunStore

from conftest import LONG_TEXT, FakeRecognizer, build_pdf, build_png


def _run(svc, name, content_type, data):
    return asyncio.run(svc.run(name, content_type, data))


@pytest.fixture
def store():
    return RunStore()


def test_unsupported_type_fails_before_planning(monkeypatch, store):
    def boom(*a, **k):
        raise AssertionError("must not be reached")

    monkeypatch.setattr(svc_mod, "open_source", boom)
    monkeypatch.setattr(svc_mod, "plan_chunks", boom)
    svc = ExtractionService(FakeRecognizer(), store)

    with pytest.raises(AppError) as exc:
        _run(svc, "notes.txt", "text/plain", b"hello")
    assert exc.value.code == ErrorCode.INVALID_FILE_TYPE
    assert len(store) == 0


def test_missing_file_is_an_input_error(store):
    svc = ExtractionService(FakeRecognizer(), store)
    with pytest.raises(AppError) as exc:
        _run(svc, None, None, None)
    assert exc.value.code == ErrorCode.FILE_MISSING


def test_oversized_upload_is_rejected(store):
    svc = ExtractionService(FakeRecognizer(), store, max_upload_bytes=10)
    with pytest.raises(AppError) as exc:
        _run(svc, "a.png", "image/png", b"x" * 11)
    assert exc.value.code == ErrorCode.FILE_TOO_LARGE


def test_broken_pdf_is_an_input_error(store):
    svc = ExtractionService(FakeRecognizer(), store)
    with pytest.raises(AppError) as exc:
        _run(svc, "broken.pdf", "application/pdf", b"this is not a pdf at all")
    assert exc.value.code == ErrorCode.PDF_INVALID


def test_hybrid_pdf_run(store):
    rec = FakeRecognizer({2: "scanned words"})
    svc = ExtractionService(rec, store)
    run = _run(svc, "mixed.pdf", "application/pdf", build_pdf([LONG_TEXT, "", LONG_TEXT]))

    assert run.state == ProcessState.DONE
    assert run.backend == "pymupdf"
    assert [p.page_number for p in run.pages] == [1, 2, 3]
    assert [p.source for p in run.pages] == ["text", "ocr", "text"]
    assert run.pages[1].text == "scanned words"
    assert rec.calls == [(2, "image/jpeg")]
    assert not run.degraded

    assert [a.name for a in run.artifacts] == ["saida.txt", "saida.json", "saida.html"]
    payload = json.loads(run.artifact("saida.json").content)
    assert payload["paginas"]["2"] == "scanned words"

    messages = [e.message for e in run.logs]
    assert messages[0] == 'Starting processing for "mixed.pdf".'
    assert messages[-1] == "Processing complete!"
    assert store.get(run.run_id) is run


def test_missing_credential_still_completes(store):
    svc = ExtractionService(FakeRecognizer(configured=False), store)
    run = _run(svc, "scan.pdf", "application/pdf", build_pdf([""]))

    assert run.state == ProcessState.DONE
    assert run.degraded
    assert run.pages[0].text.startswith("[Simulated OCR")
    assert any(e.level == "warning" and "Simulated OCR" in e.message for e in run.logs)


def test_fatal_ocr_failure_aborts_with_message(store):
    rec = FakeRecognizer(errors={1: LLMRetryableError("Gemini quota exceeded: try later")})
    svc = ExtractionService(rec, store)

    with pytest.raises(AppError) as exc:
        _run(svc, "scan.pdf", "application/pdf", build_pdf(["", ""]))
    assert exc.value.code == ErrorCode.OCR_FAILED
    assert exc.value.message == "Gemini quota exceeded: try later"
    assert exc.value.status_code == 502
    assert len(store) == 0


def test_render_failure_aborts(monkeypatch, store):
    def fail(self, page_number, scale):
        raise RenderError(page_number, f"Could not render page {page_number}: no surface")

    monkeypatch.setattr(PyMuPDFSource, "_render", fail)
    svc = ExtractionService(FakeRecognizer(), store)

    with pytest.raises(AppError) as exc:
        _run(svc, "scan.pdf", "application/pdf", build_pdf([LONG_TEXT, ""]))
    assert exc.value.code == ErrorCode.RENDER_FAILED
    assert exc.value.details == {"page_number": 2}
    assert len(store) == 0


def test_render_failure_waits_for_running_renders_before_closing(monkeypatch, store):
    seen = []

    def render(self, page_number, scale):
        if page_number == 1:
            raise RenderError(page_number, "Could not render page 1: no surface")
        time.sleep(0.2)
        seen.append((page_number, self._doc.is_closed))
        return RenderedImage(content=b"\xff\xd8", mime_type="image/jpeg")

    monkeypatch.setattr(PyMuPDFSource, "_render", render)
    svc = ExtractionService(FakeRecognizer(), store)

    with pytest.raises(AppError) as exc:
        _run(svc, "scan.pdf", "application/pdf", build_pdf(["", "", ""]))
    assert exc.value.code == ErrorCode.RENDER_FAILED
    assert all(not closed for _, closed in seen)


def test_image_upload_is_a_single_ocr_page(store, png_bytes):
    rec = FakeRecognizer({1: "text in the picture"})
    svc = ExtractionService(rec, store)
    run = _run(svc, "photo.png", "image/png", png_bytes)

    assert run.backend == "image"
    assert rec.calls == [(1, "image/png")]
    assert run.artifact("saida.txt").content == b"1\ntext in the picture"


def test_large_files_are_exported_in_parts(monkeypatch, store):
    monkeypatch.setattr(svc_mod, "plan_chunks", lambda n, size: plan_chunks(n, 20 * MIB))
    svc = ExtractionService(FakeRecognizer(), store)
    run = _run(svc, "big.pdf", "application/pdf", build_pdf([LONG_TEXT] * 16))

    assert [c.pages for c in run.chunks] == [tuple(range(1, 16)), (16,)]
    names = [a.name for a in run.artifacts]
    assert names[:3] == ["part1_saida.txt", "part1_saida.json", "part1_saida.html"]
    assert names[3:] == ["part2_saida.txt", "part2_saida.json", "part2_saida.html"]
    assert run.artifact("part2_saida.txt").content.startswith(b"16\n")


def test_release_run(store):
    svc = ExtractionService(FakeRecognizer(), store)
    run = _run(svc, "a.pdf", "application/pdf", build_pdf([LONG_TEXT]))

    svc.release_run(run.run_id)
    with pytest.raises(AppError) as exc:
        svc.get_run(run.run_id)
    assert exc.value.code == ErrorCode.NOT_FOUND


def test_store_evicts_oldest_runs():
    store = RunStore(max_runs=2)
    svc = ExtractionService(FakeRecognizer(), store)
    ids = [_run(svc, "a.pdf", "application/pdf", build_pdf([LONG_TEXT])).run_id for _ in range(3)]
    assert store.get(ids[0]) is None
    assert store.get(ids[1]) is not None
    assert store.get(ids[2]) is not None
