"""
Tests for document compression and the bounded-concurrency uploader.
"""

import threading
import time
from io import BytesIO
from unittest.mock import MagicMock, patch

import pytest
import requests
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image
from PyPDF2 import PdfReader, PdfWriter

from utils import uploads


def _jpeg(size=(2400, 1600)):
    buffer = BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buffer, format="JPEG", quality=100)
    return SimpleUploadedFile("scan.jpg", buffer.getvalue(), content_type="image/jpeg")


def _pdf():
    writer = PdfWriter()
    writer.add_blank_page(width=595, height=842)
    buffer = BytesIO()
    writer.write(buffer)
    return SimpleUploadedFile("cert.pdf", buffer.getvalue(), content_type="application/pdf")


class TestCompression:
    def test_large_image_is_downscaled(self):
        original = _jpeg()
        compressed = uploads.compress_image(original, max_bytes=10)

        with Image.open(BytesIO(compressed.read())) as img:
            assert max(img.size) <= uploads.MAX_IMAGE_DIMENSION
        assert compressed.name == "scan.jpg"
        assert compressed.content_type == "image/jpeg"

    def test_small_image_passes_through(self):
        original = _jpeg(size=(40, 40))
        assert uploads.compress_image(original) is original

    def test_unreadable_image_passes_through(self):
        broken = SimpleUploadedFile("broken.png", b"not a png", content_type="image/png")
        assert uploads.compress_image(broken) is broken

    def test_high_quality_pdf_is_untouched(self):
        original = _pdf()
        assert uploads.compress_pdf(original, quality="high") is original

    def test_pdf_result_stays_readable(self):
        result = uploads.compress_pdf(_pdf(), quality="low")
        result.seek(0)
        assert len(PdfReader(result).pages) == 1

    def test_unknown_pdf_quality(self):
        with pytest.raises(ValueError):
            uploads.compress_pdf(_pdf(), quality="ultra")

    def test_corrupt_pdf_passes_through(self):
        broken = SimpleUploadedFile("broken.pdf", b"%PDF-garbage", content_type="application/pdf")
        assert uploads.compress_pdf(broken) is broken

    def test_compress_file_dispatches_on_type(self):
        text = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        assert uploads.compress_file(text) is text
        with patch.object(uploads, "compress_pdf", return_value="pdf") as compress_pdf:
            assert uploads.compress_file(_pdf()) == "pdf"
        compress_pdf.assert_called_once()


class TestUploadFile:
    def test_cloudinary_upload(self, settings):
        settings.CLOUDINARY_CLOUD_NAME = "fti"
        settings.CLOUDINARY_UPLOAD_PRESET = "portal"
        response = MagicMock()
        response.json.return_value = {
            "secure_url": "https://res.cloudinary.com/fti/cert.pdf",
            "public_id": "membership_documents/cert",
        }

        with patch("utils.uploads.requests.post", return_value=response) as post:
            result = uploads.upload_file(_pdf(), "membership_documents")

        assert result["success"] is True
        assert result["url"] == "https://res.cloudinary.com/fti/cert.pdf"
        assert result["fileType"] == "application/pdf"
        assert post.call_args.args[0] == "https://api.cloudinary.com/v1_1/fti/upload"
        assert post.call_args.kwargs["data"] == {
            "upload_preset": "portal",
            "folder": "membership_documents",
        }

    def test_cloudinary_failure_is_reported(self, settings):
        settings.CLOUDINARY_CLOUD_NAME = "fti"
        with patch(
            "utils.uploads.requests.post", side_effect=requests.ConnectionError("offline")
        ):
            result = uploads.upload_file(_pdf())
        assert result == {"success": False, "error": "offline", "fileName": "cert.pdf"}

    def test_storage_fallback(self, settings):
        settings.CLOUDINARY_CLOUD_NAME = ""
        result = uploads.upload_file(_pdf(), "address_documents")
        assert result["success"] is True
        assert result["public_id"].startswith("address_documents/cert-")


class TestConcurrencyLimit:
    def test_empty_and_invalid_input(self):
        assert uploads.upload_files_with_concurrency_limit([]) == []
        with pytest.raises(ValueError):
            uploads.upload_files_with_concurrency_limit([_pdf()], max_concurrent=0)

    def test_results_keep_input_order_and_limit_is_respected(self):
        lock = threading.Lock()
        in_flight = 0
        peak = 0

        def fake_upload(file, folder):
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            time.sleep(0.01)
            with lock:
                in_flight -= 1
            return {"success": file.name != "bad.txt", "fileName": file.name}

        files = [
            SimpleUploadedFile(name, b"x", content_type="text/plain")
            for name in ("a.txt", "b.txt", "bad.txt", "c.txt", "d.txt")
        ]
        progress = []
        with patch.object(uploads, "upload_file", side_effect=fake_upload):
            results = uploads.upload_files_with_concurrency_limit(
                files, max_concurrent=2, on_progress=progress.append
            )

        assert [r["fileName"] for r in results] == ["a.txt", "b.txt", "bad.txt", "c.txt", "d.txt"]
        assert [r["success"] for r in results] == [True, True, False, True, True]
        assert peak <= 2
        assert [p["completed"] for p in progress] == [1, 2, 3, 4, 5]
        assert progress[-1]["percentage"] == 100

    def test_worker_exception_becomes_failed_result(self):
        files = [SimpleUploadedFile("a.txt", b"x", content_type="text/plain")]
        with patch.object(uploads, "upload_file", side_effect=RuntimeError("boom")):
            results = uploads.upload_files_with_concurrency_limit(files)
        assert results == [{"success": False, "error": "boom", "fileName": "a.txt"}]

    def test_progress_callback_errors_are_ignored(self):
        files = [SimpleUploadedFile("a.txt", b"x", content_type="text/plain")]

        def explode(progress):
            raise RuntimeError("ui gone")

        with patch.object(uploads, "upload_file", return_value={"success": True, "fileName": "a.txt"}):
            results = uploads.upload_files_with_concurrency_limit(files, on_progress=explode)
        assert results[0]["success"] is True


@pytest.mark.django_db
def test_upload_documents_endpoint(member_client):
    with patch(
        "utils.views.upload_files_with_concurrency_limit",
        return_value=[{"success": True, "fileName": "a.pdf"}, {"success": False, "fileName": "b.pdf"}],
    ) as upload:
        response = member_client.post(
            "/api/uploads",
            {
                "folder": "verification_documents",
                "files": [
                    SimpleUploadedFile("a.pdf", b"a", content_type="application/pdf"),
                    SimpleUploadedFile("b.pdf", b"b", content_type="application/pdf"),
                ],
            },
        )

    assert response.status_code == 200
    assert response.json()["failedCount"] == 1
    assert upload.call_args.kwargs["folder"] == "verification_documents"


@pytest.mark.django_db
def test_upload_documents_rejects_unknown_folder(member_client):
    response = member_client.post(
        "/api/uploads",
        {"folder": "../secrets", "files": [SimpleUploadedFile("a.pdf", b"a")]},
    )
    assert response.status_code == 400


@pytest.mark.django_db
def test_upload_documents_requires_files(member_client):
    assert member_client.post("/api/uploads", {}).status_code == 400


@pytest.mark.django_db
def test_upload_documents_requires_login(client):
    assert client.post("/api/uploads", {}).status_code == 401
