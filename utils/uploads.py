"""
Document compression and bounded-concurrency uploads.

Membership and address-update documents are compressed before upload
(images are downscaled and re-encoded with Pillow, PDFs get their content
streams deflated with PyPDF2) and then sent to Cloudinary with an unsigned
upload preset. When Cloudinary is not configured the files go to Django's
default storage instead, which is Google Cloud Storage in production.

``upload_files_with_concurrency_limit`` runs a fixed number of workers that
drain a shared queue of files and report progress after each file.
"""

import logging
import mimetypes
import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO

import requests
from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError
from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PdfReadError

from .upload_entropy import upload_with_entropy

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/upload"
DEFAULT_UPLOAD_FOLDER = "address_documents"
DEFAULT_MAX_CONCURRENT = 2

MAX_IMAGE_BYTES = 1024 * 1024
MAX_IMAGE_DIMENSION = 1920
IMAGE_QUALITY = 80
MIN_IMAGE_QUALITY = 40

PDF_QUALITIES = ("high", "medium", "low")

# Formats Pillow re-encodes without losing animation or vector data
COMPRESSIBLE_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")


def get_file_type(file):
    content_type = getattr(file, "content_type", None)
    if content_type:
        return content_type
    guessed, _ = mimetypes.guess_type(getattr(file, "name", "") or "")
    return guessed or "application/octet-stream"


def _read_bytes(file):
    if hasattr(file, "seek"):
        file.seek(0)
    data = file.read()
    if hasattr(file, "seek"):
        file.seek(0)
    return data


def _as_content_file(data, name, content_type):
    result = ContentFile(data, name=os.path.basename(name))
    result.content_type = content_type
    return result


def compress_image(
    file,
    max_bytes=MAX_IMAGE_BYTES,
    max_dimension=MAX_IMAGE_DIMENSION,
    quality=IMAGE_QUALITY,
):
    """
    Downscale and re-encode an image so it fits ``max_bytes``.

    The longest side is capped at ``max_dimension``. JPEG and WebP quality
    starts at ``quality`` and steps down until the size limit is met. The
    original file is returned when it is already small enough, when the
    re-encoded image is not smaller, or when Pillow cannot read it.
    """
    name = getattr(file, "name", "image")
    content_type = get_file_type(file)

    try:
        data = _read_bytes(file)
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        logger.warning("Image compression skipped for %s: %s", name, exc)
        return file

    if len(data) <= max_bytes and max(img.size) <= max_dimension:
        return file

    try:
        fmt = (img.format or "JPEG").upper()
        if fmt not in ("JPEG", "PNG", "WEBP"):
            fmt = "JPEG"
        if fmt == "JPEG" and img.mode not in ("RGB", "L"):
            img = img.convert("RGB")

        img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

        current_quality = quality
        while True:
            buffer = BytesIO()
            save_kwargs = {"optimize": True}
            if fmt in ("JPEG", "WEBP"):
                save_kwargs["quality"] = current_quality
            img.save(buffer, format=fmt, **save_kwargs)
            compressed = buffer.getvalue()
            if (
                len(compressed) <= max_bytes
                or fmt == "PNG"
                or current_quality <= MIN_IMAGE_QUALITY
            ):
                break
            current_quality -= 10
    except (OSError, ValueError) as exc:
        logger.warning("Image compression failed for %s: %s", name, exc)
        return file

    if len(compressed) >= len(data):
        return file

    logger.info(
        "Compressed image %s from %d to %d bytes", name, len(data), len(compressed)
    )
    return _as_content_file(compressed, name, content_type)


def compress_pdf(file, quality="medium"):
    """
    Rewrite a PDF with compressed content streams.

    ``quality`` is one of ``high`` (untouched), ``medium`` (deflate content
    streams) or ``low`` (deflate and drop document metadata). Unreadable or
    encrypted PDFs are returned unchanged, as is any result that is not
    smaller than the input.
    """
    if quality not in PDF_QUALITIES:
        raise ValueError(f"Unknown PDF quality {quality!r}; expected one of {PDF_QUALITIES}")

    name = getattr(file, "name", "document.pdf")
    if quality == "high":
        return file

    try:
        data = _read_bytes(file)
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted:
            return file

        writer = PdfWriter()
        for page in reader.pages:
            writer.add_page(page)
        for page in writer.pages:
            page.compress_content_streams()
        if quality == "medium" and reader.metadata:
            writer.add_metadata(
                {key: str(value) for key, value in reader.metadata.items()}
            )

        buffer = BytesIO()
        writer.write(buffer)
        compressed = buffer.getvalue()
    except (PdfReadError, OSError, ValueError, KeyError) as exc:
        logger.warning("PDF compression failed for %s: %s", name, exc)
        return file

    if len(compressed) >= len(data):
        return file

    logger.info("Compressed PDF %s from %d to %d bytes", name, len(data), len(compressed))
    return _as_content_file(compressed, name, "application/pdf")


def compress_file(file):
    """Compress by content type; anything that is not an image or PDF passes through."""
    content_type = get_file_type(file).lower()
    if content_type in COMPRESSIBLE_IMAGE_TYPES:
        return compress_image(file)
    if content_type == "application/pdf":
        return compress_pdf(file, quality="medium")
    return file


def _upload_to_cloudinary(file, folder):
    cloud_name = settings.CLOUDINARY_CLOUD_NAME
    response = requests.post(
        CLOUDINARY_UPLOAD_URL.format(cloud_name=cloud_name),
        files={"file": (os.path.basename(file.name), _read_bytes(file), get_file_type(file))},
        data={"upload_preset": settings.CLOUDINARY_UPLOAD_PRESET, "folder": folder},
        timeout=getattr(settings, "UPLOAD_TIMEOUT_SECONDS", 60),
    )
    response.raise_for_status()
    body = response.json()
    return body["secure_url"], body["public_id"]


def _upload_to_storage(file, folder):
    path = upload_with_entropy(folder)(None, os.path.basename(file.name))
    saved_path = default_storage.save(path, file)
    return default_storage.url(saved_path), saved_path


def upload_file(file, folder=DEFAULT_UPLOAD_FOLDER):
    """
    Upload one file and describe the outcome.

    Returns ``{"success": True, "url", "public_id", "fileName", "fileSize",
    "fileType"}`` or ``{"success": False, "error", "fileName"}``. Upload
    failures are reported, never raised.
    """
    file_name = getattr(file, "name", "") or "file"
    try:
        if getattr(settings, "CLOUDINARY_CLOUD_NAME", ""):
            url, public_id = _upload_to_cloudinary(file, folder)
        else:
            url, public_id = _upload_to_storage(file, folder)
    except requests.RequestException as exc:
        logger.error("Cloudinary upload failed for %s: %s", file_name, exc)
        return {"success": False, "error": str(exc), "fileName": file_name}
    except (KeyError, ValueError) as exc:
        logger.error("Unexpected Cloudinary response for %s: %s", file_name, exc)
        return {"success": False, "error": "รูปแบบผลลัพธ์การอัปโหลดไม่ถูกต้อง", "fileName": file_name}
    except OSError as exc:
        logger.error("Storage upload failed for %s: %s", file_name, exc)
        return {"success": False, "error": str(exc), "fileName": file_name}

    return {
        "success": True,
        "url": url,
        "public_id": public_id,
        "fileName": file_name,
        "fileSize": getattr(file, "size", None),
        "fileType": get_file_type(file),
    }


def upload_files_with_concurrency_limit(
    files, folder=DEFAULT_UPLOAD_FOLDER, max_concurrent=DEFAULT_MAX_CONCURRENT, on_progress=None
):
    """
    Compress and upload ``files`` with at most ``max_concurrent`` in flight.

    ``on_progress`` is called once per finished file with ``completed``,
    ``total``, ``percentage`` (rounded), ``currentFile`` and ``success``.
    Results come back in the same order as ``files``.
    """
    files = list(files)
    if max_concurrent < 1:
        raise ValueError("max_concurrent must be at least 1")
    if not files:
        return []

    total = len(files)
    results = [None] * total
    pending = queue.Queue()
    for index, file in enumerate(files):
        pending.put((index, file))

    progress_lock = threading.Lock()
    completed = 0

    def report(file_name, success):
        nonlocal completed
        with progress_lock:
            completed += 1
            progress = {
                "completed": completed,
                "total": total,
                "percentage": round(completed / total * 100),
                "currentFile": file_name,
                "success": success,
            }
            if on_progress is None:
                return
            try:
                on_progress(progress)
            except Exception:
                logger.exception("Upload progress callback failed")

    def worker():
        while True:
            try:
                index, file = pending.get_nowait()
            except queue.Empty:
                return
            try:
                result = upload_file(compress_file(file), folder)
            except Exception as exc:
                logger.exception("Upload worker failed for %s", getattr(file, "name", ""))
                result = {
                    "success": False,
                    "error": str(exc),
                    "fileName": getattr(file, "name", ""),
                }
            results[index] = result
            report(result.get("fileName"), result["success"])

    workers = min(max_concurrent, total)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="upload") as executor:
        futures = [executor.submit(worker) for _ in range(workers)]
        for future in futures:
            future.result()

    succeeded = sum(1 for result in results if result["success"])
    logger.info("Uploaded %d/%d files to %s", succeeded, total, folder)
    return results
