"""PDF document source: data-URL encoding, hashing, and page rendering."""

import base64
import binascii
import hashlib
import logging
from pathlib import Path

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = "data:application/pdf;base64,"


# ── Public API ───────────────────────────────────────────────────────


def compute_pdf_hash(pdf_path: str | Path) -> str:
    """SHA-256 hash of the PDF file contents."""
    h = hashlib.sha256()
    with open(pdf_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def pdf_to_data_url(pdf_path: str | Path) -> str:
    """Read a PDF and return it as a base64 ``data:`` URL."""
    pdf_data = Path(pdf_path).read_bytes()
    encoded = base64.b64encode(pdf_data).decode()
    return f"{_DATA_URL_PREFIX}{encoded}"


def decode_data_url(data_url: str) -> bytes:
    """Inverse of ``pdf_to_data_url``."""
    if not data_url.startswith(_DATA_URL_PREFIX):
        raise ValueError("Not a base64 PDF data URL")
    try:
        return base64.b64decode(data_url[len(_DATA_URL_PREFIX):], validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc


def render_page_images(pdf_bytes: bytes, dpi: int = 150) -> list[str]:
    """Render every page to PNG and return them base64-encoded, in page order."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    images: list[str] = []

    try:
        for page_num in range(len(doc)):
            pix = doc[page_num].get_pixmap(dpi=dpi)
            images.append(base64.b64encode(pix.tobytes("png")).decode())
        logger.debug("Rendered %d page(s) at %d DPI", len(images), dpi)
    finally:
        doc.close()

    return images
