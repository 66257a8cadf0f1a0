"""
Pytest configuration and fixtures for the PDF signature service tests.
"""

import base64
import os
import shutil
import tempfile
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from pypdf import PdfReader
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

# Point storage at temporary directories before importing the app
_storage_root = tempfile.mkdtemp(prefix="pdfsign_test_")
os.environ["STORAGE_DIR"] = os.path.join(_storage_root, "outputs")
os.environ["PUBLIC_DIR"] = os.path.join(_storage_root, "public")

from pdfsign.main import app  # noqa: E402
from pdfsign.services.signature_service import SignatureService  # noqa: E402


def make_pdf(pages: int = 1, pagesize=letter) -> bytes:
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=pagesize)
    for _ in range(pages):
        c.showPage()
    c.save()
    return buffer.getvalue()


def make_data_url(image_format: str, mime: str, size=(200, 100)) -> str:
    mode = "RGBA" if image_format == "PNG" else "RGB"
    image = Image.new(mode, size, (20, 40, 200) if mode == "RGB" else (20, 40, 200, 255))
    buffer = BytesIO()
    image.save(buffer, format=image_format)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


@pytest.fixture(scope="session", autouse=True)
def storage_root():
    """Remove the temporary storage tree after the session."""
    yield _storage_root
    shutil.rmtree(_storage_root, ignore_errors=True)


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def service():
    return SignatureService()


@pytest.fixture
def blank_pdf():
    """A single blank letter page (612x792)."""
    return make_pdf(pages=1)


@pytest.fixture
def three_page_pdf():
    return make_pdf(pages=3)


@pytest.fixture
def png_data_url():
    return make_data_url("PNG", "image/png")


@pytest.fixture
def jpeg_data_url():
    return make_data_url("JPEG", "image/jpeg")


@pytest.fixture
def gif_data_url():
    return make_data_url("GIF", "image/gif")


def _page_content(pdf_bytes: bytes, page_number: int = 1) -> bytes:
    page = PdfReader(BytesIO(pdf_bytes)).pages[page_number - 1]
    contents = page.get_contents()
    return contents.get_data() if contents is not None else b""


@pytest.fixture
def page_content():
    """Return the decoded content stream of a page in a PDF buffer."""
    return _page_content
