# tests/conftest.py
import io
import shutil
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from docscan.config import settings
from docscan.database import Database
from docscan.main import create_app
from docscan.models.page import FilterName
from docscan.schemas.page import PageCreate
from docscan.services import DocumentAssembler, ExportRenderer, ImagePipeline, StorageEngine
from docscan.services.export import ReportLabRenderEngine
from docscan.services.transform import PillowTransformEngine

# Create test database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="session")
def temp_storage_dir():
    """Create temporary storage directory for test files"""
    temp_dir = tempfile.mkdtemp()
    for subdir in ["scanned_docs", "uploads", "exports", "captures"]:
        Path(temp_dir, subdir).mkdir(parents=True, exist_ok=True)
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture(autouse=True)
def override_settings(temp_storage_dir):
    """Override settings for testing"""
    original_storage = settings.STORAGE_PATH
    original_scans = settings.SCANS_PATH
    original_uploads = settings.UPLOADS_PATH
    original_exports = settings.EXPORTS_PATH

    settings.STORAGE_PATH = temp_storage_dir
    settings.SCANS_PATH = temp_storage_dir / "scanned_docs"
    settings.UPLOADS_PATH = temp_storage_dir / "uploads"
    settings.EXPORTS_PATH = temp_storage_dir / "exports"

    yield

    settings.STORAGE_PATH = original_storage
    settings.SCANS_PATH = original_scans
    settings.UPLOADS_PATH = original_uploads
    settings.EXPORTS_PATH = original_exports


@pytest.fixture
def database():
    """Fresh in-memory database per test"""
    db = Database(SQLALCHEMY_TEST_DATABASE_URL).open()
    yield db
    db.close()


@pytest.fixture
def storage(database):
    return StorageEngine(database)


@pytest.fixture
def scans_dir(tmp_path):
    path = tmp_path / "scanned_docs"
    path.mkdir()
    return path


@pytest.fixture
def pipeline(scans_dir, tmp_path):
    return ImagePipeline(scans_dir=scans_dir, engine=PillowTransformEngine(tmp_path / "work"))


@pytest.fixture
def assembler(storage, pipeline):
    return DocumentAssembler(storage, pipeline)


@pytest.fixture
def renderer(storage, tmp_path):
    return ExportRenderer(storage, ReportLabRenderEngine(tmp_path / "exports"))


def create_test_image(path: Path, size=(800, 1000), text: str = "Test Text", color="white") -> Path:
    """Write a small page-like image with some text on it"""
    img = Image.new('RGB', size, color=color)
    draw = ImageDraw.Draw(img)
    draw.rectangle([40, 40, size[0] - 40, 120], outline='black', width=4)
    draw.text((50, 50), text, fill='black')
    img.save(path)
    return path


@pytest.fixture
def make_capture(tmp_path):
    """Factory producing transient capture files, like a camera session would"""
    captures = tmp_path / "captures"
    captures.mkdir(exist_ok=True)
    counter = {"n": 0}

    def _make(size=(800, 1000), suffix=".jpg", text=None) -> Path:
        counter["n"] += 1
        path = captures / f"capture_{counter['n']}{suffix}"
        return create_test_image(path, size=size, text=text or f"Page {counter['n']}")

    return _make


@pytest.fixture
def page_inputs(make_capture):
    """Factory for PageCreate lists backed by real image files"""
    def _inputs(count: int, filter_name: FilterName = FilterName.ORIGINAL):
        pages = []
        for _ in range(count):
            path = str(make_capture())
            pages.append(PageCreate(original_uri=path, processed_uri=path, filter_name=filter_name))
        return pages

    return _inputs


@pytest.fixture
def sample_document(storage, page_inputs):
    """A three page document"""
    return storage.create_document("Test Document", page_inputs(3))


@pytest.fixture
def client():
    """Test client backed by an in-memory database"""
    app = create_app(SQLALCHEMY_TEST_DATABASE_URL)
    with TestClient(app) as test_client:
        yield test_client


def create_upload_image(text: str = "Test text", size=(612, 792)) -> io.BytesIO:
    img = Image.new('RGB', size, color='white')
    draw = ImageDraw.Draw(img)
    draw.text((50, 50), text, fill='black')

    buf = io.BytesIO()
    img.save(buf, format='PNG')
    buf.seek(0)
    return buf


@pytest.fixture
def upload_scan():
    """Post a capture session of generated PNG pages to the scans endpoint"""
    def _upload(client, count: int = 3, filter_name: str = "Original", title: str | None = None):
        files = [
            ("files", (f"scan{i}.png", create_upload_image(f"Page {i}"), "image/png"))
            for i in range(count)
        ]
        data = {"filter_name": filter_name}
        if title is not None:
            data["title"] = title
        return client.post("/api/scans", files=files, data=data)

    return _upload
