# tests/services/test_export.py
from pathlib import Path

import pytest
from reportlab.lib.pagesizes import A4, letter

from docscan.errors import ConfigurationError, NotFoundError
from docscan.models.page import FilterName
from docscan.schemas.export import ExportSettings
from docscan.schemas.page import PageCreate
from docscan.services.export import ExportJob, ExportRenderer, PAGE_SIZES


class RecordingEngine:
    """Stands in for the PDF engine and remembers every job it was given"""

    def __init__(self, output: Path):
        self.output = output
        self.jobs = []

    def render(self, job: ExportJob) -> Path:
        self.jobs.append(job)
        return self.output


@pytest.fixture
def recording_engine(tmp_path):
    return RecordingEngine(tmp_path / "out.pdf")


@pytest.fixture
def recording_renderer(storage, recording_engine):
    return ExportRenderer(storage, recording_engine)


def test_units_with_page_numbers(renderer, sample_document):
    units = renderer.build_units(sample_document, ExportSettings(page_size="Letter", margins=20, include_page_numbers=True))

    assert [u.caption for u in units] == ["Page 1 of 3", "Page 2 of 3", "Page 3 of 3"]
    assert [u.image_path for u in units] == [p.processed_uri for p in sample_document.pages]
    assert all(u.margins == 20 for u in units)


def test_units_without_page_numbers(renderer, sample_document):
    units = renderer.build_units(sample_document, ExportSettings(page_size="A4", margins=0, include_page_numbers=False))

    assert len(units) == 3
    assert all(u.caption is None for u in units)


def test_units_follow_page_order(renderer, storage, sample_document):
    id0, id1, id2 = sample_document.page_ids
    reordered = storage.update_page_order(sample_document.id, [id1, id2, id0])

    units = renderer.build_units(reordered, ExportSettings())

    assert [u.image_path for u in units] == [p.processed_uri for p in reordered.pages]
    assert units[0].image_path == sample_document.pages[1].processed_uri


@pytest.mark.parametrize("page_size", ["Legal", "letter", "", "A5"])
def test_unknown_page_size_is_rejected(recording_renderer, recording_engine, sample_document, page_size):
    export_settings = ExportSettings(page_size=page_size)

    with pytest.raises(ConfigurationError):
        recording_renderer.build_units(sample_document, export_settings)
    with pytest.raises(ConfigurationError):
        recording_renderer.export_document(sample_document, export_settings)
    assert recording_engine.jobs == []


def test_negative_margins_are_rejected(recording_renderer, sample_document):
    with pytest.raises(ConfigurationError):
        recording_renderer.build_units(sample_document, ExportSettings(margins=-1))


def test_page_geometry():
    assert (PAGE_SIZES["Letter"].width, PAGE_SIZES["Letter"].height) == (8.5 * 72, 11 * 72)
    assert (PAGE_SIZES["Letter"].width, PAGE_SIZES["Letter"].height) == letter
    assert (PAGE_SIZES["A4"].width, PAGE_SIZES["A4"].height) == A4


def test_engine_output_is_returned_unchanged(recording_renderer, recording_engine, sample_document):
    output = recording_renderer.export_document(sample_document, ExportSettings(page_size="A4"))

    assert output == recording_engine.output
    job = recording_engine.jobs[0]
    assert job.geometry.name == "A4"
    assert job.title == sample_document.title
    assert len(job.units) == 3


def test_export_reloads_document_each_time(recording_renderer, recording_engine, storage, sample_document):
    recording_renderer.export(sample_document.id)
    page = sample_document.pages[0]
    storage.update_page_filter(page.id, "/scans/processed_new.jpg", FilterName.BW)
    recording_renderer.export(sample_document.id)

    first, second = recording_engine.jobs
    assert first.units[0].image_path == page.processed_uri
    assert second.units[0].image_path == "/scans/processed_new.jpg"


def test_export_missing_document(recording_renderer):
    with pytest.raises(NotFoundError):
        recording_renderer.export("doc_missing")


def test_html_markup_is_escaped(renderer, storage, make_capture):
    capture = str(make_capture())
    document = storage.create_document(
        'Q1 <script>alert("x")</script> & more',
        [PageCreate(original_uri=capture, processed_uri='/tmp/a"b<c>.jpg')]
    )

    html = renderer.build_job(document, ExportSettings()).to_html()

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert 'src="/tmp/a&quot;b&lt;c&gt;.jpg"' in html
    assert "size: 8.5in 11in" in html


def test_html_markup_has_one_block_per_page(renderer, sample_document):
    html = renderer.build_job(sample_document, ExportSettings(margins=15)).to_html()

    assert html.count("page-break-after: always") == 3
    assert html.count("padding: 15px") == 3
    assert html.index("Page 1 of 3") < html.index("Page 2 of 3") < html.index("Page 3 of 3")


def test_reportlab_engine_writes_pdf(renderer, sample_document, tmp_path):
    output = renderer.export_document(
        sample_document,
        ExportSettings(page_size="Letter", margins=20, include_page_numbers=True)
    )

    assert output.parent == tmp_path / "exports"
    assert output.suffix == ".pdf"
    assert output.read_bytes().startswith(b"%PDF")
    assert b"/Count 3" in output.read_bytes()


def test_reportlab_engine_handles_large_images(renderer, storage, make_capture):
    big = str(make_capture(size=(3000, 4000)))
    wide = str(make_capture(size=(4000, 500)))
    document = storage.create_document("Big", [
        PageCreate(original_uri=big, processed_uri=big),
        PageCreate(original_uri=wide, processed_uri=wide),
    ])

    output = renderer.export_document(document, ExportSettings(page_size="A4", margins=40))

    assert b"/Count 2" in output.read_bytes()
