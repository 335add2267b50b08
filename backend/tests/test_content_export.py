"""
Tests for the content export pipeline.

Validates:
- Header and column order
- One row per record of every public non-attachment type, any status
- Attachment type excluded even when registered public
- HTML entity decoding in titles
- Skip-and-continue when one content type fails
- Row limit and soft timeout
"""
import csv
import os

import pytest
from sqlalchemy.exc import SQLAlchemyError

from export_urls.db.models import Record
from export_urls.services.export.content import run_content_export
from export_urls.services.export.job import CONTENT_HEADER, ExportConfig, ExportJob, ExportOutcome
from export_urls.services.records import RecordSource


def read_rows(path):
    with open(path, newline="", encoding="utf-8") as fh:
        return list(csv.reader(fh))


@pytest.fixture
def source(db_session, test_settings):
    return RecordSource(db_session, test_settings)


class FailingSource(RecordSource):
    """Record source whose ID lookup fails for selected content types."""

    def __init__(self, db, settings, failing):
        super().__init__(db, settings)
        self.failing = set(failing)

    def record_ids(self, post_type):
        if post_type in self.failing:
            raise SQLAlchemyError(f"lookup failed for {post_type}")
        return super().record_ids(post_type)


def test_content_export_rows(source, sample_site, export_config, diagnostics):
    result = run_content_export(source, export_config, diagnostics)

    assert result.outcome == ExportOutcome.success
    rows = read_rows(result.path)
    assert rows[0] == CONTENT_HEADER
    assert len(rows) - 1 == 5
    assert result.rows == 5

    types = sorted(r[2] for r in rows[1:])
    assert types == ["page", "page", "page", "product", "product"]
    assert {r[3] for r in rows[1:]} == {"publish", "draft"}


def test_attachment_never_exported(source, sample_site, export_config, diagnostics):
    result = run_content_export(source, export_config, diagnostics)

    rows = read_rows(result.path)
    assert all(r[2] != "attachment" for r in rows[1:])
    assert "Found 3 content post types: page, post, product" in diagnostics.lines


def test_private_types_excluded(source, db_session, content_types, export_config, diagnostics):
    db_session.add(Record(title="rev", post_type="revision", status="inherit"))
    db_session.commit()

    result = run_content_export(source, export_config, diagnostics)

    assert read_rows(result.path) == [CONTENT_HEADER]


def test_titles_are_entity_decoded(source, sample_site, export_config, diagnostics):
    result = run_content_export(source, export_config, diagnostics)

    titles = {r[1] for r in read_rows(result.path)[1:]}
    assert "Café" in titles
    assert "Contact & Support" in titles
    assert not any("&amp;" in t or "&eacute;" in t for t in titles)


def test_permalinks(source, sample_site, export_config, diagnostics):
    result = run_content_export(source, export_config, diagnostics)

    by_title = {r[1]: r for r in read_rows(result.path)[1:]}
    assert by_title["About"][4] == "https://example.org/about/"
    draft = by_title["Draft Product"]
    assert draft[4] == f"https://example.org/?post_type=product&p={draft[0]}"


def test_empty_site_yields_header_only(source, content_types, export_config, diagnostics):
    result = run_content_export(source, export_config, diagnostics)

    assert result.outcome == ExportOutcome.success
    assert result.rows == 0
    with open(result.path, encoding="utf-8") as fh:
        assert fh.read() == "ID,Title,Post Type,Status,URL\n"


def test_failing_type_is_skipped(db_session, test_settings, sample_site, export_config, diagnostics):
    source = FailingSource(db_session, test_settings, failing=["page"])

    result = run_content_export(source, export_config, diagnostics)

    assert result.outcome == ExportOutcome.partial
    assert result.skipped_types == ["page"]
    rows = read_rows(result.path)
    assert [r[2] for r in rows[1:]] == ["product", "product"]
    assert any(line.startswith("Error getting posts for page") for line in diagnostics.lines)


def test_row_limit_stops_export(source, sample_site, test_settings, diagnostics):
    config = ExportConfig(max_rows=2, scratch_directory=test_settings.EXPORT_SCRATCH_DIR)

    result = run_content_export(source, config, diagnostics)

    assert result.outcome == ExportOutcome.partial
    assert result.stop_reason == "Row limit of 2 reached"
    assert len(read_rows(result.path)) == 3


def test_unwritable_scratch_directory_is_fatal(source, sample_site, tmp_path, diagnostics):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    config = ExportConfig(scratch_directory=str(blocker))

    result = run_content_export(source, config, diagnostics)

    assert result.outcome == ExportOutcome.fatal
    assert result.path is None
    assert result.error == "Failed to create temporary file for export."


def test_diagnostics_written_to_log_file(source, sample_site, export_config, diagnostics, test_settings):
    run_content_export(source, export_config, diagnostics)

    with open(test_settings.debug_log_path(), encoding="utf-8") as fh:
        lines = fh.read().splitlines()
    assert len(lines) == len(diagnostics.lines)
    assert lines[0].endswith("] Starting content export function")
    assert lines[-1].endswith("] Content CSV file created successfully")
    assert os.path.basename(test_settings.debug_log_path()) == "export-debug.log"


def test_trash_and_auto_drafts_not_exported(source, db_session, content_types, export_config, diagnostics):
    db_session.add_all([
        Record(title="Live", post_type="post", status="publish", slug="live"),
        Record(title="Binned", post_type="post", status="trash", slug="binned"),
        Record(title="Auto Draft", post_type="post", status="auto-draft"),
        Record(title="Hidden", post_type="post", status="private", slug="hidden"),
    ])
    db_session.commit()

    result = run_content_export(source, export_config, diagnostics)

    rows = read_rows(result.path)[1:]
    assert sorted(r[3] for r in rows) == ["private", "publish"]
    assert result.rows == 2


def test_flush_failure_on_close_is_fatal(source, sample_site, export_config, diagnostics, test_settings, monkeypatch):
    real_close = ExportJob.close

    def failing_close(self):
        real_close(self)
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(ExportJob, "close", failing_close)

    result = run_content_export(source, export_config, diagnostics)

    assert result.outcome == ExportOutcome.fatal
    assert result.path is None
    assert "No space left on device" in result.error
    assert os.listdir(test_settings.EXPORT_SCRATCH_DIR) == []


def test_export_limits_logged(source, content_types, test_settings, diagnostics):
    config = ExportConfig(max_rows=10, soft_timeout=60, scratch_directory=test_settings.EXPORT_SCRATCH_DIR)

    run_content_export(source, config, diagnostics)

    assert diagnostics.lines[1] == (
        f"Export limits: max rows 10, soft timeout 60s, scratch directory {test_settings.EXPORT_SCRATCH_DIR}"
    )
