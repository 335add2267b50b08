# export_urls/services/export/media.py
import os

from sqlalchemy.exc import SQLAlchemyError
import structlog

from export_urls.db.models import ATTACHMENT_TYPE
from export_urls.services.diagnostics import DiagnosticBuffer
from export_urls.services.export.job import (
    MEDIA_HEADER,
    ExportConfig,
    ExportJob,
    ExportOutcome,
    ExportResult,
)
from export_urls.services.records import RecordSource
from export_urls.utils.formatting import size_format

logger = structlog.get_logger()

UNKNOWN_SIZE = "Unknown"


def file_size_label(path) -> str:
    if not path or not os.path.isfile(path):
        return UNKNOWN_SIZE
    try:
        return size_format(os.path.getsize(path), 2)
    except OSError:
        return UNKNOWN_SIZE


def run_media_export(source: RecordSource, config: ExportConfig, diagnostics: DiagnosticBuffer) -> ExportResult:
    """
    Write one row per attachment not in the trash, with file URL, MIME type and size.

    Unlike the content export, a failure to list attachments aborts the run.
    """
    diagnostics.log("Starting media export function")
    diagnostics.log(config.describe())
    job = ExportJob("media", MEDIA_HEADER, config, diagnostics)

    try:
        job.open()
    except OSError as e:
        diagnostics.log("Failed to open temp file")
        logger.error("media export: scratch file", error=str(e))
        job.discard()
        return job.result(ExportOutcome.fatal, error="Failed to create temporary file for export.")

    try:
        media_ids = source.record_ids(ATTACHMENT_TYPE)
    except SQLAlchemyError as e:
        diagnostics.log(f"Error getting media: {e}")
        logger.error("media export: attachment fetch", error=str(e))
        job.discard()
        return job.result(ExportOutcome.fatal, error=f"Error retrieving media attachments: {e}")

    diagnostics.log(f"Found {len(media_ids)} media attachments")

    stop_reason = None
    try:
        for media_id in media_ids:
            stop_reason = job.stop_reason()
            if stop_reason:
                diagnostics.log(f"Export stopped early: {stop_reason}")
                break
            record = source.get(media_id)
            job.write_row([
                media_id,
                source.title(record),
                ATTACHMENT_TYPE,
                source.status(record),
                source.permalink(record),
                source.attachment_url(record),
                source.mime_type(record),
                file_size_label(source.attached_file_path(record)),
            ])
        job.close()
    except (SQLAlchemyError, OSError) as e:
        diagnostics.log(f"Exception: {e}")
        logger.error("media export failed", error=str(e), rows=job.rows)
        job.discard()
        return job.result(ExportOutcome.fatal, error=str(e))

    diagnostics.log(f"Total media items exported: {job.rows}")
    diagnostics.log("Media CSV file created successfully")
    logger.info("media export written", rows=job.rows)

    outcome = ExportOutcome.partial if stop_reason else ExportOutcome.success
    return job.result(outcome, stop_reason=stop_reason)
