# export_urls/services/export/content.py
from sqlalchemy.exc import SQLAlchemyError
import structlog

from export_urls.db.models import ATTACHMENT_TYPE
from export_urls.services.diagnostics import DiagnosticBuffer
from export_urls.services.export.job import (
    CONTENT_HEADER,
    ExportConfig,
    ExportJob,
    ExportOutcome,
    ExportResult,
)
from export_urls.services.records import RecordSource

logger = structlog.get_logger()


def run_content_export(source: RecordSource, config: ExportConfig, diagnostics: DiagnosticBuffer) -> ExportResult:
    """
    Write every non-attachment record of every public content type, any status but trash and auto-draft.

    A content type whose IDs cannot be fetched is skipped and the run is
    reported as partial.
    """
    diagnostics.log("Starting content export function")
    diagnostics.log(config.describe())
    job = ExportJob("content", CONTENT_HEADER, config, diagnostics)

    try:
        job.open()
    except OSError as e:
        diagnostics.log("Failed to open temp file")
        logger.error("content export: scratch file", error=str(e))
        job.discard()
        return job.result(ExportOutcome.fatal, error="Failed to create temporary file for export.")

    try:
        post_types = [t for t in source.public_content_types() if t != ATTACHMENT_TYPE]
    except SQLAlchemyError as e:
        diagnostics.log(f"Error getting content types: {e}")
        job.discard()
        return job.result(ExportOutcome.fatal, error="Error retrieving content types.")

    diagnostics.log(f"Found {len(post_types)} content post types: {', '.join(post_types)}")

    skipped = []
    stop_reason = None
    try:
        for post_type in post_types:
            try:
                ids = source.record_ids(post_type)
            except SQLAlchemyError as e:
                diagnostics.log(f"Error getting posts for {post_type}: {e}")
                skipped.append(post_type)
                continue
            diagnostics.log(f"Found {len(ids)} posts for post type: {post_type}")

            for record_id in ids:
                stop_reason = job.stop_reason()
                if stop_reason:
                    break
                record = source.get(record_id)
                job.write_row([
                    record_id,
                    source.title(record),
                    post_type,
                    source.status(record),
                    source.permalink(record),
                ])
            if stop_reason:
                diagnostics.log(f"Export stopped early: {stop_reason}")
                break
        job.close()
    except (SQLAlchemyError, OSError) as e:
        diagnostics.log(f"Exception: {e}")
        logger.error("content export failed", error=str(e), rows=job.rows)
        job.discard()
        return job.result(ExportOutcome.fatal, error=str(e), skipped_types=skipped)

    diagnostics.log(f"Total content posts exported: {job.rows}")
    diagnostics.log("Content CSV file created successfully")
    logger.info("content export written", rows=job.rows, skipped_types=skipped)

    outcome = ExportOutcome.partial if skipped or stop_reason else ExportOutcome.success
    return job.result(outcome, skipped_types=skipped, stop_reason=stop_reason)
