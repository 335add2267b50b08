# export_urls/services/export/delivery.py
import os
from datetime import datetime
from typing import Callable, Optional

from starlette.concurrency import run_in_threadpool
from starlette.responses import FileResponse
from starlette.types import Receive, Scope, Send

from export_urls.services.diagnostics import DiagnosticBuffer
from export_urls.services.export.job import ExportResult
from export_urls.utils.formatting import export_filename

NOCACHE_HEADERS = {
    "Cache-Control": "no-cache, must-revalidate, max-age=0, no-store, private",
    "Expires": "Wed, 11 Jan 1984 05:00:00 GMT",
    "Accept-Ranges": "none",
}


def remove_scratch_file(path: str, diagnostics: DiagnosticBuffer, on_done: Optional[Callable[[], None]] = None):
    try:
        if os.path.exists(path):
            os.remove(path)
            diagnostics.log("Temp file deleted")
    except OSError as e:
        diagnostics.log(f"Could not delete temp file {path}: {e}")
    finally:
        if on_done is not None:
            on_done()


class ScratchFileResponse(FileResponse):
    """
    One-shot file download: always the whole file, and the file is removed
    once sending ends, whether it completed or not.
    """

    def __init__(self, path: str, *, cleanup: Callable[[], None], **kwargs):
        super().__init__(path, **kwargs)
        self.cleanup = cleanup

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        # Le fichier est supprimé après l'envoi, une requête partielle n'a pas de suite
        headers = [(k, v) for k, v in scope.get("headers", []) if k.lower() not in (b"range", b"if-range")]
        scope = {**scope, "headers": headers}
        try:
            await super().__call__(scope, receive, send)
        finally:
            await run_in_threadpool(self.cleanup)


def csv_download(
    result: ExportResult,
    now: datetime,
    diagnostics: DiagnosticBuffer,
    on_done: Optional[Callable[[], None]] = None,
) -> FileResponse:
    """
    Send the finished scratch file as a CSV attachment, then delete it.
    ``Content-Length`` comes from the file on disk.
    """
    path = result.path

    def cleanup():
        diagnostics.log("File content sent to browser")
        remove_scratch_file(path, diagnostics, on_done)

    response = ScratchFileResponse(
        path,
        cleanup=cleanup,
        media_type="text/csv; charset=utf-8",
        filename=export_filename(result.kind, now),
        headers=dict(NOCACHE_HEADERS),
    )
    diagnostics.log("Headers set for CSV download")
    return response
