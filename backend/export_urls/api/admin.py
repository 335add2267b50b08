# export_urls/api/admin.py
from html import escape
from typing import List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, HTTPException, Query, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlmodel import Session

from export_urls.core.config import Settings, get_settings
from export_urls.core.deps import get_current_user, get_db, get_export_config, get_notice_store, require_role
from export_urls.core.logging import logger
from export_urls.core.security import create_action_token, verify_action_token
from export_urls.db.models import Role, User
from export_urls.services.diagnostics import DiagnosticBuffer, NoticeStore
from export_urls.services.export.content import run_content_export
from export_urls.services.export.delivery import csv_download
from export_urls.services.export.job import ExportConfig
from export_urls.services.export.media import run_media_export
from export_urls.services.records import RecordSource
from export_urls.utils.formatting import local_now

router = APIRouter()

PAGE_PATH = "/admin/export-urls"

# action -> (nonce action, nonce field, pipeline, label)
EXPORT_ACTIONS = {
    "export_urls_ajax": ("export_urls_ajax_nonce", "export_nonce", run_content_export, "content"),
    "export_media_ajax": ("export_media_ajax_nonce", "media_nonce", run_media_export, "media"),
}


def _notice(kind: str, body: str) -> str:
    return f'<div class="notice notice-{kind} is-dismissible">{body}</div>'


def render_export_page(
    user: User,
    settings: Settings,
    debug_lines: List[str],
    export_error: Optional[str] = None,
    export_success: Optional[str] = None,
) -> str:
    notices = []
    if export_error:
        notices.append(_notice("error", f"<p>{escape(export_error)}</p>"))
    if export_success:
        notices.append(_notice("success", f"<p>{escape(export_success)}</p>"))
    if debug_lines:
        log = "\n".join(escape(line) for line in debug_lines)
        notices.append(_notice("info", f"<p><strong>Debug Log:</strong></p><pre>{log}</pre>"))

    content_nonce = create_action_token(user.id, "export_urls_ajax_nonce")
    media_nonce = create_action_token(user.id, "export_media_ajax_nonce")
    log_name = escape(settings.DEBUG_LOG_NAME)

    return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Export All URLs</title></head>
<body>
{''.join(notices)}
<div class="wrap">
    <h1>Export All URLs</h1>
    <p>Click the button below to download a CSV of all posts, pages, and custom post types with URLs.</p>

    <form method="post" action="/admin/admin-ajax">
        <input type="hidden" name="action" value="export_urls_ajax">
        <input type="hidden" name="export_nonce" value="{content_nonce}">
        <input type="submit" class="button-primary" value="Download Content URLs">
    </form>

    <hr>
    <h3>Export Media URLs</h3>
    <p>Click the button below to download a CSV of media attachments only.</p>

    <form method="post" action="/admin/admin-ajax">
        <input type="hidden" name="action" value="export_media_ajax">
        <input type="hidden" name="media_nonce" value="{media_nonce}">
        <input type="submit" class="button-primary" value="Download Media URLs">
    </form>

    <hr>
    <h3>Troubleshooting</h3>
    <p>Check the <code>{log_name}</code> file in the content directory for detailed debug information.</p>
</div>
</body>
</html>
"""


@router.get("/export-urls", response_class=HTMLResponse)
def export_page(
    export_error: Optional[str] = Query(None),
    export_success: Optional[str] = Query(None),
    user: User = Depends(require_role(Role.admin)),
    settings: Settings = Depends(get_settings),
    notices: NoticeStore = Depends(get_notice_store),
):
    # Les lignes de debug ne sont affichées qu'une fois
    lines = notices.pop(user.id)
    return HTMLResponse(render_export_page(user, settings, lines, export_error, export_success))


@router.post("/admin-ajax")
def admin_ajax(
    action: str = Form(...),
    export_nonce: Optional[str] = Form(None),
    media_nonce: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    config: ExportConfig = Depends(get_export_config),
    notices: NoticeStore = Depends(get_notice_store),
):
    if action not in EXPORT_ACTIONS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown action: {action}")
    nonce_action, nonce_field, pipeline, kind = EXPORT_ACTIONS[action]
    token = export_nonce if nonce_field == "export_nonce" else media_nonce

    if not verify_action_token(token, user.id, nonce_action):
        logger.warning("export nonce rejected", action=action, user_id=user.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="The link you followed has expired.")

    diagnostics = DiagnosticBuffer(settings.debug_log_path(), settings.TIME_ZONE)
    diagnostics.log(f"Starting AJAX export handler for {kind}")

    if user.role != Role.admin:
        diagnostics.log("Permission denied")
        notices.push(user.id, diagnostics.lines)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have sufficient permissions to access this page.",
        )

    result = pipeline(RecordSource(db, settings), config, diagnostics)
    logger.info("export finished", kind=kind, outcome=result.outcome.value, rows=result.rows)

    if not result.deliverable:
        notices.push(user.id, diagnostics.lines)
        query = urlencode({"export_error": result.error or "Export failed."})
        return RedirectResponse(f"{PAGE_PATH}?{query}", status_code=status.HTTP_303_SEE_OTHER)

    return csv_download(
        result,
        local_now(settings.TIME_ZONE),
        diagnostics,
        on_done=lambda: notices.push(user.id, diagnostics.lines),
    )
