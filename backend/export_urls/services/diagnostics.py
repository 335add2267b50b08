# export_urls/services/diagnostics.py
"""
Diagnostics for export runs.

A ``DiagnosticBuffer`` is created per request and passed through the pipeline.
Each line is appended to the debug log file in the content directory and kept
in memory; once the export is over the caller files the lines under the user
in the ``NoticeStore`` so the admin page can show them on its next render.
"""
import os
import threading
from collections import defaultdict
from typing import Dict, List, Optional

import structlog

from export_urls.utils.formatting import format_log_timestamp, local_now

logger = structlog.get_logger()


class DiagnosticBuffer:
    def __init__(self, log_path: Optional[str] = None, tz_name: str = "UTC"):
        self.log_path = log_path
        self.tz_name = tz_name
        self.lines: List[str] = []

    def log(self, message: str) -> None:
        self.lines.append(message)
        if not self.log_path:
            return
        line = f"{format_log_timestamp(local_now(self.tz_name))} {message}\n"
        try:
            os.makedirs(os.path.dirname(self.log_path) or ".", exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as fh:
                fh.write(line)
        except OSError as e:
            # Le fichier de debug ne doit jamais faire échouer l'export
            logger.warning("debug log write failed", path=self.log_path, error=str(e))

    def __len__(self):
        return len(self.lines)


class NoticeStore:
    """Per-user pending diagnostic lines, shown once and then cleared."""

    def __init__(self):
        self._pending: Dict[int, List[str]] = defaultdict(list)
        self._lock = threading.Lock()

    def push(self, user_id: int, lines: List[str]) -> None:
        if not lines:
            return
        with self._lock:
            self._pending[user_id].extend(lines)

    def pop(self, user_id: int) -> List[str]:
        with self._lock:
            return self._pending.pop(user_id, [])

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()


notice_store = NoticeStore()
