# export_urls/services/export/job.py
import csv
import os
import tempfile
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

import structlog

from export_urls.services.diagnostics import DiagnosticBuffer

logger = structlog.get_logger()

CONTENT_HEADER = ["ID", "Title", "Post Type", "Status", "URL"]
MEDIA_HEADER = CONTENT_HEADER + ["File URL", "File Type", "File Size"]


@dataclass
class ExportConfig:
    max_rows: Optional[int] = None
    soft_timeout: Optional[float] = 300
    scratch_directory: str = field(default_factory=tempfile.gettempdir)

    @classmethod
    def from_settings(cls, settings) -> "ExportConfig":
        return cls(
            max_rows=settings.EXPORT_MAX_ROWS,
            soft_timeout=settings.EXPORT_SOFT_TIMEOUT,
            scratch_directory=settings.EXPORT_SCRATCH_DIR or tempfile.gettempdir(),
        )

    def describe(self) -> str:
        max_rows = self.max_rows if self.max_rows is not None else "unlimited"
        soft_timeout = f"{self.soft_timeout}s" if self.soft_timeout else "none"
        return (
            f"Export limits: max rows {max_rows}, soft timeout {soft_timeout}, "
            f"scratch directory {self.scratch_directory}"
        )


class ExportOutcome(str, Enum):
    success = "success"
    partial = "partial"
    fatal = "fatal"


@dataclass
class ExportResult:
    kind: str
    outcome: ExportOutcome
    rows: int = 0
    path: Optional[str] = None
    error: Optional[str] = None
    skipped_types: List[str] = field(default_factory=list)
    stop_reason: Optional[str] = None

    @property
    def deliverable(self) -> bool:
        return self.outcome != ExportOutcome.fatal and self.path is not None


class ExportJob:
    """
    One export run: an open scratch CSV file and a running row counter.
    """

    def __init__(
        self,
        kind: str,
        header: Sequence[str],
        config: ExportConfig,
        diagnostics: DiagnosticBuffer,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.kind = kind
        self.header = list(header)
        self.config = config
        self.diagnostics = diagnostics
        self.clock = clock
        self.rows = 0
        self.path: Optional[str] = None
        self._fh = None
        self._writer = None
        self._started = clock()

    def open(self) -> None:
        """Create the scratch file and write the header. Raises ``OSError``."""
        os.makedirs(self.config.scratch_directory, exist_ok=True)
        fd, self.path = tempfile.mkstemp(
            prefix=f"export-{self.kind}-", suffix=".csv", dir=self.config.scratch_directory
        )
        self.diagnostics.log(f"Created temp file: {self.path}")
        self._fh = os.fdopen(fd, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._fh, lineterminator="\n")
        self._writer.writerow(self.header)
        self.diagnostics.log("CSV header written")

    def stop_reason(self) -> Optional[str]:
        if self.config.max_rows is not None and self.rows >= self.config.max_rows:
            return f"Row limit of {self.config.max_rows} reached"
        if self.config.soft_timeout and self.clock() - self._started > self.config.soft_timeout:
            return f"Soft timeout of {self.config.soft_timeout}s exceeded"
        return None

    def write_row(self, row: Sequence) -> None:
        self._writer.writerow(row)
        self.rows += 1

    def close(self) -> None:
        if self._fh is not None and not self._fh.closed:
            self._fh.close()

    def discard(self) -> None:
        try:
            self.close()
        except OSError as e:
            logger.warning("scratch file close failed", path=self.path, error=str(e))
        if self.path and os.path.exists(self.path):
            try:
                os.remove(self.path)
                self.diagnostics.log("Temp file deleted")
            except OSError as e:
                logger.warning("scratch file removal failed", path=self.path, error=str(e))
        self.path = None

    def result(self, outcome: ExportOutcome, **kwargs) -> ExportResult:
        return ExportResult(kind=self.kind, outcome=outcome, rows=self.rows, path=self.path, **kwargs)
