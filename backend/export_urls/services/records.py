# export_urls/services/records.py
import html
import os
from typing import List, Optional

from sqlmodel import Session, select

from export_urls.core.config import Settings
from export_urls.db.models import ATTACHMENT_TYPE, ContentType, Record

# Statuts sans permalien « joli »
UNPUBLISHED_STATUSES = {"draft", "pending", "auto-draft", "future"}

# Statuts ignorés par « any » (exclus de la recherche)
EXCLUDED_FROM_ANY = {"trash", "auto-draft"}


class RecordSource:
    """Read access to the platform's records, as the exporters need them."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def public_content_types(self) -> List[str]:
        stmt = select(ContentType.name).where(ContentType.public.is_(True)).order_by(ContentType.name)
        return list(self.db.exec(stmt).all())

    def record_ids(self, post_type: str) -> List[int]:
        # Tous les statuts sauf corbeille et brouillons auto, sans limite, les plus récents d'abord
        stmt = (
            select(Record.id)
            .where(Record.post_type == post_type)
            .where(Record.status.not_in(sorted(EXCLUDED_FROM_ANY)))
            .order_by(Record.created_at.desc(), Record.id.desc())
        )
        return list(self.db.exec(stmt).all())

    def get(self, record_id: int) -> Optional[Record]:
        return self.db.get(Record, record_id)

    def title(self, record: Optional[Record]) -> str:
        if record is None:
            return ""
        return html.unescape(record.title or "")

    def status(self, record: Optional[Record]) -> str:
        return record.status if record is not None else ""

    def permalink(self, record: Optional[Record]) -> str:
        if record is None:
            return ""
        base = self.settings.site_url()
        if record.post_type == ATTACHMENT_TYPE:
            return f"{base}/?attachment_id={record.id}"

        plain = record.status in UNPUBLISHED_STATUSES or not record.slug
        if record.post_type == "post":
            return f"{base}/?p={record.id}" if plain else f"{base}/{record.slug}/"
        if record.post_type == "page":
            return f"{base}/?page_id={record.id}" if plain else f"{base}/{record.slug}/"
        if plain:
            return f"{base}/?post_type={record.post_type}&p={record.id}"
        return f"{base}/{record.post_type}/{record.slug}/"

    def attachment_url(self, record: Optional[Record]) -> str:
        if record is None or not record.attached_file:
            return ""
        return f"{self.settings.uploads_url()}/{record.attached_file.lstrip('/')}"

    def mime_type(self, record: Optional[Record]) -> str:
        return (record.mime_type or "") if record is not None else ""

    def attached_file_path(self, record: Optional[Record]) -> Optional[str]:
        if record is None or not record.attached_file:
            return None
        return os.path.join(self.settings.uploads_dir(), record.attached_file.lstrip("/"))
