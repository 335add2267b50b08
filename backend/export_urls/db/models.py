# export_urls/db/models.py
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone
from enum import Enum


ATTACHMENT_TYPE = "attachment"


class Role(str, Enum):
    admin = "admin"
    editor = "editor"
    author = "author"
    subscriber = "subscriber"


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    role: Role = Field(default=Role.subscriber)
    full_name: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ContentType(SQLModel, table=True):
    name: str = Field(primary_key=True)           # ex. "page", "post", "product"
    label: str
    public: bool = Field(default=True, index=True)


class Record(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = ""                               # brut, peut contenir des entités HTML
    post_type: str = Field(foreign_key="contenttype.name", index=True)
    status: str = Field(default="draft", index=True)
    slug: str = ""

    # Médias uniquement
    mime_type: Optional[str] = None
    attached_file: Optional[str] = None           # relatif au dossier uploads

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
