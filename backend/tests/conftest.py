"""
Pytest fixtures for the export service.

Provides an in-memory database, per-test content/uploads/scratch directories,
and a FastAPI test client wired to both through dependency overrides.
"""
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from export_urls.core.config import Settings, get_settings
from export_urls.core.deps import get_db, get_notice_store
from export_urls.core.security import create_access_token, hash_password
from export_urls.db.models import ATTACHMENT_TYPE, ContentType, Record, Role, User
from export_urls.services.diagnostics import DiagnosticBuffer, NoticeStore
from export_urls.services.export.job import ExportConfig


@pytest.fixture(scope="session")
def hashed_password():
    return hash_password("s3cret-pass")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def test_settings(tmp_path):
    content_dir = tmp_path / "content"
    (content_dir / "uploads").mkdir(parents=True)
    (tmp_path / "scratch").mkdir()
    return Settings(
        JWT_SECRET_KEY=os.environ["JWT_SECRET_KEY"],
        SITE_URL="https://example.org",
        CONTENT_DIR=str(content_dir),
        EXPORT_SCRATCH_DIR=str(tmp_path / "scratch"),
    )


@pytest.fixture
def export_config(test_settings):
    return ExportConfig.from_settings(test_settings)


@pytest.fixture
def diagnostics(test_settings):
    return DiagnosticBuffer(test_settings.debug_log_path(), test_settings.TIME_ZONE)


@pytest.fixture
def notices():
    return NoticeStore()


@pytest.fixture
def content_types(db_session):
    """post, page and attachment registered public, plus a public custom type and a private one."""
    types = [
        ContentType(name="post", label="Posts", public=True),
        ContentType(name="page", label="Pages", public=True),
        ContentType(name=ATTACHMENT_TYPE, label="Media", public=True),
        ContentType(name="product", label="Products", public=True),
        ContentType(name="revision", label="Revisions", public=False),
    ]
    db_session.add_all(types)
    db_session.commit()
    return types


@pytest.fixture
def sample_site(db_session, content_types, test_settings):
    """
    3 published pages, 2 draft products and 1 attachment whose file exists.
    """
    records = [
        Record(title="About", post_type="page", status="publish", slug="about"),
        Record(title="Contact &amp; Support", post_type="page", status="publish", slug="contact"),
        Record(title="Caf&eacute;", post_type="page", status="publish", slug="cafe"),
        Record(title="Draft Product", post_type="product", status="draft", slug="draft-product"),
        Record(title="Other Product", post_type="product", status="draft", slug=""),
        Record(
            title="Logo",
            post_type=ATTACHMENT_TYPE,
            status="inherit",
            slug="logo",
            mime_type="image/png",
            attached_file="2024/05/logo.png",
        ),
    ]
    db_session.add_all(records)
    db_session.commit()

    upload = os.path.join(test_settings.uploads_dir(), "2024", "05")
    os.makedirs(upload)
    with open(os.path.join(upload, "logo.png"), "wb") as fh:
        fh.write(b"\0" * 1536)
    return records


def _make_user(db_session, hashed_password, email, role):
    user = User(email=email, hashed_password=hashed_password, role=role, full_name=email.split("@")[0])
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session, hashed_password):
    return _make_user(db_session, hashed_password, "admin@site.org", Role.admin)


@pytest.fixture
def editor_user(db_session, hashed_password):
    return _make_user(db_session, hashed_password, "editor@site.org", Role.editor)


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}
    return _headers


@pytest.fixture
def client(db_session, test_settings, notices):
    """
    FastAPI test client with database, settings and notice store overrides.
    """
    from main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_notice_store] = lambda: notices

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
