# export_urls/db/seed.py
from export_urls.db.base import engine
from export_urls.db.models import ATTACHMENT_TYPE, ContentType, Role, User
from sqlmodel import Session, select
from export_urls.core.security import hash_password

CORE_CONTENT_TYPES = [
    ContentType(name="post", label="Posts", public=True),
    ContentType(name="page", label="Pages", public=True),
    ContentType(name=ATTACHMENT_TYPE, label="Media", public=True),
]

def seed_initial_data(admin_email: str = "admin@site.org", admin_password: str = "adminpass", bind=None) -> bool:
    with Session(bind or engine) as session:
        if session.exec(select(User)).first():
            return False

        session.add(User(
            email=admin_email,
            hashed_password=hash_password(admin_password),
            role=Role.admin,
            full_name="Site Admin"
        ))
        for content_type in CORE_CONTENT_TYPES:
            if not session.get(ContentType, content_type.name):
                session.add(ContentType(**content_type.model_dump()))
        session.commit()
        return True
