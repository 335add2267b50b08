# export_urls/db/base.py
from sqlmodel import SQLModel, create_engine, Session
from export_urls.core.config import settings

DB_URL = settings.DATABASE_URL
connect_args = {"check_same_thread": False} if DB_URL.startswith("sqlite") else {}

engine = create_engine(DB_URL, echo=False, connect_args=connect_args)

def get_session():
    with Session(engine) as session:
        yield session

def init_db(bind=None):
    import export_urls.db.models  # Important : importe tous les modèles
    SQLModel.metadata.create_all(bind or engine)
