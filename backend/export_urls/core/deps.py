# export_urls/core/deps.py
from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session
from export_urls.core.config import Settings, get_settings
from export_urls.core.security import decode_token
from export_urls.db.base import get_session
from export_urls.db.models import User
from export_urls.services.diagnostics import NoticeStore, notice_store
from export_urls.services.export.job import ExportConfig

ACCESS_COOKIE = "access_token"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

def get_db():
    yield from get_session()

def get_token(request: Request, bearer: Optional[str] = Depends(oauth2_scheme)) -> str:
    # Les formulaires de la page admin n'envoient que le cookie
    token = bearer or request.cookies.get(ACCESS_COOKIE)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token

async def get_current_user(token: str = Depends(get_token), db: Session = Depends(get_db)) -> User:
    payload = decode_token(token)
    if not payload or "sub" not in payload or payload.get("typ") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = db.get(User, int(payload["sub"]))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

def require_role(role: str):
    def wrapper(user: User = Depends(get_current_user)):
        if user.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have sufficient permissions to access this page.",
            )
        return user
    return wrapper

def get_export_config(settings: Settings = Depends(get_settings)) -> ExportConfig:
    return ExportConfig.from_settings(settings)

def get_notice_store() -> NoticeStore:
    return notice_store
