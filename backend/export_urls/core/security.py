# export_urls/core/security.py
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from export_urls.core.config import get_settings
from typing import Optional

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def _encode(data: dict, expires_delta: timedelta) -> str:
    settings = get_settings()
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    minutes = get_settings().ACCESS_TOKEN_EXPIRE_MINUTES
    return _encode({**data, "typ": "access"}, expires_delta or timedelta(minutes=minutes))

def create_refresh_token(data: dict):
    minutes = get_settings().REFRESH_TOKEN_EXPIRE_MINUTES
    return _encode({**data, "typ": "refresh"}, timedelta(minutes=minutes))

def decode_token(token: str):
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


# Action-scoped request-forgery tokens

def create_action_token(user_id: int, action: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a token that only verifies for the same user and the same action name,
    e.g. ``export_urls_ajax_nonce``.
    """
    minutes = get_settings().NONCE_EXPIRE_MINUTES
    payload = {"sub": str(user_id), "action": action, "typ": "nonce"}
    return _encode(payload, expires_delta or timedelta(minutes=minutes))

def verify_action_token(token: Optional[str], user_id: int, action: str) -> bool:
    if not token:
        return False
    payload = decode_token(token)
    if not payload or payload.get("typ") != "nonce":
        return False
    return payload.get("action") == action and payload.get("sub") == str(user_id)
