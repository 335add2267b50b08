# export_urls/api/auth.py
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select
from export_urls.schemas.auth import LoginRequest, Token
from export_urls.schemas.users import UserOut
from export_urls.core.security import verify_password, create_access_token, create_refresh_token
from export_urls.core.deps import ACCESS_COOKIE, get_db, get_current_user
from export_urls.core.logging import logger
from export_urls.db.models import User

router = APIRouter()


@router.post("/login", response_model=Token)
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = db.exec(select(User).where(User.email == data.email)).first()
    if not user or not verify_password(data.password, user.hashed_password):
        logger.warning("login failed", email=data.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    payload = {"sub": str(user.id)}
    access_token = create_access_token(payload)
    # Cookie pour la page admin et ses formulaires
    response.set_cookie(ACCESS_COOKIE, access_token, httponly=True, samesite="lax")
    return Token(
        access_token=access_token,
        refresh_token=create_refresh_token(payload)
    )


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(ACCESS_COOKIE)
    return {"detail": "Logged out"}


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user
