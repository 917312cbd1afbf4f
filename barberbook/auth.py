# barberbook/auth.py

import logging
from datetime import datetime, timedelta
from typing import Optional

import httpx
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlmodel import Session, select

from barberbook.config import settings
from barberbook.db import get_session
from barberbook.models import User

logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
VERIFY_EMAIL_PURPOSE = "verify_email"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    to_encode = data.copy()
    if expires_minutes is None:
        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes)
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_verification_token(email: str) -> str:
    return create_access_token(
        {"sub": email, "purpose": VERIFY_EMAIL_PURPOSE},
        expires_minutes=settings.VERIFICATION_TOKEN_EXPIRE_MINUTES,
    )


def read_verification_token(token: str) -> str:
    """Return the e-mail a verification token was issued for."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")
    if payload.get("purpose") != VERIFY_EMAIL_PURPOSE or not payload.get("sub"):
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")
    return payload["sub"]


def send_verification(email: str) -> str:
    # No mail transport; the link is logged for the operator.
    token = create_verification_token(email)
    base = (settings.PUBLIC_BASE_URL or "").rstrip("/")
    logger.info(f"Verification link for {email}: {base}/auth/verify-email?token={token}")
    return token


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def verify_google_id_token(id_token: str) -> dict:
    """
    Validate a Google ID token through the tokeninfo endpoint.

    Returns the claims (email, email_verified, aud, ...) or raises 401.
    """
    try:
        with httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
            resp = client.get(GOOGLE_TOKENINFO_URL, params={"id_token": id_token})
    except httpx.HTTPError as e:
        logger.error(f"Google tokeninfo request failed: {e}")
        raise HTTPException(status_code=502, detail="Google sign-in unavailable")

    if resp.status_code != 200:
        logger.warning(f"Google tokeninfo rejected token: HTTP {resp.status_code}")
        raise HTTPException(status_code=401, detail="Invalid Google token")

    claims = resp.json()
    if settings.GOOGLE_CLIENT_ID and claims.get("aud") != settings.GOOGLE_CLIENT_ID:
        raise HTTPException(status_code=401, detail="Google token audience mismatch")
    if not claims.get("email"):
        raise HTTPException(status_code=401, detail="Google token has no email")
    return claims


def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        email = payload.get("sub")
        if email is None or payload.get("purpose") is not None:
            raise HTTPException(
                status_code=401,
                detail="Invalid token",
                headers={"WWW-Authenticate": "Bearer"},
            )
    except JWTError:
        raise HTTPException(
            status_code=401,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None:
        raise HTTPException(
            status_code=401,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "email_verified": user.email_verified,
        "auth_provider": user.auth_provider,
    }
