# barberbook/routers/auth_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from barberbook.db import get_session
from barberbook.models import User
from barberbook.schemas import Token, GoogleSignIn, VerifyEmail, UserPublic
from barberbook.auth import (
    verify_password,
    create_access_token,
    get_current_user,
    read_verification_token,
    send_verification,
    verify_google_id_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    email = form_data.username.strip().lower()
    password = form_data.password

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.email})
    return {"access_token": token, "token_type": "bearer"}


@router.post("/google", response_model=Token)
def google_sign_in(
    body: GoogleSignIn,
    session: Session = Depends(get_session),
):
    claims = verify_google_id_token(body.id_token)
    email = claims["email"].strip().lower()
    # tokeninfo returns booleans as strings
    verified = str(claims.get("email_verified", "false")).lower() == "true"

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None:
        user = User(
            email=email,
            password_hash=None,
            role=body.role.value,
            email_verified=verified,
            auth_provider="google",
        )
        session.add(user)
        logger.info(f"Registered {email} via Google as {body.role.value}")
    elif not verified:
        # linking by email needs Google to vouch for the address
        logger.warning(f"Google sign-in for existing account {email} with unverified Google email")
        raise HTTPException(status_code=401, detail="Google email is not verified")
    elif not user.email_verified:
        user.email_verified = True
        session.add(user)

    session.commit()

    token = create_access_token({"sub": email})
    return {"access_token": token, "token_type": "bearer"}


@router.post("/verify-email", response_model=UserPublic)
def verify_email(
    body: VerifyEmail,
    session: Session = Depends(get_session),
):
    email = read_verification_token(body.token)

    user = session.exec(
        select(User).where(User.email == email)
    ).first()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    if not user.email_verified:
        user.email_verified = True
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info(f"Email verified for {email}")

    return user


@router.post("/resend-verification", status_code=202)
def resend_verification(current_user: dict = Depends(get_current_user)):
    if current_user["email_verified"]:
        raise HTTPException(status_code=409, detail="Email already verified")
    send_verification(current_user["email"])
    return {"detail": "Verification email sent"}
