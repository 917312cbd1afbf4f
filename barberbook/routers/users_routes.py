# barberbook/routers/users_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barberbook.db import get_session
from barberbook.models import User
from barberbook.schemas import UserCreate, UserPublic
from barberbook.auth import get_current_user, hash_password, send_verification

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    email = user.email.strip().lower()

    # 1) Check if email already exists
    existing = session.exec(
        select(User).where(User.email == email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Create user in DB, unverified until the link is used
    db_user = User(
        email=email,
        password_hash=hash_password(user.password),
        role=user.role.value,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id

    logger.info(f"Registered {email} as {db_user.role}")
    send_verification(email)

    return db_user
