# barberbook/routers/clients_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from barberbook import core, maps
from barberbook.db import get_session
from barberbook.models import Client
from barberbook.schemas import ClientProfileUpdate, ClientPublic
from barberbook.auth import get_current_user
from barberbook.deps import require_role, require_verified
from barberbook.presenters import client_to_public

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/clients",
    tags=["clients"],
)


@router.put("/me/profile", response_model=ClientPublic)
def upsert_profile(
    profile: ClientProfileUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")
    require_verified(current_user)

    db_client = session.get(Client, current_user["id"])
    if db_client is None:
        db_client = Client(user_id=current_user["id"], email=current_user["email"])

    db_client.full_name = profile.full_name.strip()
    db_client.phone = profile.phone.strip()

    old_address = db_client.address
    if profile.address is not None:
        address = profile.address.model_dump()
        address["full_address"] = profile.address.display()
        db_client.address = address

    coords = maps.locate(
        db_client.address,
        profile.coordinates.model_dump() if profile.coordinates else None,
    )
    if coords is not None:
        db_client.latitude = coords["lat"]
        db_client.longitude = coords["lng"]
    elif db_client.address != old_address:
        # a moved address must not keep the previous location
        db_client.latitude = None
        db_client.longitude = None

    db_client.profile_complete = core.client_profile_complete(db_client)

    session.add(db_client)
    session.commit()
    session.refresh(db_client)

    logger.info(f"Client {db_client.user_id} profile saved (complete={db_client.profile_complete})")
    return client_to_public(db_client)


@router.get("/me/profile", response_model=ClientPublic)
def get_my_profile(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")
    db_client = session.get(Client, current_user["id"])
    if db_client is None:
        raise HTTPException(status_code=404, detail="Profile not set")
    return client_to_public(db_client)
