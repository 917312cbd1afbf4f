# barberbook/routers/barbers_routes.py

import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select

from barberbook import core, maps
from barberbook.config import settings
from barberbook.db import get_session
from barberbook.models import Appointment, Barber, Client, default_availability
from barberbook.schemas import (
    WEEKDAYS,
    AppointmentStatus,
    AvailabilityResponse,
    BarberProfileUpdate,
    BarberPublic,
    DayAvailability,
    Service,
    ServiceIn,
    TravelInfo,
)
from barberbook.auth import get_current_user
from barberbook.deps import require_role, require_verified
from barberbook.flows.travel import GetTravelInfoInput, get_travel_info
from barberbook.presenters import barber_to_public

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)


def get_barber_or_404(session: Session, barber_id: int) -> Barber:
    barber = session.get(Barber, barber_id)
    if barber is None:
        raise HTTPException(status_code=404, detail="Barber Not Found")
    return barber


def validate_availability(availability: Dict[str, DayAvailability]) -> dict:
    for day, hours in availability.items():
        if day not in WEEKDAYS:
            raise HTTPException(status_code=422, detail=f"Unknown weekday '{day}'")
        if hours.start >= hours.end:
            raise HTTPException(status_code=422, detail=f"{day}: start must be before end")

    return {day: hours.model_dump() for day, hours in availability.items()}


def _my_barber(session: Session, current_user: dict) -> Barber:
    require_role(current_user, "barber")
    barber = session.get(Barber, current_user["id"])
    if barber is None:
        raise HTTPException(status_code=404, detail="Profile not set")
    return barber


@router.put("/me/profile", response_model=BarberPublic)
def upsert_profile(
    profile: BarberProfileUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")
    require_verified(current_user)

    db_barber = session.get(Barber, current_user["id"])
    if db_barber is None:
        db_barber = Barber(user_id=current_user["id"], email=current_user["email"])

    db_barber.full_name = profile.full_name.strip()
    db_barber.phone = profile.phone.strip()
    db_barber.photo_url = profile.photo_url
    db_barber.cover_photo_url = profile.cover_photo_url
    db_barber.description = profile.description

    if profile.availability is not None:
        availability = dict(db_barber.availability)
        availability.update(validate_availability(profile.availability))
        db_barber.availability = availability
    if profile.services is not None:
        db_barber.services = [s.model_dump() for s in profile.services]
    if profile.barbershop_photos is not None:
        db_barber.barbershop_photos = list(profile.barbershop_photos)

    old_address = db_barber.address
    if profile.address is not None:
        address = profile.address.model_dump()
        address["full_address"] = profile.address.display()
        db_barber.address = address

    coords = maps.locate(
        db_barber.address,
        profile.coordinates.model_dump() if profile.coordinates else None,
    )
    if coords is not None:
        db_barber.latitude = coords["lat"]
        db_barber.longitude = coords["lng"]
    elif db_barber.address != old_address:
        # a moved address must not keep the previous location
        db_barber.latitude = None
        db_barber.longitude = None

    db_barber.profile_complete = core.barber_profile_complete(db_barber)

    session.add(db_barber)
    session.commit()
    session.refresh(db_barber)

    logger.info(f"Barber {db_barber.user_id} profile saved (complete={db_barber.profile_complete})")
    return barber_to_public(db_barber)


@router.get("/me/profile", response_model=BarberPublic)
def get_my_profile(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return barber_to_public(_my_barber(session, current_user))


@router.post("/me/services", response_model=Service, status_code=201)
def add_service(
    service: ServiceIn,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_verified(current_user)
    db_barber = _my_barber(session, current_user)

    new_service = {"id": core.service_id_for(service.name), **service.model_dump()}
    # JSON columns only persist on reassignment
    db_barber.services = [*db_barber.services, new_service]
    db_barber.profile_complete = core.barber_profile_complete(db_barber)

    session.add(db_barber)
    session.commit()
    return new_service


@router.delete("/me/services/{service_id}", status_code=204)
def remove_service(
    service_id: str,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_verified(current_user)
    db_barber = _my_barber(session, current_user)

    remaining = [s for s in db_barber.services if s.get("id") != service_id]
    if len(remaining) == len(db_barber.services):
        raise HTTPException(status_code=404, detail="Service not found")

    db_barber.services = remaining
    db_barber.profile_complete = core.barber_profile_complete(db_barber)
    session.add(db_barber)
    session.commit()
    return Response(status_code=204)


@router.put("/me/availability", response_model=Dict[str, DayAvailability])
def set_availability(
    availability: Dict[str, DayAvailability],
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_verified(current_user)
    db_barber = _my_barber(session, current_user)

    week = validate_availability(availability)
    # days left out of the body are off; their stored hours are kept
    for day in WEEKDAYS:
        if day not in week:
            previous = db_barber.availability.get(day) or default_availability()[day]
            week[day] = {**previous, "active": False}
    db_barber.availability = week
    db_barber.profile_complete = core.barber_profile_complete(db_barber)

    session.add(db_barber)
    session.commit()
    session.refresh(db_barber)
    return db_barber.availability


@router.get("", response_model=List[BarberPublic])
def list_barbers(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    barbers = session.exec(
        select(Barber).where(Barber.profile_complete == True)  # noqa: E712
    ).all()

    origin = None
    if current_user["role"] == "client":
        client = session.get(Client, current_user["id"])
        if client is not None and client.latitude is not None and client.longitude is not None:
            origin = (client.latitude, client.longitude)

    if origin is None:
        return [barber_to_public(b) for b in barbers]

    with_distance = []
    for b in barbers:
        distance = None
        if b.latitude is not None and b.longitude is not None:
            distance = core.haversine_km(origin[0], origin[1], b.latitude, b.longitude)
        with_distance.append((distance, b))

    # barbers without coordinates go last
    with_distance.sort(key=lambda pair: float("inf") if pair[0] is None else pair[0])
    return [barber_to_public(b, distance_km=d) for d, b in with_distance]


@router.get("/{barber_id}", response_model=BarberPublic)
def get_barber(
    barber_id: int,
    session: Session = Depends(get_session),
):
    return barber_to_public(get_barber_or_404(session, barber_id))


@router.get("/{barber_id}/availability", response_model=AvailabilityResponse)
def barber_availability(
    barber_id: int,
    date: date,
    service_id: Optional[str] = None,
    session: Session = Depends(get_session),
):
    # 1) Lookup barber
    barber = get_barber_or_404(session, barber_id)

    # 2) Duration from the chosen service, or the default slot length
    duration = None
    if service_id is not None:
        service = core.find_service(barber.services, service_id)
        if service is None:
            raise HTTPException(status_code=422, detail="Service not available")
        duration = core.service_duration(service)

    # 3) Scheduled appointments for this barber + date
    appts_for_day = session.exec(
        select(Appointment)
        .where(Appointment.barber_id == barber_id)
        .where(Appointment.date == date)
        .where(Appointment.status == AppointmentStatus.scheduled.value)
    ).all()

    available = core.available_starts(
        barber.availability,
        date,
        duration or settings.DEFAULT_SERVICE_MINUTES,
        appts_for_day,
        core.now_local(),
    )
    return {
        "barber_id": barber_id,
        "date": date,
        "service_id": service_id,
        "available_starts": available,
    }


@router.get("/{barber_id}/travel-info", response_model=TravelInfo)
def barber_travel_info(
    barber_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")
    require_verified(current_user)
    barber = get_barber_or_404(session, barber_id)

    client = session.get(Client, current_user["id"])
    if client is None or client.latitude is None or client.longitude is None:
        raise HTTPException(status_code=409, detail="Client location not set")
    if barber.latitude is None or barber.longitude is None:
        raise HTTPException(status_code=409, detail="Barber location not set")

    info = get_travel_info(GetTravelInfoInput(
        origin={"lat": client.latitude, "lng": client.longitude},
        destinations=[{"lat": barber.latitude, "lng": barber.longitude}],
    ))
    return info[0]
