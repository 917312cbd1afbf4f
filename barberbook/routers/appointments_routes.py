# barberbook/routers/appointments_routes.py

import logging
from datetime import datetime, timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barberbook import core
from barberbook.db import get_session
from barberbook.models import Appointment, Barber, Client
from barberbook.schemas import (
    AppointmentPublic,
    AppointmentStatus,
    BookingType,
    ClientAppointmentCreate,
)
from barberbook.auth import get_current_user
from barberbook.deps import require_role, require_verified
from barberbook.presenters import appointment_to_public

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["appointments"],
)

BARBER_HISTORY_FILTERS = ("all", "scheduled", "completed", "cancelled", "no-show")
CLIENT_HISTORY_FILTERS = ("all", "completed", "cancelled", "no-show")


def get_appointment_or_404(session: Session, appt_id: int) -> Appointment:
    appt = session.get(Appointment, appt_id)
    if appt is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appt


@router.post("/barbers/{barber_id}/appointments", response_model=AppointmentPublic, status_code=201)
def client_create_appointment(
    barber_id: int,
    appt: ClientAppointmentCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")
    require_verified(current_user)

    # 1) Barber must exist and be bookable
    barber = session.get(Barber, barber_id)
    if barber is None:
        raise HTTPException(status_code=404, detail="Barber Not Found")
    if not barber.profile_complete:
        raise HTTPException(status_code=409, detail="Barber profile is not complete")

    # 2) Validate service and booking type
    service = core.find_service(barber.services, appt.service_id)
    if service is None:
        raise HTTPException(status_code=422, detail="Service not available")
    if appt.type == BookingType.at_home and not (service.get("at_home_fee") or 0) > 0:
        raise HTTPException(status_code=422, detail="Service is not offered at home")

    # 3) Build appointment interval
    duration = core.service_duration(service)
    appt_start = datetime.combine(appt.date, appt.time)
    appt_end = appt_start + timedelta(minutes=duration)

    # 4) Prevent booking in the past (shop local time)
    if appt_start < core.now_local():
        raise HTTPException(status_code=422, detail="Cannot book an appointment in the past")

    # 5) Validate working day and hours
    window = core.day_window(barber.availability, appt.date)
    if window is None:
        raise HTTPException(status_code=422, detail="Barber is not scheduled to work that day")
    work_start, work_end = window
    if appt_start < work_start or appt_end > work_end:
        raise HTTPException(status_code=422, detail="Appointment must be within working hours")

    # 6) Reject overlaps with scheduled appointments
    appts_for_day = session.exec(
        select(Appointment)
        .where(Appointment.barber_id == barber_id)
        .where(Appointment.date == appt.date)
        .where(Appointment.status == AppointmentStatus.scheduled.value)
    ).all()
    if core.find_conflict(appt_start, appt_end, appts_for_day) is not None:
        raise HTTPException(status_code=409, detail="Appointment overlaps an existing appointment")

    # 7) Client details copied onto the appointment
    client = session.get(Client, current_user["id"])
    client_name = (appt.client_name or "").strip() or (client.full_name if client else "")
    if not client_name:
        raise HTTPException(status_code=422, detail="Client name is required")

    db_appt = Appointment(
        barber_id=barber_id,
        client_id=current_user["id"],
        client_name=client_name,
        client_latitude=client.latitude if client else None,
        client_longitude=client.longitude if client else None,
        client_full_address=(client.address or {}).get("full_address") if client else None,
        service_id=service["id"],
        service_name=service["name"],
        service_price=core.booking_price(service, appt.type.value),
        duration_minutes=duration,
        type=appt.type.value,
        date=appt.date,
        time=appt.time,
        status=AppointmentStatus.scheduled.value,
    )

    session.add(db_appt)
    try:
        session.commit()
    except IntegrityError:
        # a concurrent booking took the same start
        session.rollback()
        raise HTTPException(status_code=409, detail="Appointment already exists for that start time")
    session.refresh(db_appt)

    logger.info(
        f"Appointment {db_appt.id} booked: barber={barber_id} client={current_user['id']} "
        f"{db_appt.date} {db_appt.time.strftime('%H:%M')} {db_appt.service_name}"
    )
    return appointment_to_public(db_appt, core.now_local(), barber_name=barber.full_name)


def _change_status(
    session: Session,
    appt_id: int,
    current_user: dict,
    target: AppointmentStatus,
) -> dict:
    require_verified(current_user)

    # 1) Find the appointment in DB
    appt = get_appointment_or_404(session, appt_id)

    # 2) Authorization: cancel by client who booked OR barber; the rest barber only
    user_id = current_user["id"]
    is_barber = current_user["role"] == "barber" and user_id == appt.barber_id
    is_client = current_user["role"] == "client" and user_id == appt.client_id
    if target == AppointmentStatus.cancelled:
        if not (is_barber or is_client):
            raise HTTPException(status_code=403, detail="Forbidden")
    elif not is_barber:
        raise HTTPException(status_code=403, detail="Forbidden")

    # 3) Completed / no-show only once the start time has passed
    now = core.now_local()
    if (
        target != AppointmentStatus.cancelled
        and appt.status == AppointmentStatus.scheduled.value
        and core.appointment_start(appt) > now
    ):
        raise HTTPException(status_code=409, detail="Appointment has not started yet")

    # 4) Transition and persist
    previous = appt.status
    core.transition(appt, target)
    session.add(appt)
    session.commit()
    session.refresh(appt)

    logger.info(f"Appointment {appt.id} status {previous} -> {appt.status} by user {user_id}")
    return appointment_to_public(appt, now)


@router.patch("/appointments/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return _change_status(session, appt_id, current_user, AppointmentStatus.cancelled)


@router.patch("/appointments/{appt_id}/complete", response_model=AppointmentPublic)
def complete_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return _change_status(session, appt_id, current_user, AppointmentStatus.completed)


@router.patch("/appointments/{appt_id}/no-show", response_model=AppointmentPublic)
def mark_no_show(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return _change_status(session, appt_id, current_user, AppointmentStatus.no_show)


@router.get("/barbers/me/appointments/upcoming", response_model=List[AppointmentPublic])
def list_barber_upcoming(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")

    appts = session.exec(
        select(Appointment)
        .where(Appointment.barber_id == current_user["id"])
        .where(Appointment.status == AppointmentStatus.scheduled.value)
    ).all()

    now = core.now_local()
    return [appointment_to_public(a, now) for a in core.upcoming_appointments(appts, now)]


@router.get("/barbers/me/appointments/history", response_model=List[AppointmentPublic])
def list_barber_history(
    status: str = "all",
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")

    if status not in BARBER_HISTORY_FILTERS:
        raise HTTPException(status_code=422, detail=f"status must be one of {', '.join(BARBER_HISTORY_FILTERS)}")

    appts = session.exec(
        select(Appointment).where(Appointment.barber_id == current_user["id"])
    ).all()

    now = core.now_local()
    history = core.filter_by_status(core.past_appointments(appts, now), status)
    return [appointment_to_public(a, now) for a in history]


def _client_appointments(session: Session, client_id: int):
    rows = session.exec(
        select(Appointment, Barber.full_name)
        .join(Barber, Barber.user_id == Appointment.barber_id)
        .where(Appointment.client_id == client_id)
    ).all()
    names = {a.id: name for a, name in rows}
    return [a for a, _ in rows], names


@router.get("/clients/me/appointments", response_model=List[AppointmentPublic])
def list_my_appointments(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")

    appts, names = _client_appointments(session, current_user["id"])
    appts.sort(key=core.appointment_start, reverse=True)

    now = core.now_local()
    return [appointment_to_public(a, now, barber_name=names[a.id]) for a in appts]


@router.get("/clients/me/appointments/history", response_model=List[AppointmentPublic])
def list_my_history(
    status: str = "all",
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")

    if status not in CLIENT_HISTORY_FILTERS:
        raise HTTPException(status_code=422, detail=f"status must be one of {', '.join(CLIENT_HISTORY_FILTERS)}")

    appts, names = _client_appointments(session, current_user["id"])

    now = core.now_local()
    history = core.filter_by_status(core.past_appointments(appts, now), status)
    return [appointment_to_public(a, now, barber_name=names[a.id]) for a in history]
