# barberbook/routers/ai_routes.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from barberbook.db import get_session
from barberbook.models import Appointment, Barber
from barberbook.schemas import BioRequest, BioResponse, ReminderResponse
from barberbook.auth import get_current_user
from barberbook.deps import require_role, require_verified
from barberbook.flows.bio import GenerateBarberBioInput, generate_barber_bio
from barberbook.flows.reminder import GenerateReminderInput, generate_appointment_reminder, long_date_pt

router = APIRouter(
    tags=["ai"],
)


@router.post("/ai/bio", response_model=BioResponse)
def generate_bio(
    body: BioRequest,
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")
    require_verified(current_user)

    result = generate_barber_bio(GenerateBarberBioInput(keywords=body.keywords))
    return {"bio": result.bio}


@router.post("/appointments/{appt_id}/reminder", response_model=ReminderResponse)
def generate_reminder(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")
    require_verified(current_user)

    appt = session.get(Appointment, appt_id)
    if appt is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    if appt.barber_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")

    barber = session.get(Barber, appt.barber_id)
    result = generate_appointment_reminder(GenerateReminderInput(
        client_name=appt.client_name,
        service=appt.service_name,
        date=long_date_pt(appt.date),
        time=appt.time.strftime("%H:%M"),
        barber_name=barber.full_name,
    ))
    return {"reminder_text": result.reminder_text}
