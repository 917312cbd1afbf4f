# barberbook/presenters.py

from datetime import datetime
from typing import Optional

from barberbook import core
from barberbook.models import Appointment, Barber, Client


def _coordinates(lat: Optional[float], lng: Optional[float]) -> Optional[dict]:
    if lat is None or lng is None:
        return None
    return {"lat": lat, "lng": lng}


def barber_to_public(barber: Barber, distance_km: Optional[float] = None) -> dict:
    return {
        "id": barber.user_id,
        "email": barber.email,
        "full_name": barber.full_name,
        "phone": barber.phone,
        "profile_complete": barber.profile_complete,
        "photo_url": barber.photo_url,
        "cover_photo_url": barber.cover_photo_url,
        "description": barber.description,
        "address": barber.address,
        "coordinates": _coordinates(barber.latitude, barber.longitude),
        "availability": barber.availability,
        "services": barber.services,
        "barbershop_photos": barber.barbershop_photos,
        "review_count": barber.review_count,
        "rating_average": barber.rating_average,
        "distance_km": distance_km,
    }


def client_to_public(client: Client) -> dict:
    return {
        "id": client.user_id,
        "email": client.email,
        "full_name": client.full_name,
        "phone": client.phone,
        "address": client.address,
        "coordinates": _coordinates(client.latitude, client.longitude),
        "profile_complete": client.profile_complete,
    }


def appointment_to_public(
    appt: Appointment,
    now: datetime,
    barber_name: Optional[str] = None,
) -> dict:
    return {
        "id": appt.id,
        "barber_id": appt.barber_id,
        "barber_name": barber_name,
        "client_id": appt.client_id,
        "client_name": appt.client_name,
        "client_coordinates": _coordinates(appt.client_latitude, appt.client_longitude),
        "client_full_address": appt.client_full_address,
        "service_id": appt.service_id,
        "service_name": appt.service_name,
        "service_price": appt.service_price,
        "duration_minutes": appt.duration_minutes,
        "type": appt.type,
        "date": appt.date,
        "time": appt.time,
        "created_at": appt.created_at,
        "status": appt.status,
        "reviewed": appt.reviewed,
        "pending": core.is_pending(appt, now),
    }
