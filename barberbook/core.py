# barberbook/core.py

import math
import re
import time as _time
import unicodedata
from collections import Counter
from datetime import datetime, timedelta, date, time
from typing import Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from barberbook.config import settings
from barberbook.exceptions import InvalidTransitionError
from barberbook.models import Appointment, Barber, Client, Review
from barberbook.schemas import WEEKDAYS, AppointmentStatus, BookingType

EARTH_RADIUS_KM = 6371

# scheduled is the only status with outgoing edges
TRANSITIONS = {
    AppointmentStatus.scheduled.value: {
        AppointmentStatus.completed.value,
        AppointmentStatus.cancelled.value,
        AppointmentStatus.no_show.value,
    },
}


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def now_local() -> datetime:
    """Wall-clock time in the shop's timezone, naive like the stored dates."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def weekday_name(d: date) -> str:
    return WEEKDAYS[d.weekday()]


def day_window(availability: dict, d: date) -> Optional[Tuple[datetime, datetime]]:
    """Working window for a date, or None when the barber is off that day."""
    day = availability.get(weekday_name(d))
    if not day or not day.get("active"):
        return None
    return (
        datetime.combine(d, parse_hhmm(day["start"])),
        datetime.combine(d, parse_hhmm(day["end"])),
    )


def find_service(services: List[dict], service_id: str) -> Optional[dict]:
    for s in services or []:
        if s.get("id") == service_id:
            return s
    return None


def service_duration(service: dict) -> int:
    return service.get("duration") or settings.DEFAULT_SERVICE_MINUTES


def booking_price(service: dict, booking_type: str) -> float:
    fee = service.get("at_home_fee") or 0
    if booking_type == BookingType.at_home.value and fee:
        return service["price"] + fee
    return service["price"]


def service_id_for(name: str) -> str:
    normalized = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    slug = re.sub(r"\s+", "-", normalized.strip().lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    return f"{slug}-{int(_time.time() * 1000)}"


def appointment_start(appt: Appointment) -> datetime:
    return datetime.combine(appt.date, appt.time)


def appointment_interval(appt: Appointment) -> Tuple[datetime, datetime]:
    start = appointment_start(appt)
    return start, start + timedelta(minutes=appt.duration_minutes)


def find_conflict(
    start: datetime,
    end: datetime,
    appointments: Iterable[Appointment],
) -> Optional[Appointment]:
    for a in appointments:
        if a.status != AppointmentStatus.scheduled.value:
            continue
        a_start, a_end = appointment_interval(a)
        if overlaps(start, end, a_start, a_end):
            return a
    return None


def available_starts(
    availability: dict,
    on_date: date,
    duration_minutes: int,
    appointments: Iterable[Appointment],
    now: datetime,
    slot_minutes: Optional[int] = None,
) -> List[str]:
    window = day_window(availability, on_date)
    if window is None:
        return []

    work_start, work_end = window
    slot_delta = timedelta(minutes=slot_minutes or settings.SLOT_MINUTES)
    duration = timedelta(minutes=duration_minutes)
    appointments = list(appointments)

    available = []
    current = work_start
    while current + duration <= work_end:
        if current >= now and find_conflict(current, current + duration, appointments) is None:
            available.append(current.strftime("%H:%M"))
        current += slot_delta
    return available


def is_pending(appt: Appointment, now: datetime) -> bool:
    return appt.status == AppointmentStatus.scheduled.value and appointment_start(appt) < now


def past_appointments(appointments: Iterable[Appointment], now: datetime) -> List[Appointment]:
    """Anything no longer scheduled, plus scheduled ones whose start has passed. Newest first."""
    past = [
        a for a in appointments
        if a.status != AppointmentStatus.scheduled.value or appointment_start(a) < now
    ]
    past.sort(key=appointment_start, reverse=True)
    return past


def upcoming_appointments(appointments: Iterable[Appointment], now: datetime) -> List[Appointment]:
    upcoming = [
        a for a in appointments
        if a.status == AppointmentStatus.scheduled.value and appointment_start(a) >= now
    ]
    upcoming.sort(key=appointment_start)
    return upcoming


def filter_by_status(appointments: List[Appointment], status: str) -> List[Appointment]:
    if status == "all":
        return appointments
    return [a for a in appointments if a.status == status]


def transition(appt: Appointment, target: AppointmentStatus) -> None:
    allowed = TRANSITIONS.get(appt.status, set())
    if target.value not in allowed:
        raise InvalidTransitionError(appt.status, target.value)
    appt.status = target.value


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def barber_profile_complete(barber: Barber) -> bool:
    has_active_day = any(d.get("active") for d in (barber.availability or {}).values())
    return bool(
        barber.full_name
        and barber.phone
        and barber.address
        and barber.services
        and has_active_day
    )


def client_profile_complete(client: Client) -> bool:
    return bool(client.full_name and client.phone and client.address)


def add_rating(count: int, average: float, rating: int) -> Tuple[int, float]:
    new_count = count + 1
    return new_count, (average * count + rating) / new_count


def review_summary(reviews: List[Review]) -> dict:
    if not reviews:
        return {"average_rating": 0.0, "total_reviews": 0, "praise_counts": []}

    total = sum(r.rating for r in reviews)
    counts = Counter(p for r in reviews for p in (r.praises or []))
    return {
        "average_rating": total / len(reviews),
        "total_reviews": len(reviews),
        "praise_counts": [
            {"praise": praise, "count": count}
            for praise, count in counts.most_common()
        ],
    }
