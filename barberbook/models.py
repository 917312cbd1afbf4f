# barberbook/models.py

from typing import Optional, List, Dict, Any
from datetime import datetime, date as Date, time as Time

from sqlalchemy import Index, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


def default_availability() -> Dict[str, Dict[str, Any]]:
    return {
        "monday": {"active": False, "start": "09:00", "end": "18:00"},
        "tuesday": {"active": True, "start": "09:00", "end": "18:00"},
        "wednesday": {"active": True, "start": "09:00", "end": "18:00"},
        "thursday": {"active": True, "start": "09:00", "end": "18:00"},
        "friday": {"active": True, "start": "09:00", "end": "18:00"},
        "saturday": {"active": True, "start": "10:00", "end": "20:00"},
        "sunday": {"active": False, "start": "09:00", "end": "18:00"},
    }


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: Optional[str] = None  # None for Google-only accounts
    role: str  # barber or client
    email_verified: bool = False
    auth_provider: str = "password"  # password or google
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Barber(SQLModel, table=True):
    user_id: int = Field(foreign_key="user.id", primary_key=True)
    email: str
    full_name: str = ""
    phone: str = ""
    profile_complete: bool = Field(default=False, index=True)
    photo_url: Optional[str] = None
    cover_photo_url: Optional[str] = None
    description: Optional[str] = None
    address: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    availability: Dict[str, Any] = Field(default_factory=default_availability, sa_column=Column(JSON))
    services: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    barbershop_photos: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    review_count: int = 0
    rating_average: float = 0.0


class Client(SQLModel, table=True):
    user_id: int = Field(foreign_key="user.id", primary_key=True)
    email: str
    full_name: str = ""
    phone: str = ""
    address: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    profile_complete: bool = False


class Appointment(SQLModel, table=True):
    __table_args__ = (
        # one scheduled booking per barber and start; cancelled rows free the slot
        Index(
            "uq_barber_scheduled_start",
            "barber_id",
            "date",
            "time",
            unique=True,
            sqlite_where=text("status = 'scheduled'"),
            postgresql_where=text("status = 'scheduled'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    barber_id: int = Field(foreign_key="barber.user_id", index=True)
    client_id: int = Field(foreign_key="user.id", index=True)
    client_name: str
    client_latitude: Optional[float] = None
    client_longitude: Optional[float] = None
    client_full_address: Optional[str] = None

    service_id: str
    service_name: str
    service_price: float
    duration_minutes: int
    type: str = "inShop"  # inShop or atHome

    date: Date = Field(index=True)
    time: Time
    created_at: datetime = Field(default_factory=datetime.utcnow)
    status: str = "scheduled"
    reviewed: bool = False


class Review(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    barber_id: int = Field(foreign_key="barber.user_id", index=True)
    client_id: int = Field(foreign_key="user.id")
    client_name: str
    appointment_id: int = Field(foreign_key="appointment.id", unique=True)
    rating: int
    comment: Optional[str] = None
    praises: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    reply: Optional[str] = None
    replied_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
