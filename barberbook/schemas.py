# barberbook/schemas.py

import re
from pydantic import BaseModel, Field, field_validator
from enum import Enum
from datetime import datetime, date, time
from typing import List, Optional, Dict

HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

PRAISE_OPTIONS = [
    "Ótimo Corte",
    "Bom de Papo",
    "Mão Leve",
    "Ambiente Limpo",
    "Pontualidade",
    "Estiloso",
]


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    barber = "barber"
    client = "client"


class AppointmentStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no-show"


class BookingType(str, Enum):
    in_shop = "inShop"
    at_home = "atHome"


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole
    email_verified: bool
    auth_provider: str


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole


class GoogleSignIn(BaseModel):
    id_token: str
    role: UserRole = UserRole.client


class VerifyEmail(BaseModel):
    token: str


class GeoPoint(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class Address(BaseModel):
    cep: str
    street: str
    number: str
    complement: Optional[str] = None
    neighborhood: str
    city: str
    state: str
    full_address: str = ""

    def display(self) -> str:
        if self.full_address:
            return self.full_address
        return f"{self.street}, {self.number}, {self.neighborhood}, {self.city} - {self.state}"


class DayAvailability(BaseModel):
    active: bool
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def check_hhmm(cls, v: str) -> str:
        if not HHMM_RE.match(v):
            raise ValueError("time must be in HH:MM format")
        return v


class ServiceIn(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(gt=0)
    at_home_fee: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, gt=0, le=480)


class Service(ServiceIn):
    id: str


class BarberProfileUpdate(BaseModel):
    full_name: str
    phone: str
    photo_url: Optional[str] = None
    cover_photo_url: Optional[str] = None
    description: Optional[str] = None
    address: Optional[Address] = None
    coordinates: Optional[GeoPoint] = None
    availability: Optional[Dict[str, DayAvailability]] = None
    services: Optional[List[Service]] = None
    barbershop_photos: Optional[List[str]] = None


class BarberPublic(BaseModel):
    id: int
    email: str
    full_name: str
    phone: str
    profile_complete: bool
    photo_url: Optional[str] = None
    cover_photo_url: Optional[str] = None
    description: Optional[str] = None
    address: Optional[Address] = None
    coordinates: Optional[GeoPoint] = None
    availability: Dict[str, DayAvailability]
    services: List[Service]
    barbershop_photos: List[str]
    review_count: int
    rating_average: float
    distance_km: Optional[float] = None


class ClientProfileUpdate(BaseModel):
    full_name: str
    phone: str
    address: Optional[Address] = None
    coordinates: Optional[GeoPoint] = None


class ClientPublic(BaseModel):
    id: int
    email: str
    full_name: str
    phone: str
    address: Optional[Address] = None
    coordinates: Optional[GeoPoint] = None
    profile_complete: bool


class ClientAppointmentCreate(BaseModel):
    service_id: str
    type: BookingType = BookingType.in_shop
    date: date
    time: time
    client_name: Optional[str] = None


class AppointmentPublic(BaseModel):
    id: int
    barber_id: int
    barber_name: Optional[str] = None
    client_id: int
    client_name: str
    client_coordinates: Optional[GeoPoint] = None
    client_full_address: Optional[str] = None
    service_id: str
    service_name: str
    service_price: float
    duration_minutes: int
    type: BookingType
    date: date
    time: time
    created_at: datetime
    status: AppointmentStatus
    reviewed: bool
    pending: bool = False


class AvailabilityResponse(BaseModel):
    barber_id: int
    date: date
    service_id: Optional[str] = None
    available_starts: List[str]


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    praises: List[str] = Field(default_factory=list)

    @field_validator("praises")
    @classmethod
    def check_praises(cls, v: List[str]) -> List[str]:
        unknown = [p for p in v if p not in PRAISE_OPTIONS]
        if unknown:
            raise ValueError(f"unknown praises: {', '.join(unknown)}")
        # keep order, drop repeats
        return list(dict.fromkeys(v))


class ReviewReply(BaseModel):
    reply: str = Field(min_length=1, max_length=1000)


class ReviewPublic(BaseModel):
    id: int
    barber_id: int
    client_id: int
    client_name: str
    appointment_id: int
    rating: int
    comment: Optional[str] = None
    praises: List[str]
    reply: Optional[str] = None
    replied_at: Optional[datetime] = None
    created_at: datetime


class PraiseCount(BaseModel):
    praise: str
    count: int


class ReviewSummary(BaseModel):
    average_rating: float
    total_reviews: int
    praise_counts: List[PraiseCount]


class BioRequest(BaseModel):
    keywords: str = Field(min_length=1, max_length=500)


class BioResponse(BaseModel):
    bio: str


class ReminderResponse(BaseModel):
    reminder_text: str


class TravelInfo(BaseModel):
    distance: str
    duration: str


class CepLookup(BaseModel):
    cep: str
    street: str
    neighborhood: str
    city: str
    state: str
