# barberbook/schemas.py

from datetime import datetime, date, time
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class UserRole(str, Enum):
    customer = "customer"
    barber = "barber"
    admin = "admin"


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class Weekday(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]  # 0=Mon ... 6=Sun


# ---------- users ----------

class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: str
    password: str = Field(min_length=8, max_length=72)
    phone: str = ""
    role: UserRole = UserRole.customer


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=72)


class UserPublic(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    role: UserRole


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    user: UserPublic
    access_token: str
    token_type: str = "bearer"


# ---------- shops ----------

class DayHours(BaseModel):
    opens: time = time(9, 0)
    closes: time = time(20, 0)
    closed: bool = False

    @model_validator(mode="after")
    def check_window(self):
        if not self.closed and self.opens >= self.closes:
            raise ValueError("opens must be before closes")
        return self


OpeningHours = Dict[Weekday, DayHours]


class ShopCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    instagram: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    opening_hours: OpeningHours = Field(default_factory=dict)


class ShopUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    instagram: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    opening_hours: Optional[OpeningHours] = None


class BarberPublic(BaseModel):
    id: int
    name: str
    email: str
    phone: str


class ShopPublic(BaseModel):
    id: int
    name: str
    description: str
    address: str
    phone: str
    email: str
    instagram: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    owner_id: int
    created_at: datetime
    updated_at: datetime


class ShopDetail(ShopPublic):
    opening_hours: OpeningHours
    barbers: List[BarberPublic]


class ShopBarberAdd(BaseModel):
    user_id: int


# ---------- services ----------

class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = ""
    price: float = Field(ge=0)
    duration: int = Field(gt=0)  # minutes
    shop_id: int
    image_url: Optional[str] = None


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, gt=0)
    image_url: Optional[str] = None


class ServicePublic(BaseModel):
    id: int
    name: str
    description: str
    price: float
    duration: int
    shop_id: int
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ServiceWithShop(ServicePublic):
    shop_name: str


class PopularService(ServiceWithShop):
    booking_count: int


# ---------- bookings ----------

class BookingCreate(BaseModel):
    barber_id: int
    shop_id: int
    service_id: int
    booking_date: date
    start_time: time
    end_time: time
    total_price: float = 0
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_time(cls, value: time) -> time:
        if value.tzinfo is not None:
            raise ValueError("times are local to the shop and must not carry a UTC offset")
        return value


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingPublic(BaseModel):
    id: int
    user_id: int
    barber_id: int
    shop_id: int
    service_id: int
    booking_date: date
    start_time: time
    end_time: time
    status: BookingStatus
    total_price: float
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BookingDetail(BookingPublic):
    user_name: str
    barber_name: str
    shop_name: str
    service_name: str
    user_phone: Optional[str] = None


class AvailabilityResponse(BaseModel):
    barber_id: int
    shop_id: int
    date: date
    available_starts: List[str]
