# barberbook/models.py

from typing import Optional
from datetime import datetime, timezone, date as Date, time

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    phone: str = ""
    password_hash: str
    role: str  # customer, barber or admin

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Shop(SQLModel, table=True):
    __tablename__ = "shops"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    instagram: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    owner_id: int = Field(foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ShopHours(SQLModel, table=True):
    __tablename__ = "shop_hours"

    shop_id: int = Field(foreign_key="shops.id", primary_key=True, ondelete="CASCADE")
    weekday: str = Field(primary_key=True)  # Weekday value, "monday" ... "sunday"
    opens: time
    closes: time
    closed: bool = False


class ShopBarber(SQLModel, table=True):
    __tablename__ = "shop_barbers"
    __table_args__ = (
        UniqueConstraint("shop_id", "user_id", name="uq_shop_barber"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    shop_id: int = Field(foreign_key="shops.id", index=True, ondelete="CASCADE")
    user_id: int = Field(foreign_key="users.id", index=True)


class Service(SQLModel, table=True):
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_services_price"),
        CheckConstraint("duration > 0", name="ck_services_duration"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: str = ""
    price: float
    duration: int  # minutes
    shop_id: int = Field(foreign_key="shops.id", index=True, ondelete="CASCADE")
    image_url: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_bookings_interval"),
        CheckConstraint("total_price >= 0", name="ck_bookings_total_price"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", index=True)
    barber_id: int = Field(foreign_key="users.id", index=True)
    shop_id: int = Field(foreign_key="shops.id", index=True, ondelete="CASCADE")
    service_id: int = Field(foreign_key="services.id", index=True)

    booking_date: Date = Field(index=True)
    start_time: time
    end_time: time

    status: str = "pending"
    total_price: float = 0
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class BarberDayLock(SQLModel, table=True):
    """One row per barber and day. Writers bump ``version`` to serialise
    booking changes for that barber on that day."""

    __tablename__ = "barber_day_locks"

    barber_id: int = Field(foreign_key="users.id", primary_key=True)
    day: Date = Field(primary_key=True)
    version: int = 1
