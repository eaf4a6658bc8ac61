# barberbook/routers/bookings_routes.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from barberbook import bookings
from barberbook.auth import get_current_user, get_app_settings
from barberbook.config import Settings
from barberbook.db import get_session
from barberbook.schemas import (
    BookingCreate,
    BookingDetail,
    BookingPublic,
    BookingStatus,
    BookingStatusUpdate,
)

router = APIRouter(
    prefix="/api/bookings",
    tags=["bookings"],
)


@router.post("", response_model=BookingPublic, status_code=201)
def create_booking(
    data: BookingCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return bookings.create_booking(session, current_user, data)


# declared before /{booking_id} so "user" is not read as an id
@router.get("/user", response_model=List[BookingDetail])
def list_my_bookings(
    status: Optional[BookingStatus] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return bookings.list_user_bookings(session, current_user, status)


@router.get("/shop/{shop_id}", response_model=List[BookingDetail])
def list_shop_bookings(
    shop_id: int,
    date: Optional[date] = None,
    barber_id: Optional[int] = None,
    status: Optional[BookingStatus] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return bookings.list_shop_bookings(
        session, current_user, shop_id,
        on_date=date, barber_id=barber_id, status=status,
    )


@router.get("/{booking_id}", response_model=BookingDetail)
def get_booking(
    booking_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return bookings.get_booking(session, current_user, booking_id)


@router.put("/{booking_id}/status", response_model=BookingPublic)
def update_booking_status(
    booking_id: int,
    body: BookingStatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
):
    return bookings.update_status(
        session, current_user, booking_id, body.status,
        enforce_transitions=settings.ENFORCE_STATUS_TRANSITIONS,
    )


@router.delete("/{booking_id}")
def delete_booking(
    booking_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    bookings.delete_booking(session, current_user, booking_id)
    return {"message": "Booking deleted"}
