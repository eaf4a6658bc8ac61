# barberbook/bookings.py

"""
Booking lifecycle: creation, reads, status changes and admin deletion.

Every write that can make a booking active runs behind the barber/day lock
from ``core.lock_barber_day`` so that the availability check and the write
commit together.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import aliased
from sqlmodel import Session, select

from .core import is_available, lock_barber_day
from .errors import Forbidden, InternalError, InvalidTransition, NotFound, SlotUnavailable, ValidationError
from .models import Booking, Service, Shop, ShopBarber, User, utcnow
from .schemas import BookingCreate, BookingStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.cancelled, BookingStatus.completed},
    BookingStatus.confirmed: {BookingStatus.cancelled, BookingStatus.completed},
    BookingStatus.cancelled: set(),
    BookingStatus.completed: set(),
}


# ---------- authorization ----------

def is_shop_owner(session: Session, user_id: int, shop_id: int) -> bool:
    shop = session.get(Shop, shop_id)
    return shop is not None and shop.owner_id == user_id


def is_shop_barber(session: Session, user_id: int, shop_id: int) -> bool:
    row = session.exec(
        select(ShopBarber)
        .where(ShopBarber.shop_id == shop_id)
        .where(ShopBarber.user_id == user_id)
    ).first()
    return row is not None


def can_view_booking(caller: dict, booking: Booking) -> bool:
    return (
        caller["id"] in (booking.user_id, booking.barber_id)
        or caller["role"] == "admin"
    )


def can_manage_booking(session: Session, caller: dict, booking: Booking) -> bool:
    return (
        caller["id"] == booking.barber_id
        or caller["role"] == "admin"
        or is_shop_owner(session, caller["id"], booking.shop_id)
    )


def can_view_shop_bookings(session: Session, caller: dict, shop_id: int) -> bool:
    return (
        caller["role"] == "admin"
        or is_shop_owner(session, caller["id"], shop_id)
        or is_shop_barber(session, caller["id"], shop_id)
    )


# ---------- create ----------

def _check_references(session: Session, data: BookingCreate) -> None:
    shop = session.get(Shop, data.shop_id)
    if shop is None:
        raise NotFound("Shop not found")

    service = session.get(Service, data.service_id)
    if service is None:
        raise NotFound("Service not found")
    if service.shop_id != shop.id:
        raise ValidationError("Service is not offered by this shop")

    barber = session.get(User, data.barber_id)
    if barber is None or barber.role != "barber":
        raise NotFound("Barber not found")
    if not is_shop_barber(session, barber.id, shop.id):
        raise ValidationError("Barber does not work at this shop")


def _commit(session: Session, action: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Storage failure during %s", action)
        raise InternalError("Storage failure")


def create_booking(session: Session, caller: dict, data: BookingCreate) -> Booking:
    # 1) Validate the request
    if data.start_time >= data.end_time:
        raise ValidationError("start_time must be before end_time")
    if data.total_price < 0:
        raise ValidationError("total_price cannot be negative")
    _check_references(session, data)

    # 2) Check and insert in one transaction, holding the barber's day
    try:
        lock_barber_day(session, data.barber_id, data.booking_date)

        if not is_available(session, data.barber_id, data.booking_date, data.start_time, data.end_time):
            session.rollback()
            logger.warning(
                "Slot taken: barber=%s date=%s %s-%s",
                data.barber_id, data.booking_date, data.start_time, data.end_time,
            )
            raise SlotUnavailable("Barber is not available at this time")

        now = utcnow()
        booking = Booking(
            user_id=caller["id"],
            barber_id=data.barber_id,
            shop_id=data.shop_id,
            service_id=data.service_id,
            booking_date=data.booking_date,
            start_time=data.start_time,
            end_time=data.end_time,
            status=BookingStatus.pending.value,
            total_price=data.total_price,
            notes=data.notes or None,
            created_at=now,
            updated_at=now,
        )
        session.add(booking)
        session.flush()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Storage failure while creating booking")
        raise InternalError("Storage failure")

    _commit(session, "booking create")
    session.refresh(booking)

    logger.info(
        "Booking %s created: customer=%s barber=%s date=%s %s-%s",
        booking.id, booking.user_id, booking.barber_id,
        booking.booking_date, booking.start_time, booking.end_time,
    )
    return booking


# ---------- reads ----------

def _detail_query():
    customer = aliased(User)
    barber = aliased(User)
    return (
        select(
            Booking,
            customer.name,
            customer.phone,
            barber.name,
            Shop.name,
            Service.name,
        )
        .join(customer, Booking.user_id == customer.id)
        .join(barber, Booking.barber_id == barber.id)
        .join(Shop, Booking.shop_id == Shop.id)
        .join(Service, Booking.service_id == Service.id)
    )


def _as_detail(row, with_phone: bool = False) -> dict:
    booking, user_name, user_phone, barber_name, shop_name, service_name = row
    out = booking.model_dump()
    out.update(
        user_name=user_name,
        barber_name=barber_name,
        shop_name=shop_name,
        service_name=service_name,
        user_phone=user_phone if with_phone else None,
    )
    return out


def get_booking(session: Session, caller: dict, booking_id: int) -> dict:
    row = session.exec(_detail_query().where(Booking.id == booking_id)).first()
    if row is None:
        raise NotFound("Booking not found")

    if not can_view_booking(caller, row[0]):
        logger.warning("User %s denied access to booking %s", caller["id"], booking_id)
        raise Forbidden("Forbidden")

    return _as_detail(row)


def list_user_bookings(
    session: Session,
    caller: dict,
    status: Optional[BookingStatus] = None,
) -> List[dict]:
    stmt = _detail_query().where(Booking.user_id == caller["id"])
    if status is not None:
        stmt = stmt.where(Booking.status == status.value)
    stmt = stmt.order_by(Booking.booking_date.desc(), Booking.start_time.asc())

    return [_as_detail(row) for row in session.exec(stmt).all()]


def list_shop_bookings(
    session: Session,
    caller: dict,
    shop_id: int,
    on_date: Optional[date] = None,
    barber_id: Optional[int] = None,
    status: Optional[BookingStatus] = None,
) -> List[dict]:
    if session.get(Shop, shop_id) is None:
        raise NotFound("Shop not found")

    if not can_view_shop_bookings(session, caller, shop_id):
        logger.warning("User %s denied access to bookings of shop %s", caller["id"], shop_id)
        raise Forbidden("Forbidden")

    stmt = _detail_query().where(Booking.shop_id == shop_id)
    if on_date is not None:
        stmt = stmt.where(Booking.booking_date == on_date)
    if barber_id is not None:
        stmt = stmt.where(Booking.barber_id == barber_id)
    if status is not None:
        stmt = stmt.where(Booking.status == status.value)
    stmt = stmt.order_by(Booking.booking_date.asc(), Booking.start_time.asc())

    return [_as_detail(row, with_phone=True) for row in session.exec(stmt).all()]


# ---------- status ----------

def update_status(
    session: Session,
    caller: dict,
    booking_id: int,
    new_status: BookingStatus,
    enforce_transitions: bool = False,
) -> Booking:
    # 1) Find the booking
    booking = session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")

    # 2) Authorization: assigned barber, shop owner or admin
    if not can_manage_booking(session, caller, booking):
        logger.warning("User %s denied status change on booking %s", caller["id"], booking_id)
        raise Forbidden("Forbidden")

    # 3) Moves to an active status hold the barber's day and decide on a fresh read
    if new_status != BookingStatus.cancelled:
        try:
            lock_barber_day(session, booking.barber_id, booking.booking_date)
            booking = session.get(Booking, booking_id, with_for_update=True, populate_existing=True)
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Storage failure while locking booking %s", booking_id)
            raise InternalError("Storage failure")
        if booking is None:
            session.rollback()
            raise NotFound("Booking not found")

    current = BookingStatus(booking.status)
    if enforce_transitions and new_status != current and new_status not in ALLOWED_TRANSITIONS[current]:
        session.rollback()
        raise InvalidTransition(f"Cannot change status from {current.value} to {new_status.value}")

    # 4) Re-activating a cancelled booking must not create an overlap
    if current == BookingStatus.cancelled and new_status != BookingStatus.cancelled:
        try:
            free = is_available(
                session, booking.barber_id, booking.booking_date,
                booking.start_time, booking.end_time,
                exclude_booking_id=booking.id,
            )
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Storage failure while re-checking booking %s", booking_id)
            raise InternalError("Storage failure")
        if not free:
            session.rollback()
            logger.warning("Booking %s cannot be re-activated: slot taken", booking_id)
            raise SlotUnavailable("Barber is not available at this time")

    # 5) Persist
    booking.status = new_status.value
    booking.updated_at = utcnow()
    session.add(booking)
    _commit(session, "status update")
    session.refresh(booking)

    logger.info(
        "Booking %s status %s -> %s by user %s",
        booking.id, current.value, new_status.value, caller["id"],
    )
    return booking


# ---------- delete ----------

def delete_booking(session: Session, caller: dict, booking_id: int) -> None:
    if caller["role"] != "admin":
        raise Forbidden("Forbidden")

    booking = session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")

    session.delete(booking)
    _commit(session, "booking delete")
    logger.info("Booking %s deleted by admin %s", booking_id, caller["id"])
