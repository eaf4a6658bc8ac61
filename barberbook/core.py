# barberbook/core.py

"""
Slot availability for barbers.

Intervals are half-open: ``[start, end)``. Two bookings that touch (one ends
exactly when the next starts) do not overlap.
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from .models import BarberDayLock, Booking

CANCELLED = "cancelled"

_UPSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    return a_start < b_end and a_end > b_start


def active_bookings(
    session: Session,
    barber_id: int,
    on_date: date,
    exclude_booking_id: Optional[int] = None,
) -> List[Booking]:
    stmt = (
        select(Booking)
        .where(Booking.barber_id == barber_id)
        .where(Booking.booking_date == on_date)
        .where(Booking.status != CANCELLED)
    )
    if exclude_booking_id is not None:
        stmt = stmt.where(Booking.id != exclude_booking_id)
    return list(session.exec(stmt).all())


def is_available(
    session: Session,
    barber_id: int,
    on_date: date,
    start: time,
    end: time,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """True when no active booking of the barber on that date overlaps
    ``[start, end)``. Callers guarantee ``start < end``."""
    for b in active_bookings(session, barber_id, on_date, exclude_booking_id):
        if overlaps(start, end, b.start_time, b.end_time):
            return False
    return True


def lock_barber_day(session: Session, barber_id: int, on_date: date) -> None:
    """Take the write lock for one barber's day inside the current transaction.

    The lock row is inserted on first use and bumped afterwards. Concurrent
    transactions locking the same key wait here until the holder commits or
    rolls back.
    """
    conn = session.connection()
    insert = _UPSERTS.get(conn.dialect.name)
    if insert is None:
        raise RuntimeError(f"Unsupported database backend: {conn.dialect.name}")

    table = BarberDayLock.__table__
    stmt = insert(table).values(barber_id=barber_id, day=on_date, version=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.barber_id, table.c.day],
        set_={"version": table.c.version + 1},
    )
    conn.execute(stmt)


def free_starts(
    session: Session,
    barber_id: int,
    on_date: date,
    opens: time,
    closes: time,
    duration_minutes: int,
    step_minutes: int,
) -> List[str]:
    """Start times (``HH:MM``) at which a service of ``duration_minutes`` fits
    inside opening hours without hitting an active booking."""
    bookings = active_bookings(session, barber_id, on_date)

    work_start = datetime.combine(on_date, opens)
    work_end = datetime.combine(on_date, closes)
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=step_minutes)

    available = []
    current = work_start
    while current + duration <= work_end:
        slot_start = current.time()
        slot_end = (current + duration).time()

        booked = False
        for b in bookings:
            if overlaps(slot_start, slot_end, b.start_time, b.end_time):
                booked = True
                break

        if not booked:
            available.append(slot_start.strftime("%H:%M"))
        current += step

    return available
