# barberbook/routers/barbers_routes.py

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from barberbook.auth import get_app_settings
from barberbook.bookings import is_shop_barber
from barberbook.config import Settings
from barberbook.core import free_starts
from barberbook.db import get_session
from barberbook.models import Service, Shop, ShopHours, User
from barberbook.schemas import AvailabilityResponse, Weekday

router = APIRouter(
    prefix="/api/barbers",
    tags=["barbers"],
)


@router.get("/{barber_id}/availability", response_model=AvailabilityResponse)
def barber_availability(
    barber_id: int,
    shop_id: int,
    service_id: int,
    date: date,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    # 1) Lookup barber, shop and service
    barber = session.get(User, barber_id)
    if barber is None or barber.role != "barber":
        raise HTTPException(status_code=404, detail="Barber not found")

    shop = session.get(Shop, shop_id)
    if shop is None or not is_shop_barber(session, barber_id, shop_id):
        raise HTTPException(status_code=404, detail="Barber does not work at this shop")

    service = session.get(Service, service_id)
    if service is None or service.shop_id != shop_id:
        raise HTTPException(status_code=404, detail="Service not found")

    empty = {"barber_id": barber_id, "shop_id": shop_id, "date": date, "available_starts": []}

    # 2) Opening hours for that weekday; missing means closed
    hours = session.get(ShopHours, (shop_id, Weekday.of(date).value))
    if hours is None or hours.closed:
        return empty

    # 3) Step through the day, skipping active bookings
    starts = free_starts(
        session,
        barber_id,
        date,
        hours.opens,
        hours.closes,
        duration_minutes=service.duration,
        step_minutes=settings.SLOT_MINUTES,
    )
    return {**empty, "available_starts": starts}
