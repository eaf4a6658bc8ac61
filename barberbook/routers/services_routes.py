# barberbook/routers/services_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barberbook.auth import get_current_user
from barberbook.bookings import is_shop_barber, is_shop_owner
from barberbook.db import get_session
from barberbook.deps import is_admin
from barberbook.models import Booking, Service, Shop, ShopBarber, User, utcnow
from barberbook.schemas import (
    PopularService,
    ServiceCreate,
    ServicePublic,
    ServiceUpdate,
    ServiceWithShop,
)

router = APIRouter(
    prefix="/api/services",
    tags=["services"],
)

POPULAR_LIMIT = 10


def can_edit_services(session: Session, current_user: dict, shop_id: int) -> bool:
    return (
        is_admin(current_user)
        or is_shop_owner(session, current_user["id"], shop_id)
        or is_shop_barber(session, current_user["id"], shop_id)
    )


def get_service_or_404(session: Session, service_id: int) -> Service:
    service = session.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.get("", response_model=List[ServicePublic])
def list_services(session: Session = Depends(get_session)):
    return session.exec(select(Service).order_by(Service.name)).all()


@router.get("/popular", response_model=List[PopularService])
def popular_services(session: Session = Depends(get_session)):
    booking_count = func.count(Booking.id).label("booking_count")
    rows = session.exec(
        select(Service, Shop.name, booking_count)
        .join(Shop, Service.shop_id == Shop.id)
        .outerjoin(Booking, Booking.service_id == Service.id)
        .group_by(Service.id, Shop.name)
        .order_by(booking_count.desc(), Service.id)
        .limit(POPULAR_LIMIT)
    ).all()

    return [
        {**service.model_dump(), "shop_name": shop_name, "booking_count": count}
        for service, shop_name, count in rows
    ]


@router.get("/barber/{barber_id}", response_model=List[ServiceWithShop])
def services_by_barber(barber_id: int, session: Session = Depends(get_session)):
    barber = session.get(User, barber_id)
    if barber is None or barber.role != "barber":
        raise HTTPException(status_code=404, detail="Barber not found")

    rows = session.exec(
        select(Service, Shop.name)
        .join(Shop, Service.shop_id == Shop.id)
        .join(ShopBarber, ShopBarber.shop_id == Shop.id)
        .where(ShopBarber.user_id == barber_id)
        .order_by(Service.shop_id, Service.name)
    ).all()

    return [{**service.model_dump(), "shop_name": shop_name} for service, shop_name in rows]


@router.get("/{service_id}", response_model=ServicePublic)
def get_service(service_id: int, session: Session = Depends(get_session)):
    return get_service_or_404(session, service_id)


@router.post("", response_model=ServicePublic, status_code=201)
def create_service(
    data: ServiceCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if session.get(Shop, data.shop_id) is None:
        raise HTTPException(status_code=404, detail="Shop not found")
    if not can_edit_services(session, current_user, data.shop_id):
        raise HTTPException(status_code=403, detail="Forbidden")

    service = Service(**data.model_dump())
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.put("/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    changes: ServiceUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    service = get_service_or_404(session, service_id)
    if not can_edit_services(session, current_user, service.shop_id):
        raise HTTPException(status_code=403, detail="Forbidden")

    for field, value in changes.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(service, field, value)
    service.updated_at = utcnow()

    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.delete("/{service_id}")
def delete_service(
    service_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    service = get_service_or_404(session, service_id)
    # barbers may edit services but only the owner removes them
    if not is_admin(current_user) and not is_shop_owner(session, current_user["id"], service.shop_id):
        raise HTTPException(status_code=403, detail="Forbidden")

    # bookings keep their service; it can only go once nothing references it
    booked = session.exec(select(Booking.id).where(Booking.service_id == service_id)).first()
    if booked is not None:
        raise HTTPException(status_code=409, detail="Service has bookings")

    session.delete(service)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Service has bookings")
    return {"message": "Service deleted"}
