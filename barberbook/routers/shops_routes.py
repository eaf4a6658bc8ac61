# barberbook/routers/shops_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barberbook.auth import get_current_user
from barberbook.db import get_session
from barberbook.deps import get_admin_user, is_admin, require_role
from barberbook.models import Service, Shop, ShopBarber, ShopHours, User, utcnow
from barberbook.schemas import (
    BarberPublic,
    OpeningHours,
    ServicePublic,
    ShopBarberAdd,
    ShopCreate,
    ShopDetail,
    ShopPublic,
    ShopUpdate,
    Weekday,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/shops",
    tags=["shops"],
)


def get_shop_or_404(session: Session, shop_id: int) -> Shop:
    shop = session.get(Shop, shop_id)
    if shop is None:
        raise HTTPException(status_code=404, detail="Shop not found")
    return shop


def require_owner(shop: Shop, current_user: dict):
    if not is_admin(current_user) and shop.owner_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")


def load_hours(session: Session, shop_id: int) -> OpeningHours:
    rows = session.exec(select(ShopHours).where(ShopHours.shop_id == shop_id)).all()
    return {
        Weekday(r.weekday): {"opens": r.opens, "closes": r.closes, "closed": r.closed}
        for r in rows
    }


def save_hours(session: Session, shop_id: int, hours: OpeningHours):
    # Replace the whole week; days left out are closed
    for row in session.exec(select(ShopHours).where(ShopHours.shop_id == shop_id)).all():
        session.delete(row)
    session.flush()

    for day in Weekday:
        h = hours.get(day)
        if h is None:
            continue
        session.add(ShopHours(
            shop_id=shop_id,
            weekday=day.value,
            opens=h.opens,
            closes=h.closes,
            closed=h.closed,
        ))


def shop_detail(session: Session, shop: Shop) -> dict:
    barbers = session.exec(
        select(User)
        .join(ShopBarber, ShopBarber.user_id == User.id)
        .where(ShopBarber.shop_id == shop.id)
        .where(User.role == "barber")
        .order_by(User.name)
    ).all()

    out = shop.model_dump()
    out["opening_hours"] = load_hours(session, shop.id)
    out["barbers"] = [BarberPublic.model_validate(b, from_attributes=True) for b in barbers]
    return out


@router.get("", response_model=List[ShopPublic])
def list_shops(session: Session = Depends(get_session)):
    return session.exec(select(Shop).order_by(Shop.name)).all()


@router.get("/{shop_id}", response_model=ShopDetail)
def get_shop(shop_id: int, session: Session = Depends(get_session)):
    shop = get_shop_or_404(session, shop_id)
    return shop_detail(session, shop)


@router.get("/{shop_id}/services", response_model=List[ServicePublic])
def list_shop_services(shop_id: int, session: Session = Depends(get_session)):
    get_shop_or_404(session, shop_id)
    return session.exec(
        select(Service).where(Service.shop_id == shop_id).order_by(Service.name)
    ).all()


@router.post("", response_model=ShopDetail, status_code=201)
def create_shop(
    data: ShopCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber", "admin")

    shop = Shop(
        **data.model_dump(exclude={"opening_hours"}),
        owner_id=current_user["id"],
    )
    session.add(shop)
    session.flush()  # fills shop.id

    save_hours(session, shop.id, data.opening_hours)

    # a barber who opens a shop works there
    if current_user["role"] == "barber":
        session.add(ShopBarber(shop_id=shop.id, user_id=current_user["id"]))

    session.commit()
    session.refresh(shop)
    logger.info("Shop %s created by user %s", shop.id, current_user["id"])
    return shop_detail(session, shop)


@router.put("/{shop_id}", response_model=ShopDetail)
def update_shop(
    shop_id: int,
    changes: ShopUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    shop = get_shop_or_404(session, shop_id)
    require_owner(shop, current_user)

    for field, value in changes.model_dump(exclude_unset=True, exclude={"opening_hours"}).items():
        if value is not None:
            setattr(shop, field, value)

    if changes.opening_hours is not None:
        save_hours(session, shop.id, changes.opening_hours)

    shop.updated_at = utcnow()
    session.add(shop)
    session.commit()
    session.refresh(shop)
    return shop_detail(session, shop)


@router.delete("/{shop_id}")
def delete_shop(
    shop_id: int,
    session: Session = Depends(get_session),
    admin: dict = Depends(get_admin_user),
):
    shop = get_shop_or_404(session, shop_id)
    session.delete(shop)
    session.commit()
    logger.info("Shop %s deleted by admin %s", shop_id, admin["id"])
    return {"message": "Shop deleted"}


@router.post("/{shop_id}/barbers", response_model=BarberPublic, status_code=201)
def add_barber(
    shop_id: int,
    body: ShopBarberAdd,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    shop = get_shop_or_404(session, shop_id)
    require_owner(shop, current_user)

    barber = session.get(User, body.user_id)
    if barber is None or barber.role != "barber":
        raise HTTPException(status_code=404, detail="Barber not found")

    session.add(ShopBarber(shop_id=shop.id, user_id=barber.id))
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Barber already works at this shop")

    return barber
