from datetime import date, time, timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from barberbook.auth import hash_password, token_for
from barberbook.config import Settings
from barberbook.main import create_app
from barberbook.models import Service, Shop, ShopBarber, ShopHours, User
from barberbook.schemas import Weekday

PASSWORD = "password123"
PASSWORD_HASH = hash_password(PASSWORD)

DAY = date(2030, 6, 3)
CLOSED_DAY = DAY + timedelta(days=1)


def add_user(session, name, email, role):
    user = User(name=name, email=email, phone="0912", password_hash=PASSWORD_HASH, role=role)
    session.add(user)
    session.flush()
    return user


def add_world(session, settings):
    """Users, one shop with hours, one service.

    owner  - barber who owns the shop and works there
    barber - barber attached to the shop
    stranger_barber - barber with no link to the shop
    """
    admin = add_user(session, "Admin", "admin@test.com", "admin")
    owner = add_user(session, "Owner", "owner@test.com", "barber")
    barber = add_user(session, "Barber", "barber@test.com", "barber")
    stranger_barber = add_user(session, "Stranger", "stranger@test.com", "barber")
    customer = add_user(session, "Customer", "customer@test.com", "customer")
    other_customer = add_user(session, "Other", "other@test.com", "customer")

    shop = Shop(name="Fade Factory", owner_id=owner.id)
    session.add(shop)
    session.flush()

    for day in Weekday:
        closed = day == Weekday.of(CLOSED_DAY)
        session.add(ShopHours(shop_id=shop.id, weekday=day.value, opens=time(9, 0), closes=time(12, 0), closed=closed))
    session.add(ShopBarber(shop_id=shop.id, user_id=owner.id))
    session.add(ShopBarber(shop_id=shop.id, user_id=barber.id))

    service = Service(name="Haircut", price=25, duration=30, shop_id=shop.id)
    session.add(service)
    session.commit()

    users = {
        "admin": admin,
        "owner": owner,
        "barber": barber,
        "stranger_barber": stranger_barber,
        "customer": customer,
        "other_customer": other_customer,
    }
    world = SimpleNamespace(shop_id=shop.id, service_id=service.id, ids={}, headers={}, callers={})
    for key, user in users.items():
        world.ids[key] = user.id
        world.headers[key] = {"Authorization": f"Bearer {token_for(user, settings)}"}
        world.callers[key] = {"id": user.id, "email": user.email, "name": user.name, "role": user.role}
    return world


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client, app):
    return app.state.db


@pytest.fixture
def world(db, settings):
    with db.session() as session:
        return add_world(session, settings)


@pytest.fixture
def book(client, world):
    """Create a booking as the customer with barber ``barber``; returns the response."""

    def _book(start, end, who="customer", barber="barber", on=DAY, **extra):
        payload = {
            "barber_id": world.ids[barber],
            "shop_id": world.shop_id,
            "service_id": world.service_id,
            "booking_date": on.isoformat(),
            "start_time": start,
            "end_time": end,
            "total_price": 25,
        }
        payload.update(extra)
        return client.post("/api/bookings", json=payload, headers=world.headers[who])

    return _book
