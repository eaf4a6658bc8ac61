# barberbook/seed.py

"""Create the default admin and a sample shop.

Run with ``python -m barberbook.seed``. Safe to run more than once.
"""

import logging
from datetime import time

import click
from sqlmodel import Session, select

from .auth import hash_password
from .config import get_settings
from .db import Database
from .models import Service, Shop, ShopBarber, ShopHours, User
from .schemas import Weekday

logger = logging.getLogger(__name__)

# name -> (price, minutes)
SERVICES = {
    "Haircut": (150000, 30),
    "Beard trim": (100000, 20),
    "Haircut and beard": (200000, 45),
}

WEEK = {
    Weekday.monday: (time(9, 0), time(20, 0), False),
    Weekday.tuesday: (time(9, 0), time(20, 0), False),
    Weekday.wednesday: (time(9, 0), time(20, 0), False),
    Weekday.thursday: (time(9, 0), time(20, 0), False),
    Weekday.friday: (time(9, 0), time(14, 0), False),
    Weekday.saturday: (time(9, 0), time(20, 0), False),
    Weekday.sunday: (time(9, 0), time(20, 0), True),
}


def get_or_create_user(session: Session, name, email, password, role) -> User:
    user = session.exec(select(User).where(User.email == email)).first()
    if user is None:
        user = User(name=name, email=email, password_hash=hash_password(password), role=role)
        session.add(user)
        session.flush()
        logger.info("Created %s user %s", role, email)
    return user


def seed(session: Session, admin_email: str, admin_password: str, sample: bool = True) -> None:
    get_or_create_user(session, "Admin", admin_email, admin_password, "admin")

    if not sample or session.exec(select(Shop)).first() is not None:
        session.commit()
        return

    barber = get_or_create_user(session, "Sample Barber", "barber@example.com", "barber123", "barber")
    get_or_create_user(session, "Sample Customer", "customer@example.com", "customer123", "customer")

    shop = Shop(
        name="Modern Barber",
        description="Classic cuts and beard care",
        address="123 Main Street",
        phone="021-1234-5678",
        email="info@modernbarber.example.com",
        owner_id=barber.id,
    )
    session.add(shop)
    session.flush()

    for day, (opens, closes, closed) in WEEK.items():
        session.add(ShopHours(shop_id=shop.id, weekday=day.value, opens=opens, closes=closes, closed=closed))
    session.add(ShopBarber(shop_id=shop.id, user_id=barber.id))
    for name, (price, minutes) in SERVICES.items():
        session.add(Service(name=name, price=price, duration=minutes, shop_id=shop.id))

    session.commit()
    logger.info("Sample shop %s created", shop.id)


@click.command()
@click.option("--admin-email", default="admin@barber.com", show_default=True)
@click.option("--admin-password", default="admin123", show_default=True)
@click.option("--no-sample", is_flag=True, help="Only create the admin user.")
def main(admin_email, admin_password, no_sample):
    """Initialise the database and seed default data."""
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    db = Database(
        settings.DATABASE_URL,
        echo=settings.SQL_ECHO,
        busy_timeout=settings.SQLITE_BUSY_TIMEOUT,
    )
    try:
        db.create_all()
        with db.session() as session:
            seed(session, admin_email.strip().lower(), admin_password, sample=not no_sample)
    finally:
        db.close()
    click.echo("Database ready")


if __name__ == "__main__":
    main()
