# barberbook/routers/users_routes.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barberbook.auth import get_current_user, hash_password
from barberbook.db import get_session
from barberbook.models import User, utcnow
from barberbook.schemas import UserPublic, UserUpdate

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
)


@router.get("/profile", response_model=UserPublic)
def get_profile(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return session.get(User, current_user["id"])


@router.put("/profile", response_model=UserPublic)
def update_profile(
    changes: UserUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    db_user = session.get(User, current_user["id"])

    if changes.email is not None:
        email = changes.email.strip().lower()
        taken = session.exec(
            select(User).where(User.email == email).where(User.id != db_user.id)
        ).first()
        if taken is not None:
            raise HTTPException(status_code=409, detail="Email already registered")
        db_user.email = email

    if changes.name is not None:
        db_user.name = changes.name
    if changes.phone is not None:
        db_user.phone = changes.phone
    if changes.password is not None:
        db_user.password_hash = hash_password(changes.password)

    db_user.updated_at = utcnow()
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    return db_user
