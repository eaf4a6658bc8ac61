# barberbook/routers/auth_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from barberbook.auth import get_app_settings, hash_password, token_for, verify_password
from barberbook.config import Settings
from barberbook.db import get_session
from barberbook.models import User
from barberbook.schemas import AuthResponse, UserCreate, UserPublic, UserRole

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/users",
    tags=["auth"],
)


@router.post("/register", status_code=201, response_model=AuthResponse)
def register(
    user: UserCreate,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    # 1) Admins are created by the seed command only
    if user.role == UserRole.admin:
        raise HTTPException(status_code=403, detail="Cannot register as admin")

    # 2) Check if email already exists
    email = user.email.strip().lower()
    existing = session.exec(
        select(User).where(User.email == email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 3) Create user in DB
    db_user = User(
        name=user.name,
        email=email,
        phone=user.phone,
        password_hash=hash_password(user.password),
        role=user.role.value,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id
    logger.info("Registered user %s as %s", db_user.id, db_user.role)

    return {
        "user": UserPublic.model_validate(db_user, from_attributes=True),
        "access_token": token_for(db_user, settings),
    }


@router.post("/login", response_model=AuthResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    email = form_data.username.strip().lower()
    password = form_data.password

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {
        "user": UserPublic.model_validate(user, from_attributes=True),
        "access_token": token_for(user, settings),
    }
