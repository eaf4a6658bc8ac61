# barberbook/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .db import Database
from .errors import BookingError, Unauthorized
from .routers import (
    auth_routes,
    barbers_routes,
    bookings_routes,
    services_routes,
    shops_routes,
    users_routes,
)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = Database(
            settings.DATABASE_URL,
            echo=settings.SQL_ECHO,
            busy_timeout=settings.SQLITE_BUSY_TIMEOUT,
        )
        db.create_all()
        app.state.db = db
        try:
            yield
        finally:
            db.close()

    app = FastAPI(title="barberbook", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    app.include_router(auth_routes.router)
    app.include_router(users_routes.router)
    app.include_router(shops_routes.router)
    app.include_router(services_routes.router)
    app.include_router(barbers_routes.router)
    app.include_router(bookings_routes.router)

    return app


app = create_app()
