# barberbook/db.py

import logging

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine for one running application.

    Created when the app starts and disposed when it stops. Request handlers
    get sessions from it through ``get_session``.
    """

    def __init__(self, url: str, echo: bool = False, busy_timeout: float = 30.0):
        self.url = make_url(url)
        kwargs = {"echo": echo}

        if self.is_sqlite:
            # required for SQLite + FastAPI, plus a busy timeout so writers queue
            kwargs["connect_args"] = {"check_same_thread": False, "timeout": busy_timeout}
            if self.url.database in (None, "", ":memory:"):
                kwargs["poolclass"] = StaticPool

        self.engine = create_engine(url, **kwargs)

        if self.is_sqlite:
            _use_immediate_transactions(self.engine)

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == "sqlite"

    def create_all(self) -> None:
        # models must be imported so their tables are registered
        from barberbook import models  # noqa: F401

        SQLModel.metadata.create_all(self.engine)
        logger.info("Schema ready on %s", self.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        return Session(self.engine)

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")


def _use_immediate_transactions(engine) -> None:
    # pysqlite defers BEGIN until the first write; take the write lock up front
    # so that check-then-insert sequences on SQLite are serialised.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


# Dependency: one session per request
def get_session(request: Request):
    with request.app.state.db.session() as session:
        yield session
