# backend/docscan/database.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .utils.logging import db_logger

Base = declarative_base()


class Database:
    """Owns the SQLAlchemy engine and session factory for one store.

    Constructed explicitly and opened at process start, closed at shutdown.
    """

    def __init__(self, url: str):
        self.url = str(url)
        self.engine: Engine | None = None
        self.SessionLocal: sessionmaker | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> "Database":
        if self.is_open:
            return self

        db_logger.info(f"Connecting to database: {self.url}")

        engine_kwargs = {"echo": False}
        if self.is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url:
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(self.url, **engine_kwargs)
        if self.is_sqlite:
            event.listen(self.engine, "connect", self._configure_sqlite)

        # Import models so their tables are registered on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        return self

    def close(self) -> None:
        if self.engine is not None:
            db_logger.info(f"Closing database: {self.url}")
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None

    def _configure_sqlite(self, dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if ":memory:" not in self.url:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @contextmanager
    def session(self) -> Iterator[Session]:
        if self.SessionLocal is None:
            raise RuntimeError("Database is not open")
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
