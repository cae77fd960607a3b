"""SQLModel engine and session management."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from scopestatus.core.config import Settings


class Database:
    """Connection pool built once at startup and handed to the store.

    Each unit of work borrows a session with :meth:`session` and returns it
    when the block exits.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        connect_args = {}
        if url.startswith("sqlite"):
            # Sessions are used from FastAPI's worker threads.
            connect_args["check_same_thread"] = False
        self.url = url
        self.engine: Engine = create_engine(
            url, echo=echo, pool_pre_ping=True, connect_args=connect_args
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, echo=settings.database_echo)

    def init_db(self) -> None:
        # Registers the table on SQLModel.metadata.
        from scopestatus.models import StatusSnapshot  # noqa: F401

        SQLModel.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = Session(self.engine, expire_on_commit=False)
        try:
            yield session
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = ["Database"]
