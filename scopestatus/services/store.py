"""Append-only snapshot persistence."""

from __future__ import annotations

import logging
import threading

from sqlalchemy import func
from sqlalchemy.exc import DBAPIError, InterfaceError, SQLAlchemyError, StatementError
from sqlmodel import Session, select

from scopestatus.core.errors import NotFound, StorageError, StorageStage
from scopestatus.core.metrics import SNAPSHOTS_INGESTED, STORAGE_FAILURES
from scopestatus.db.session import Database
from scopestatus.models import SnapshotIngest, SnapshotRead, StatusSnapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Ordered log of status snapshots keyed by a monotonically increasing id.

    Writes go through a single lock so id assignment never races; reads do
    not take the lock and see whatever has been committed when they run.
    """

    def __init__(self, database: Database) -> None:
        self.database = database
        self._write_lock = threading.Lock()

    def append(self, fields: SnapshotIngest) -> int:
        """Persist a new snapshot and return its id."""

        with self._write_lock, self.database.session() as session:
            try:
                session.connection()
                row = StatusSnapshot(**fields.model_dump())
                session.add(row)
            except SQLAlchemyError as exc:
                raise self._failure("prepare", exc, session) from exc
            try:
                session.flush()
                session.commit()
            except SQLAlchemyError as exc:
                raise self._failure(_write_stage(exc), exc, session) from exc

            snapshot_id = row.id
        SNAPSHOTS_INGESTED.inc()
        logger.info("Snapshot appended", extra={"snapshot_id": snapshot_id, "instrument": fields.instrument})
        return snapshot_id

    def get_by_id(self, snapshot_id: int) -> SnapshotRead:
        with self.database.session() as session:
            self._connect(session)
            try:
                row = session.get(StatusSnapshot, snapshot_id)
            except SQLAlchemyError as exc:
                raise self._failure("execute", exc, session) from exc
            if row is None:
                raise NotFound(snapshot_id)
            return SnapshotRead.model_validate(row)

    def get_latest(self) -> SnapshotRead:
        stmt = select(StatusSnapshot).order_by(StatusSnapshot.id.desc()).limit(1)
        with self.database.session() as session:
            self._connect(session)
            try:
                row = session.exec(stmt).first()
            except SQLAlchemyError as exc:
                raise self._failure("execute", exc, session) from exc
            if row is None:
                raise NotFound()
            return SnapshotRead.model_validate(row)

    def count(self) -> int:
        with self.database.session() as session:
            self._connect(session)
            try:
                return session.exec(select(func.count()).select_from(StatusSnapshot)).one()
            except SQLAlchemyError as exc:
                raise self._failure("execute", exc, session) from exc

    def _connect(self, session: Session) -> None:
        try:
            session.connection()
        except SQLAlchemyError as exc:
            raise self._failure("prepare", exc, session) from exc

    @staticmethod
    def _failure(stage: StorageStage, exc: Exception, session: Session) -> StorageError:
        session.rollback()
        message = str(getattr(exc, "orig", None) or exc)
        STORAGE_FAILURES.labels(stage=stage).inc()
        logger.error("Snapshot storage failed", extra={"stage": stage, "error": message})
        return StorageError(stage, message)


def _write_stage(exc: SQLAlchemyError) -> StorageStage:
    """Tell parameter binding failures apart from the database rejecting the write."""

    if isinstance(exc, InterfaceError):
        return "bind"
    if isinstance(exc, DBAPIError):
        return "bind" if "binding parameter" in str(exc.orig).lower() else "execute"
    if isinstance(exc, StatementError):
        # Raised by a column type's bind processor before the driver is called.
        return "bind"
    return "execute"


__all__ = ["SnapshotStore"]
