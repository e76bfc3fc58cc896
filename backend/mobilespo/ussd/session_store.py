"""
USSD session storage.

A session lives from the first gateway request bearing its session id
until it goes `timeout` seconds without activity. Expired sessions are
reported as absent by `get` and removed by `sweep`, which the app runs
on a fixed interval.

Two backends share the SessionStore interface:
- InMemorySessionStore: a dict guarded by a lock, for single-process use.
- DatabaseSessionStore: the `ussd_sessions` table, for deployments where
  several workers answer the same gateway.
"""

import asyncio
import copy
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from mobilespo.core.config import settings
from mobilespo.models.ussd_session import UssdSessionRecord
from mobilespo.ussd.states import Language, UssdState
from mobilespo.ussd.validators import mask_phone

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UssdSession(BaseModel):
    session_id: str
    phone_number: str
    language: Language = Language.ENGLISH
    state: UssdState = UssdState.MAIN_MENU
    context: dict = Field(default_factory=dict)
    input_history: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    last_activity: datetime = Field(default_factory=utcnow)


class SessionStore(ABC):
    def __init__(self, timeout: Optional[int] = None, clock: Callable[[], datetime] = utcnow):
        self.timeout = timedelta(seconds=timeout if timeout is not None else settings.USSD_SESSION_TIMEOUT)
        self.clock = clock

    def is_valid(self, session: UssdSession) -> bool:
        return self.clock() - session.last_activity < self.timeout

    @abstractmethod
    def get(self, session_id: str) -> Optional[UssdSession]:
        """Return the live session, or None when missing or expired."""

    @abstractmethod
    def create(self, session_id: str, phone_number: str) -> UssdSession:
        """Start a fresh session, replacing any record under the same id."""

    @abstractmethod
    def save(self, session: UssdSession) -> None:
        ...

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def sweep(self) -> int:
        """Delete every expired session and return how many were removed."""

    @abstractmethod
    def active_sessions(self) -> List[UssdSession]:
        """Every session that has not yet expired."""

    def new_session(self, session_id: str, phone_number: str) -> UssdSession:
        now = self.clock()
        return UssdSession(
            session_id=session_id,
            phone_number=phone_number,
            created_at=now,
            last_activity=now,
        )


class InMemorySessionStore(SessionStore):
    """
    Sessions are stored and handed out as copies, so a caller mutating its
    session never races another request until it calls `save`.
    """

    def __init__(self, timeout: Optional[int] = None, clock: Callable[[], datetime] = utcnow):
        super().__init__(timeout, clock)
        self._sessions: Dict[str, UssdSession] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[UssdSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or not self.is_valid(session):
                return None
            return session.model_copy(deep=True)

    def create(self, session_id: str, phone_number: str) -> UssdSession:
        session = self.new_session(session_id, phone_number)
        with self._lock:
            self._sessions[session_id] = session.model_copy(deep=True)
        logger.info("Created USSD session %s for %s", session_id, mask_phone(phone_number))
        return session

    def save(self, session: UssdSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session.model_copy(deep=True)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def sweep(self) -> int:
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if not self.is_valid(s)]
            for session_id in expired:
                del self._sessions[session_id]

        for session_id in expired:
            logger.info("Cleaned up expired USSD session %s", session_id)
        return len(expired)

    def active_sessions(self) -> List[UssdSession]:
        with self._lock:
            return [s.model_copy(deep=True) for s in self._sessions.values() if self.is_valid(s)]

    def __len__(self):
        with self._lock:
            return len(self._sessions)


class DatabaseSessionStore(SessionStore):
    def __init__(self, session_factory, timeout: Optional[int] = None, clock: Callable[[], datetime] = utcnow):
        super().__init__(timeout, clock)
        self.session_factory = session_factory

    @staticmethod
    def _aware(value: datetime) -> datetime:
        # SQLite hands back naive datetimes
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def _to_session(self, record: UssdSessionRecord) -> UssdSession:
        return UssdSession(
            session_id=record.session_id,
            phone_number=record.phone_number,
            language=record.language,
            state=record.state,
            context=copy.deepcopy(dict(record.context or {})),
            input_history=list(record.input_history or []),
            created_at=self._aware(record.created_at),
            last_activity=self._aware(record.last_activity),
        )

    @staticmethod
    def _apply(record: UssdSessionRecord, session: UssdSession) -> None:
        record.phone_number = session.phone_number
        record.language = session.language.value
        record.state = session.state.value
        record.context = copy.deepcopy(session.context)
        record.input_history = list(session.input_history)
        record.created_at = session.created_at
        record.last_activity = session.last_activity

    def get(self, session_id: str) -> Optional[UssdSession]:
        with self.session_factory() as db:
            record = db.query(UssdSessionRecord).filter_by(session_id=session_id).first()
            if record is None:
                return None
            session = self._to_session(record)

        if not self.is_valid(session):
            return None
        return session

    def create(self, session_id: str, phone_number: str) -> UssdSession:
        session = self.new_session(session_id, phone_number)
        self.save(session)
        logger.info("Created USSD session %s for %s", session_id, mask_phone(phone_number))
        return session

    def save(self, session: UssdSession) -> None:
        with self.session_factory() as db:
            record = (
                db.query(UssdSessionRecord)
                .filter_by(session_id=session.session_id)
                .with_for_update()
                .first()
            )
            if record is None:
                record = UssdSessionRecord(session_id=session.session_id)
                db.add(record)
            self._apply(record, session)
            db.commit()

    def delete(self, session_id: str) -> bool:
        with self.session_factory() as db:
            deleted = db.query(UssdSessionRecord).filter_by(session_id=session_id).delete()
            db.commit()
        return deleted > 0

    def sweep(self) -> int:
        cutoff = self.clock() - self.timeout
        with self.session_factory() as db:
            removed = (
                db.query(UssdSessionRecord)
                .filter(UssdSessionRecord.last_activity <= cutoff)
                .delete(synchronize_session=False)
            )
            db.commit()

        if removed:
            logger.info("Cleaned up %d expired USSD sessions", removed)
        return removed

    def active_sessions(self) -> List[UssdSession]:
        cutoff = self.clock() - self.timeout
        with self.session_factory() as db:
            records = db.query(UssdSessionRecord).filter(UssdSessionRecord.last_activity > cutoff).all()
            return [self._to_session(record) for record in records]


def build_session_store(backend: Optional[str] = None) -> SessionStore:
    backend = backend or settings.USSD_SESSION_BACKEND

    if backend == "database":
        from mobilespo.database.base import Base
        from mobilespo.database.session import SessionLocal, engine

        Base.metadata.create_all(bind=engine)
        return DatabaseSessionStore(SessionLocal)

    if backend != "memory":
        raise ValueError(f"Unknown USSD session backend: {backend}")
    return InMemorySessionStore()


async def sweep_forever(store: SessionStore, interval: Optional[int] = None):
    """Run `store.sweep()` every `interval` seconds until cancelled."""
    interval = interval or settings.USSD_SWEEP_INTERVAL
    while True:
        await asyncio.sleep(interval)
        try:
            store.sweep()
        except Exception:
            logger.exception("USSD session sweep failed")
