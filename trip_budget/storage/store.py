"""Durable key-value stores holding JSON blobs."""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from trip_budget.storage.models import Base, StoreEntry
from trip_budget.utils.errors import PersistenceWriteFailed, StorageError
from trip_budget.utils.logging import get_logger

logger = get_logger(__name__)

EXPENSES_KEY = "expenses"
BUDGET_PLAN_KEY = "budget-plan"
TRIP_BUDGET_KEY = "trip-budget"
LANGUAGE_KEY = "preferred-language"


class BaseStore(ABC):
    """Key to JSON-blob store.

    ``get_raw`` returns the stored text or ``None``. ``set`` raises
    ``PersistenceWriteFailed`` when the write does not go through.
    """

    @abstractmethod
    def get_raw(self, key: str) -> Optional[str]:
        """Return the stored JSON text for ``key``."""

    @abstractmethod
    def set_raw(self, key: str, text: str) -> None:
        """Store JSON text under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""

    def get(self, key: str) -> Any:
        """Decoded value, or ``None`` if absent, unreadable or malformed."""
        try:
            text = self.get_raw(key)
        except StorageError as e:
            logger.warning(f"Store read failed for '{key}': {e}", extra={"store_key": key})
            return None
        if text is None:
            return None
        try:
            return json.loads(text)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed JSON under '{key}'", extra={"store_key": key})
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            text = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceWriteFailed(key, f"not JSON serializable: {e}")
        self.set_raw(key, text)


class MemoryStore(BaseStore):
    """In-process store used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_raw(self, key: str, text: str) -> None:
        self._data[key] = text

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlStore(BaseStore):
    """Store backed by a single SQLAlchemy table."""

    def __init__(self, url: str = "sqlite:///data/trip_budget.db", echo: bool = False):
        parsed = make_url(url)
        if parsed.drivername.startswith("sqlite") and parsed.database not in (None, "", ":memory:"):
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

        connect_args = {"check_same_thread": False} if parsed.drivername.startswith("sqlite") else {}
        self.engine = create_engine(url, connect_args=connect_args, echo=echo)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Store engine created: {parsed.render_as_string(hide_password=True)}")

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Session that commits on success and rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_raw(self, key: str) -> Optional[str]:
        try:
            with self.session_scope() as session:
                entry = session.get(StoreEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            raise StorageError(str(e))

    def set_raw(self, key: str, text: str) -> None:
        try:
            with self.session_scope() as session:
                entry = session.get(StoreEntry, key)
                if entry is None:
                    session.add(StoreEntry(key=key, value=text))
                else:
                    entry.value = text
        except SQLAlchemyError as e:
            raise PersistenceWriteFailed(key, str(e))

    def delete(self, key: str) -> None:
        try:
            with self.session_scope() as session:
                entry = session.get(StoreEntry, key)
                if entry is not None:
                    session.delete(entry)
        except SQLAlchemyError as e:
            raise PersistenceWriteFailed(key, str(e))

    def close(self) -> None:
        self.engine.dispose()


def create_store(url: str) -> BaseStore:
    """Build a store from a configured URL; "memory" gives a ``MemoryStore``."""
    if url == "memory":
        return MemoryStore()
    return SqlStore(url)
