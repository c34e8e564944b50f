"""Flat key-value persistence backing profiles, search caches and credentials."""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from food_analyzer.database import SessionLocal
from food_analyzer.exceptions import StorageError
from food_analyzer.models import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """
    Abstract key-value store interface.

    Keys are flat strings; namespacing (profile_<id>, search_<id>) is the
    caller's convention. Every operation may raise StorageError, and a failed
    write must leave the previous value untouched.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Create or overwrite a key."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns True if the key existed, False otherwise.
        """
        pass

    @abstractmethod
    def list_keys(self) -> list[str]:
        """Return every key in the store."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        pass


class SQLKeyValueStore(KeyValueStore):
    """KeyValueStore over a single SQLAlchemy table, one transaction per call."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def _run(self, operation: str, func):
        db = self.session_factory()
        try:
            result = func(db)
            db.commit()
            return result
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Key-value store %s failed: %s", operation, e)
            raise StorageError(f"Key-value store {operation} failed") from e
        finally:
            db.close()

    def get(self, key: str) -> Optional[str]:
        def _get(db: Session):
            entry = db.get(KeyValueEntry, key)
            return entry.value if entry else None

        return self._run("get", _get)

    def set(self, key: str, value: str) -> None:
        def _set(db: Session):
            entry = db.get(KeyValueEntry, key)
            if entry:
                entry.value = value
            else:
                db.add(KeyValueEntry(key=key, value=value))

        self._run("set", _set)

    def delete(self, key: str) -> bool:
        def _delete(db: Session):
            count = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
            return count > 0

        return self._run("delete", _delete)

    def list_keys(self) -> list[str]:
        def _list(db: Session):
            rows = db.query(KeyValueEntry.key).order_by(KeyValueEntry.key).all()
            return [row.key for row in rows]

        return self._run("list_keys", _list)

    def clear(self) -> None:
        self._run("clear", lambda db: db.query(KeyValueEntry).delete())
