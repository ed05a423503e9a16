# app/db/record_store.py
"""
Id-keyed durable collections shared by every role.

A RecordStore wraps one mapped entity class. Each call opens its own
short-lived session and hands back detached copies, so nothing a caller
holds aliases another caller's state. Single-entity writes go through
``upsert``; entities carrying a ``version_id_col`` are checked against
the stored version on every write, and ``lock(id)`` serialises
read-modify-write sequences on one id inside this process.
"""

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Generic, Iterable, List, Optional, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import NotFoundError, StaleVersionError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _LockRegistry:
    """One lock per entity id, dropped once no caller references it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = weakref.WeakValueDictionary()

    def get(self, key) -> "_IdLock":
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = _IdLock()
                self._locks[key] = lock
            return lock


class _IdLock:
    # threading.Lock cannot be weakly referenced
    __slots__ = ("_lock", "__weakref__")

    def __init__(self):
        self._lock = threading.Lock()

    def acquire(self, timeout: float) -> bool:
        return self._lock.acquire(timeout=timeout)

    def release(self) -> None:
        self._lock.release()


class RecordStore(Generic[T]):
    def __init__(self, model, session_factory, lock_timeout: float = 5.0, order_by=None):
        self.model = model
        self._session_factory = session_factory
        self._lock_timeout = lock_timeout
        self._order_by = order_by
        self._locks = _LockRegistry()

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    # --------------------------------------------------
    # READS
    # --------------------------------------------------
    def get_all(self) -> List[T]:
        stmt = select(self.model)
        if self._order_by is not None:
            stmt = stmt.order_by(self._order_by)

        with self._session() as db:
            return list(db.scalars(stmt).all())

    def get_by_id(self, entity_id) -> T:
        with self._session() as db:
            entity = db.get(self.model, entity_id)

        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    def find(self, **criteria) -> List[T]:
        stmt = select(self.model).filter_by(**criteria)
        if self._order_by is not None:
            stmt = stmt.order_by(self._order_by)

        with self._session() as db:
            return list(db.scalars(stmt).all())

    def find_one(self, **criteria) -> Optional[T]:
        stmt = select(self.model).filter_by(**criteria).limit(1)
        with self._session() as db:
            return db.scalars(stmt).first()

    # --------------------------------------------------
    # WRITES
    # --------------------------------------------------
    def upsert(self, entity: T) -> T:
        """Insert or replace one entity by id, atomically.

        Returns the stored copy, whose version has moved on; the instance
        passed in must not be written again.
        """
        with self._session() as db:
            try:
                stored = db.merge(entity)
                db.commit()
            except StaleDataError as e:
                db.rollback()
                raise StaleVersionError(
                    f"{self.entity_name} {getattr(entity, 'id', None)} was changed by another writer"
                ) from e
            except SQLAlchemyError:
                db.rollback()
                raise
        return stored

    def save_all(self, entities: Iterable[T]) -> None:
        """Replace the whole collection in one transaction.

        Not safe as a mutation primitive for single entities: anything
        written between the caller's read and this call is lost.
        """
        entities = list(entities)
        with self._session() as db:
            try:
                db.execute(delete(self.model))
                for entity in entities:
                    db.merge(entity)
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise
        logger.info("Replaced %s collection with %d records", self.entity_name, len(entities))

    # --------------------------------------------------
    # LOCKING
    # --------------------------------------------------
    @contextmanager
    def lock(self, entity_id):
        lock = self._locks.get(entity_id)
        if not lock.acquire(self._lock_timeout):
            raise StorageError(
                f"Timed out after {self._lock_timeout}s waiting for {self.entity_name} {entity_id}"
            )
        try:
            yield
        finally:
            lock.release()

    @contextmanager
    def _session(self):
        db = None
        try:
            db = self._session_factory()
            yield db
        except SQLAlchemyError as e:
            logger.error("Storage fault on %s: %r", self.entity_name, e)
            raise StorageError(f"{self.entity_name} storage is unavailable") from e
        finally:
            if db is not None:
                db.close()
