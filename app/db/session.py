# app/db/session.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def build_engine(database_url: str = None, lock_timeout: float = None):
    url = database_url or settings.DATABASE_URL
    timeout = lock_timeout if lock_timeout is not None else settings.STORE_LOCK_TIMEOUT

    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": timeout},
        )

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_timeout=timeout,
    )


def build_session_factory(bind):
    # entities leave the store detached, so nothing may expire on commit
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=bind,
    )


engine = build_engine()

SessionLocal = build_session_factory(engine)
