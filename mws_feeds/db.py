"""SQLite history database helpers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models import Base


def create_history_engine(database_url: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args, echo=False)


def create_session_factory(database_url: str):
    engine = create_history_engine(database_url)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine), engine


def init_db(database_url: str) -> Engine:
    _, engine = create_session_factory(database_url)
    Base.metadata.create_all(bind=engine)
    return engine


@contextmanager
def get_session(database_url: str) -> Iterator[Session]:
    session_factory, engine = create_session_factory(database_url)
    db: Session = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        engine.dispose()
