"""
Database access: declarative base, engine, request sessions, transactions.

PostgreSQL (psycopg 3 driver) in production; a sqlite:// DATABASE_URL is
accepted for local runs.
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from app.config import get_settings
from app.application.errors import StoreError


class Base(DeclarativeBase):
    """Base class of the practice tables"""
    pass


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Engine процесса, создаётся при первом обращении"""
    global _engine
    if _engine is None:
        url = get_settings().get_sqlalchemy_url()
        if url.startswith("sqlite"):
            _engine = create_engine(url, connect_args={"check_same_thread": False})
        else:
            _engine = create_engine(url, pool_pre_ping=True)
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)
    return _session_factory


def get_db() -> Iterator[Session]:
    """
    Dependency для FastAPI: одна session на запрос, закрывается после ответа

    Usage:
        @router.get("/clients")
        def list_clients(db: Session = Depends(get_db)):
            ...
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Транзакционная граница для операций из нескольких записей.

    Коммитит при успехе, откатывает при любом исключении. Ошибки
    SQLAlchemy пробрасываются наружу как StoreError с исходным текстом.

    Usage:
        with unit_of_work(self.db):
            self.db.add(consumed)
            package.used_sessions += 1
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(str(e)) from e
    except Exception:
        db.rollback()
        raise


def check_db_connection() -> None:
    """
    Readiness check: SELECT 1 через engine приложения

    Raises:
        StoreError: если БД недоступна
    """
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise StoreError(str(e)) from e
