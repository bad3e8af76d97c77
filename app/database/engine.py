from sqlmodel import create_engine, SQLModel, Session
from sqlalchemy import event
from sqlalchemy.engine import Engine
from typing import Generator

from app.core.config import settings

DATABASE_URL = settings.database_url


def enable_sqlite_savepoints(target: Engine) -> Engine:
    """
    Let SQLAlchemy own transaction boundaries on SQLite.

    pysqlite issues its own BEGIN/COMMIT, which breaks SAVEPOINT handling.
    The sync engine relies on per-record savepoints, so local/test SQLite
    engines must emit BEGIN themselves.
    """
    @event.listens_for(target, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(target, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return target


if DATABASE_URL.startswith("sqlite"):
    engine = enable_sqlite_savepoints(create_engine(
        DATABASE_URL,
        echo=settings.DB_ECHO,
        connect_args={"check_same_thread": False},
    ))
else:
    engine = create_engine(
        DATABASE_URL,
        echo=settings.DB_ECHO,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600
    )

def create_db_and_tables():
    SQLModel.metadata.create_all(engine)

def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
