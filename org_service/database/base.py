from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
import logging

from ..core.config import settings

logger = logging.getLogger(__name__)

# Create Base class
Base = declarative_base()

def enable_sqlite_write_locking(sqlite_engine: Engine) -> Engine:
    """
    Make every SQLite transaction start with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first write, so a locked re-check
    (SELECT ... FOR UPDATE is dropped on SQLite) would otherwise hold no lock.
    Taking the database write lock up front serializes membership writes.
    """
    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return sqlite_engine

is_sqlite = settings.DATABASE_URL.startswith("sqlite")

# SQLite connections are shared across the threadpool FastAPI runs sync code in
connect_args = {"check_same_thread": False} if is_sqlite else {}

# Create engine
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    pool_pre_ping=True,
    connect_args=connect_args,
    future=True
)

if is_sqlite:
    enable_sqlite_write_locking(engine)

# Create SessionLocal class
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True
)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
