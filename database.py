from typing import Generator, Optional

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import create_engine, Session, SQLModel

from config import DATABASE_ECHO, DATABASE_URL

# Make sure to import models to register them with SQLModel.metadata
from models import User, Task  # noqa: F401

_engine: Optional[Engine] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
        # Log a redacted version for verification, not the whole URL
        logger.info("Connecting to database {}...", DATABASE_URL[:15])
        _engine = create_engine(DATABASE_URL, echo=DATABASE_ECHO, connect_args=connect_args)
    return _engine


def init_db(engine: Optional[Engine] = None) -> None:
    SQLModel.metadata.create_all(engine or get_engine())


def get_session() -> Generator[Session, None, None]:
    with Session(get_engine()) as session:
        yield session
