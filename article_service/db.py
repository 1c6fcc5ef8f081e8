import logging
import time
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when the service cannot be built from its configuration."""


def make_engine(database_url: Optional[str]) -> Engine:
    if not database_url:
        raise ConfigurationError("no existing database: DATABASE_URL is not set")
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def wait_for_db(engine: Engine, max_attempts: int = 10, delay: int = 1) -> None:
    """Attempt to connect to the database until it is ready."""
    for attempt in range(1, max_attempts + 1):
        try:
            with engine.connect():
                return
        except OperationalError:
            logger.info("Database not ready (attempt %s/%s)", attempt, max_attempts)
            if attempt < max_attempts:
                time.sleep(delay)
    raise ConfigurationError("Database is not ready")
