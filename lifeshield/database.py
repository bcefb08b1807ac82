import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from lifeshield.core import config


logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def init_database() -> None:
    # Importing the models registers their tables on Base.metadata.
    from lifeshield.models import application, blog, newsletter, policy, review, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database ready: %s", engine.url.render_as_string(hide_password=True))


def dispose_database() -> None:
    engine.dispose()
    logger.info("Database connections released")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
