# SQLAlchemy wiring: one engine per process, a session factory, and the
# declarative Base every model inherits from.

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from hrms.core.config import settings


def _connect_args(url: str) -> dict:
    # SQLite connections are used from Starlette's worker threads.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    future=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

Base = declarative_base()

