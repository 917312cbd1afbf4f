# barberbook/db.py

from sqlmodel import SQLModel, create_engine, Session

from barberbook.config import settings


def _connect_args(url: str) -> dict:
    # required for SQLite + FastAPI
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# Engine = connection to the database
engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    connect_args=_connect_args(settings.DATABASE_URL),
)


def init_db() -> None:
    import barberbook.models  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(engine)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
