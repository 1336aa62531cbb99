from sqlmodel import SQLModel, create_engine, Session

from hr_insights.config import settings

# Registers every table on SQLModel.metadata before create_all
import hr_insights.models  # noqa: F401

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=_connect_args)


def init_db(bind=None):
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """Provide DB session"""
    with Session(engine) as session:
        yield session
