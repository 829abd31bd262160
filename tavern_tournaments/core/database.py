from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from tavern_tournaments.core.config import settings

# SQLite needs check_same_thread disabled because FastAPI may serve a request
# from a different thread than the one that opened the connection.
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    # Importing the models registers their tables on Base.metadata.
    import tavern_tournaments.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
