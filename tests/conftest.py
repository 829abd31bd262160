from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import tavern_tournaments.models  # noqa: F401  (registers the tables)
from tavern_tournaments.api.dependencies import get_current_user_id, get_db
from tavern_tournaments.core.config import settings
from tavern_tournaments.core.database import Base
from tavern_tournaments.main import app
from tavern_tournaments.models.player_model import TournamentPlayer

MOCK_USER_ID = "organizer_123"
EVENT_ID = "event-0001"


def make_token(subject=MOCK_USER_ID, expires_in=timedelta(minutes=30)):
    """A bearer token like the ones the host application hands out."""
    claims = {"sub": subject, "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def make_players(count, event_id=EVENT_ID, **overrides):
    """Players P1..Pn with seeds 1..n, top seed first."""
    return [
        TournamentPlayer(id=f"p{i}", event_id=event_id, player_name=f"P{i}", seed=i, **overrides)
        for i in range(1, count + 1)
    ]


@pytest.fixture
def engine():
    # One shared in-memory connection so every session sees the same database.
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def anonymous_client(db_session):
    """Client with the test database but real authentication."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides = {}


@pytest.fixture
def client(anonymous_client):
    app.dependency_overrides[get_current_user_id] = lambda: MOCK_USER_ID
    return anonymous_client
