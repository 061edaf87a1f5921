import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from clubhouse.main import app
from clubhouse.db import get_session
from clubhouse.auth import create_access_token
from clubhouse.models import Club, ClubMembership, User
from clubhouse.permissions import PermissionLevel


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_club(session: Session):
    def _make(name="Garfield-Clarendon Model Railroad Club"):
        club = Club(name=name)
        session.add(club)
        session.commit()
        session.refresh(club)
        return club
    return _make


@pytest.fixture
def make_user(session: Session):
    """Create a user with a permission level and memberships; returns (user, auth headers)."""
    counter = {"n": 0}

    def _make(permission=PermissionLevel.REGULAR, clubs=()):
        counter["n"] += 1
        user = User(
            email=f"member{counter['n']}@example.com",
            password_hash="not-used",
            permission=None if permission is None else int(permission),
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        for club in clubs:
            session.add(ClubMembership(user_id=user.id, club_id=club.id))
        session.commit()
        token = create_access_token({"sub": user.email})
        return user, {"Authorization": f"Bearer {token}"}
    return _make

