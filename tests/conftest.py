import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from backend import app
from rbac_module.config import settings
from rbac_module.database import Base, get_db_session, get_session_factory
from rbac_module.models import Institution, RoleAssignment, User
from rbac_module.roles import Actor, PLATFORM_ADMIN_ROLES
from rbac_module.security import create_access_token, hash_password

PASSWORD = "Secret@1234"


class FakeCounters:
    """In-memory stand-in for the school record counters."""

    def __init__(self, email=None, failing=(), **counts):
        self.email = email
        self.failing = set(failing)
        self.counts = counts

    def profile_email(self, institution_id):
        if "profile" in self.failing:
            raise RuntimeError("profile query failed")
        return self.email

    def count(self, kind, institution_id):
        if kind in self.failing:
            raise RuntimeError(f"{kind} query failed")
        return self.counts.get(kind, 0)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def institution(db):
    institution = Institution(name="Green Valley High")
    db.add(institution)
    db.commit()
    db.refresh(institution)
    return institution


@pytest.fixture
def make_user(db):
    def _make(email, *roles, institution_id=None):
        user = User(email=email, full_name=email.split("@")[0], password_hash=hash_password(PASSWORD))
        db.add(user)
        db.flush()
        for role in roles:
            scope = None if role in PLATFORM_ADMIN_ROLES else institution_id
            db.add(RoleAssignment(user_id=user.id, role=role, institution_id=scope))
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_actor(institution):
    counter = iter(range(1, 1000))

    def _make(*roles, institution_id=None):
        return Actor(
            user_id=next(counter),
            institution_id=institution_id or institution.id,
            roles=frozenset(roles),
        )

    return _make


@pytest.fixture
def client(session_factory):
    def override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user, institution_id=None):
    headers = {"Authorization": f"Bearer {create_access_token(user.email)}"}
    if institution_id is not None:
        headers[settings.institution_header] = str(institution_id)
    return headers
