import os

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('JWT_SECRET_KEY', 'lifeshield-test-signing-secret-0123456789')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from lifeshield.auth import jwt_handler  # noqa: E402
from lifeshield.database import Base, get_db  # noqa: E402
from lifeshield.integrations.stripe_client import PaymentProcessorError, get_payment_client  # noqa: E402
from lifeshield.main import app  # noqa: E402
from lifeshield.models import application, blog, newsletter, policy, review  # noqa: E402,F401
from lifeshield.models.user import User  # noqa: E402


class FakePaymentClient:
    def __init__(self, client_secret: str = 'pi_test_secret_123', fail: bool = False):
        self.client_secret = client_secret
        self.fail = fail
        self.calls: list[tuple[int, str]] = []

    def create_payment_intent(self, amount: int, currency: str) -> str:
        self.calls.append((amount, currency))
        if self.fail:
            raise PaymentProcessorError('Payment processor unavailable')
        return self.client_secret


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield testing_session_local
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def payment_client() -> FakePaymentClient:
    return FakePaymentClient()


@pytest.fixture
def client(session_factory, payment_client):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_client] = lambda: payment_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def add_user(db):
    def _add_user(email: str, role: str = 'user', name: str | None = None) -> User:
        user = User(email=email, name=name or email.split('@')[0], role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _add_user


def auth_headers(email: str) -> dict[str, str]:
    token = jwt_handler.issue_token({'email': email})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def headers_for():
    return auth_headers


class RacingQuery:
    """Stands in for an existence check while a rival request commits first."""

    def __init__(self, commit_rival):
        self.commit_rival = commit_rival

    def filter(self, *criteria):
        return self

    def first(self):
        self.commit_rival()
        return None


@pytest.fixture
def rival_commits_first(db, monkeypatch):
    def _install(commit_rival):
        monkeypatch.setattr(db, 'query', lambda *entities: RacingQuery(commit_rival))
        return monkeypatch.undo

    return _install
