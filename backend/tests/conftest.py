"""Shared test fixtures."""

import os

# Keep the app's own lifespan off PostgreSQL; every test overrides get_db anyway
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import UTC, datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from eventhub.database import Database, get_db  # noqa: E402
from eventhub.dependencies.auth import get_message_sender, get_token_signer  # noqa: E402
from eventhub.main import app  # noqa: E402
from eventhub.models.user import User  # noqa: E402
from eventhub.rate_limiter import limiter  # noqa: E402
from eventhub.services.auth import (  # noqa: E402
    AuthService,
    PasswordHasher,
    ResetTokenStore,
    TokenSigner,
)
from eventhub.services.email_service import EmailDeliveryError  # noqa: E402

TEST_SECRET = "test-secret-key"


class RecordingSender:
    """Message sender that records reset links instead of emailing them."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def send(self, to_address: str, reset_url: str) -> None:
        if self.fail:
            raise EmailDeliveryError(f"Failed to send email to {to_address}")
        self.sent.append((to_address, reset_url))

    @property
    def last_token(self) -> str:
        """Raw secret from the most recent reset link."""
        return self.sent[-1][1].split("token=", 1)[1]


class FakeClock:
    """Settable clock for reset token expiry tests."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def database():
    """In-memory SQLite database with all tables created."""
    database = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    database.open()
    database.create_all()
    yield database
    database.close()


@pytest.fixture
def db(database):
    """A session on the test database."""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hasher():
    # Low cost keeps the suite fast; the default cost is covered separately
    return PasswordHasher(rounds=4)


@pytest.fixture
def signer():
    return TokenSigner(TEST_SECRET)


@pytest.fixture
def auth_service(db, sender, hasher, signer, clock):
    """AuthService wired to the test database with a controllable clock."""
    return AuthService(
        db,
        sender,
        hasher=hasher,
        signer=signer,
        reset_tokens=ResetTokenStore(db, clock=clock),
    )


@pytest.fixture
def client(database, sender, signer):
    """Test client over the in-memory database.

    Yields a tuple of (TestClient, session factory) for use in tests.
    """
    limiter.reset()

    def override_get_db():
        session = database.session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_message_sender] = lambda: sender
    app.dependency_overrides[get_token_signer] = lambda: signer

    with TestClient(app) as test_client:
        yield test_client, database.session

    app.dependency_overrides.clear()


def register_user(
    test_client: TestClient,
    email: str = "ada@example.com",
    password: str = "secret1",
    first_name: str = "Ada",
    last_name: str = "Lovelace",
) -> dict:
    """Register through the API and return the response body."""
    response = test_client.post(
        "/api/auth/register",
        json={
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": password,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def make_admin(session_factory, email: str) -> None:
    """Flag an existing user as admin directly in the database."""
    db = session_factory()
    user = db.query(User).filter(User.email == email).first()
    user.is_admin = True
    db.commit()
    db.close()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
