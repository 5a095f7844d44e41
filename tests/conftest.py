"""Pytest configuration and fixtures."""

import os

# The application engine is built at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from snippet_manager.main import app
from snippet_manager.db.base import Base
from snippet_manager.db.session import get_db
from snippet_manager.api.v1.dependencies import (
    get_blob_storage,
    get_email_sender,
    get_google_verifier,
)
from snippet_manager.notifications.email_sender import EmailSender
from snippet_manager.services.exceptions import AuthenticationError
from snippet_manager.services.google_identity import GoogleIdentity, GoogleTokenVerifier
from snippet_manager.storage.blob_storage import BlobStorage


# In-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

MOCK_STORAGE_URL = "http://mock-storage/profiles-bucket"


class MockBlobStorage(BlobStorage):
    """Mock blob storage for testing."""

    def __init__(self):
        self._storage = {}

    def upload_file(self, key: str, file_obj, content_type: str) -> str:
        self._storage[key] = file_obj.read()
        return key

    def public_url(self, key: str) -> str:
        return f"{MOCK_STORAGE_URL}/{key}"

    def key_from_url(self, url: str):
        prefix = f"{MOCK_STORAGE_URL}/"
        if url.startswith(prefix):
            return url[len(prefix):]
        return None

    def delete(self, key: str) -> bool:
        if key in self._storage:
            del self._storage[key]
            return True
        return False

    def exists(self, key: str) -> bool:
        return key in self._storage


class FakeEmailSender(EmailSender):
    """Records outgoing emails instead of queueing them."""

    def __init__(self):
        self.verification_codes = {}
        self.reset_tokens = {}
        self.fail = False

    def send_verification_code(self, email: str, otp: str) -> bool:
        if self.fail:
            return False
        self.verification_codes[email] = otp
        return True

    def send_password_reset(self, email: str, reset_token: str) -> bool:
        if self.fail:
            return False
        self.reset_tokens[email] = reset_token
        return True


class FakeGoogleVerifier(GoogleTokenVerifier):
    """Accepts tokens registered on it and rejects everything else."""

    def __init__(self):
        self.identities = {}

    def verify(self, id_token: str) -> GoogleIdentity:
        if id_token not in self.identities:
            raise AuthenticationError("Invalid Google token")
        return self.identities[id_token]


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def mock_blob_storage():
    """Create a mock blob storage for testing."""
    return MockBlobStorage()


@pytest.fixture(scope="function")
def email_sender():
    """Create a recording email sender."""
    return FakeEmailSender()


@pytest.fixture(scope="function")
def google_verifier():
    """Create a fake Google token verifier."""
    return FakeGoogleVerifier()


@pytest.fixture(scope="function")
def client(db_session, mock_blob_storage, email_sender, google_verifier):
    """Create a test client with overridden dependencies."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_storage] = lambda: mock_blob_storage
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_google_verifier] = lambda: google_verifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def register_user(client, email_sender, email: str, password: str = "testpassword123",
                  first_name: str = "Test", last_name: str = "User") -> dict:
    """Sign up and verify a user through the API, returning token and user data."""
    response = client.post(
        "/api/v1/auth/signup",
        json={
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password": password,
        },
    )
    assert response.status_code == 201

    otp = email_sender.verification_codes[email.lower()]
    verify_response = client.post(
        "/api/v1/auth/verify-otp",
        json={"email": email, "otp": otp},
    )
    assert verify_response.status_code == 200

    data = verify_response.json()
    return {
        "email": email.lower(),
        "password": password,
        "token": data["access_token"],
        "user": data["user"],
    }


@pytest.fixture
def test_user(client, email_sender):
    """Create a verified test user and return credentials."""
    return register_user(client, email_sender, "test@example.com")


@pytest.fixture
def other_user(client, email_sender):
    """Create a second verified user."""
    return register_user(
        client, email_sender, "other@example.com", first_name="Other", last_name="Person"
    )


@pytest.fixture
def auth_headers(test_user):
    """Return authorization headers for authenticated requests."""
    return {"Authorization": f"Bearer {test_user['token']}"}


@pytest.fixture
def other_auth_headers(other_user):
    """Return authorization headers for the second user."""
    return {"Authorization": f"Bearer {other_user['token']}"}


@pytest.fixture
def anon_headers():
    """Headers of one anonymous session."""
    return {"X-Anonymous-ID": "anon-1"}


@pytest.fixture
def other_anon_headers():
    """Headers of a different anonymous session."""
    return {"X-Anonymous-ID": "anon-2"}
