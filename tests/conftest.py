"""Pytest configuration and fixtures."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from warden.config import Settings
from warden.database import Base, make_engine, make_session_factory
from warden.dependencies import Services, build_services, get_services
from warden.errors import DeliveryError
from warden.models.user import User  # noqa: F401
from warden.services.auth import Registration
from warden.services.mailer import Mailer
from warden.store.memory import MemoryIdentityStore
from warden.store.sql import SqlIdentityStore


class RecordingMailer(Mailer):
    """Keeps sent messages in memory. Set ``fail`` to simulate a transport failure."""

    def __init__(self) -> None:
        super().__init__(site_name="Warden")
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise DeliveryError("SMTP server unavailable")
        self.sent.append((to, subject, body))

    def last_code(self) -> str:
        return self.sent[-1][2].rsplit(":", 1)[1].strip()


def write_key_pair(directory) -> tuple[str, str]:
    """Generate an RSA key pair and write it as PEM files. Returns (private, public) paths."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_path = directory / "private.pem"
    public_path = directory / "public.pem"
    private_path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    public_path.write_bytes(
        key.public_key().public_bytes(serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo)
    )
    return str(private_path), str(public_path)


@pytest.fixture(name="key_paths", scope="session")
def key_paths_fixture(tmp_path_factory) -> tuple[str, str]:
    return write_key_pair(tmp_path_factory.mktemp("keys"))


@pytest.fixture(name="foreign_key_paths", scope="session")
def foreign_key_paths_fixture(tmp_path_factory) -> tuple[str, str]:
    """A second key pair that the service does not trust."""
    return write_key_pair(tmp_path_factory.mktemp("foreign_keys"))


@pytest.fixture(name="settings")
def settings_fixture(key_paths) -> Settings:
    settings = Settings()
    settings.JWT_PRIVATE_KEY_PATH, settings.JWT_PUBLIC_KEY_PATH = key_paths
    settings.ADMIN_ID = 1
    settings.PRIVATE_SIGNUP = False
    settings.BCRYPT_ROUNDS = 4
    settings.MAIL_BACKEND = "console"
    return settings


@pytest.fixture(name="store")
def store_fixture() -> MemoryIdentityStore:
    return MemoryIdentityStore()


@pytest.fixture(name="sql_store")
def sql_store_fixture():
    """SQL store on an in-memory SQLite database."""
    engine = make_engine("sqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield SqlIdentityStore(make_session_factory(engine))
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(name="mailer")
def mailer_fixture() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture(name="services")
def services_fixture(settings: Settings, store: MemoryIdentityStore, mailer: RecordingMailer) -> Services:
    return build_services(settings, store=store, mailer=mailer)


@pytest.fixture(name="private_services")
def private_services_fixture(settings: Settings, store: MemoryIdentityStore, mailer: RecordingMailer) -> Services:
    """Services with private signup turned on."""
    settings.PRIVATE_SIGNUP = True
    return build_services(settings, store=store, mailer=mailer)


@pytest.fixture(name="admin")
def admin_fixture(services: Services) -> dict:
    """The first registered user, which is the configured admin. Returns its id and tokens."""
    user_id = services.auth.create_user(
        Registration(username="sarah", password="oakheart", email="sarah@email.com", first_name="Sarah")
    )
    pair = services.tokens.issue("sarah", "oakheart")
    return {"id": user_id, "token": pair.access_token, "refresh_token": pair.refresh_token}


@pytest.fixture(name="test_user")
def test_user_fixture(services: Services, admin: dict) -> dict:
    """A regular user. Returns its id and tokens."""
    user_id = services.auth.create_user(
        Registration(
            username="alle",
            password="oakheart",
            email="alle@email.com",
            first_name="Alle",
            last_name="Oak",
        )
    )
    pair = services.tokens.issue("alle", "oakheart")
    return {"id": user_id, "token": pair.access_token, "refresh_token": pair.refresh_token}


@pytest.fixture(name="client")
def client_fixture(services: Services):
    """Create a test client with the services dependency overridden."""
    from main import app

    app.dependency_overrides[get_services] = lambda: services
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
