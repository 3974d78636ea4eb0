"""Service wiring and request dependencies for FastAPI routes."""

import logging
from dataclasses import dataclass

from fastapi import Request

from warden.config import Settings, get_settings
from warden.database import make_engine, make_session_factory
from warden.errors import InvalidToken
from warden.services.allocator import IdentityAllocator
from warden.services.auth import AuthService
from warden.services.hasher import CredentialHasher
from warden.services.invitation import InvitationService
from warden.services.jwt import TokenService
from warden.services.mailer import ConsoleMailer, Mailer, SmtpMailer
from warden.services.recovery import RecoveryService
from warden.store.base import IdentityStore
from warden.store.memory import MemoryIdentityStore
from warden.store.sql import SqlIdentityStore


@dataclass
class Services:
    """The stateless services sharing one store, hasher and mailer."""

    tokens: TokenService
    auth: AuthService
    recovery: RecoveryService
    invitations: InvitationService


def build_store(settings: Settings, logger: logging.Logger) -> IdentityStore:
    if settings.STORE_BACKEND == "memory":
        return MemoryIdentityStore()
    engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    return SqlIdentityStore(make_session_factory(engine), logger=logger)


def build_mailer(settings: Settings, logger: logging.Logger) -> Mailer:
    if settings.MAIL_BACKEND == "smtp":
        return SmtpMailer(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            from_address=settings.SMTP_FROM,
            site_name=settings.SITE_NAME,
            logger=logger,
        )
    return ConsoleMailer(site_name=settings.SITE_NAME, logger=logger)


def build_services(
    settings: Settings,
    store: IdentityStore | None = None,
    mailer: Mailer | None = None,
    logger: logging.Logger | None = None,
) -> Services:
    """Wire every service from ``settings``. ``store`` and ``mailer`` override the configured backends."""
    logger = logger or logging.getLogger("warden")
    store = store or build_store(settings, logger)
    mailer = mailer or build_mailer(settings, logger)
    hasher = CredentialHasher(rounds=settings.BCRYPT_ROUNDS)
    allocator = IdentityAllocator(store, logger=logger)
    tokens = TokenService(
        store,
        hasher,
        private_key_path=settings.JWT_PRIVATE_KEY_PATH,
        public_key_path=settings.JWT_PUBLIC_KEY_PATH,
        logger=logger,
    )
    return Services(
        tokens=tokens,
        auth=AuthService(
            store,
            allocator,
            hasher,
            tokens,
            admin_id=settings.ADMIN_ID,
            private_signup=settings.PRIVATE_SIGNUP,
            logger=logger,
        ),
        recovery=RecoveryService(store, mailer, hasher, logger=logger),
        invitations=InvitationService(store, allocator, tokens, mailer, admin_id=settings.ADMIN_ID, logger=logger),
    )


_services: Services | None = None


def get_services() -> Services:
    """Get singleton services instance."""
    global _services
    if _services is None:
        _services = build_services(get_settings())
    return _services


def get_bearer_token(request: Request) -> str:
    """Extract the Bearer token from the Authorization header. Raises InvalidToken if missing."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise InvalidToken("Not authenticated")
    token = auth_header[7:].strip()
    if not token:
        raise InvalidToken("Not authenticated")
    return token
