"""Tests for the token service."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from warden.dependencies import Services
from warden.errors import InvalidCredentials, InvalidToken, SigningError
from warden.services.hasher import CredentialHasher
from warden.services.jwt import ACCESS_TOKEN_TTL, TokenService
from warden.store.memory import MemoryIdentityStore


def make_tokens(store, key_paths, clock=None) -> TokenService:
    private_path, public_path = key_paths
    kwargs = {"clock": clock} if clock else {}
    return TokenService(store, CredentialHasher(rounds=4), private_path, public_path, **kwargs)


class TestIssue:
    """Tests for exchanging credentials for tokens."""

    def test_issue_returns_both_tokens(self, services: Services, admin: dict):
        """Issue returns distinct access and refresh tokens."""
        assert admin["token"]
        assert admin["refresh_token"]
        assert admin["token"] != admin["refresh_token"]

    def test_access_token_claims(self, admin: dict):
        """Access token carries sub, userId and a one-hour expiry."""
        claims = jwt.get_unverified_claims(admin["token"])
        assert claims["sub"] == "sarah"
        assert claims["userId"] == admin["id"]
        expected = datetime.now(timezone.utc) + ACCESS_TOKEN_TTL
        assert abs(claims["exp"] - expected.timestamp()) < 5

    def test_refresh_token_claims(self, admin: dict):
        """Refresh token carries sub and a one-year expiry, no userId."""
        claims = jwt.get_unverified_claims(admin["refresh_token"])
        assert claims["sub"] == "sarah"
        assert "userId" not in claims
        lifetime = claims["exp"] - datetime.now(timezone.utc).timestamp()
        assert timedelta(days=364) < timedelta(seconds=lifetime) <= timedelta(days=366)

    def test_tokens_are_rs256(self, admin: dict):
        """Tokens are signed with RS256."""
        assert jwt.get_unverified_header(admin["token"])["alg"] == "RS256"

    def test_wrong_password(self, services: Services, admin: dict):
        """Wrong password raises InvalidCredentials."""
        with pytest.raises(InvalidCredentials):
            services.tokens.issue("sarah", "wrong")

    def test_unknown_user(self, services: Services, admin: dict):
        """Unknown username raises InvalidCredentials."""
        with pytest.raises(InvalidCredentials) as exc:
            services.tokens.issue("nobody", "oakheart")
        assert exc.value.message == "Username or password is wrong"

    def test_username_is_case_insensitive(self, services: Services, admin: dict):
        """Login ignores username case."""
        pair = services.tokens.issue("SARAH", "oakheart")
        assert services.tokens.validate(pair.access_token).id == admin["id"]

    def test_missing_private_key(self, services: Services, admin: dict, tmp_path):
        """Missing private key raises SigningError."""
        services.tokens.private_key_path = str(tmp_path / "missing.pem")
        with pytest.raises(SigningError):
            services.tokens.issue("sarah", "oakheart")


class TestValidate:
    """Tests for token validation."""

    def test_validate_returns_identity(self, services: Services, admin: dict):
        """Validate returns the token's identity."""
        user = services.tokens.validate(admin["token"])
        assert user.id == admin["id"]
        assert user.username == "sarah"
        assert user.email == "sarah@email.com"

    def test_refresh_token_validates(self, services: Services, admin: dict):
        """Refresh tokens validate too."""
        assert services.tokens.validate(admin["refresh_token"]).id == admin["id"]

    def test_garbage_token(self, services: Services, admin: dict):
        """Malformed token raises InvalidToken."""
        with pytest.raises(InvalidToken):
            services.tokens.validate("not.a.token")

    def test_tampered_token(self, services: Services, admin: dict):
        """Altered signature raises InvalidToken."""
        header, payload, signature = admin["token"].split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(InvalidToken):
            services.tokens.validate(tampered)

    def test_token_signed_with_foreign_key(self, store: MemoryIdentityStore, foreign_key_paths, services, admin):
        """Token signed by another key raises InvalidToken."""
        foreign = make_tokens(store, foreign_key_paths)
        token = foreign.create_access_token(store.get(admin["id"]))
        with pytest.raises(InvalidToken):
            services.tokens.validate(token)

    def test_deleted_subject(self, services: Services, store: MemoryIdentityStore, admin: dict):
        """Token of a deleted user raises InvalidToken."""
        store.delete_by_id(admin["id"])
        with pytest.raises(InvalidToken):
            services.tokens.validate(admin["token"])

    def test_missing_public_key(self, services: Services, admin: dict, tmp_path):
        """Missing public key raises InvalidToken."""
        services.tokens.public_key_path = str(tmp_path / "missing.pem")
        with pytest.raises(InvalidToken):
            services.tokens.validate(admin["token"])


class TestExpiry:
    """Tests for token lifetimes."""

    def test_expired_access_token(self, store: MemoryIdentityStore, key_paths, admin: dict):
        """Access token expires after an hour."""
        issued_at = datetime.now(timezone.utc) - ACCESS_TOKEN_TTL - timedelta(minutes=1)
        old = make_tokens(store, key_paths, clock=lambda: issued_at)
        token = old.create_access_token(store.get(admin["id"]))
        with pytest.raises(InvalidToken):
            make_tokens(store, key_paths).validate(token)

    def test_access_token_valid_within_hour(self, store: MemoryIdentityStore, key_paths, admin: dict):
        """Access token works within its hour."""
        issued_at = datetime.now(timezone.utc) - timedelta(minutes=50)
        old = make_tokens(store, key_paths, clock=lambda: issued_at)
        token = old.create_access_token(store.get(admin["id"]))
        assert make_tokens(store, key_paths).validate(token).id == admin["id"]

    def test_year_old_refresh_token_still_refreshes(self, store: MemoryIdentityStore, key_paths, admin: dict):
        """Refresh token still works just under a year later."""
        issued_at = datetime.now(timezone.utc) - timedelta(days=364)
        old = make_tokens(store, key_paths, clock=lambda: issued_at)
        token = old.create_refresh_token(store.get(admin["id"]))
        assert make_tokens(store, key_paths).refresh(token)

    def test_expired_refresh_token(self, store: MemoryIdentityStore, key_paths, admin: dict):
        """Refresh token expires after a year."""
        issued_at = datetime.now(timezone.utc) - timedelta(days=367)
        old = make_tokens(store, key_paths, clock=lambda: issued_at)
        token = old.create_refresh_token(store.get(admin["id"]))
        with pytest.raises(InvalidToken):
            make_tokens(store, key_paths).refresh(token)

    def test_leap_day_refresh_expiry(self, store: MemoryIdentityStore, key_paths, admin: dict):
        """Leap-day refresh token expires on Feb 28."""
        leap_day = datetime(2028, 2, 29, 12, 0, tzinfo=timezone.utc)
        tokens = make_tokens(store, key_paths, clock=lambda: leap_day)
        claims = jwt.get_unverified_claims(tokens.create_refresh_token(store.get(admin["id"])))
        assert claims["exp"] == int(datetime(2029, 2, 28, 12, 0, tzinfo=timezone.utc).timestamp())


class TestRefresh:
    """Tests for refreshing access tokens."""

    def test_refresh_returns_access_token(self, services: Services, admin: dict):
        """Refresh returns a valid access token for the same user."""
        access_token = services.tokens.refresh(admin["refresh_token"])
        claims = jwt.get_unverified_claims(access_token)
        assert claims["userId"] == admin["id"]
        assert services.tokens.validate(access_token).id == admin["id"]

    def test_refresh_does_not_rotate(self, services: Services, admin: dict):
        """The same refresh token keeps working."""
        services.tokens.refresh(admin["refresh_token"])
        assert services.tokens.refresh(admin["refresh_token"])

    def test_refresh_with_invalid_token(self, services: Services, admin: dict):
        """Refresh with a garbage token raises InvalidToken."""
        with pytest.raises(InvalidToken):
            services.tokens.refresh("invalid")
