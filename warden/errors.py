"""Typed errors raised by the identity services.

Services raise these; only the HTTP layer knows about status codes.
"""

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    CODE_MISMATCH = "code_mismatch"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    INVALID_PAYLOAD = "invalid_payload"
    ALLOCATION_EXHAUSTED = "allocation_exhausted"
    DELIVERY = "delivery_error"
    STORE = "store_error"
    HASHING = "hashing_error"
    SIGNING = "signing_error"


class AuthError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.STORE
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Username or password is wrong"


class InvalidToken(AuthError):
    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid token"


class NotFound(AuthError):
    kind = ErrorKind.NOT_FOUND
    default_message = "User does not exist"


class CodeMismatch(AuthError):
    kind = ErrorKind.CODE_MISMATCH
    default_message = "Provided code does not match"


class Unauthorized(AuthError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Wrong email or invite code"


class Forbidden(AuthError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Available only for admin"


class Conflict(AuthError):
    kind = ErrorKind.CONFLICT
    default_message = "Username already exists"


class InvalidPayload(AuthError):
    kind = ErrorKind.INVALID_PAYLOAD
    default_message = "Invalid update payload"


class AllocationExhausted(AuthError):
    kind = ErrorKind.ALLOCATION_EXHAUSTED
    default_message = "Cannot allocate user id"


class DeliveryError(AuthError):
    kind = ErrorKind.DELIVERY
    default_message = "Email was not sent"


class StoreError(AuthError):
    kind = ErrorKind.STORE
    default_message = "Storage failure"


class DuplicateIdError(StoreError):
    """Another writer already holds the id. Only the allocator handles this."""

    def __init__(self, identity_id: int) -> None:
        self.identity_id = identity_id
        super().__init__(f"Id {identity_id} is already taken")


class HashingError(AuthError):
    kind = ErrorKind.HASHING
    default_message = "Failed to hash secret"


class SigningError(AuthError):
    kind = ErrorKind.SIGNING
    default_message = "Failed to sign token"
