"""One-time code generation."""

import secrets
import string

RECOVERY_CODE_LENGTH = 6
RESETTING_CODE_LENGTH = 10
INVITE_CODE_LENGTH = 32


def generate_code(size: int) -> str:
    """Return ``size`` decimal digits, each drawn uniformly from a CSPRNG."""
    return "".join(secrets.choice(string.digits) for _ in range(size))
