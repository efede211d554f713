"""Password strength rules and bcrypt hashing."""
import re
from dataclasses import dataclass, field

import bcrypt

SPECIAL_CHARACTERS = r"[!@#$%^&*(),.?\":{}|<>]"

PASSWORD_RULES: list[tuple[str, str]] = [
    (r"[A-Z]", "Password must contain at least one uppercase letter"),
    (r"[a-z]", "Password must contain at least one lowercase letter"),
    (r"[0-9]", "Password must contain at least one number"),
    (SPECIAL_CHARACTERS, "Password must contain at least one special character"),
]

MIN_PASSWORD_LENGTH = 8


@dataclass
class PasswordCheck:
    """Outcome of a password strength check."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_password(password: str) -> PasswordCheck:
    """Check a password against every rule, collecting all failures in order."""
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    for pattern, message in PASSWORD_RULES:
        if not re.search(pattern, password):
            errors.append(message)
    return PasswordCheck(is_valid=not errors, errors=errors)


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(
        password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)
    ).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Compare a candidate password to a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
