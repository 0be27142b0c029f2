"""
Password hashing and complexity rules.
"""

from __future__ import annotations

import hashlib
import secrets
import string

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 30
# How many of the character classes (lower, upper, digit, symbol) must appear
PASSWORD_REQUIRED_CLASSES = 2


def hash_password(password: str) -> str:
    """
    Hash a password using PBKDF2-SHA256.

    Returns: salt:hash format string
    """
    salt = secrets.token_hex(32)
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=100_000
    )
    return f"{salt}:{hash_bytes.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, stored_hash = password_hash.split(':')
        hash_bytes = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            iterations=100_000
        )
        return secrets.compare_digest(hash_bytes.hex(), stored_hash)
    except (ValueError, AttributeError):
        return False


def check_password_complexity(password: str) -> str:
    """
    Validate password length and character mix.

    Used as a pydantic validator; raises ValueError with a readable message.
    """
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValueError(
            f"Password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters"
        )

    classes = [
        any(c.islower() for c in password),
        any(c.isupper() for c in password),
        any(c.isdigit() for c in password),
        any(c in string.punctuation for c in password),
    ]
    if sum(classes) < PASSWORD_REQUIRED_CLASSES:
        raise ValueError(
            "Password must mix at least two of: lowercase, uppercase, digits, symbols"
        )
    return password
