"""Random account names and passwords for provisioned MySQL users."""

from __future__ import annotations

import secrets
import string

USERNAME_PREFIX = "ghost-"
USERNAME_SPACE = 1000

PASSWORD_LENGTH = 10
LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
# Quotes, backticks and backslashes are left out so the password survives
# shells and hand-edited config files unchanged.
SYMBOLS = "!@#$%^&*()+_-=}{[]|:;/?.><,~"


def generate_username() -> str:
    """Return a candidate account name such as ``ghost-417``.

    The namespace is deliberately small; callers must expect collisions.
    """
    return f"{USERNAME_PREFIX}{secrets.randbelow(USERNAME_SPACE)}"


def generate_password(
    length: int = PASSWORD_LENGTH,
    *,
    numbers: bool = True,
    symbols: bool = True,
    strict: bool = True,
) -> str:
    """Generate a random password.

    With ``strict`` the result contains at least one character from every
    enabled class (lowercase, uppercase, and optionally digits and symbols).
    """
    pools = [LOWERCASE, UPPERCASE]
    if numbers:
        pools.append(DIGITS)
    if symbols:
        pools.append(SYMBOLS)
    if strict and length < len(pools):
        raise ValueError(f"Length must be at least {len(pools)} for a strict password")

    alphabet = "".join(pools)
    while True:
        candidate = "".join(secrets.choice(alphabet) for _ in range(length))
        if not strict or all(any(ch in pool for ch in candidate) for pool in pools):
            return candidate
