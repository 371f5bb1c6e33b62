"""Deterministic username allocation."""

import re
from typing import Awaitable, Callable

_INVALID_CHARS = re.compile(r"[^a-z0-9._-]")
FALLBACK_USERNAME = "user"

# Upper bound on suffixes tried before giving up
MAX_SUFFIX = 10_000


def username_base(value: str) -> str:
    """Lowercase ``value`` and strip characters not allowed in usernames."""
    cleaned = _INVALID_CHARS.sub("", value.strip().lower())
    return cleaned or FALLBACK_USERNAME


def username_base_from_email(email: str) -> str:
    """Derive a username stem from the local part of an email address."""
    return username_base(email.split("@", 1)[0])


async def allocate_username(
    base: str,
    is_taken: Callable[[str], Awaitable[bool]],
) -> str:
    """Return ``base`` or the first free ``base1``, ``base2``, ...

    The sequence is fixed, so the same set of existing names always
    yields the same result.
    """
    candidate = base
    suffix = 0
    while await is_taken(candidate):
        suffix += 1
        if suffix > MAX_SUFFIX:
            msg = f"No free username for base '{base}'"
            raise ValueError(msg)
        candidate = f"{base}{suffix}"
    return candidate
