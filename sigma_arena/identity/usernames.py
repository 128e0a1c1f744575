from __future__ import annotations

import hashlib
import re
from collections.abc import Collection

from sigma_arena.identity.errors import InvalidUsernameError

USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,20}$")
USERNAME_MAX_LENGTH = 20
SUGGESTION_COUNT = 3
_SUGGESTION_POOL = 8


def is_valid_username(username: str) -> bool:
    return USERNAME_RE.fullmatch(username) is not None


def validate_username(username: str) -> str:
    normalized = username.strip()
    if not is_valid_username(normalized):
        raise InvalidUsernameError(
            "username must be 3-20 characters of letters, digits and underscores"
        )
    return normalized


def suggestion_candidates(username: str) -> list[str]:
    """Deterministic alternatives derived from a hash of the requested name."""
    digest = hashlib.sha256(username.lower().encode("utf-8")).hexdigest()
    candidates: list[str] = []
    for index in range(_SUGGESTION_POOL):
        number = int(digest[index * 4 : index * 4 + 4], 16) % 1000
        separator = "_" if index % 2 else ""
        suffix = f"{separator}{number}"
        base = username[: USERNAME_MAX_LENGTH - len(suffix)]
        candidate = f"{base}{suffix}"
        if is_valid_username(candidate) and candidate.lower() not in {c.lower() for c in candidates}:
            candidates.append(candidate)
    return candidates


def pick_suggestions(candidates: list[str], taken_lowercase: Collection[str]) -> tuple[str, ...]:
    available = [candidate for candidate in candidates if candidate.lower() not in taken_lowercase]
    return tuple(available[:SUGGESTION_COUNT])
