from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """The actor behind a widget event."""

    name: str


def is_owner(user: User | None, owner_name: str | None) -> bool:
    """Return True when `user` is the configured owner.

    An unset owner name authorizes nobody.
    """
    if user is None or not owner_name:
        return False
    return (user.name or "").strip() == owner_name.strip()
