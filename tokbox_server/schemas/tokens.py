"""Data contracts for token generation."""
from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

TokenClaims = dict[str, Any]

ISSUER_TYPE = "project"
CONNECT_SCOPE = "session.connect"

# Accepted option names, including the camelCase spellings other SDKs use.
_OPTION_ALIASES = {
    "role": "role",
    "expire_time": "expire_time",
    "expireTime": "expire_time",
    "data": "data",
    "connection_data": "data",
    "connectionData": "data",
    "initial_layout_class_list": "initial_layout_class_list",
    "initialLayoutClassList": "initial_layout_class_list",
}


class Role(str, enum.Enum):
    SUBSCRIBER = "subscriber"
    PUBLISHER = "publisher"
    MODERATOR = "moderator"


class TokenFormat(str, enum.Enum):
    LEGACY = "legacy"
    MODERN = "modern"


@dataclass(frozen=True, slots=True)
class AccountCredential:
    """Project key and secret; the secret is the HMAC signing key."""

    api_key: str
    api_secret: str = field(repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.api_key, int) and not isinstance(self.api_key, bool):
            object.__setattr__(self, "api_key", str(self.api_key))


@dataclass(frozen=True, slots=True)
class TokenOptions:
    """Options for a client connection token.

    ``expire_time`` is epoch seconds and defaults to 24 hours after creation.
    ``data`` is free-form connection metadata shown to other participants.
    """

    role: Role | str = Role.PUBLISHER
    expire_time: int | float | None = None
    data: str | None = None
    initial_layout_class_list: Sequence[str] | None = None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "TokenOptions":
        """Build options from a loose mapping, ignoring keys that are not recognised."""

        if not options:
            return cls()
        values: dict[str, Any] = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key)
            if name is None or value is None:
                continue
            values[name] = value
        return cls(**values)
