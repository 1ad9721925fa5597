"""Server-side library for the OpenTok video platform."""
from __future__ import annotations

from .client import SDK_VERSION as __version__
from .client import OpenTok, Session
from .core.errors import (
    AuthenticationError,
    ConnectionDataTooLargeError,
    EmptySessionIdError,
    ExpireTimeProblem,
    InvalidArgumentError,
    InvalidExpireTimeError,
    InvalidLayoutClassListError,
    InvalidSessionIdError,
    MalformedSessionIdError,
    OpenTokError,
    OpenTokFatalError,
    RequestError,
    SessionKeyMismatchError,
    SigningKeyError,
    TokenError,
    TokenExpiredError,
    TokenMalformedError,
    TokenSignatureInvalidError,
    UnexpectedResponseError,
    UnknownRoleError,
)
from .schemas.sessions import ArchiveMode, MediaMode, SessionOptions
from .schemas.tokens import AccountCredential, Role, TokenFormat, TokenOptions

__all__ = [
    "__version__",
    "AccountCredential",
    "ArchiveMode",
    "AuthenticationError",
    "ConnectionDataTooLargeError",
    "EmptySessionIdError",
    "ExpireTimeProblem",
    "InvalidArgumentError",
    "InvalidExpireTimeError",
    "InvalidLayoutClassListError",
    "InvalidSessionIdError",
    "MalformedSessionIdError",
    "MediaMode",
    "OpenTok",
    "OpenTokError",
    "OpenTokFatalError",
    "RequestError",
    "Role",
    "Session",
    "SessionKeyMismatchError",
    "SessionOptions",
    "SigningKeyError",
    "TokenError",
    "TokenExpiredError",
    "TokenFormat",
    "TokenMalformedError",
    "TokenOptions",
    "TokenSignatureInvalidError",
    "UnexpectedResponseError",
    "UnknownRoleError",
]
