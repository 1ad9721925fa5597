"""Exception hierarchy raised by the OpenTok server library."""
from __future__ import annotations

import enum


class OpenTokError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgumentError(OpenTokError, ValueError):
    """A caller-supplied value was rejected before any signing happened."""

    kind = "invalid_argument"


class EmptySessionIdError(InvalidArgumentError):
    kind = "empty_session_id"


class MalformedSessionIdError(InvalidArgumentError):
    """No ``~``-delimited structure could be recovered from the session id."""

    kind = "malformed_session_id"


class InvalidSessionIdError(InvalidArgumentError):
    """The session id decoded but does not name an owning project."""

    kind = "invalid_session_id"


class UnknownRoleError(InvalidArgumentError):
    kind = "unknown_role"


class ExpireTimeProblem(str, enum.Enum):
    NOT_A_NUMBER = "not_a_number"
    IN_THE_PAST = "in_the_past"
    TOO_FAR_IN_FUTURE = "too_far_in_future"


class InvalidExpireTimeError(InvalidArgumentError):
    kind = "invalid_expire_time"

    def __init__(self, message: str, reason: ExpireTimeProblem) -> None:
        super().__init__(message)
        self.reason = reason


class ConnectionDataTooLargeError(InvalidArgumentError):
    kind = "connection_data_too_large"


class InvalidLayoutClassListError(InvalidArgumentError):
    kind = "invalid_layout_class_list"


class SessionKeyMismatchError(InvalidArgumentError):
    """The session belongs to a different project than the caller's key."""

    kind = "session_key_mismatch"


class TokenError(OpenTokError):
    """Base class for failures while decoding or verifying a signed token."""


class TokenMalformedError(TokenError):
    pass


class TokenSignatureInvalidError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


class OpenTokFatalError(OpenTokError):
    """Unrecoverable misconfiguration; not caused by per-call arguments."""


class SigningKeyError(OpenTokFatalError):
    pass


class RequestError(OpenTokError):
    """The platform could not be reached or answered with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(RequestError):
    """The platform rejected the project key or secret."""


class UnexpectedResponseError(RequestError):
    """The platform answered with a body this library cannot interpret."""
