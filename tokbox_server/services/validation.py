"""Rules deciding which token options are acceptable."""
from __future__ import annotations

import math
import numbers
from collections.abc import Sequence

from ..core.errors import (
    ConnectionDataTooLargeError,
    EmptySessionIdError,
    ExpireTimeProblem,
    InvalidArgumentError,
    InvalidExpireTimeError,
    InvalidLayoutClassListError,
    SessionKeyMismatchError,
    UnknownRoleError,
)
from ..schemas.tokens import Role, TokenOptions
from .session_ids import owner_account_key

MAX_TOKEN_LIFETIME_SECONDS = 30 * 24 * 60 * 60
MAX_CONNECTION_DATA_BYTES = 1000

_ROLE_VALUES = frozenset(role.value for role in Role)


def validate_session_id(session_id: object) -> None:
    if not isinstance(session_id, str) or not session_id:
        raise EmptySessionIdError(f"Null or empty session id is not valid: {session_id!r}")


def validate_role(role: object) -> Role:
    """Return the matching ``Role``; names are case-sensitive."""

    if isinstance(role, Role):
        return role
    if isinstance(role, str) and role in _ROLE_VALUES:
        return Role(role)
    raise UnknownRoleError(f"Unknown role: {role!r}")


def validate_expire_time(expire_time: object, create_time: int) -> None:
    if expire_time is None:
        return
    if isinstance(expire_time, bool) or not isinstance(expire_time, numbers.Real):
        raise InvalidExpireTimeError(
            f"Expire time must be a number: {expire_time!r}", ExpireTimeProblem.NOT_A_NUMBER
        )
    if not math.isfinite(expire_time):
        raise InvalidExpireTimeError(
            f"Expire time must be a finite number: {expire_time!r}", ExpireTimeProblem.NOT_A_NUMBER
        )
    if expire_time <= create_time:
        raise InvalidExpireTimeError(
            f"Expire time must be in the future: {expire_time} <= {create_time}",
            ExpireTimeProblem.IN_THE_PAST,
        )
    latest = create_time + MAX_TOKEN_LIFETIME_SECONDS
    if expire_time > latest:
        raise InvalidExpireTimeError(
            f"Expire time must be in the next 30 days: {expire_time} > {latest}",
            ExpireTimeProblem.TOO_FAR_IN_FUTURE,
        )


def validate_connection_data(data: object) -> None:
    if data is None:
        return
    if not isinstance(data, str):
        raise ConnectionDataTooLargeError(f"Connection data must be a string: {data!r}")
    try:
        size = len(data.encode("utf-8"))
    except UnicodeEncodeError as exc:
        raise ConnectionDataTooLargeError("Connection data must be valid UTF-8") from exc
    if size > MAX_CONNECTION_DATA_BYTES:
        raise ConnectionDataTooLargeError(
            f"Connection data must be at most {MAX_CONNECTION_DATA_BYTES} bytes. Length: {size}"
        )


def validate_layout_class_list(class_list: object) -> None:
    if class_list is None:
        return
    if isinstance(class_list, (str, bytes)) or not isinstance(class_list, Sequence):
        raise InvalidLayoutClassListError(
            f"Layout class list must be a list of class names: {class_list!r}"
        )
    for item in class_list:
        if not isinstance(item, str) or not item.strip():
            raise InvalidLayoutClassListError(f"Invalid layout class name: {item!r}")


def validate_session_ownership(session_id: str, api_key: str) -> None:
    owner = owner_account_key(session_id)
    if owner != str(api_key):
        raise SessionKeyMismatchError(
            f"The session id must belong to the project key. session id: {session_id!r}, key: {api_key!r}"
        )


def first_violation(
    api_key: str,
    session_id: object,
    options: TokenOptions,
    create_time: int,
) -> InvalidArgumentError | None:
    """Run every rule in order and return the first failure instead of raising it."""

    try:
        validate_session_id(session_id)
        validate_role(options.role)
        validate_expire_time(options.expire_time, create_time)
        validate_connection_data(options.data)
        validate_layout_class_list(options.initial_layout_class_list)
        validate_session_ownership(session_id, api_key)  # type: ignore[arg-type]
    except InvalidArgumentError as exc:
        return exc
    return None
