"""Assembly of the claim sets carried by client tokens and API auth headers."""
from __future__ import annotations

import logging
import math
import secrets
import time
from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from ..schemas.tokens import (
    CONNECT_SCOPE,
    ISSUER_TYPE,
    AccountCredential,
    TokenClaims,
    TokenFormat,
    TokenOptions,
)
from .validation import first_violation, validate_role

DEFAULT_TOKEN_LIFETIME_SECONDS = 24 * 60 * 60
AUTH_HEADER_LIFETIME_SECONDS = 5 * 60

logger = logging.getLogger(__name__)


def _current_time(now: float | None) -> int:
    return int(time.time() if now is None else now)


def legacy_nonce() -> str:
    """Random ratio in ``[0, 1)`` with 53 bits of entropy."""

    return repr(secrets.randbits(53) / (1 << 53))


def unique_nonce() -> str:
    return str(uuid4())


def build_user_token_claims(
    credential: AccountCredential,
    session_id: str,
    options: TokenOptions | Mapping[str, Any] | None = None,
    *,
    token_format: TokenFormat = TokenFormat.MODERN,
    now: float | None = None,
) -> TokenClaims:
    """Validate ``options`` and return the claims for a session connection token.

    Mappings are reduced to the recognised option names first. Every rule runs
    before anything is returned, so an invalid request never yields claims.
    """

    if not isinstance(options, TokenOptions):
        options = TokenOptions.from_mapping(options)
    create_time = _current_time(now)

    violation = first_violation(credential.api_key, session_id, options, create_time)
    if violation is not None:
        logger.debug("Rejected token options for session %s: %s", session_id, violation.kind)
        raise violation

    expire_time = options.expire_time
    if expire_time is None:
        expire_time = create_time + DEFAULT_TOKEN_LIFETIME_SECONDS

    legacy = TokenFormat(token_format) is TokenFormat.LEGACY
    claims: TokenClaims = {
        "ist": ISSUER_TYPE,
        "iss": credential.api_key,
        "sub": session_id,
        "iat": create_time,
        "exp": math.ceil(expire_time),
        "jti": legacy_nonce() if legacy else unique_nonce(),
        "role": validate_role(options.role).value,
    }
    if not legacy:
        claims["scope"] = CONNECT_SCOPE
    if options.data:
        claims["connection_data"] = options.data
    if options.initial_layout_class_list:
        claims["initial_layout_class_list"] = " ".join(options.initial_layout_class_list)
    return claims


def build_auth_header_claims(
    credential: AccountCredential,
    session_id: str | None = None,
    *,
    now: float | None = None,
) -> TokenClaims:
    """Return the claims for a single outbound REST request."""

    issued_at = _current_time(now)
    claims: TokenClaims = {
        "ist": ISSUER_TYPE,
        "iss": credential.api_key,
    }
    if session_id:
        claims["sub"] = session_id
    claims["iat"] = issued_at
    claims["exp"] = issued_at + AUTH_HEADER_LIFETIME_SECONDS
    claims["jti"] = unique_nonce()
    return claims
