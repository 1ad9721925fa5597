"""Signing and verification of client connection tokens.

Two mutually incompatible formats exist. Legacy ``T1`` tokens wrap an
HMAC-SHA1 signed query string in base64; modern tokens are HS256 JWTs. The
caller always names the format, it is never sniffed from the token.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from urllib.parse import parse_qsl, quote_plus

import jwt

from ..core.errors import (
    SigningKeyError,
    TokenExpiredError,
    TokenMalformedError,
    TokenSignatureInvalidError,
)
from ..schemas.tokens import AccountCredential, TokenClaims, TokenFormat

LEGACY_PREFIX = "T1=="
JWT_ALGORITHM = "HS256"
DATA_STRING_KEY = "data_string"

# Legacy data string field order, keyed by the claim each field is read from.
_LEGACY_FIELDS = (
    ("session_id", "sub"),
    ("create_time", "iat"),
    ("role", "role"),
    ("nonce", "jti"),
    ("expire_time", "exp"),
    ("connection_data", "connection_data"),
    ("initial_layout_class_list", "initial_layout_class_list"),
)
_QUOTED_FIELDS = frozenset({"connection_data", "initial_layout_class_list"})

logger = logging.getLogger(__name__)


def _secret_bytes(credential: AccountCredential) -> bytes:
    secret = credential.api_secret
    if not isinstance(secret, str) or not secret:
        raise SigningKeyError("Project secret must be a non-empty string")
    return secret.encode("utf-8")


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def legacy_data_string(claims: TokenClaims) -> str:
    """Serialise claims into the ordered ``key=value&...`` string that gets signed."""

    pairs = []
    for name, claim in _LEGACY_FIELDS:
        value = claims.get(claim)
        if value is None or value == "":
            continue
        text = str(value)
        if name in _QUOTED_FIELDS:
            text = quote_plus(text, safe="").replace("~", "%7E")
        pairs.append(f"{name}={text}")
    return "&".join(pairs)


def sign_legacy(data_string: str, credential: AccountCredential) -> str:
    return hmac.new(_secret_bytes(credential), data_string.encode("utf-8"), hashlib.sha1).hexdigest()


def encode_legacy(claims: TokenClaims, credential: AccountCredential) -> str:
    data_string = legacy_data_string(claims)
    signature = sign_legacy(data_string, credential)
    envelope = f"partner_id={credential.api_key}&sig={signature}:{data_string}"
    return LEGACY_PREFIX + base64.b64encode(envelope.encode("utf-8")).decode("ascii")


def decode_legacy(token: str) -> dict[str, str]:
    """Split a ``T1`` token into its fields without checking the signature.

    The signed data string is returned verbatim under ``data_string``.
    """

    if not isinstance(token, str) or not token.startswith(LEGACY_PREFIX):
        raise TokenMalformedError("Legacy token must start with " + LEGACY_PREFIX)
    try:
        decoded = base64.b64decode(token[len(LEGACY_PREFIX):], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise TokenMalformedError(f"Legacy token is not valid base64: {exc}") from exc

    partner_info, separator, data_string = decoded.partition(":")
    if not separator:
        raise TokenMalformedError("Legacy token is missing its data string")

    fields = dict(parse_qsl(partner_info, keep_blank_values=True))
    fields.update(parse_qsl(data_string, keep_blank_values=True))
    fields[DATA_STRING_KEY] = data_string
    return fields


def verify_legacy(token: str, credential: AccountCredential) -> dict[str, str]:
    fields = decode_legacy(token)
    expected = sign_legacy(fields[DATA_STRING_KEY], credential)
    if not hmac.compare_digest(expected.encode("ascii"), fields.get("sig", "").encode("utf-8")):
        raise TokenSignatureInvalidError("Legacy token signature does not match")
    if fields.get("partner_id") != credential.api_key:
        raise TokenSignatureInvalidError("Legacy token was issued for a different project")
    return fields


def encode_modern(claims: TokenClaims, credential: AccountCredential) -> str:
    return jwt.encode(dict(claims), _secret_bytes(credential), algorithm=JWT_ALGORITHM)


def decode_modern(
    token: str,
    credential: AccountCredential,
    *,
    verify_exp: bool = True,
) -> TokenClaims:
    """Verify a JWT against the project secret and return its claims.

    The signature is checked before any part of the payload is parsed.
    """

    secret = _secret_bytes(credential)
    parts = token.split(".") if isinstance(token, str) else []
    if len(parts) != 3 or not all(parts):
        raise TokenMalformedError("Token must have three dot separated segments")

    try:
        signing_input = f"{parts[0]}.{parts[1]}".encode("ascii")
        presented = parts[2].encode("ascii")
    except UnicodeEncodeError as exc:
        raise TokenMalformedError("Token contains non-ascii characters") from exc
    expected = _b64url(hmac.new(secret, signing_input, hashlib.sha256).digest()).encode("ascii")
    if not hmac.compare_digest(expected, presented):
        raise TokenSignatureInvalidError("Token signature does not match")

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"verify_exp": verify_exp},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token has expired") from exc
    except jwt.InvalidSignatureError as exc:
        raise TokenSignatureInvalidError(str(exc)) from exc
    except jwt.InvalidTokenError as exc:
        raise TokenMalformedError(f"Invalid token: {exc}") from exc


def encode(token_format: TokenFormat | str, claims: TokenClaims, credential: AccountCredential) -> str:
    """Sign ``claims`` in the requested format."""

    token_format = TokenFormat(token_format)
    if token_format is TokenFormat.LEGACY:
        token = encode_legacy(claims, credential)
    else:
        token = encode_modern(claims, credential)
    logger.debug("Signed %s token for session %s", token_format.value, claims.get("sub"))
    return token
