"""Tests for legacy and JWT token signing."""
from __future__ import annotations

import base64
import hashlib
import hmac
import time

import jwt
import pytest

from tests.helpers import API_KEY, API_SECRET, SESSION_ID
from tokbox_server.core.errors import (
    SigningKeyError,
    TokenExpiredError,
    TokenMalformedError,
    TokenSignatureInvalidError,
)
from tokbox_server.schemas.tokens import AccountCredential, TokenFormat, TokenOptions
from tokbox_server.services import tokens
from tokbox_server.services.claims import build_user_token_claims


def _legacy_token(credential, options=None, now=None):
    claims = build_user_token_claims(
        credential, SESSION_ID, options, token_format=TokenFormat.LEGACY, now=now
    )
    return tokens.encode(TokenFormat.LEGACY, claims, credential)


def test_legacy_token_round_trip_with_role_and_expiry(credential):
    now = int(time.time())

    token = _legacy_token(credential, {"role": "moderator", "expireTime": now + 3600}, now=now)
    fields = tokens.verify_legacy(token, credential)

    assert token.startswith("T1==")
    assert fields["partner_id"] == API_KEY
    assert fields["session_id"] == SESSION_ID
    assert fields["role"] == "moderator"
    assert fields["create_time"] == str(now)
    assert fields["expire_time"] == str(now + 3600)
    assert fields["nonce"]
    assert "connection_data" not in fields
    expected = hmac.new(API_SECRET.encode(), fields["data_string"].encode(), hashlib.sha1).hexdigest()
    assert fields["sig"] == expected


def test_legacy_data_string_field_order(credential):
    token = _legacy_token(credential, {"data": "name=Jo & Co: 1", "initialLayoutClassList": ["focus"]})

    data_string = tokens.decode_legacy(token)["data_string"]
    names = [pair.split("=", 1)[0] for pair in data_string.split("&")]

    assert names == [
        "session_id",
        "create_time",
        "role",
        "nonce",
        "expire_time",
        "connection_data",
        "initial_layout_class_list",
    ]


def test_legacy_connection_data_is_percent_encoded(credential):
    token = _legacy_token(credential, {"data": "name=Jo & Co: 1"})

    fields = tokens.decode_legacy(token)

    assert "connection_data=name%3DJo+%26+Co%3A+1" in fields["data_string"]
    assert fields["connection_data"] == "name=Jo & Co: 1"


def test_legacy_connection_data_escapes_tilde_and_slash(credential):
    token = _legacy_token(credential, {"data": "a~b/c"})

    fields = tokens.verify_legacy(token, credential)

    assert "connection_data=a%7Eb%2Fc" in fields["data_string"]
    assert fields["connection_data"] == "a~b/c"


def test_legacy_token_signed_with_other_secret_fails(credential):
    token = _legacy_token(credential)
    other = AccountCredential(api_key=API_KEY, api_secret="another-secret-another-secret-123")

    with pytest.raises(TokenSignatureInvalidError):
        tokens.verify_legacy(token, other)


def test_legacy_token_for_other_project_fails(credential):
    token = _legacy_token(credential)
    other = AccountCredential(api_key="87654321", api_secret=API_SECRET)

    with pytest.raises(TokenSignatureInvalidError):
        tokens.verify_legacy(token, other)


@pytest.mark.parametrize(
    "token",
    [
        "T2==cGFydG5lcl9pZD0x",
        "T1==not base64!!",
        "T1==" + base64.b64encode(b"partner_id=1&sig=abc").decode(),
        12345,
    ],
)
def test_malformed_legacy_tokens(token):
    with pytest.raises(TokenMalformedError):
        tokens.decode_legacy(token)


def test_modern_token_round_trip(credential):
    claims = build_user_token_claims(
        credential,
        SESSION_ID,
        TokenOptions(role="subscriber", data="hello", initial_layout_class_list=["a", "b"]),
    )

    token = tokens.encode(TokenFormat.MODERN, claims, credential)

    assert tokens.decode_modern(token, credential) == claims
    assert jwt.get_unverified_header(token) == {"alg": "HS256", "typ": "JWT"}


def test_modern_token_rejects_any_altered_character(credential):
    claims = build_user_token_claims(credential, SESSION_ID)
    token = tokens.encode_modern(claims, credential)

    for index, char in enumerate(token):
        if char == ".":
            continue
        replacement = "A" if char != "A" else "B"
        altered = token[:index] + replacement + token[index + 1:]
        with pytest.raises(TokenSignatureInvalidError):
            tokens.decode_modern(altered, credential)


def test_modern_token_with_wrong_secret_fails(credential):
    token = tokens.encode_modern(build_user_token_claims(credential, SESSION_ID), credential)
    other = AccountCredential(api_key=API_KEY, api_secret="another-secret-another-secret-123")

    with pytest.raises(TokenSignatureInvalidError):
        tokens.decode_modern(token, other)


@pytest.mark.parametrize("token", ["abc.def", "a..b", "", "a.b.c.d", "é.b.c"])
def test_malformed_modern_tokens(credential, token):
    with pytest.raises(TokenMalformedError):
        tokens.decode_modern(token, credential)


def test_signed_garbage_payload_is_malformed(credential):
    header = base64.urlsafe_b64encode(b'{"alg":"HS256","typ":"JWT"}').rstrip(b"=").decode()
    payload = base64.urlsafe_b64encode(b"not json").rstrip(b"=").decode()
    signing_input = f"{header}.{payload}"
    signature = hmac.new(API_SECRET.encode(), signing_input.encode(), hashlib.sha256).digest()
    token = f"{signing_input}.{base64.urlsafe_b64encode(signature).rstrip(b'=').decode()}"

    with pytest.raises(TokenMalformedError):
        tokens.decode_modern(token, credential)


def test_expired_modern_token(credential):
    issued = time.time() - 3 * 86_400
    token = tokens.encode_modern(build_user_token_claims(credential, SESSION_ID, now=issued), credential)

    with pytest.raises(TokenExpiredError):
        tokens.decode_modern(token, credential)

    claims = tokens.decode_modern(token, credential, verify_exp=False)
    assert claims["sub"] == SESSION_ID


def test_encode_dispatches_on_explicit_format(credential):
    claims = build_user_token_claims(credential, SESSION_ID, token_format=TokenFormat.LEGACY)

    assert tokens.encode("legacy", claims, credential).startswith("T1==")
    assert tokens.encode(TokenFormat.MODERN, claims, credential).count(".") == 2


@pytest.mark.parametrize("secret", ["", None])
def test_missing_secret_is_fatal(secret):
    credential = AccountCredential(api_key=API_KEY, api_secret=secret)  # type: ignore[arg-type]
    claims = {"iss": API_KEY, "sub": SESSION_ID, "iat": 1, "exp": 2, "jti": "x"}

    with pytest.raises(SigningKeyError):
        tokens.encode_modern(claims, credential)
    with pytest.raises(SigningKeyError):
        tokens.encode_legacy(claims, credential)
