"""Per-request authentication for calls to the platform REST API."""
from __future__ import annotations

import json
import logging
from typing import Generator
from urllib.parse import parse_qs

import httpx

from ..schemas.tokens import AccountCredential
from .claims import build_auth_header_claims
from .tokens import encode_modern

AUTH_HEADER = "X-OPENTOK-AUTH"
_SESSION_ID_KEYS = ("sessionId", "session_id")

logger = logging.getLogger(__name__)


def issue_auth_header(
    credential: AccountCredential,
    session_id: str | None = None,
    *,
    now: float | None = None,
) -> str:
    """Return a freshly signed, five minute auth header value."""

    return encode_modern(build_auth_header_claims(credential, session_id, now=now), credential)


def session_id_from_body(request: httpx.Request) -> str | None:
    """Find the session a request body refers to, if it names one."""

    body = request.content
    if not body:
        return None
    content_type = request.headers.get("content-type", "")
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return None

    if "json" in content_type:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            return None
        if not isinstance(payload, dict):
            return None
        values = {key: payload.get(key) for key in _SESSION_ID_KEYS}
    elif "x-www-form-urlencoded" in content_type:
        form = parse_qs(text)
        values = {key: (form.get(key) or [None])[0] for key in _SESSION_ID_KEYS}
    else:
        return None

    for key in _SESSION_ID_KEYS:
        value = values.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class OpenTokAuth(httpx.Auth):
    """Attach a new ``X-OPENTOK-AUTH`` header to every outgoing request."""

    requires_request_body = True

    def __init__(self, credential: AccountCredential) -> None:
        self._credential = credential

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        session_id = session_id_from_body(request)
        request.headers[AUTH_HEADER] = issue_auth_header(self._credential, session_id)
        logger.debug("Signed %s %s for project %s", request.method, request.url.path, self._credential.api_key)
        yield request
