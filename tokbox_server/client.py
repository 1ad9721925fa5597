"""Project-level entry point: token generation and session creation."""
from __future__ import annotations

import logging
import platform
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Sequence

import httpx
from pydantic import ValidationError

from .core.config import DEFAULT_API_URL, Settings, get_settings
from .core.errors import (
    AuthenticationError,
    InvalidArgumentError,
    RequestError,
    SigningKeyError,
    UnexpectedResponseError,
)
from .schemas.sessions import ArchiveMode, MediaMode, SessionCreateResponse, SessionOptions
from .schemas.tokens import AccountCredential, Role, TokenFormat, TokenOptions
from .services import tokens
from .services.auth import OpenTokAuth
from .services.claims import build_user_token_claims

SDK_VERSION = "0.1.0"
USER_AGENT = f"OpenTok-Python-Server/{SDK_VERSION} python/{platform.python_version()}"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Session:
    """A session created on the platform, able to mint its own tokens."""

    session_id: str
    client: "OpenTok" = field(repr=False)
    media_mode: MediaMode = MediaMode.RELAYED
    archive_mode: ArchiveMode = ArchiveMode.MANUAL
    location: str | None = None

    def __str__(self) -> str:
        return self.session_id

    def generate_token(self, **options: Any) -> str:
        return self.client.generate_token(self.session_id, **options)


class OpenTok:
    """Client bound to one project's key and secret."""

    def __init__(
        self,
        api_key: str | int,
        api_secret: str,
        *,
        api_url: str = DEFAULT_API_URL,
        http_client: httpx.AsyncClient | None = None,
        default_token_format: TokenFormat = TokenFormat.MODERN,
    ) -> None:
        self.credential = AccountCredential(api_key=api_key, api_secret=api_secret)  # type: ignore[arg-type]
        self.api_url = api_url.rstrip("/")
        self.default_token_format = TokenFormat(default_token_format)
        self._http_client = http_client
        self._auth = OpenTokAuth(self.credential)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> "OpenTok":
        """Build a client from ``OPENTOK_*`` environment configuration."""

        settings = settings or get_settings()
        if not settings.api_key or not settings.api_secret:
            raise SigningKeyError("OPENTOK_API_KEY and OPENTOK_API_SECRET must both be set")
        kwargs.setdefault("default_token_format", settings.token_format)
        return cls(settings.api_key, settings.api_secret, api_url=settings.api_url, **kwargs)

    @property
    def api_key(self) -> str:
        return self.credential.api_key

    def generate_token(
        self,
        session_id: str,
        *,
        role: Role | str = Role.PUBLISHER,
        expire_time: int | float | None = None,
        data: str | None = None,
        initial_layout_class_list: Sequence[str] | None = None,
        token_format: TokenFormat | str | None = None,
        legacy: bool = False,
    ) -> str:
        """Return a token that lets a client connect to ``session_id``.

        ``legacy=True`` is shorthand for ``token_format=TokenFormat.LEGACY``.
        """

        if token_format is None:
            token_format = TokenFormat.LEGACY if legacy else self.default_token_format
        token_format = TokenFormat(token_format)
        options = TokenOptions(
            role=role,
            expire_time=expire_time,
            data=data,
            initial_layout_class_list=initial_layout_class_list,
        )
        claims = build_user_token_claims(self.credential, session_id, options, token_format=token_format)
        return tokens.encode(token_format, claims, self.credential)

    async def create_session(self, options: SessionOptions | None = None) -> Session:
        """Ask the platform for a new session id."""

        options = options or SessionOptions()
        if options.archive_mode is ArchiveMode.ALWAYS and options.media_mode is not MediaMode.ROUTED:
            raise InvalidArgumentError("A session with archive mode 'always' must use the routed media mode")

        payload = await self._post_form("/session/create", options.to_form())
        items = payload if isinstance(payload, list) else [payload]
        try:
            created = SessionCreateResponse.model_validate(items[0])
        except (IndexError, ValidationError) as exc:
            raise UnexpectedResponseError(f"Unexpected session create response: {payload!r}") from exc

        return Session(
            session_id=created.session_id,
            client=self,
            media_mode=options.media_mode,
            archive_mode=options.archive_mode,
            location=str(options.location) if options.location is not None else None,
        )

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def _post_form(self, path: str, form: dict[str, str]) -> Any:
        url = f"{self.api_url}{path}"
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        async with self._client() as client:
            try:
                response = await client.post(url, data=form, headers=headers, auth=self._auth)
            except httpx.HTTPError as exc:
                logger.warning("Request to %s failed: %s", url, exc)
                raise RequestError(f"Request to {url} failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                "The platform rejected the project key or secret", status_code=response.status_code
            )
        if response.is_error:
            logger.warning("Request to %s returned %s", url, response.status_code)
            raise RequestError(
                f"Request to {url} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise UnexpectedResponseError(
                f"Response from {url} is not JSON", status_code=response.status_code
            ) from exc
