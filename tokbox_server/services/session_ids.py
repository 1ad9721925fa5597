"""Decoding of platform-issued session identifiers.

Session ids are never minted locally. They carry a two character version tag
followed by dash separated, unpadded base64 segments whose payload is a ``~``
delimited record; the second field of the first record is the owning project
key.
"""
from __future__ import annotations

import base64
import binascii

from ..core.errors import InvalidSessionIdError, MalformedSessionIdError

VERSION_TAG_LENGTH = 2
FIELD_SEPARATOR = "~"
MAX_PADDING = 2


def _decode_segment(segment: str) -> list[str] | None:
    """Return the ``~`` fields of a segment, or ``None`` if none are recoverable.

    Every padding from 0 to 2 characters is attempted; a decode that succeeds
    but yields no separator does not stop the search.
    """

    normalised = segment.replace("-", "+").replace("_", "/")
    for padding in range(MAX_PADDING + 1):
        try:
            raw = base64.b64decode(normalised + "=" * padding, validate=True)
        except (binascii.Error, ValueError):
            continue
        text = raw.decode("latin-1")
        if FIELD_SEPARATOR in text:
            return text.split(FIELD_SEPARATOR)
    return None


def _decoded_segments(session_id: str) -> list[list[str]]:
    if not isinstance(session_id, str):
        raise MalformedSessionIdError(f"Session id must be a string, got {type(session_id).__name__}")
    body = session_id[VERSION_TAG_LENGTH:]
    segments = []
    for segment in body.split("-"):
        if not segment:
            continue
        fields = _decode_segment(segment)
        if fields is not None:
            segments.append(fields)
    if not segments:
        raise MalformedSessionIdError(f"Session id could not be decoded: {session_id!r}")
    return segments


def decode_session_id(session_id: str) -> list[str]:
    """Return the positional fields embedded in ``session_id``."""

    fields: list[str] = []
    for segment in _decoded_segments(session_id):
        fields.extend(segment)
    return fields


def owner_account_key(session_id: str) -> str:
    """Return the project key that owns ``session_id``."""

    first = _decoded_segments(session_id)[0]
    if len(first) < 2 or not first[1]:
        raise InvalidSessionIdError(f"Session id does not name a project: {session_id!r}")
    return first[1]
