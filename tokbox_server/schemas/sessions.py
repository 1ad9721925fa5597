"""Schemas for session creation against the platform REST API."""
from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress


class MediaMode(str, enum.Enum):
    RELAYED = "relayed"
    ROUTED = "routed"


class ArchiveMode(str, enum.Enum):
    MANUAL = "manual"
    ALWAYS = "always"


class SessionOptions(BaseModel):
    location: IPvAnyAddress | None = Field(default=None, description="IP address used to pick a media region")
    media_mode: MediaMode = MediaMode.RELAYED
    archive_mode: ArchiveMode = ArchiveMode.MANUAL

    def to_form(self) -> dict[str, str]:
        """Return the form fields expected by ``POST /session/create``."""

        form = {
            "p2p.preference": "enabled" if self.media_mode is MediaMode.RELAYED else "disabled",
            "archiveMode": self.archive_mode.value,
        }
        if self.location is not None:
            form["location"] = str(self.location)
        return form


class SessionCreateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    session_id: str = Field(..., min_length=3)
    project_id: str | int | None = None
    create_dt: str | None = None
    media_server_url: str | None = None
