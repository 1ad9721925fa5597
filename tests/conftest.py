"""Shared fixtures."""
from __future__ import annotations

import pytest

from tests.helpers import API_KEY, API_SECRET
from tokbox_server.schemas.tokens import AccountCredential


@pytest.fixture
def credential() -> AccountCredential:
    return AccountCredential(api_key=API_KEY, api_secret=API_SECRET)
