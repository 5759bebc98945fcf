from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from graph_auth.config import get_settings

TEST_ENV = {
    "GRAPH_AUTH_GRAPH_API_BASE_URL": "https://example.com",
    "GRAPH_AUTH_FACEBOOK_OAUTH_BASE_URL": "https://example.com",
    "GRAPH_AUTH_GRAPH_API_VERSION": "v1.0",
    "GRAPH_AUTH_APP_ID": "app",
    "GRAPH_AUTH_APP_SECRET": "secret",
    "GRAPH_AUTH_OAUTH_REDIRECT_URI": "https://client.example.com/callback",
}


@pytest.fixture(autouse=True)
def configure_settings() -> Iterator[None]:
    """Point settings at a fake Graph host and reset the cache."""

    os.environ.update(TEST_ENV)
    get_settings.cache_clear()
    _ = get_settings()
    yield
    get_settings.cache_clear()
    for key in TEST_ENV:
        os.environ.pop(key, None)
