"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest

from dropbox_bridge.storage.derivation import DerivationTrigger
from dropbox_bridge.storage.links import LinkResolver
from dropbox_bridge.storage.urls import DownloadUrlBuilder
from dropbox_bridge.styles import ImageStyle, StyleRegistry

SITE_URL = "https://example.com"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep developer DROPBOX_BRIDGE_* variables out of the tests."""
    for name in list(os.environ):
        if name.startswith("DROPBOX_BRIDGE_"):
            monkeypatch.delenv(name)
    yield


@pytest.fixture
def thumbnail_style() -> ImageStyle:
    return ImageStyle(name="thumbnail", label="Thumbnail", private_key="key", hash_salt="salt")


@pytest.fixture
def styles(thumbnail_style: ImageStyle) -> StyleRegistry:
    return StyleRegistry([thumbnail_style])


@pytest.fixture
def url_builder() -> DownloadUrlBuilder:
    return DownloadUrlBuilder(SITE_URL, "dropbox")


@pytest.fixture
def link_client() -> MagicMock:
    """Remote client whose links must be set per test."""
    client = MagicMock()
    client.create_shareable_link = AsyncMock(return_value=None)
    client.get_account_info = AsyncMock(return_value={"email": "me@example.com"})
    return client


@pytest.fixture
def trigger() -> MagicMock:
    trigger = MagicMock(spec=DerivationTrigger)
    trigger.trigger = AsyncMock(return_value=True)
    return trigger


@pytest.fixture
def resolver(
    link_client: MagicMock,
    trigger: MagicMock,
    styles: StyleRegistry,
    url_builder: DownloadUrlBuilder,
) -> LinkResolver:
    return LinkResolver(
        client=link_client,
        trigger=trigger,
        styles=styles,
        url_builder=url_builder,
        scheme="dropbox",
    )
