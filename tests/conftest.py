"""
Shared pytest configuration for the divelog tests.

No test talks to a real PocketBase: the client class is patched for every
test, and SKIP_PB_AUTH keeps the API from logging in at startup.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault("SKIP_PB_AUTH", "true")


def create_mock_pocketbase() -> Mock:
    """A PocketBase stand-in whose collections are all empty."""
    empty_page = Mock(items=[], total_items=0, total_pages=0, page=1, per_page=20)

    collection = Mock()
    collection.auth_with_password = Mock(return_value=True)
    collection.get_full_list = Mock(return_value=[])
    collection.get_list = Mock(return_value=empty_page)
    collection.get_one = Mock()
    collection.get_first_list_item = Mock()
    collection.create = Mock(return_value=Mock(id="new-record"))
    collection.update = Mock()

    client = Mock()
    client.collection = Mock(return_value=collection)
    return client


@pytest.fixture
def mock_pocketbase() -> Mock:
    return create_mock_pocketbase()


@pytest.fixture
def repository(mock_pocketbase: Mock):
    """DivelogRepository over the empty PocketBase stand-in."""
    from api.services.divelog_repository import DivelogRepository

    return DivelogRepository(mock_pocketbase, read_timeout=1.0, write_timeout=1.0)


@pytest.fixture(autouse=True)
def mock_all_external_services():
    """Patch the PocketBase client class so nothing opens a connection."""
    if os.environ.get("SKIP_MOCKING") == "true":
        yield {}
        return

    client = create_mock_pocketbase()
    with patch("pocketbase.PocketBase", return_value=client):
        yield {"pocketbase": client}


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Forget cached Settings after each test so env patches do not leak."""
    yield
    from api.settings import get_settings

    get_settings.cache_clear()
