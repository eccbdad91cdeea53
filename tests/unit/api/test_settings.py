"""Tests for api/settings module."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from api.settings import Settings, get_settings


class TestDefaults:
    def test_data_access_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.default_page_size == 20
        assert settings.read_timeout_seconds == 1.0
        assert settings.write_timeout_seconds == 2.0
        assert settings.pocketbase_url == "http://127.0.0.1:8090"

    def test_allowed_origins_parsed_from_comma_list(self):
        with patch.dict("os.environ", {"ALLOWED_ORIGINS": "http://a.test, http://b.test,,"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.allowed_origins == ["http://a.test", "http://b.test"]


class TestValidation:
    @pytest.mark.parametrize("size", ["0", "101"])
    def test_default_page_size_must_be_in_range(self, size):
        with patch.dict("os.environ", {"DEFAULT_PAGE_SIZE": size}, clear=True):
            with pytest.raises(ValidationError, match="DEFAULT_PAGE_SIZE"):
                Settings(_env_file=None)

    @pytest.mark.parametrize("name", ["READ_TIMEOUT_SECONDS", "WRITE_TIMEOUT_SECONDS", "STATS_TIMEOUT_SECONDS"])
    def test_timeouts_must_be_positive(self, name):
        with patch.dict("os.environ", {name: "0"}, clear=True):
            with pytest.raises(ValidationError, match="positive"):
                Settings(_env_file=None)

    def test_env_overrides(self):
        with patch.dict("os.environ", {"READ_TIMEOUT_SECONDS": "1.5", "SKIP_PB_AUTH": "true"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.read_timeout_seconds == 1.5
        assert settings.skip_pb_auth is True


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
