"""Unit tests for API key authentication module."""

from unittest.mock import patch

import pytest

from storefront.core.auth import (
    configured_user_ids,
    parse_api_keys,
    require_user,
    resolve_user_id,
)
from storefront.core.errors import AuthenticationAppError
from storefront.core.logging import get_user_id, set_user_id


class TestParseAPIKeys:
    """Test API key parsing utility function."""

    def test_parse_single_pair(self) -> None:
        assert parse_api_keys("my-secret-key:7") == {"my-secret-key": 7}

    def test_parse_multiple_pairs_with_whitespace(self) -> None:
        result = parse_api_keys(" key1:1 , key2 : 2,key3:3 ")
        assert result == {"key1": 1, "key2": 2, "key3": 3}

    def test_parse_none_returns_empty(self) -> None:
        assert parse_api_keys(None) == {}

    def test_parse_empty_string_returns_empty(self) -> None:
        assert parse_api_keys("") == {}

    def test_pairs_without_valid_user_id_are_skipped(self) -> None:
        """Bare keys, non-numeric and non-positive user ids are ignored."""
        result = parse_api_keys("bare-key,bad:abc,zero:0,neg:-1,:5,good:9")
        assert result == {"good": 9}

    def test_key_may_contain_colons(self) -> None:
        assert parse_api_keys("a:b:c:4") == {"a:b:c": 4}


class TestResolveUserId:
    """Test core API key lookup logic."""

    @patch("storefront.core.auth.settings")
    def test_default_user_when_auth_disabled(self, mock_settings) -> None:
        mock_settings.app.api_key_required = False
        mock_settings.app.default_user_id = 3

        assert resolve_user_id(None) == 3
        assert resolve_user_id("anything") == 3

    @patch("storefront.core.auth.settings")
    def test_missing_key_rejected(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "k:1"

        with pytest.raises(AuthenticationAppError) as exc_info:
            resolve_user_id(None)

        assert exc_info.value.code == "not_authenticated"
        assert "Missing API key" in exc_info.value.message

    @patch("storefront.core.auth.settings")
    def test_raises_when_no_keys_configured(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = None

        with pytest.raises(AuthenticationAppError) as exc_info:
            resolve_user_id("some-key")

        assert exc_info.value.code == "api_keys_not_configured"

    @patch("storefront.core.auth.settings")
    def test_valid_key_maps_to_user(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "alice:1,bob:2"

        assert resolve_user_id("alice") == 1
        assert resolve_user_id("bob") == 2

    @patch("storefront.core.auth.settings")
    def test_invalid_key_rejected(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "alice:1"

        with pytest.raises(AuthenticationAppError) as exc_info:
            resolve_user_id("mallory")

        assert exc_info.value.code == "not_authenticated"
        assert exc_info.value.message == "Invalid or missing API key"


class TestRequireUserDependency:
    """Test FastAPI dependency for authentication."""

    @pytest.mark.asyncio
    @patch("storefront.core.auth.settings")
    async def test_binds_user_to_log_context(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "alice:5"

        try:
            assert await require_user(x_api_key="alice") == 5
            assert get_user_id() == 5
        finally:
            set_user_id(None)

    @pytest.mark.asyncio
    @patch("storefront.core.auth.settings")
    async def test_propagates_authentication_error(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "alice:5"

        with pytest.raises(AuthenticationAppError):
            await require_user(x_api_key="wrong")


class TestConfiguredUserIds:
    @patch("storefront.core.auth.settings")
    def test_includes_key_owners(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "a:1,b:2,c:2"

        assert configured_user_ids() == {1, 2}

    @patch("storefront.core.auth.settings")
    def test_includes_default_user_when_auth_disabled(self, mock_settings) -> None:
        mock_settings.app.api_key_required = False
        mock_settings.app.api_keys = None
        mock_settings.app.default_user_id = 4

        assert configured_user_ids() == {4}
