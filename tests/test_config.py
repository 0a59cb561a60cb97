"""
Tests for settings loading and the assembled configuration.
"""

import dataclasses

import pytest

from webstarter import Settings, StarterConfig
from webstarter.core.config import DEFAULT_IGNORE_HTTP_CODES


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.port == 8080
        assert settings.listen_address == "0.0.0.0:8080"
        assert settings.hide_panic_error_details is False

    def test_environment_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("WEBSTARTER_PORT", "9090")
        monkeypatch.setenv("WEBSTARTER_IGNORE_HTTP_CODES", "[404, 415]")
        monkeypatch.setenv("WEBSTARTER_DISABLE_METHOD_NOT_ALLOWED_ERROR", "true")
        settings = Settings(_env_file=None)
        assert settings.port == 9090
        assert settings.ignore_http_codes == [404, 415]
        assert settings.disable_method_not_allowed_error is True

    def test_port_out_of_range_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            Settings(_env_file=None, port=70000)


class TestStarterConfig:
    """Tests for StarterConfig."""

    def test_effective_ignore_codes_merges_defaults(self) -> None:
        config = StarterConfig(settings=Settings(_env_file=None, ignore_http_codes=[404]))
        assert config.effective_ignore_codes() == DEFAULT_IGNORE_HTTP_CODES | {404}

    def test_default_ignore_set_can_be_disabled(self) -> None:
        settings = Settings(
            _env_file=None, ignore_http_codes=[404], disable_default_ignore_http_code=True
        )
        assert StarterConfig(settings=settings).effective_ignore_codes() == {404}

    def test_none_middlewares_are_dropped(self) -> None:
        def middleware(request):
            return None, True

        config = StarterConfig(global_middlewares=[None, middleware, None])
        assert config.global_middlewares == (middleware,)

    def test_config_is_immutable(self) -> None:
        config = StarterConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.routers = ()  # type: ignore[misc]
