"""
Tests for the server lifecycle.

Starts a real uvicorn server on an ephemeral local port.
"""

import httpx

from webstarter import RouterInfo, Settings, Starter, StarterConfig, resp_text_plain


class PingRouter:
    """Single health-check style route."""

    def info(self) -> RouterInfo:
        return RouterInfo()

    def handlers(self, router) -> None:
        router.get("ping", lambda request: resp_text_plain("pong"))


def local_config() -> StarterConfig:
    return StarterConfig(
        settings=Settings(_env_file=None, host="127.0.0.1", port=0, log_level="WARNING"),
        routers=[PingRouter()],
    )


class TestStarter:
    """Tests for Starter start/stop."""

    def test_start_serve_and_stop(self) -> None:
        starter = Starter(local_config())
        starter.start()
        try:
            response = httpx.get(f"http://127.0.0.1:{starter.port}/ping", timeout=5)
            assert response.text == "pong"
        finally:
            assert starter.stop(5) == (True, True)
        assert starter.port is None

    def test_lazy_config_is_resolved_once(self) -> None:
        calls: list[int] = []

        def lazy() -> StarterConfig:
            calls.append(1)
            return local_config()

        starter = Starter(lazy_config=lazy)
        assert starter.config is starter.config
        assert starter.app is starter.app
        assert calls == [1]

    def test_stop_without_start(self) -> None:
        assert Starter(local_config()).stop(1) == (True, True)
