"""
Tests for panic recovery.

Covers custom panic resolvers, resolvers that fail or return nothing,
hidden panic details and failures after the response started.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.responses import StreamingResponse

from webstarter import (
    ResponseDecodeError,
    RouterInfo,
    Settings,
    StarterConfig,
    StatusCode,
    create_app,
    resp_rest_status_error,
    resp_text_plain,
)


class FailingRouter:
    """Routes that raise different kinds of exceptions."""

    def info(self) -> RouterInfo:
        return RouterInfo()

    def handlers(self, router) -> None:
        router.get("runtime", self.runtime)
        router.get("framework", self.framework)

    @staticmethod
    def runtime(request):
        raise RuntimeError("secret detail")

    @staticmethod
    def framework(request):
        raise ResponseDecodeError("Widget", "not serializable")


def make_client(panic_resolver=None, **settings) -> TestClient:
    kwargs = {"settings": Settings(**settings), "routers": [FailingRouter()]}
    if panic_resolver is not None:
        kwargs["panic_resolver"] = panic_resolver
    return TestClient(create_app(StarterConfig(**kwargs)))


@pytest.fixture
def default_client() -> TestClient:
    # Built during setup: create_app reconfigures the root logger.
    return make_client()


class TestPanicResolver:
    """Tests for the configurable panic resolver."""

    def test_custom_resolver_response_is_written(self) -> None:
        seen: list[BaseException] = []

        def resolver(request, exc):
            seen.append(exc)
            return resp_text_plain(f"recovered {request.path}")

        response = make_client(resolver).get("/runtime")
        assert response.status_code == 200
        assert response.text == "recovered /runtime"
        assert isinstance(seen[0], RuntimeError)

    def test_async_resolver_is_awaited(self) -> None:
        async def resolver(request, exc):
            return resp_rest_status_error(StatusCode.REQUEST_TIMEOUT)

        response = make_client(resolver).get("/runtime")
        assert response.json()["status"] == StatusCode.REQUEST_TIMEOUT

    def test_resolver_returning_none_sends_bare_500(self) -> None:
        response = make_client(lambda request, exc: None).get("/runtime")
        assert response.status_code == 500
        assert response.content == b""

    def test_resolver_raising_sends_bare_500(self) -> None:
        def resolver(request, exc):
            raise LookupError("resolver broken")

        response = make_client(resolver).get("/runtime")
        assert response.status_code == 500

    def test_default_resolver_logs_failure(self, default_client, caplog) -> None:
        default_client.get("/runtime")
        assert any("unhandled exception" in record.getMessage() for record in caplog.records)


class TestHiddenPanicDetails:
    """Tests for hide_panic_error_details."""

    def test_unknown_errors_skip_resolver(self) -> None:
        calls: list[BaseException] = []

        def resolver(request, exc):
            calls.append(exc)
            return resp_text_plain("detailed")

        client = make_client(resolver, hide_panic_error_details=True)
        response = client.get("/runtime")
        assert calls == []
        assert response.json()["status"] == StatusCode.EXCEPTION
        assert "secret detail" not in response.text

    def test_framework_errors_still_reach_resolver(self) -> None:
        calls: list[BaseException] = []

        def resolver(request, exc):
            calls.append(exc)
            return resp_text_plain("framework")

        client = make_client(resolver, hide_panic_error_details=True)
        assert client.get("/framework").text == "framework"
        assert isinstance(calls[0], ResponseDecodeError)


    def test_failing_decoder_falls_back_to_bare_500(self) -> None:
        class BrokenDecoder:
            content_type = "application/json"

            def decode(self, value) -> bytes:
                raise ResponseDecodeError(type(value).__name__, "decoder offline")

        config = StarterConfig(
            settings=Settings(hide_panic_error_details=True),
            routers=[FailingRouter()],
            decoder=BrokenDecoder(),
        )
        response = TestClient(create_app(config)).get("/runtime")
        assert response.status_code == 500
        assert response.content == b""


class TestStartedResponse:
    """Tests for failures after the response reached the wire."""

    def test_failure_after_start_is_not_rewritten(self) -> None:
        async def chunks():
            yield b"partial"
            raise RuntimeError("stream broke")

        app = create_app(StarterConfig())

        @app.get("/native-stream")
        def native_stream():
            return StreamingResponse(chunks(), media_type="text/plain")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/native-stream")
        assert response.status_code == 200
        assert response.content.startswith(b"partial")
        assert b"status" not in response.content
