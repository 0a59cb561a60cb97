"""
End-to-end tests for the assembled application.

Runs real requests through recovery, bad-status resolution, the
middleware chain and route groups with the FastAPI TestClient.
"""

import json

import pytest
import yaml
from fastapi.testclient import TestClient

from webstarter import (
    RouterInfo,
    Settings,
    StarterConfig,
    StatusCode,
    create_app,
    resp_http_status_code,
    resp_json,
    resp_redirect,
    resp_rest_biz_error,
    resp_rest_success,
    resp_text_plain,
    resp_toml,
    resp_xml,
    resp_yaml,
)

PAYLOAD = {"id": 7, "name": "widget", "tags": ["a", "b"]}


class DemoRouter:
    """Route group exercising every kind of handler outcome."""

    def info(self) -> RouterInfo:
        return RouterInfo(group_path="demo")

    def handlers(self, router) -> None:
        router.get("success", lambda request: resp_rest_success(PAYLOAD))
        router.get("empty", lambda request: None)
        router.get("boom", self.boom)
        router.get("biz", lambda request: resp_rest_biz_error(1001, "stock exhausted"))
        router.get("status/{code}", lambda request: resp_http_status_code(int(request.path_param("code"))))
        router.get("redirect", lambda request: resp_redirect("/demo/success", 302))
        router.get("json", lambda request: resp_json(PAYLOAD, 201))
        router.get("xml", lambda request: resp_xml(PAYLOAD))
        router.get("yaml", lambda request: resp_yaml(PAYLOAD))
        router.get("toml", lambda request: resp_toml({"name": "widget", "count": 3}))
        router.get("text", lambda request: resp_text_plain("hello"))
        router.post("echo", self.echo)

    @staticmethod
    def boom(request):
        raise RuntimeError("handler failed")

    @staticmethod
    async def echo(request):
        return resp_rest_success(await request.json())


def make_client(**settings) -> TestClient:
    config = StarterConfig(settings=Settings(**settings), routers=[DemoRouter()])
    return TestClient(create_app(config))


client = make_client()


class TestStructuredResponses:
    """Tests for envelope responses produced by handlers."""

    def test_success_round_trip(self) -> None:
        """Decoding the body yields the success status and original payload."""
        response = client.get("/demo/success")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        body = response.json()
        assert body["status"] == StatusCode.SUCCESS
        assert body["message"] == "success"
        assert body["data"] == PAYLOAD
        assert isinstance(body["timestamp"], int)

    def test_none_response_is_bare_200(self) -> None:
        """A handler returning None yields 200 with an empty body."""
        response = client.get("/demo/empty")
        assert response.status_code == 200
        assert response.content == b""
        assert "content-type" not in response.headers

    def test_business_error_keeps_success_status(self) -> None:
        """Business errors are carried in the envelope's biz fields."""
        body = client.get("/demo/biz").json()
        assert body["status"] == StatusCode.SUCCESS
        assert body["bizErrorCode"] == 1001
        assert body["bizErrorMessage"] == "stock exhausted"

    def test_async_handler_reads_json_body(self) -> None:
        """Async handlers can read the request body."""
        response = client.post("/demo/echo", json={"hello": "world"})
        assert response.json()["data"] == {"hello": "world"}


class TestRawResponses:
    """Tests for raw responses written directly through the writer."""

    def test_json_with_custom_status(self) -> None:
        response = client.get("/demo/json")
        assert response.status_code == 201
        assert response.json() == PAYLOAD

    def test_xml(self) -> None:
        response = client.get("/demo/xml")
        assert response.headers["content-type"].startswith("application/xml")
        assert response.content.startswith(b"<?xml")
        assert b"<name>widget</name>" in response.content
        assert b"<tags><item>a</item><item>b</item></tags>" in response.content

    def test_yaml(self) -> None:
        response = client.get("/demo/yaml")
        assert yaml.safe_load(response.text) == PAYLOAD

    def test_toml(self) -> None:
        response = client.get("/demo/toml")
        assert 'name = "widget"' in response.text
        assert "count = 3" in response.text

    def test_text_plain(self) -> None:
        response = client.get("/demo/text")
        assert response.text == "hello"
        assert response.headers["content-type"].startswith("text/plain")

    def test_redirect_passes_through(self) -> None:
        """Redirect statuses are in the default ignore set."""
        response = client.get("/demo/redirect", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/demo/success"


class TestHandlerFaults:
    """Tests for exceptions raised by handlers."""

    def test_exception_becomes_exception_envelope(self) -> None:
        """The default panic resolver answers with the exception envelope at 200."""
        response = client.get("/demo/boom")
        assert response.status_code == 200
        assert response.json()["status"] == StatusCode.EXCEPTION

    def test_undecodable_payload_becomes_exception_envelope(self) -> None:
        """An encoding failure is a fault handled by recovery."""

        class BadRouter:
            def info(self) -> RouterInfo:
                return RouterInfo()

            def handlers(self, router) -> None:
                router.get("bad", lambda request: resp_rest_success(object()))

        app = create_app(StarterConfig(routers=[BadRouter()]))
        response = TestClient(app).get("/bad")
        assert response.status_code == 200
        assert response.json()["status"] == StatusCode.EXCEPTION


class TestBadStatusResolution:
    """Tests for transport statuses rewritten into the envelope."""

    def test_unmatched_route_is_not_found(self) -> None:
        response = client.get("/nowhere")
        assert response.status_code == 200
        assert response.json()["status"] == StatusCode.NOT_FOUND

    def test_method_mismatch_is_method_not_allowed(self) -> None:
        response = client.delete("/demo/success")
        assert response.status_code == 200
        assert response.json()["status"] == StatusCode.METHOD_NOT_ALLOWED
        assert "GET" in response.headers["allow"]

    def test_method_mismatch_reported_as_not_found_when_disabled(self) -> None:
        response = make_client(disable_method_not_allowed_error=True).delete("/demo/success")
        assert response.json()["status"] == StatusCode.NOT_FOUND

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            (400, StatusCode.BAD_REQUEST_PARAMETERS),
            (401, StatusCode.FORBIDDEN),
            (403, StatusCode.FORBIDDEN),
            (415, StatusCode.MEDIA_TYPE_NOT_ALLOWED),
            (418, StatusCode.EXCEPTION),
            (503, StatusCode.EXCEPTION),
        ],
    )
    def test_handler_status_is_mapped(self, code: int, expected: StatusCode) -> None:
        response = client.get(f"/demo/status/{code}")
        assert response.status_code == 200
        assert response.json()["status"] == expected

    def test_oversized_body_is_upload_limit_exceeded(self) -> None:
        limited = make_client(max_request_size_bytes=16)
        response = limited.post("/demo/echo", content=json.dumps({"data": "x" * 64}))
        assert response.status_code == 200
        assert response.json()["status"] == StatusCode.UPLOAD_LIMIT_EXCEEDED

    def test_ignored_status_is_delivered_raw(self) -> None:
        """With 404 ignored the raw transport 404 reaches the client."""
        response = make_client(ignore_http_codes=[404]).get("/nowhere")
        assert response.status_code == 404
        assert response.content == b""

    def test_default_ignore_set_can_be_disabled(self) -> None:
        response = make_client(disable_default_ignore_http_code=True).get("/demo/json")
        assert response.status_code == 200
        assert response.json()["status"] == StatusCode.EXCEPTION

    def test_pipeline_can_be_disabled(self) -> None:
        response = make_client(disable_bad_http_code_resolver=True).get("/nowhere")
        assert response.status_code == 404


class TestCustomDecoder:
    """Tests for a replacement structured payload encoder."""

    def test_custom_decoder_is_used(self) -> None:
        class WrappingDecoder:
            content_type = "application/vnd.demo+json"

            def decode(self, value) -> bytes:
                return json.dumps({"wrapped": value.status}).encode()

        config = StarterConfig(routers=[DemoRouter()], decoder=WrappingDecoder())
        response = TestClient(create_app(config)).get("/demo/success")
        assert response.headers["content-type"] == "application/vnd.demo+json"
        assert response.json() == {"wrapped": 200}
