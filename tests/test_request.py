from __future__ import annotations

import json
import sys
import unittest
from pathlib import Path
from typing import Any, Callable

import httpx

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_ROOT))

from discoclient.apis import checks_v1alpha  # noqa: E402
from discoclient.config import ClientOptions  # noqa: E402
from discoclient.credentials import AccessToken, ApiKey, OAuthToken  # noqa: E402
from discoclient.errors import (  # noqa: E402
    ApiError,
    RequestValidationError,
    ResponseDecodeError,
    TransportError,
)
from discoclient.models import Operation  # noqa: E402
from discoclient.request import _redact, error_from_response  # noqa: E402
from discoclient.transport import AsyncHttpxTransport, HttpResponse, HttpxTransport  # noqa: E402

OPERATION_NAME = "accounts/123/apps/456/operations/789"


def _json_response(status: int, payload: Any, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status, content=json.dumps(payload).encode("utf-8"), headers={"Content-Type": "application/json", **(headers or {})})


class _Recorder:
    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.calls: list[httpx.Request] = []
        self._respond = respond

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self._respond(request)

    def transport(self) -> HttpxTransport:
        return HttpxTransport(httpx.Client(transport=httpx.MockTransport(self)))


class TestRequestBuilding(unittest.TestCase):
    def setUp(self) -> None:
        self.recorder = _Recorder(lambda request: _json_response(200, {"name": OPERATION_NAME}))
        self.service = checks_v1alpha.build(transport=self.recorder.transport())

    def tearDown(self) -> None:
        self.service.transport.raw_client.close()

    def test_get_operation_url(self) -> None:
        request = self.service.accounts.apps.operations.get(name=OPERATION_NAME)
        http = request.build()
        self.assertEqual(http.method, "GET")
        self.assertEqual(http.url, "https://checks.googleapis.com/v1alpha/accounts/123/apps/456/operations/789")
        self.assertIsNone(http.content)
        self.assertEqual(http.headers["Accept"], "application/json")

    def test_positional_path_parameter(self) -> None:
        request = self.service.accounts.apps.operations.get(OPERATION_NAME)
        self.assertEqual(request.params, {"name": OPERATION_NAME})
        with self.assertRaises(TypeError):
            self.service.accounts.apps.operations.get(OPERATION_NAME, name=OPERATION_NAME)

    def test_bad_name_fails_before_any_call(self) -> None:
        for value in ("bad-name", OPERATION_NAME + "\n"):
            with self.subTest(value=value):
                with self.assertRaises(RequestValidationError) as ctx:
                    self.service.accounts.apps.operations.get(name=value)
                self.assertEqual(ctx.exception.parameter, "name")
        self.assertEqual(self.recorder.calls, [])

    def test_missing_required_parameter(self) -> None:
        with self.assertRaises(RequestValidationError):
            self.service.accounts.apps.operations.get()
        self.assertEqual(self.recorder.calls, [])

    def test_unknown_parameter(self) -> None:
        with self.assertRaises(RequestValidationError):
            self.service.accounts.apps.operations.get(name=OPERATION_NAME, page_size=10)

    def test_standard_query_parameters(self) -> None:
        request = self.service.accounts.apps.operations.get(name=OPERATION_NAME, xgafv="2")
        self.assertIs(request.set(fields="name,done", pretty_print=False), request)
        http = request.build()
        url = httpx.URL(http.url)
        self.assertEqual(url.path, "/v1alpha/accounts/123/apps/456/operations/789")
        self.assertEqual(url.params["$.xgafv"], "2")
        self.assertEqual(url.params["fields"], "name,done")
        self.assertEqual(url.params["prettyPrint"], "false")

        with self.assertRaises(RequestValidationError):
            request.set(alt="xml")

    def test_body_is_required_and_coerced(self) -> None:
        analyze = self.service.privacypolicy.analyze
        with self.assertRaises(RequestValidationError) as ctx:
            analyze()
        self.assertEqual(ctx.exception.parameter, "body")

        request = analyze(body={"privacyPolicyUri": "https://example.com/privacy"})
        self.assertIsInstance(request.body, checks_v1alpha.AnalyzePrivacyPolicyRequest)
        http = request.build()
        self.assertEqual(http.method, "POST")
        self.assertEqual(http.url, "https://checks.googleapis.com/v1alpha/privacypolicy:analyze")
        self.assertEqual(http.headers["Content-Type"], "application/json; charset=utf-8")
        self.assertEqual(json.loads(http.content), {"privacyPolicyUri": "https://example.com/privacy"})

    def test_body_on_method_without_body(self) -> None:
        with self.assertRaises(RequestValidationError):
            self.service.accounts.apps.operations.get(name=OPERATION_NAME, body={"x": 1})

    def test_options_apply_to_every_request(self) -> None:
        service = checks_v1alpha.build(
            transport=self.recorder.transport(),
            options=ClientOptions(
                base_uri="http://localhost:8080",
                quota_user="tenant-1",
                user_agent="tests/1.0",
                headers={"X-Trace": "abc"},
            ),
        )
        http = service.accounts.apps.operations.get(name=OPERATION_NAME).build()
        url = httpx.URL(http.url)
        self.assertEqual(url.host, "localhost")
        self.assertEqual(url.port, 8080)
        self.assertEqual(url.params["quotaUser"], "tenant-1")
        self.assertEqual(http.headers["User-Agent"], "tests/1.0")
        self.assertEqual(http.headers["X-Trace"], "abc")

    def test_credentials_slots(self) -> None:
        for credentials, check in (
            (ApiKey("k-123"), lambda http: httpx.URL(http.url).params["key"] == "k-123"),
            (AccessToken("t-123"), lambda http: http.headers["Authorization"] == "Bearer t-123"),
            (
                AccessToken("t-123", placement="query"),
                lambda http: httpx.URL(http.url).params["access_token"] == "t-123",
            ),
            (OAuthToken("o-123"), lambda http: httpx.URL(http.url).params["oauth_token"] == "o-123"),
        ):
            with self.subTest(credentials=credentials):
                service = checks_v1alpha.build(transport=self.recorder.transport(), credentials=credentials)
                http = service.accounts.apps.operations.get(name=OPERATION_NAME).build()
                self.assertTrue(check(http))
                self.assertNotIn("123", repr(credentials))

    def test_redact_masks_credentials(self) -> None:
        redacted = _redact("https://checks.googleapis.com/v1alpha/x?key=secret&fields=name&access_token=opaque-value")
        self.assertNotIn("secret", redacted)
        self.assertNotIn("opaque-value", redacted)
        self.assertIn("fields=name", redacted)


class TestRequestExecution(unittest.TestCase):
    def _service(self, respond: Callable[[httpx.Request], httpx.Response]) -> tuple[Any, _Recorder]:
        recorder = _Recorder(respond)
        service = checks_v1alpha.build(transport=recorder.transport())
        self.addCleanup(service.transport.raw_client.close)
        return service, recorder

    def test_success_decodes_typed_record(self) -> None:
        payload = {
            "name": OPERATION_NAME,
            "done": False,
            "metadata": {"@type": "type.googleapis.com/Meta", "progress": 40},
            "serverAddedField": {"nested": [1, 2]},
        }
        service, recorder = self._service(lambda request: _json_response(200, payload, {"ETag": '"abc"'}))
        op = service.accounts.apps.operations.get(name=OPERATION_NAME).execute()

        self.assertIsInstance(op, Operation)
        self.assertEqual(op.metadata["progress"], 40)
        self.assertEqual(op.overflow, {"serverAddedField": {"nested": [1, 2]}})
        self.assertEqual(op.etag, '"abc"')
        self.assertEqual(len(recorder.calls), 1)
        self.assertEqual(recorder.calls[0].method, "GET")

    def test_request_executes_once(self) -> None:
        service, recorder = self._service(lambda request: _json_response(200, {"name": OPERATION_NAME}))
        request = service.accounts.apps.operations.get(name=OPERATION_NAME)
        request.execute()
        self.assertTrue(request.executed)
        with self.assertRaises(RuntimeError):
            request.execute()
        with self.assertRaises(RuntimeError):
            request.set(fields="name")
        self.assertEqual(len(recorder.calls), 1)

    def test_empty_body_yields_empty_record(self) -> None:
        service, _ = self._service(lambda request: httpx.Response(200, content=b""))
        op = service.accounts.apps.operations.get(name=OPERATION_NAME).execute()
        self.assertIsNone(op.name)
        self.assertFalse(op.is_terminal)

    def test_error_envelope_preserves_http_status(self) -> None:
        envelope = {
            "error": {
                "code": 400,
                "message": "Requested entity was not found.",
                "status": "NOT_FOUND",
                "details": [{"@type": "type.googleapis.com/google.rpc.ErrorInfo", "reason": "MISSING"}],
            }
        }
        service, _ = self._service(lambda request: _json_response(404, envelope))
        with self.assertRaises(ApiError) as ctx:
            service.accounts.apps.operations.get(name=OPERATION_NAME).execute()

        error = ctx.exception
        self.assertEqual(error.status_code, 404)
        self.assertEqual(error.message, "Requested entity was not found.")
        self.assertEqual(error.details[0]["reason"], "MISSING")
        self.assertEqual(error.error.error.status, "NOT_FOUND")
        self.assertEqual(str(error), "API error 404: Requested entity was not found.")

    def test_plain_text_error(self) -> None:
        service, _ = self._service(lambda request: httpx.Response(503, content=b"upstream down"))
        with self.assertRaises(ApiError) as ctx:
            service.privacypolicy.analyze(body={"privacyPolicyUri": "https://example.com"}).execute()
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.message, "upstream down")
        self.assertEqual(ctx.exception.details, [])
        self.assertIsNone(ctx.exception.error)

    def test_status_code_is_always_transport_status(self) -> None:
        for status in (400, 401, 403, 409, 429, 500, 502):
            with self.subTest(status=status):
                response = HttpResponse(
                    status,
                    {"Content-Type": "application/json"},
                    json.dumps({"error": {"code": 999, "message": "x"}}).encode("utf-8"),
                )
                self.assertEqual(error_from_response(response).status_code, status)

    def test_invalid_json_success(self) -> None:
        service, _ = self._service(lambda request: httpx.Response(200, content=b"{not json"))
        with self.assertRaises(ResponseDecodeError) as ctx:
            service.accounts.apps.operations.get(name=OPERATION_NAME).execute()
        self.assertEqual(ctx.exception.status_code, 200)

    def test_schema_violation_success(self) -> None:
        service, _ = self._service(lambda request: _json_response(200, {"done": True}))
        with self.assertRaises(ResponseDecodeError):
            service.accounts.apps.operations.get(name=OPERATION_NAME).execute()

    def test_transport_error_is_wrapped(self) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service, _ = self._service(respond)
        with self.assertRaises(TransportError) as ctx:
            service.accounts.apps.operations.get(name=OPERATION_NAME).execute()
        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectError)
        self.assertEqual(ctx.exception.method, "GET")

    def test_analyze_privacy_policy(self) -> None:
        payload = {
            "htmlContent": "<p>We collect email.</p>",
            "dataTypeAnnotations": [{"dataType": "EMAIL", "startOffset": "10", "endOffset": "15", "score": 0.8}],
        }
        service, recorder = self._service(lambda request: _json_response(200, payload))
        body = checks_v1alpha.AnalyzePrivacyPolicyRequest(privacy_policy_page_content="<p>We collect email.</p>")
        result = service.privacypolicy.analyze(body).execute()

        self.assertIsInstance(result, checks_v1alpha.AnalyzePrivacyPolicyResponse)
        self.assertEqual(result.data_type_annotations[0].end_offset, 15)
        sent = json.loads(recorder.calls[0].content)
        self.assertEqual(sent, {"privacyPolicyPageContent": "<p>We collect email.</p>"})


class TestAsyncExecution(unittest.IsolatedAsyncioTestCase):
    async def test_execute_async(self) -> None:
        calls: list[httpx.Request] = []

        def respond(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return _json_response(200, {"name": OPERATION_NAME, "done": True, "response": {"ok": True}})

        async with AsyncHttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(respond))) as transport:
            client = transport.raw_client
            service = checks_v1alpha.build(
                transport=HttpxTransport(httpx.Client(transport=httpx.MockTransport(respond))),
                async_transport=transport,
            )
            op = await service.accounts.apps.operations.get(name=OPERATION_NAME).execute_async()
            await client.aclose()

        self.assertTrue(op.is_terminal)
        self.assertEqual(op.result(), {"ok": True})
        self.assertEqual(len(calls), 1)

    async def test_execute_async_without_transport(self) -> None:
        service = checks_v1alpha.build(transport=HttpxTransport(httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))))
        request = service.accounts.apps.operations.get(name=OPERATION_NAME)
        with self.assertRaises(RuntimeError):
            await request.execute_async()
        self.assertFalse(request.executed)


if __name__ == "__main__":
    unittest.main()
