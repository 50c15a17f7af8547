"""
Tests for codeguard.llms
========================

Covers the ModelInvoker: credential checks, request construction,
status classification, transport failures, credential redaction and
usage extraction. All calls go to a stub session.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from codeguard.core.models import ErrorKind, ModelReply, UpstreamError
from codeguard.core.prompts import TOOL_NAME, build_prompt
from codeguard.llms import DEFAULT_ENDPOINT, DEFAULT_MODEL, LLMUsage, ModelInvoker

API_KEY = "sk-secret-abcdef"


def _invoker(response=None, side_effect=None, api_key=API_KEY):
    session = MagicMock()
    if side_effect is not None:
        session.post.side_effect = side_effect
    else:
        session.post.return_value = response
    return ModelInvoker(api_key=api_key, session=session), session


# ═══════════════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════════════


class TestMissingCredential:
    @pytest.mark.parametrize("api_key", [None, ""])
    def test_configuration_missing(self, api_key):
        invoker, session = _invoker(api_key=api_key)
        result = invoker.invoke(build_prompt("eval(x)"))
        assert isinstance(result, UpstreamError)
        assert result.kind is ErrorKind.CONFIGURATION_MISSING
        assert result.status_code == 500

    def test_no_network_call(self):
        invoker, session = _invoker(api_key=None)
        invoker.invoke(build_prompt("eval(x)"))
        session.post.assert_not_called()

    def test_defaults(self):
        invoker = ModelInvoker(api_key=API_KEY, session=MagicMock())
        assert invoker.endpoint == DEFAULT_ENDPOINT
        assert invoker.model == DEFAULT_MODEL
        assert invoker.configured

    def test_repr_hides_key(self):
        invoker = ModelInvoker(api_key=API_KEY, session=MagicMock())
        assert API_KEY not in repr(invoker)


# ═══════════════════════════════════════════════════════════════════════════
# Request construction
# ═══════════════════════════════════════════════════════════════════════════


class TestRequest:
    def test_posts_payload_once(self, http_response, completion):
        invoker, session = _invoker(http_response(200, completion({"vulnerabilities": []})))
        invoker.invoke(build_prompt("eval(x)"))

        assert session.post.call_count == 1
        args, kwargs = session.post.call_args
        assert args[0] == DEFAULT_ENDPOINT
        payload = kwargs["json"]
        assert payload["model"] == DEFAULT_MODEL
        assert payload["tool_choice"] == {"type": "function", "function": {"name": TOOL_NAME}}
        assert "eval(x)" in payload["messages"][1]["content"]

    def test_bearer_header(self, http_response, completion):
        invoker, session = _invoker(http_response(200, completion({"vulnerabilities": []})))
        invoker.invoke(build_prompt("eval(x)"))
        headers = session.post.call_args.kwargs["headers"]
        assert headers["Authorization"] == f"Bearer {API_KEY}"
        assert headers["Content-Type"] == "application/json"

    def test_timeout_passed(self, http_response, completion):
        session = MagicMock()
        session.post.return_value = http_response(200, completion({"vulnerabilities": []}))
        ModelInvoker(api_key=API_KEY, timeout=7, session=session).invoke(build_prompt("x"))
        assert session.post.call_args.kwargs["timeout"] == 7


# ═══════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════


class TestSuccess:
    def test_returns_model_reply(self, http_response, completion):
        body = completion({"vulnerabilities": []})
        invoker, _ = _invoker(http_response(200, body))
        result = invoker.invoke(build_prompt("x"))
        assert isinstance(result, ModelReply)
        assert result.body == body

    def test_usage_extracted(self, completion):
        body = completion({"vulnerabilities": []}, usage={"prompt_tokens": 120, "completion_tokens": 30})
        usage = ModelInvoker(api_key=API_KEY)._extract_usage(body)
        assert usage == LLMUsage(input_tokens=120, output_tokens=30, model=DEFAULT_MODEL)
        assert usage.total_tokens == 150

    def test_usage_missing_is_zero(self, completion):
        usage = ModelInvoker(api_key=API_KEY)._extract_usage(completion({"vulnerabilities": []}))
        assert usage.total_tokens == 0

    def test_no_state_kept_between_calls(self, http_response, completion):
        body = completion({"vulnerabilities": []}, usage={"prompt_tokens": 5, "completion_tokens": 1})
        invoker, _ = _invoker(http_response(200, body))
        before = dict(vars(invoker))
        invoker.invoke(build_prompt("x"))
        invoker.invoke(build_prompt("y"))
        assert vars(invoker) == before

    def test_deeply_nested_body_is_malformed(self, http_response):
        response = http_response(200, text="[" * 100000)
        response.json.side_effect = RecursionError("maximum recursion depth exceeded")
        invoker, _ = _invoker(response)
        result = invoker.invoke(build_prompt("x"))
        assert result.kind is ErrorKind.MALFORMED_RESPONSE

    def test_non_json_body_is_malformed(self, http_response):
        invoker, _ = _invoker(http_response(200, text="<html>gateway</html>"))
        result = invoker.invoke(build_prompt("x"))
        assert isinstance(result, UpstreamError)
        assert result.kind is ErrorKind.MALFORMED_RESPONSE


class TestStatusErrors:
    def test_rate_limited(self, http_response):
        invoker, session = _invoker(http_response(429, text="Too Many Requests"))
        result = invoker.invoke(build_prompt("x"))
        assert result.kind is ErrorKind.RATE_LIMITED
        assert result.status_code == 429
        assert session.post.call_count == 1

    def test_payment_required(self, http_response):
        invoker, _ = _invoker(http_response(402, text="Payment Required"))
        result = invoker.invoke(build_prompt("x"))
        assert result.kind is ErrorKind.PAYMENT_REQUIRED
        assert result.status_code == 402

    def test_other_status_carries_detail(self, http_response):
        invoker, _ = _invoker(http_response(503, text='{"error": "overloaded"}'))
        result = invoker.invoke(build_prompt("x"))
        assert result.kind is ErrorKind.UPSTREAM_FAILURE
        assert result.status_code == 500
        assert result.upstream_status == 503
        assert result.detail == '{"error": "overloaded"}'

    @pytest.mark.parametrize("status", [301, 302, 304, 307])
    def test_redirect_status_is_failure(self, http_response, status):
        response = http_response(status, text="<html>moved</html>")
        response.ok = True
        invoker, _ = _invoker(response)
        result = invoker.invoke(build_prompt("x"))
        assert result.kind is ErrorKind.UPSTREAM_FAILURE
        assert result.status_code == 500
        assert result.upstream_status == status

    def test_credential_redacted_from_detail(self, http_response):
        invoker, _ = _invoker(http_response(401, text=f"invalid key {API_KEY}"))
        result = invoker.invoke(build_prompt("x"))
        assert API_KEY not in result.message
        assert API_KEY not in result.detail


class TestTransportErrors:
    def test_connection_error(self):
        invoker, session = _invoker(side_effect=requests.exceptions.ConnectionError("refused"))
        result = invoker.invoke(build_prompt("x"))
        assert result.kind is ErrorKind.UPSTREAM_FAILURE
        assert result.status_code == 500
        assert session.post.call_count == 1

    def test_timeout(self):
        invoker, session = _invoker(side_effect=requests.exceptions.Timeout("read timed out"))
        result = invoker.invoke(build_prompt("x"))
        assert result.kind is ErrorKind.UPSTREAM_FAILURE
        assert "timed out" in result.message
        assert session.post.call_count == 1

    def test_credential_redacted_from_exception(self):
        invoker, _ = _invoker(side_effect=requests.exceptions.ConnectionError(f"bad header {API_KEY}"))
        result = invoker.invoke(build_prompt("x"))
        assert API_KEY not in result.message
        assert API_KEY not in result.detail


class TestTransport:
    def test_posts_without_shared_session_by_default(self, http_response, completion):
        with patch("codeguard.llms.requests.post") as post:
            post.return_value = http_response(200, completion({"vulnerabilities": []}))
            result = ModelInvoker(api_key=API_KEY).invoke(build_prompt("x"))
        assert isinstance(result, ModelReply)
        assert post.call_count == 1
        assert post.call_args.args[0] == DEFAULT_ENDPOINT

    def test_injected_session_used(self, http_response, completion):
        invoker, session = _invoker(http_response(200, completion({"vulnerabilities": []})))
        with patch("codeguard.llms.requests.post") as post:
            invoker.invoke(build_prompt("x"))
        session.post.assert_called_once()
        post.assert_not_called()
