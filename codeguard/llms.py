"""
Model Invoker
=============

Sends an AnalysisPrompt to an OpenAI-compatible chat completions
endpoint with tool invocation forced to the declared function.

Exactly one attempt is made per call. Failures come back as
UpstreamError values rather than exceptions, so callers handle every
error kind explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import requests
import structlog

from codeguard.core.errors import classify_status, make_error, redact
from codeguard.core.models import ErrorKind, ModelReply, UpstreamError
from codeguard.core.prompts import AnalysisPrompt

log = structlog.get_logger("codeguard.llms")

DEFAULT_ENDPOINT = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_TIMEOUT = 120

InvokeResult = Union[ModelReply, UpstreamError]


@dataclass
class LLMUsage:
    """Token usage reported by the endpoint."""

    input_tokens: int
    output_tokens: int
    model: str

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class ModelInvoker:
    """Client for the upstream generation endpoint.

    The credential is injected at construction. An HTTP session may be
    injected too; without one each call posts with a fresh connection, so
    concurrent calls share no transport state. The invoker keeps nothing
    between calls.

    Example:
        >>> invoker = ModelInvoker(api_key=os.environ["AI_GATEWAY_API_KEY"])
        >>> result = invoker.invoke(build_prompt(code))
        >>> if isinstance(result, UpstreamError):
        ...     print(result.kind, result.status_code)
    """

    def __init__(
        self,
        api_key: str | None,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._api_key = api_key or None
        self.endpoint = endpoint
        self.model = model
        self.timeout = timeout
        self.session = session

    def __repr__(self) -> str:
        return f"ModelInvoker(endpoint={self.endpoint!r}, model={self.model!r})"

    @property
    def configured(self) -> bool:
        return self._api_key is not None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _extract_usage(self, body: Any) -> LLMUsage:
        usage = body.get("usage") if isinstance(body, dict) else None
        if not isinstance(usage, dict):
            usage = {}
        return LLMUsage(
            input_tokens=int(usage.get("prompt_tokens") or 0),
            output_tokens=int(usage.get("completion_tokens") or 0),
            model=self.model,
        )

    def invoke(self, prompt: AnalysisPrompt) -> InvokeResult:
        """Send *prompt* and return the decoded reply or a classified error."""
        if not self.configured:
            log.error("AI gateway API key is not configured")
            return make_error(ErrorKind.CONFIGURATION_MISSING)

        log.info("Analyzing code for vulnerabilities", model=self.model)
        post = self.session.post if self.session is not None else requests.post
        try:
            response = post(
                self.endpoint,
                headers=self._headers(),
                json=prompt.to_payload(self.model),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            log.error("AI gateway timed out", timeout=self.timeout)
            return make_error(
                ErrorKind.UPSTREAM_FAILURE,
                "AI gateway timed out",
                detail=redact(str(e), self._api_key),
            )
        except requests.exceptions.RequestException as e:
            detail = redact(str(e), self._api_key)
            log.error("AI gateway could not be reached", error=detail)
            return make_error(
                ErrorKind.UPSTREAM_FAILURE,
                "AI gateway could not be reached",
                detail=detail,
            )

        if not 200 <= response.status_code < 300:
            body = redact(response.text, self._api_key)
            log.error("AI gateway error", status=response.status_code, body=body)
            return classify_status(response.status_code, body)

        try:
            data = response.json()
        except (ValueError, RecursionError) as e:
            log.warning("AI gateway returned a non-JSON body", status=response.status_code)
            return make_error(
                ErrorKind.MALFORMED_RESPONSE,
                upstream_status=response.status_code,
                detail=redact(str(e), self._api_key),
            )

        usage = self._extract_usage(data)
        log.info(
            "AI response received",
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            model=self.model,
        )
        return ModelReply(status_code=response.status_code, body=data)
