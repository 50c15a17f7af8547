"""
Error Classification
====================

Maps upstream failures onto the caller-facing error taxonomy.

Each ErrorKind has exactly one HTTP status and one default message.
MalformedResponse is the exception: it never reaches the caller as an
error, the gateway answers 200 with an empty findings list instead.
"""

from __future__ import annotations

import structlog

from .models import ErrorKind, UpstreamError

log = structlog.get_logger("codeguard.errors")

REDACTED = "[REDACTED]"

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.PAYMENT_REQUIRED: 402,
    ErrorKind.CONFIGURATION_MISSING: 500,
    ErrorKind.UPSTREAM_FAILURE: 500,
    ErrorKind.MALFORMED_RESPONSE: 200,
    ErrorKind.INVALID_REQUEST: 400,
}

DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMITED: "Rate limit exceeded. Please try again later.",
    ErrorKind.PAYMENT_REQUIRED: "Payment required. Please add credits to your workspace.",
    ErrorKind.CONFIGURATION_MISSING: "AI gateway API key is not configured",
    ErrorKind.UPSTREAM_FAILURE: "AI gateway error",
    ErrorKind.MALFORMED_RESPONSE: "AI gateway returned a malformed response",
    ErrorKind.INVALID_REQUEST: "Invalid request",
}


def status_for(kind: ErrorKind) -> int:
    """Return the HTTP status the gateway answers with for *kind*."""
    return STATUS_BY_KIND[kind]


def is_surfaced(kind: ErrorKind) -> bool:
    """Whether *kind* is reported to the caller as an HTTP error."""
    return kind is not ErrorKind.MALFORMED_RESPONSE


def redact(text: str | None, secret: str | None) -> str | None:
    """Remove every occurrence of *secret* from *text*."""
    if text is None or not secret:
        return text
    return text.replace(secret, REDACTED)


def make_error(
    kind: ErrorKind,
    message: str | None = None,
    *,
    upstream_status: int | None = None,
    detail: str | None = None,
) -> UpstreamError:
    """Build an UpstreamError with the status code for its kind."""
    return UpstreamError(
        kind=kind,
        message=message or DEFAULT_MESSAGES[kind],
        status_code=status_for(kind),
        upstream_status=upstream_status,
        detail=detail,
    )


def classify_status(status: int, body: str | None = None) -> UpstreamError:
    """Classify a non-success upstream HTTP status.

    Args:
        status: Status code returned by the upstream endpoint
        body: Response body, kept as diagnostic detail

    Returns:
        UpstreamError of kind RateLimited (429), PaymentRequired (402),
        or UpstreamFailure for anything else
    """
    if status == 429:
        return make_error(ErrorKind.RATE_LIMITED, upstream_status=status, detail=body)
    if status == 402:
        return make_error(ErrorKind.PAYMENT_REQUIRED, upstream_status=status, detail=body)
    return make_error(
        ErrorKind.UPSTREAM_FAILURE,
        f"AI gateway error: {status}",
        upstream_status=status,
        detail=body,
    )


def classify_exception(exc: Exception, secret: str | None = None) -> UpstreamError:
    """Convert an unexpected exception into an UpstreamFailure.

    *secret* is scrubbed from the exception text before it is logged or
    kept as detail.
    """
    detail = redact(str(exc), secret)
    log.error("Unclassified failure", error_type=type(exc).__name__, error=detail)
    return make_error(ErrorKind.UPSTREAM_FAILURE, detail=detail)


def error_body(error: UpstreamError) -> dict[str, str]:
    """JSON body returned to the caller for *error*."""
    return {"error": error.message}
