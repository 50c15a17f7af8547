"""
Request Gateway
===============

HTTP entry point for code analysis.

``POST /analyze-code`` accepts ``{"code": "..."}`` and answers with
``{"vulnerabilities": [...]}`` or ``{"error": "..."}``. ``OPTIONS`` on the
same path is a CORS preflight and returns an empty body without touching
the analysis pipeline. Every response carries the cross-origin headers.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from codeguard import __version__
from codeguard.config import CodeguardConfig, load_config
from codeguard.core.analysis import CodeAnalyzer
from codeguard.core.errors import classify_exception, error_body, make_error
from codeguard.core.models import AnalysisRequest, AnalysisResult, ErrorKind, UpstreamError
from codeguard.llms import ModelInvoker

log = structlog.get_logger("codeguard.server")

ANALYZE_PATH = "/analyze-code"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def build_analyzer(config: CodeguardConfig) -> CodeAnalyzer:
    """Create the analysis pipeline with the configured credential injected."""
    invoker = ModelInvoker(
        api_key=config.api_key,
        endpoint=config.endpoint,
        model=config.model,
        timeout=config.request_timeout,
    )
    return CodeAnalyzer(invoker)


def json_response(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


def error_response(error: UpstreamError) -> JSONResponse:
    return json_response(error_body(error), status_code=error.status_code)


def invalid_request(message: str) -> JSONResponse:
    return error_response(make_error(ErrorKind.INVALID_REQUEST, message))


def outcome_response(outcome: AnalysisResult | UpstreamError) -> JSONResponse:
    """Format a pipeline outcome as the final HTTP response."""
    if isinstance(outcome, UpstreamError):
        log.warning(
            "Analysis failed",
            kind=outcome.kind.value,
            status=outcome.status_code,
            upstream_status=outcome.upstream_status,
        )
        return error_response(outcome)
    return json_response(outcome.model_dump(mode="json"))


def create_app(
    config: CodeguardConfig | None = None,
    analyzer: CodeAnalyzer | None = None,
) -> FastAPI:
    """Create the gateway application.

    Args:
        config: Settings (default: loaded from config file and environment)
        analyzer: Pipeline to use (default: built from config)

    Returns:
        FastAPI application
    """
    config = config or load_config()
    analyzer = analyzer or build_analyzer(config)

    app = FastAPI(title="Codeguard", version=__version__)
    app.state.config = config
    app.state.analyzer = analyzer

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        headers = {**(exc.headers or {}), **CORS_HEADERS}
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        return error_response(classify_exception(exc, config.api_key))

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.options(ANALYZE_PATH)
    async def preflight() -> Response:
        return Response(status_code=200, headers=CORS_HEADERS)

    @app.post(ANALYZE_PATH)
    async def analyze_code(request: Request) -> Response:
        try:
            payload = await request.json()
        except ValueError:
            return invalid_request("Request body must be valid JSON")

        try:
            analysis_request = AnalysisRequest.model_validate(payload)
        except ValidationError:
            return invalid_request("Request body must include a non-empty 'code' string")

        code = analysis_request.code
        if len(code) > config.max_code_chars:
            return invalid_request(f"Code exceeds the maximum length of {config.max_code_chars} characters")

        log.info("Analysis requested", code_chars=len(code))
        try:
            outcome = await run_in_threadpool(analyzer.analyze, code)
        except Exception as e:
            return error_response(classify_exception(e, config.api_key))

        return outcome_response(outcome)

    return app
