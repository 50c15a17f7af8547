"""
Code Analysis Pipeline
======================

Runs one snippet through prompt construction, the model call, and
response extraction.

The CodeAnalyzer returns either an AnalysisResult or an UpstreamError;
it never raises for upstream failures. A malformed reply is not an
error: it yields an AnalysisResult with no findings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

import structlog

from .errors import is_surfaced
from .extractor import extract_findings
from .models import AnalysisResult, ModelReply, UpstreamError
from .prompts import build_prompt

if TYPE_CHECKING:
    from ..llms import ModelInvoker

log = structlog.get_logger("codeguard.analysis")

AnalysisOutcome = Union[AnalysisResult, UpstreamError]


class CodeAnalyzer:
    """Orchestrates a single vulnerability analysis.

    Attributes:
        invoker: Client for the upstream generation endpoint

    Example:
        >>> analyzer = CodeAnalyzer(ModelInvoker(api_key))
        >>> outcome = analyzer.analyze("eval(user_input)")
        >>> if isinstance(outcome, AnalysisResult):
        ...     for finding in outcome.vulnerabilities:
        ...         print(finding.severity.value, finding.title)
    """

    def __init__(self, invoker: ModelInvoker) -> None:
        self.invoker = invoker

    def analyze(self, code: str) -> AnalysisOutcome:
        prompt = build_prompt(code)
        reply = self.invoker.invoke(prompt)

        if isinstance(reply, UpstreamError):
            if is_surfaced(reply.kind):
                return reply
            log.warning("Upstream reply unreadable, returning no findings", detail=reply.detail)
            return AnalysisResult(vulnerabilities=[])

        if isinstance(reply, ModelReply):
            findings = extract_findings(reply.body)
            log.info("Analysis complete", findings=len(findings))
            return AnalysisResult(vulnerabilities=findings)

        raise TypeError(f"Unexpected invoker result: {type(reply).__name__}")
