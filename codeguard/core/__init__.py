"""
Codeguard Core Module
=====================

Core domain logic for code vulnerability analysis.

Submodules:
- models: Data models (Severity, VulnerabilityFinding, UpstreamError)
- prompts: Prompt and tool schema construction
- extractor: Tool call parsing and finding validation
- errors: Error taxonomy and status classification
- analysis: Analysis pipeline orchestrator
"""

from codeguard.core.analysis import AnalysisOutcome, CodeAnalyzer
from codeguard.core.errors import classify_status, error_body, status_for
from codeguard.core.extractor import extract_findings
from codeguard.core.models import (
    AnalysisRequest,
    AnalysisResult,
    ErrorKind,
    ModelReply,
    RejectedFinding,
    Severity,
    UpstreamError,
    VulnerabilityFinding,
)
from codeguard.core.prompts import AnalysisPrompt, build_prompt

__all__ = [
    # Models
    "Severity",
    "AnalysisRequest",
    "VulnerabilityFinding",
    "RejectedFinding",
    "AnalysisResult",
    "ErrorKind",
    "UpstreamError",
    "ModelReply",
    # Prompts
    "AnalysisPrompt",
    "build_prompt",
    # Extraction
    "extract_findings",
    # Errors
    "classify_status",
    "status_for",
    "error_body",
    # Analysis
    "AnalysisOutcome",
    "CodeAnalyzer",
]
