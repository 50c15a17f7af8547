"""
Codeguard - AI-Powered Code Vulnerability Analysis
==================================================

Codeguard sends a source code snippet to a generative model under a
strict tool schema and returns the security findings it reports.

Key Features:
- Schema-constrained model output (forced tool invocation)
- Runtime validation of every finding
- Small error taxonomy mapped to HTTP status codes
- HTTP gateway with CORS support and a local scanning CLI

Modules:
- core: Core domain logic (models, prompts, extraction, errors, analysis)
- llms: Client for the upstream generation endpoint
- server: HTTP gateway
- cli: Command-line interface

Usage:
    # CLI
    codeguard serve --port 8000
    codeguard scan app.js

    # Programmatic
    from codeguard.core import CodeAnalyzer
    from codeguard.llms import ModelInvoker
"""

__version__ = "0.1.0"

from codeguard.core import (
    AnalysisResult,
    CodeAnalyzer,
    ErrorKind,
    Severity,
    UpstreamError,
    VulnerabilityFinding,
)
from codeguard.llms import ModelInvoker

__all__ = [
    "__version__",
    "AnalysisResult",
    "CodeAnalyzer",
    "ErrorKind",
    "ModelInvoker",
    "Severity",
    "UpstreamError",
    "VulnerabilityFinding",
]
