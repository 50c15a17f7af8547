"""
Core Data Models
================

Domain models for a single code analysis exchange.

Every model here lives for exactly one request/response cycle: the
inbound request, the findings parsed from the model's tool call, and the
error values produced when the upstream call fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    """Severity levels a finding may carry."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


SEVERITY_VALUES = [member.value for member in Severity]


class AnalysisRequest(BaseModel):
    """Inbound request body: a single snippet of source code."""

    code: str = Field(description="Source code to analyze, any language")

    @field_validator("code")
    @classmethod
    def _reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("code must not be empty")
        return v


class VulnerabilityFinding(BaseModel):
    """A single reported security issue.

    All four fields are required and must contain non-whitespace text.
    Extra keys from the model are dropped.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    severity: Severity
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    recommendation: str = Field(min_length=1)

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, v: object) -> object:
        # "HIGH" and " high " are the same level; anything else is left
        # for the enum to reject.
        if isinstance(v, str):
            return v.strip().lower()
        return v


class AnalysisResult(BaseModel):
    """Findings in the order the model emitted them."""

    vulnerabilities: list[VulnerabilityFinding] = Field(default_factory=list)


@dataclass(frozen=True)
class RejectedFinding:
    """A raw item from the model that failed validation."""

    raw: Any
    reason: str


FindingCheck = Union[VulnerabilityFinding, RejectedFinding]


class ErrorKind(str, Enum):
    """Failure categories surfaced by the analysis pipeline."""

    RATE_LIMITED = "RateLimited"
    PAYMENT_REQUIRED = "PaymentRequired"
    CONFIGURATION_MISSING = "ConfigurationMissing"
    UPSTREAM_FAILURE = "UpstreamFailure"
    MALFORMED_RESPONSE = "MalformedResponse"
    INVALID_REQUEST = "InvalidRequest"


@dataclass(frozen=True)
class UpstreamError:
    """A classified failure.

    Attributes:
        kind: Failure category
        message: Caller-facing message, safe to return in a response body
        status_code: HTTP status the gateway answers with
        upstream_status: Status returned by the upstream endpoint, if any
        detail: Diagnostic text (upstream body), for logs only
    """

    kind: ErrorKind
    message: str
    status_code: int
    upstream_status: int | None = None
    detail: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class ModelReply:
    """A successful upstream response and its decoded JSON body."""

    status_code: int
    body: Any
