"""
Response Extraction
===================

Turns the model's tool call into validated findings.

The schema only makes the reply shape likely, not certain. Anything that
cannot be read as a ``vulnerabilities`` array degrades to an empty list;
individual items that fail validation are dropped and logged.
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from pydantic import ValidationError

from .models import FindingCheck, RejectedFinding, VulnerabilityFinding

log = structlog.get_logger("codeguard.extractor")


class MalformedResponse(ValueError):
    """Raised internally when the tool call payload cannot be read."""


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def find_tool_arguments(body: Any) -> Any:
    """Return the arguments of the first tool call in a chat completion.

    Raises:
        MalformedResponse: If the body holds no tool call with arguments
    """
    if not isinstance(body, dict):
        raise MalformedResponse("response body is not an object")
    choice = _first(body.get("choices"))
    message = choice.get("message") if isinstance(choice, dict) else None
    tool_call = _first(message.get("tool_calls")) if isinstance(message, dict) else None
    function = tool_call.get("function") if isinstance(tool_call, dict) else None
    arguments = function.get("arguments") if isinstance(function, dict) else None
    if arguments is None or arguments == "":
        raise MalformedResponse("no tool call in response")
    return arguments


def parse_arguments(arguments: Any) -> list[Any]:
    """Decode tool arguments and return the raw ``vulnerabilities`` list.

    Some gateways hand back arguments already decoded, so dicts are
    accepted as well as JSON strings.

    Raises:
        MalformedResponse: If the payload is not JSON or has no list
    """
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except json.JSONDecodeError as e:
            raise MalformedResponse(f"tool arguments are not valid JSON: {e}") from e
        except RecursionError as e:
            raise MalformedResponse("tool arguments are nested too deeply") from e
    if not isinstance(arguments, dict):
        raise MalformedResponse("tool arguments are not an object")
    items = arguments.get("vulnerabilities")
    if not isinstance(items, list):
        raise MalformedResponse("'vulnerabilities' is missing or not an array")
    return items


def check_finding(raw: Any) -> FindingCheck:
    """Validate one raw item into a finding or a rejection."""
    try:
        return VulnerabilityFinding.model_validate(raw)
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'item'}: {err['msg']}" for err in e.errors()
        )
        return RejectedFinding(raw=raw, reason=reasons)


def extract_findings(body: Any) -> list[VulnerabilityFinding]:
    """Extract validated findings from a chat completion body.

    Args:
        body: Decoded JSON body of a successful upstream response

    Returns:
        Findings in emission order; empty if the tool call is missing or
        unreadable
    """
    try:
        items = parse_arguments(find_tool_arguments(body))
    except MalformedResponse as e:
        log.warning("Malformed model response, returning no findings", reason=str(e))
        return []

    findings: list[VulnerabilityFinding] = []
    for index, raw in enumerate(items):
        checked = check_finding(raw)
        if isinstance(checked, RejectedFinding):
            log.warning("Dropping invalid finding", index=index, reason=checked.reason)
            continue
        findings.append(checked)

    log.debug("Findings extracted", received=len(items), kept=len(findings))
    return findings
