"""
Prompt Construction
===================

Builds the messages and the tool schema sent to the model for one
analysis request.

The tool schema is the contract with the model: tool invocation is forced
to ``report_vulnerabilities`` so the reply is always a JSON object with a
``vulnerabilities`` array of four-field items, never free text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models import SEVERITY_VALUES

TOOL_NAME = "report_vulnerabilities"

VULNERABILITY_CLASSES = [
    "SQL Injection and other injection vulnerabilities",
    "Cross-Site Scripting (XSS)",
    "Exposed API keys/secrets",
    "Insecure authentication",
    "Use of eval() or other dynamic code evaluation",
    "Inadequate input validation",
    "Weak cryptography",
    "Missing access controls",
]

SYSTEM_PROMPT_TEMPLATE = """You are an expert security analyst specializing in code vulnerability detection. \
Analyze the provided code for security issues and report them with the {tool_name} tool.

Each vulnerability should have:
- severity: {severities}
- title: Brief title of the issue
- description: Clear explanation of the security problem
- recommendation: Specific steps to fix it

Common issues to check:
{classes}

If no issues are found, report a single vulnerability with severity "info", \
title "No Critical Issues Found", description "The code appears to follow basic security practices." \
and recommendation "Continue monitoring for emerging vulnerabilities."
"""

USER_PROMPT_TEMPLATE = "Analyze this code for security vulnerabilities:\n\n{code}"


def build_system_prompt() -> str:
    severities = " | ".join(f'"{value}"' for value in SEVERITY_VALUES)
    classes = "\n".join(f"- {name}" for name in VULNERABILITY_CLASSES)
    return SYSTEM_PROMPT_TEMPLATE.format(tool_name=TOOL_NAME, severities=severities, classes=classes)


def build_user_prompt(code: str) -> str:
    # The code is embedded verbatim; no escaping or truncation here.
    return USER_PROMPT_TEMPLATE.format(code=code)


def build_tool_schema() -> dict[str, Any]:
    """JSON schema for the ``report_vulnerabilities`` tool arguments."""
    item = {
        "type": "object",
        "properties": {
            "severity": {"type": "string", "enum": list(SEVERITY_VALUES)},
            "title": {"type": "string"},
            "description": {"type": "string"},
            "recommendation": {"type": "string"},
        },
        "required": ["severity", "title", "description", "recommendation"],
        "additionalProperties": False,
    }
    return {
        "type": "object",
        "properties": {
            "vulnerabilities": {"type": "array", "items": item},
        },
        "required": ["vulnerabilities"],
        "additionalProperties": False,
    }


@dataclass(frozen=True)
class AnalysisPrompt:
    """Everything the model needs for a single analysis call."""

    system: str
    user: str
    schema: dict[str, Any]
    tool_name: str = TOOL_NAME

    @property
    def messages(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]

    @property
    def tools(self) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": self.tool_name,
                    "description": "Report security vulnerabilities found in code",
                    "parameters": self.schema,
                },
            }
        ]

    @property
    def tool_choice(self) -> dict[str, Any]:
        return {"type": "function", "function": {"name": self.tool_name}}

    def to_payload(self, model: str) -> dict[str, Any]:
        """Request body for a chat-completions endpoint."""
        return {
            "model": model,
            "messages": self.messages,
            "tools": self.tools,
            "tool_choice": self.tool_choice,
        }


def build_prompt(code: str) -> AnalysisPrompt:
    """Build the prompt for *code*.

    Args:
        code: Source code, already validated as non-empty by the caller

    Returns:
        AnalysisPrompt holding the system and user messages and the
        strict output schema
    """
    return AnalysisPrompt(
        system=build_system_prompt(),
        user=build_user_prompt(code),
        schema=build_tool_schema(),
    )
