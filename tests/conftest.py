"""
Shared Fixtures and Test Utilities for Codeguard
================================================

Provides reusable stub transports, chat completion bodies, and app
factories that every test module can use via standard pytest fixture
injection. No real network calls are made by any fixture here.
"""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog
from fastapi.testclient import TestClient

from codeguard.config import CodeguardConfig
from codeguard.core.analysis import CodeAnalyzer
from codeguard.llms import ModelInvoker
from codeguard.server.app import create_app

TEST_API_KEY = "sk-test-0123456789abcdef"


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

SAMPLE_CODE = """function authenticateUser(username, password) {
  const query = "SELECT * FROM users WHERE username = '" + username + "'";
  return database.execute(query);
}

const apiKey = "sk_live_51234567890abcdef";
eval(userInput);"""


SAMPLE_FINDINGS = [
    {
        "severity": "critical",
        "title": "SQL Injection",
        "description": "User input is concatenated into a SQL query.",
        "recommendation": "Use parameterized queries.",
    },
    {
        "severity": "high",
        "title": "Hardcoded API key",
        "description": "A live API key is embedded in source code.",
        "recommendation": "Load secrets from the environment or a vault.",
    },
    {
        "severity": "medium",
        "title": "Use of eval()",
        "description": "eval() executes arbitrary user-controlled input.",
        "recommendation": "Remove eval() and parse input explicitly.",
    },
]


def build_completion(arguments: Any, *, usage: dict | None = None) -> dict:
    """Build a chat completion body carrying one tool call.

    Dicts and lists are JSON-encoded, strings are used as-is so tests
    can pass deliberately broken payloads.
    """
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    body: dict[str, Any] = {
        "id": "chatcmpl-test",
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {"name": "report_vulnerabilities", "arguments": arguments},
                        }
                    ],
                },
                "finish_reason": "tool_calls",
            }
        ],
    }
    if usage is not None:
        body["usage"] = usage
    return body


def build_http_response(status: int = 200, body: Any = None, text: str | None = None) -> MagicMock:
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    if body is not None:
        response.json.return_value = body
        response.text = json.dumps(body)
    else:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
        response.text = text or ""
    return response


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration a test (or the CLI) applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def completion():
    """Factory for chat completion bodies."""
    return build_completion


@pytest.fixture
def http_response():
    """Factory for stub HTTP responses."""
    return build_http_response


@pytest.fixture
def sample_code():
    return SAMPLE_CODE


@pytest.fixture
def sample_findings():
    return [dict(item) for item in SAMPLE_FINDINGS]


@pytest.fixture
def session():
    """Stub requests.Session answering with the sample findings."""
    stub = MagicMock()
    stub.post.return_value = build_http_response(200, build_completion({"vulnerabilities": SAMPLE_FINDINGS}))
    return stub


@pytest.fixture
def invoker(session):
    return ModelInvoker(api_key=TEST_API_KEY, session=session)


@pytest.fixture
def analyzer(invoker):
    return CodeAnalyzer(invoker)


@pytest.fixture
def config():
    return CodeguardConfig(api_key=TEST_API_KEY, max_code_chars=1000)


@pytest.fixture
def make_client(config):
    """Factory for a TestClient around a given analyzer."""

    def _make(analyzer: CodeAnalyzer) -> TestClient:
        return TestClient(create_app(config, analyzer))

    return _make


@pytest.fixture
def client(make_client, analyzer):
    return make_client(analyzer)
