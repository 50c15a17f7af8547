"""
HTTP Server Module
==================

FastAPI gateway exposing the analysis pipeline over HTTP.
"""

from codeguard.server.app import ANALYZE_PATH, CORS_HEADERS, build_analyzer, create_app

__all__ = [
    "ANALYZE_PATH",
    "CORS_HEADERS",
    "build_analyzer",
    "create_app",
]
