"""
CLI Runner
==========

Main execution orchestration for the Codeguard CLI.

This module ties together:
- Configuration loading and CLI overrides
- Logging setup
- The HTTP gateway (serve)
- One-off file analysis (scan)
"""

from __future__ import annotations

import argparse
from pathlib import Path

import structlog

from codeguard.config import CodeguardConfig, create_example_config, load_config
from codeguard.core.models import UpstreamError
from codeguard.log_config import configure_logging
from codeguard.server.app import build_analyzer, create_app

from .output import console, print_error, print_findings, print_json
from .parser import create_argument_parser, validate_args

log = structlog.get_logger("codeguard.cli")

EXIT_OK = 0
EXIT_UPSTREAM_ERROR = 1
EXIT_INVALID_INPUT = 2


def merge_config_with_args(config: CodeguardConfig, args: argparse.Namespace) -> CodeguardConfig:
    """Merge config file settings with CLI arguments.

    CLI arguments take precedence over config file and environment.
    """
    if getattr(args, "host", None):
        config.host = args.host
    if getattr(args, "port", None) is not None:
        config.port = args.port
    if args.verbosity:
        config.verbosity = args.verbosity
    if args.log_json:
        config.log_json = True
    return config


def run_scan(args: argparse.Namespace, config: CodeguardConfig) -> int:
    """Analyze a single file and print the findings.

    Returns:
        Process exit code
    """
    path = Path(args.file)
    try:
        code = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[bold red]Cannot read {path}:[/bold red] {e}")
        return EXIT_INVALID_INPUT

    if not code.strip():
        console.print(f"[bold red]Nothing to analyze:[/bold red] {path} is empty")
        return EXIT_INVALID_INPUT
    if len(code) > config.max_code_chars:
        console.print(
            f"[bold red]File too large:[/bold red] {len(code)} characters "
            f"(limit {config.max_code_chars})"
        )
        return EXIT_INVALID_INPUT

    log.info("Scanning file", path=str(path), code_chars=len(code))
    outcome = build_analyzer(config).analyze(code)

    if isinstance(outcome, UpstreamError):
        print_error(outcome)
        return EXIT_UPSTREAM_ERROR

    if args.json:
        print_json(outcome)
    else:
        print_findings(outcome, source=str(path))
    return EXIT_OK


def run_serve(config: CodeguardConfig) -> int:
    """Run the HTTP gateway until interrupted."""
    import uvicorn

    if not config.api_key:
        log.warning("AI gateway API key is not configured; analysis requests will fail with 500")

    app = create_app(config)
    log.info("Starting server", host=config.host, port=config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level="debug" if config.verbosity > 1 else "info")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments to parse (default: sys.argv[1:])

    Returns:
        Process exit code
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    errors = validate_args(args)
    if errors:
        for error in errors:
            console.print(f"[bold red]Error:[/bold red] {error}")
        return EXIT_INVALID_INPUT

    configure_logging(args.verbosity, args.log_json)

    if args.command == "init-config":
        create_example_config(Path(args.path))
        console.print(f"Example config written to {args.path}")
        return EXIT_OK

    config = load_config(Path(args.config) if args.config else None)
    config = merge_config_with_args(config, args)
    if (config.verbosity, config.log_json) != (args.verbosity, args.log_json):
        configure_logging(config.verbosity, config.log_json)

    if args.command == "serve":
        return run_serve(config)
    return run_scan(args, config)
