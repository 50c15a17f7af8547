"""
CLI Argument Parser
===================

Handles command-line argument parsing and validation for Codeguard.

This module provides:
- Argument parser creation with the serve, scan and init-config commands
- Argument validation
"""

import argparse
from pathlib import Path


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all CLI options.

    Returns:
        Configured ArgumentParser instance

    Example:
        >>> parser = create_argument_parser()
        >>> args = parser.parse_args(['scan', 'app.js'])
    """
    parser = argparse.ArgumentParser(
        prog='codeguard',
        description='Analyze source code for security vulnerabilities with an AI model. '
                    'Export your AI_GATEWAY_API_KEY before running.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  codeguard serve --port 8000
  codeguard scan app.js
  codeguard scan handler.py --json
  codeguard init-config .codeguard.yaml
        """
    )

    parser.add_argument(
        '-v', '--verbosity',
        action='count',
        default=0,
        help='Increase log verbosity (-v for INFO, -vv for DEBUG)'
    )

    parser.add_argument(
        '--log-json',
        action='store_true',
        help='Write logs as JSON lines'
    )

    parser.add_argument(
        '-c', '--config',
        type=str,
        help='Path to a .codeguard.yaml config file'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    serve = subparsers.add_parser('serve', help='Run the HTTP analysis gateway')
    serve.add_argument('--host', type=str, help='Bind address (default from config: 0.0.0.0)')
    serve.add_argument('--port', type=int, help='Port to listen on (default from config: 8000)')

    scan = subparsers.add_parser('scan', help='Analyze a single source file')
    scan.add_argument('file', type=str, help='Path to the source file to analyze')
    scan.add_argument('--json', action='store_true', help='Print findings as JSON')

    init = subparsers.add_parser('init-config', help='Write an example config file')
    init.add_argument(
        'path',
        type=str,
        nargs='?',
        default='.codeguard.yaml',
        help='Destination path (default: .codeguard.yaml)'
    )

    return parser


def validate_args(args: argparse.Namespace) -> list[str]:
    """Validate parsed arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if args.config and not Path(args.config).exists():
        errors.append(f"Config file does not exist: {args.config}")

    if args.command == 'scan':
        path = Path(args.file)
        if not path.exists():
            errors.append(f"File does not exist: {args.file}")
        elif not path.is_file():
            errors.append(f"Not a file: {args.file}")

    if args.command == 'serve' and args.port is not None and not 0 < args.port < 65536:
        errors.append(f"Port must be between 1 and 65535, got {args.port}")

    return errors
