"""
Command Line Interface Module
=============================

Provides CLI parsing, output formatting, and execution orchestration.

Submodules:
- parser: Argument parsing and validation
- output: Console output formatting and display
- runner: Main execution orchestration
"""

from codeguard.cli.output import print_error, print_findings, print_json
from codeguard.cli.parser import create_argument_parser, validate_args
from codeguard.cli.runner import main, run_scan, run_serve

__all__ = [
    # Parser
    "create_argument_parser",
    "validate_args",
    # Output
    "print_findings",
    "print_json",
    "print_error",
    # Runner
    "main",
    "run_scan",
    "run_serve",
]
