"""
CLI Output Formatting
=====================

Handles console output for scan results.

Uses Rich library for styled console output.
"""

import json

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core.models import AnalysisResult, Severity, UpstreamError

# Module-level console instance
console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold white on red",
    Severity.HIGH: "bold red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
    Severity.INFO: "dim",
}


def print_findings(result: AnalysisResult, source: str = "") -> None:
    """Print findings as a table, in the order the model reported them.

    Args:
        result: Analysis result to print
        source: Name of the analyzed file, used in the title
    """
    findings = result.vulnerabilities
    if not findings:
        console.print("\n[dim]No findings reported[/dim]\n")
        return

    title = f"Findings for {source}" if source else "Findings"
    table = Table(title=title, show_header=True, header_style="bold", show_lines=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Title")
    table.add_column("Description")
    table.add_column("Recommendation")

    for finding in findings:
        style = SEVERITY_STYLES.get(finding.severity, "")
        table.add_row(
            Text(finding.severity.value.upper(), style=style),
            Text(finding.title),
            Text(finding.description),
            Text(finding.recommendation),
        )

    console.print(table)
    console.print(f"\n[bold]Found {len(findings)} potential issues[/bold]\n")


def print_json(result: AnalysisResult) -> None:
    """Print the result exactly as the HTTP gateway would return it."""
    console.print_json(json.dumps(result.model_dump(mode="json")))


def print_error(error: UpstreamError) -> None:
    """Print an analysis failure."""
    console.print(f"[bold red]Analysis failed:[/bold red] {error.message} [dim]({error.kind.value})[/dim]")
