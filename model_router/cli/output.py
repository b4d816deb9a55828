"""
CLI output formatting helpers.

Provides consistent formatting for human-readable and JSON output.
"""

import json
from enum import Enum
from typing import Any

from rich.console import Console
from rich.table import Table


class OutputFormat(str, Enum):
    """Output format options."""

    HUMAN = "human"
    JSON = "json"


class Formatter:
    """Output formatter with support for multiple formats."""

    def __init__(
        self,
        format: OutputFormat = OutputFormat.HUMAN,
        color: bool = True,
    ):
        self.format = format
        self.console = Console(force_terminal=color, no_color=not color)

    def print_json(self, data: Any):
        """Print data as JSON."""
        print(json.dumps(data, indent=2, default=str))

    def print_models(self, rows: list[dict]):
        """Print model definitions with their provider status."""
        if self.format == OutputFormat.JSON:
            self.print_json({"models": rows, "total": len(rows)})
            return

        if not rows:
            self.console.print("[dim]No models available[/dim]")
            return

        table = Table(title="Models")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Provider")
        table.add_column("Tools")
        table.add_column("Reasoning")
        table.add_column("Status")

        for row in rows:
            status = "[green]enabled[/green]" if row["enabled"] else "[red]missing credentials[/red]"
            table.add_row(
                row["id"],
                row["name"],
                row["provider"],
                "yes" if row["supports_tools"] else "no",
                "yes" if row["supports_reasoning"] else "no",
                status,
            )

        self.console.print(table)

    def print_check_results(self, results: list[dict]):
        """Print smoke-test results and a summary line."""
        if self.format == OutputFormat.JSON:
            self.print_json({"results": results})
            return

        table = Table(title="Model check")
        table.add_column("Model", style="cyan")
        table.add_column("Result")
        table.add_column("Time")
        table.add_column("Tokens")
        table.add_column("Error", style="dim")

        colors = {"passed": "green", "failed": "red", "skipped": "yellow"}
        for result in results:
            color = colors[result["status"]]
            latency = f"{result['response_time_ms']}ms" if result.get("response_time_ms") is not None else ""
            tokens = ""
            if result.get("tokens"):
                tokens = f"{result['tokens']['input']} in / {result['tokens']['output']} out"
            table.add_row(
                result["model_id"],
                f"[{color}]{result['status']}[/{color}]",
                latency,
                tokens,
                result.get("error") or "",
            )

        self.console.print(table)

        counts = {status: sum(1 for r in results if r["status"] == status) for status in colors}
        self.console.print(
            f"Passed: {counts['passed']}  Failed: {counts['failed']}  Skipped: {counts['skipped']}"
        )
