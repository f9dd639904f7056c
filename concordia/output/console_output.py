"""Console output formatter using rich library."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from concordia.models.enums import Category, Severity
from concordia.models.report import ComparisonReport, OverlapGroup


class ConsoleOutputFormatter:
    """Render a comparison report for the terminal using rich."""

    SEVERITY_COLORS = {
        "critical": "bright_red",
        "high": "red",
        "medium": "yellow",
        "low": "blue",
    }

    def __init__(self, console: Console | None = None, verbose: bool = False):
        """
        Initialize the formatter.

        Args:
            console: Rich console instance
            verbose: Also list every shared and unique group
        """
        self.console = console or Console()
        self.verbose = verbose

    def print(self, report: ComparisonReport) -> None:
        """Print the comparison report to the console."""
        self._print_summary(report)
        if not report.effectiveness:
            self.console.print("[dim]No tool results to compare yet.[/dim]")
            return

        self._print_effectiveness(report)
        self._print_severity_breakdown(report)
        self._print_category_breakdown(report)

        if self.verbose:
            self._print_groups("Detected by Multiple Tools", report.detailed_overlap)
            self._print_groups("Detected by One Tool", report.detailed_unique)

    def _print_summary(self, report: ComparisonReport) -> None:
        summary = Table(show_header=False, box=None)
        summary.add_column("Metric", style="bold")
        summary.add_column("Value", justify="right")

        if report.repository:
            summary.add_row("Repository", report.repository)
        summary.add_row("Tools Analyzed", ", ".join(report.tools) or "-")
        summary.add_row("Common Findings", str(report.overlap.common_findings))
        summary.add_row("Unique Findings", str(report.overlap.unique_findings))
        summary.add_row("Total Unique Issues", str(report.overlap.total_unique_issues))

        self.console.print(Panel(summary, title="Tool Comparison", border_style="blue"))

        for tool, error in report.failed_tools.items():
            self.console.print(f"[red]✗ {tool} failed: {error}[/red]")
        self.console.print()

    def _print_effectiveness(self, report: ComparisonReport) -> None:
        table = Table(title="Tool Effectiveness", show_header=True)
        table.add_column("Tool", style="bold")
        table.add_column("Total", justify="right")
        table.add_column("Unique", justify="right")
        table.add_column("Shared", justify="right")
        table.add_column("Uniqueness", justify="right")

        for tool, metrics in report.effectiveness.items():
            table.add_row(
                tool,
                str(metrics.total_detections),
                str(metrics.unique_detections),
                str(metrics.shared_detections),
                f"{metrics.uniqueness_rate:.2f}%",
            )

        self.console.print(table)
        self.console.print()

    def _print_severity_breakdown(self, report: ComparisonReport) -> None:
        table = Table(title="Findings by Severity", show_header=True)
        table.add_column("Tool", style="bold")
        for severity in Severity:
            table.add_column(
                Text(severity.value.upper(), style=self.SEVERITY_COLORS[severity.value]),
                justify="right",
            )

        for tool, counts in report.by_severity.items():
            table.add_row(tool, *(str(counts.get(s.value, 0)) for s in Severity))

        self.console.print(table)
        self.console.print()

    def _print_category_breakdown(self, report: ComparisonReport) -> None:
        # Columns only for categories at least one tool reported
        categories = [
            c.value
            for c in Category
            if any(counts.get(c.value, 0) for counts in report.by_category.values())
        ]
        if not categories:
            return

        table = Table(title="Findings by Category", show_header=True)
        table.add_column("Category", style="bold")
        tools = report.compared_tools()
        for tool in tools:
            table.add_column(tool, justify="right")

        for category in categories:
            table.add_row(category, *(str(report.by_category[t].get(category, 0)) for t in tools))

        self.console.print(table)
        self.console.print()

    def _print_groups(self, title: str, groups: list[OverlapGroup]) -> None:
        if not groups:
            return

        table = Table(title=title, show_header=True, expand=True)
        table.add_column("Severity", width=10)
        table.add_column("Category", width=18)
        table.add_column("Rule", ratio=2)
        table.add_column("Location", ratio=2)
        table.add_column("Detected By", ratio=1)

        for group in groups:
            finding = group.representative_finding
            severity = Severity(finding.severity).value
            location = finding.location.path
            if finding.location.start_line is not None:
                location += f":{finding.location.start_line}"
            table.add_row(
                Text(severity.upper(), style=self.SEVERITY_COLORS[severity]),
                finding.category,
                finding.rule_id,
                location,
                ", ".join(sorted(group.detected_by)),
            )

        self.console.print(table)
        self.console.print()
