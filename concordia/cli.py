"""CLI interface for Concordia - Static-Analysis Findings Comparison."""

import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from concordia import __version__
from concordia.adapters import AdapterRegistry, register_default_adapters
from concordia.comparison.report import compare_findings, compare_scan_outputs
from concordia.config import ConcordiaConfig, load_config, merge_cli_with_config
from concordia.logging import setup_logging
from concordia.models.scan import ScanOutput
from concordia.output.console_output import ConsoleOutputFormatter
from concordia.output.json_output import JSONOutputFormatter
from concordia.scanners import build_scanners, scan_repositories
from concordia.storage import FindingStore, StorageError

console = Console()

register_default_adapters()

TOOL_CHOICES = ["semgrep", "snyk", "eslint", "sonarqube"]


def _load_scan_outputs(
    files, tool: str | None = None, repository_path: str | None = None
) -> list[ScanOutput]:
    """
    Read scan records from JSON files.

    Without ``tool`` each file holds one ScanOutput record or a list of
    them. With ``tool`` each file is that tool's raw report.
    """
    records: list[ScanOutput] = []
    for file_path_str in files:
        file_path = Path(file_path_str)
        try:
            with open(file_path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            console.print(f"[red]Error reading {file_path}: invalid JSON ({e})[/red]")
            continue

        if tool:
            records.append(
                ScanOutput(
                    tool_name=tool,
                    repository_path=repository_path or "",
                    raw_output=data,
                )
            )
            continue

        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                console.print(f"[yellow]Warning: Skipping non-object record in {file_path}[/yellow]")
                continue
            if repository_path and not item.get("repository_path"):
                item = {**item, "repository_path": repository_path}
            try:
                records.append(ScanOutput.model_validate(item))
            except ValidationError as e:
                console.print(f"[yellow]Warning: Skipping invalid record in {file_path}: {e}[/yellow]")
    return records


def _prepare(config_path, **overrides) -> ConcordiaConfig:
    base_config = load_config(Path(config_path) if config_path else None)
    config = merge_cli_with_config(base_config, **overrides)
    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        format_style=config.logging.format,
    )
    return config


def _emit_report(report, config: ConcordiaConfig) -> None:
    if config.output.format == "json":
        formatter = JSONOutputFormatter(
            pretty=config.output.pretty, include_details=config.output.show_details
        )
        if not config.output.path:
            print(formatter.format(report))
        else:
            output_path = Path(config.output.path)
            formatter.write(report, output_path)
            console.print(f"[green]Report written to {output_path}[/green]")
    else:
        formatter = ConsoleOutputFormatter(console=console, verbose=config.output.show_details)
        formatter.print(report)


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
log_level_option = click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Logging level",
)
format_option = click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["json", "console"]),
    default=None,
    help="Output format (default: console)",
)
output_option = click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Output file path for json format (default: stdout)",
)
details_option = click.option(
    "--details/--no-details",
    default=None,
    help="Include every overlap group in the output",
)


@click.group()
@click.version_option(version=__version__, prog_name="concordia")
def cli():
    """Concordia - Compare findings across static-analysis tools."""
    pass


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True))
@config_option
@click.option(
    "--tool",
    "-t",
    type=click.Choice(TOOL_CHOICES),
    default=None,
    help="Treat FILES as this tool's raw report instead of scan records",
)
@click.option(
    "--repo-root",
    default=None,
    help="Repository root to strip from absolute finding paths",
)
@output_option
@click.option(
    "--store/--no-store",
    default=False,
    help="Persist the canonical findings in the finding store",
)
@click.option("--store-path", default=None, help="Finding store directory")
@log_level_option
def normalize(files, config_path, tool, repo_root, output, store, store_path, log_level):
    """
    Convert tool output into canonical findings.

    FILES: Scan record JSON files (or raw reports with --tool)
    """
    config = _prepare(config_path, output_path=output, store_path=store_path, log_level=log_level)

    records = _load_scan_outputs(files, tool=tool, repository_path=repo_root)
    results = AdapterRegistry.adapt_all(records, category_rules=config.classifier.resolved_rules())
    if not results:
        console.print("[red]No scan records found in the given files[/red]")
        sys.exit(1)

    for result in results:
        if result.success:
            console.print(
                f"  [green]✓[/green] {result.tool_name}: {len(result.findings)} findings", highlight=False
            )
        else:
            console.print(f"  [red]✗[/red] {result.tool_name}: {result.error}", highlight=False)

    if store:
        finding_store = FindingStore(config.storage.path)
        for result in results:
            if not result.success:
                continue
            repository = result.repository or "default"
            try:
                finding_store.store(repository, result.tool_name, result.findings)
            except (StorageError, OSError) as e:
                console.print(f"[red]Error storing {result.tool_name} findings: {e}[/red]")
                sys.exit(1)
        console.print(f"[dim]Stored findings in {config.storage.path}[/dim]")

    formatter = JSONOutputFormatter(pretty=config.output.pretty)
    if config.output.path:
        output_path = Path(config.output.path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            f.write(formatter.format_results(results))
        console.print(f"[green]Canonical findings written to {output_path}[/green]")

    if not any(result.success for result in results):
        sys.exit(1)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True))
@config_option
@click.option(
    "--repo-root",
    default=None,
    help="Repository root applied to records that do not carry one",
)
@format_option
@output_option
@details_option
@log_level_option
def compare(files, config_path, repo_root, output_format, output, details, log_level):
    """
    Compare findings from several tools.

    FILES: Scan record JSON files, one or more records each
    """
    config = _prepare(
        config_path,
        output_format=output_format,
        output_path=output,
        show_details=details,
        log_level=log_level,
    )

    records = _load_scan_outputs(files, repository_path=repo_root)
    report = compare_scan_outputs(records, category_rules=config.classifier.resolved_rules())
    _emit_report(report, config)


@cli.command()
@click.argument("repositories", nargs=-1, required=True, type=click.Path(exists=True, file_okay=False))
@config_option
@click.option(
    "--tool",
    "-t",
    "tools",
    multiple=True,
    type=click.Choice(TOOL_CHOICES),
    help="Tool to run (can be specified multiple times; default from config)",
)
@click.option("--max-workers", type=int, default=None, help="Concurrent scans")
@click.option(
    "--store/--no-store",
    default=True,
    help="Persist successful scan results in the finding store",
)
@click.option("--store-path", default=None, help="Finding store directory")
@format_option
@output_option
@details_option
@log_level_option
def scan(
    repositories,
    config_path,
    tools,
    max_workers,
    store,
    store_path,
    output_format,
    output,
    details,
    log_level,
):
    """
    Run scanners against repositories and compare their findings.

    REPOSITORIES: Local repository directories to scan
    """
    config = _prepare(
        config_path,
        output_format=output_format,
        output_path=output,
        show_details=details,
        log_level=log_level,
        store_path=store_path,
        tools=list(tools),
    )
    workers = max_workers or config.scanners.max_workers

    scanners = build_scanners(config.scanners.tools, config.scanners)
    console.print(
        f"[dim]Running {', '.join(s.tool_name for s in scanners)} "
        f"against {len(repositories)} repositor{'y' if len(repositories) == 1 else 'ies'}[/dim]"
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("[green]Scanning...", total=None)
        scan_outputs = scan_repositories(scanners, repositories, max_workers=workers)

    rules = config.classifier.resolved_rules()
    finding_store = FindingStore(config.storage.path) if store else None

    by_repository: dict[str, list[ScanOutput]] = {}
    for scan_output in scan_outputs:
        by_repository.setdefault(scan_output.repository_path, []).append(scan_output)

    for repository_path, outputs in by_repository.items():
        if finding_store is not None:
            for result, record in zip(AdapterRegistry.adapt_all(outputs, category_rules=rules), outputs):
                if not result.success:
                    continue
                try:
                    finding_store.store(
                        result.repository or Path(repository_path).name,
                        result.tool_name,
                        result.findings,
                        tool_version=record.tool_version,
                    )
                except (StorageError, OSError) as e:
                    console.print(f"[red]Error storing {result.tool_name} findings: {e}[/red]")

        _emit_report(compare_scan_outputs(outputs, category_rules=rules), config)


@cli.command()
@click.argument("repository")
@config_option
@click.option("--store-path", default=None, help="Finding store directory")
@format_option
@output_option
@details_option
@log_level_option
def report(repository, config_path, store_path, output_format, output, details, log_level):
    """
    Compare the stored findings of a repository.

    REPOSITORY: Repository name used when the findings were stored
    """
    config = _prepare(
        config_path,
        output_format=output_format,
        output_path=output,
        show_details=details,
        log_level=log_level,
        store_path=store_path,
    )

    finding_store = FindingStore(config.storage.path)
    try:
        findings_by_tool = finding_store.fetch_by_repository(repository)
    except StorageError as e:
        console.print(f"[red]Error reading store: {e}[/red]")
        sys.exit(1)

    if not findings_by_tool:
        known = finding_store.repositories()
        console.print(f"[yellow]No stored findings for {repository}[/yellow]")
        if known:
            console.print(f"[dim]Known repositories: {', '.join(known)}[/dim]")
        sys.exit(1)

    _emit_report(compare_findings(findings_by_tool, repository=repository), config)


@cli.command()
def adapters():
    """List available adapters."""
    console.print("\n[bold]Available Adapters[/bold]\n")
    for adapter in AdapterRegistry.get_all_adapters():
        console.print(f"  • [cyan]{adapter.tool_name}[/cyan] ({adapter.tool_kind.value})")


if __name__ == "__main__":
    cli()
