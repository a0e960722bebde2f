"""CLI entry point for gqlms (GraphQL mutation authorization sweep)."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from gqlms.console import console, print_body, warn
from gqlms.http import DEFAULT_PROXY, DEFAULT_TIMEOUT

load_dotenv()


@click.group()
@click.version_option(version="0.1.0", prog_name="gqlms")
def cli():
    """Test which GraphQL mutations the current credentials may invoke."""


@cli.command()
@click.option("-r", "--request", "request_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Captured raw HTTP request file (e.g. request.txt)")
@click.option("-t", "--delay", default=1.0, type=click.FloatRange(min=0), envvar="GQLMS_DELAY", show_default=True, help="Seconds to wait between mutations")
@click.option("--ssl/--no-ssl", "use_ssl", default=True, help="Scheme for relative request targets")
@click.option("--unauth", default="", help="Comma-separated headers to remove after introspection")
@click.option("--proxy", default=None, is_flag=False, flag_value=DEFAULT_PROXY, envvar="GQLMS_PROXY", help=f"Proxy URL (bare flag: {DEFAULT_PROXY})")
@click.option("--insecure", is_flag=True, default=False, help="Do not verify TLS certificates")
@click.option("--timeout", default=DEFAULT_TIMEOUT, type=float, envvar="GQLMS_TIMEOUT", show_default=True, help="Per-request timeout in seconds")
@click.option("-o", "--output-dir", default=".", type=click.Path(file_okay=False), help="Directory for the result files")
@click.option("--report", "report_path", default=None, type=click.Path(dir_okay=False), help="Also write a JSON report here")
@click.option("-y", "--yes", is_flag=True, default=False, help="Continue without asking when unauth headers are missing")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Print every mutation response")
def scan(
    request_path: str,
    delay: float,
    use_ssl: bool,
    unauth: str,
    proxy: str | None,
    insecure: bool,
    timeout: float,
    output_dir: str,
    report_path: str | None,
    yes: bool,
    verbose: bool,
) -> None:
    """Introspect the endpoint of a captured request and test every mutation.

    \b
    Examples:
      gqlms scan -r request.txt
      gqlms scan -r request.txt --unauth Authorization,Cookie -t 0.5
      gqlms scan -r request.txt --proxy --insecure -v
    """
    from gqlms.credentials import CredentialSet
    from gqlms.errors import ConfigError, TransportError
    from gqlms.http import RequestExecutor
    from gqlms.request_file import parse_request_file
    from gqlms.runner import SweepAborted, SweepRunner
    from gqlms.sinks import result_sinks

    try:
        captured = parse_request_file(request_path, use_ssl=use_ssl)
        executor = RequestExecutor(proxy=proxy, timeout=timeout, verify=not insecure)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    credentials = CredentialSet.from_mapping(captured.headers)
    unauth_headers = [h.strip() for h in unauth.split(",") if h.strip()]

    console.print(f"[bold]Target:[/bold] {captured.endpoint}")
    console.print(f"  → {'Authenticated' if credentials.looks_authenticated else 'Unauthenticated'} mode")
    console.print(f"  → {'Using proxy ' + executor.proxy if executor.proxy else 'No proxy in use'}")

    def confirm(missing: list[str]) -> bool:
        warn(f"The following headers were not found in the request: {', '.join(missing)}")
        return yes or click.confirm("Do you want to continue anyway?", default=True)

    progress = Progress(
        TextColumn("{task.description}"),
        BarColumn(bar_width=40),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    task = progress.add_task("Testing mutations", total=None)

    def on_result(index, total, name, result, response):
        # Started lazily so the confirm prompt never runs under the live display
        progress.start()
        progress.update(task, total=total, completed=index, description=name)
        if verbose:
            style = "green" if result.allowed else "red"
            console.print(f"[{style}]{name}[/{style}] {result.verdict.value} ({escape(result.evidence)})")
            if response is not None:
                print_body(response.body)

    discovered, allowed, denied = result_sinks(output_dir)
    runner = SweepRunner(
        executor,
        captured.endpoint,
        credentials,
        unauth_headers=unauth_headers,
        delay=delay,
        confirm=confirm,
        on_progress=lambda msg: console.print(f"  {msg}", markup=False),
        on_result=on_result,
    )

    try:
        with discovered, allowed, denied:
            summary = runner.run(discovered, allowed, denied)
            # Categories that got no names still replace the previous run's file
            for sink in (discovered, allowed, denied):
                sink.open()
    except SweepAborted as e:
        console.print(f"[yellow]{escape(str(e))}[/yellow]")
        sys.exit(0)
    except TransportError as e:
        console.print(f"[red]Error fetching mutations: {escape(str(e))}[/red]")
        sys.exit(1)
    finally:
        progress.stop()

    if summary.total == 0:
        warn("No mutations were tested")

    console.print("[green]Authorization testing completed![/green]")
    _print_summary(summary)

    if report_path:
        from gqlms.formats.report import SweepReport

        report = SweepReport.from_summary(
            summary,
            endpoint=captured.endpoint,
            created_at=datetime.now(timezone.utc).isoformat(),
            unauth_headers=unauth_headers,
        )
        path = Path(report_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report.model_dump_json(indent=2))
        console.print(f"[green]Report written to {report_path}[/green]")


def _print_summary(summary) -> None:
    table = Table(title="Summary")
    table.add_column("Result", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Allowed", str(summary.allowed_count))
    table.add_row("Denied", str(summary.denied_count))
    if summary.unreachable_count:
        table.add_row("  of which unreachable", str(summary.unreachable_count))
    table.add_row("Total tested", str(summary.total))
    console.print(table)


if __name__ == "__main__":
    cli()
