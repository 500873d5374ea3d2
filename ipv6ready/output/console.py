"""
Rich console output for ipv6ready
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import Analysis, ProbeDefinition, ProbeResult, RunResult, Status
from .. import __version__


# Status styling
STATUS_STYLES = {
    Status.OK: 'green',
    Status.SLOW: 'yellow',
    Status.BAD: 'red',
    Status.TIMEOUT: 'red',
    Status.ERROR: 'red',
    Status.SKIPPED: 'dim',
}

# Finding color -> (marker, style)
COLOR_MARKERS = {
    'GREEN': ('[OK]', 'green'),
    'BLUE': ('[INFO]', 'cyan'),
    'ORANGE': ('[WARN]', 'yellow'),
    'RED': ('[FAIL]', 'bold red'),
}

MAX_ERROR_LEN = 200


def truncate_error(error: str, max_len: int = MAX_ERROR_LEN) -> str:
    if len(error) <= max_len:
        return error
    return error[:max_len] + "…"


def format_score(score: int) -> str:
    return f"{score}/10" if score >= 0 else "n/a"


class ConsoleOutput:
    """
    Rich console output for readiness runs.

    Features:
    - Per-probe results table
    - Readiness scores panel
    - Color-coded findings
    """

    def __init__(self, console: Optional[Console] = None, show_errors: bool = False):
        self.console = console or Console()
        self.show_errors = show_errors

    def print_header(self, run: RunResult):
        """Print run header"""
        content = Text()
        content.append("ipv6ready", style="bold cyan")
        content.append(f" v{__version__}\n", style="dim")
        content.append("Run ID: ", style="dim")
        content.append(run.run_id, style="bold")
        content.append("\n")
        content.append(f"Started: {run.started_at.isoformat(timespec='seconds')}", style="dim")
        content.append(f"  |  Duration: {run.duration_ms} ms", style="dim")

        self.console.print(Panel(content, border_style="cyan", padding=(0, 1)))

    def print_results(self, run: RunResult):
        """Print per-probe results table"""
        table = Table(
            show_header=True,
            header_style="bold magenta",
            box=box.ROUNDED,
            border_style="dim",
            padding=(0, 1)
        )

        table.add_column("Probe", width=16)
        table.add_column("Status", width=8)
        table.add_column("Time", width=8, justify="right")
        table.add_column("IP", overflow="fold")
        if self.show_errors:
            table.add_column("Error", overflow="fold")

        for result in run.results:
            row = [
                result.name.value,
                Text(result.status.value, style=STATUS_STYLES.get(result.status, '')),
                self._format_time(result),
                self._format_ip(result),
            ]
            if self.show_errors:
                row.append(truncate_error(result.error) if result.error else "")
            table.add_row(*row)

        self.console.print(table)

    def print_analysis(self, analysis: Analysis):
        """Print readiness scores and findings"""
        content = Text()
        content.append("Readiness: ", style="bold")
        content.append(f"IPv4 {format_score(analysis.score_transition)}", style="bold")
        content.append(", ")
        content.append(f"IPv6 {format_score(analysis.score_strict)}", style="bold")
        content.append(f"  (mini {analysis.mini_primary} / {analysis.mini_secondary})", style="dim")

        for detail in analysis.tokens:
            marker, style = COLOR_MARKERS.get(detail.color.upper(), ('[INFO]', 'yellow'))
            content.append("\n")
            content.append(f"{marker:<7}", style=style)
            content.append(detail.message or detail.token)
            if detail.more_info:
                content.append(f" [more: {detail.more_info}]", style="dim")
            content.append(f" (v4={detail.score_transition} v6={detail.score_strict})", style="dim")

        ok = analysis.score_strict >= 10 and analysis.score_transition >= 10
        panel = Panel(
            content,
            title=Text("Summary", style="bold"),
            border_style="green" if ok else "yellow",
            padding=(0, 1)
        )
        self.console.print(panel)

    def print_report(self, run: RunResult, analysis: Analysis):
        """Print header, results and analysis"""
        self.print_header(run)
        self.print_results(run)
        self.print_analysis(analysis)

    def print_catalog(self, definitions: list[ProbeDefinition]):
        """Print the probe catalog"""
        table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
        table.add_column("Probe", no_wrap=True)
        table.add_column("Category")
        table.add_column("Description")
        table.add_column("IPv6", justify="center")
        table.add_column("URL", overflow="fold")

        for d in definitions:
            table.add_row(d.name.value, d.category, d.description,
                          "yes" if d.requires_ipv6 else "", d.example_url)

        self.console.print(table)

    def print_error(self, message: str):
        """Print error message"""
        self.console.print(f"[bold red]Error:[/] {message}")

    def _format_time(self, result: ProbeResult) -> str:
        if result.elapsed_ms is None:
            return "-"
        return f"{result.time_ms} ms"

    def _format_ip(self, result: ProbeResult) -> str:
        obs = result.ip
        if obs is None or not obs.ip:
            return "-"
        parts = [obs.ip]
        if obs.subtype:
            parts.append(f"({obs.subtype})")
        if obs.asn:
            parts.append(f"AS{obs.asn}")
        if obs.asn_name:
            parts.append(obs.asn_name)
        return " ".join(parts)
