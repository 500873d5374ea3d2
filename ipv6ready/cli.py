import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import __version__
from .config import (
    DEFAULT_DOMAIN, DEFAULT_PACKET_SIZE, DEFAULT_SLOW_THRESHOLD, DEFAULT_TIMEOUT,
    ENV_PREFIX, catalog, default_options
)
from .diagnostics import analyze
from .enrichment import ASNLookup
from .log import setup_logging
from .models import ProbeName, RunResult
from .output import ConsoleOutput, JsonExporter
from .probe import Runner
from .store import RunStore


console = Console()
logger = logging.getLogger(__name__)


def parse_probe_names(value: Optional[str]) -> list[ProbeName]:
    """Parse a comma separated probe list; empty means all probes"""
    names = []
    for part in (value or '').split(','):
        if part.strip():
            names.append(ProbeName.parse(part))
    return names


async def annotate_asn(run: RunResult, timeout: float = 3.0) -> RunResult:
    """Fill ASN number/name on the run-level observations that lack them"""
    with ASNLookup(timeout=timeout) as lookup:
        ipv4, ipv6 = await asyncio.gather(lookup.annotate(run.ipv4),
                                          lookup.annotate(run.ipv6))
    return replace(run, ipv4=ipv4, ipv6=ipv6)


async def execute_run(runner: Runner, probes: list[ProbeName],
                      deadline: Optional[float], asn: bool) -> RunResult:
    result = await runner.run(probes, deadline=deadline)
    if asn:
        result = await annotate_asn(result)
    return result


def domain_options(f):
    """Options shared by commands that build endpoint URLs"""
    f = click.option('--packet-size', default=DEFAULT_PACKET_SIZE, type=int, show_default=True,
                     envvar=f'{ENV_PREFIX}_PACKET_SIZE',
                     help='Payload size for the MTU probes, in bytes')(f)
    f = click.option('--lookup-domain', default=None, envvar=f'{ENV_PREFIX}_LOOKUP_DOMAIN',
                     help='Domain for the ASN lookup endpoints (default: --domain)')(f)
    f = click.option('--domain', default=DEFAULT_DOMAIN, show_default=True,
                     envvar=f'{ENV_PREFIX}_DOMAIN',
                     help='Base domain for probe endpoints')(f)
    return f


def store_option(f):
    return click.option('--store-path', type=click.Path(dir_okay=False, path_type=Path),
                        default=None, envvar=f'{ENV_PREFIX}_STORE',
                        help='Run store file (default: ~/.ipv6ready/runs.json)')(f)


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging')
@click.version_option(version=__version__)
def main(verbose: bool):
    """
    ipv6ready - IPv4/IPv6 connectivity readiness check.

    Probes a set of IPv4-only, IPv6-only and dual-stack endpoints and
    reports whether this network will keep working as sites enable IPv6.

    Examples:

        ipv6ready run

        ipv6ready run --tests ipv4_dns,ipv6_dns --json

        ipv6ready show run-1700000000000000000-3f2a9c1b7d4e
    """
    setup_logging(verbose)


@main.command()
@domain_options
@click.option('-w', '--timeout', default=DEFAULT_TIMEOUT, type=float, show_default=True,
              envvar=f'{ENV_PREFIX}_TIMEOUT', help='Per-probe timeout in seconds')
@click.option('--slow', default=DEFAULT_SLOW_THRESHOLD, type=float, show_default=True,
              envvar=f'{ENV_PREFIX}_SLOW', help='Slow threshold in seconds')
@click.option('-t', '--tests', 'tests_csv', default='',
              help='Comma separated probe names (default: all)')
@click.option('--deadline', type=float, default=None,
              help='Overall time budget for the run in seconds')
@click.option('--asn', is_flag=True, help='Annotate observed addresses with ASN data')
@click.option('--json', 'json_out', is_flag=True, help='Print JSON instead of a report')
@click.option('--json-file', type=click.Path(dir_okay=False, path_type=Path),
              help='Also export results to a JSON file')
@click.option('--show-errors', is_flag=True, help='Show (truncated) error details')
@click.option('--store/--no-store', default=True, help='Save the run to the run store')
@store_option
def run(domain: str, lookup_domain: Optional[str], packet_size: int, timeout: float,
        slow: float, tests_csv: str, deadline: Optional[float], asn: bool, json_out: bool,
        json_file: Optional[Path], show_errors: bool, store: bool,
        store_path: Optional[Path]):
    """Run the connectivity probes and print the verdict."""
    try:
        probes = parse_probe_names(tests_csv)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--tests')

    options = default_options(domain, lookup_domain, packet_size,
                              timeout=timeout, slow_threshold=slow)
    runner = Runner(options)

    try:
        result = asyncio.run(execute_run(runner, probes, deadline, asn))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/]")
        sys.exit(130)

    analysis = analyze(result)
    exporter = JsonExporter()

    if store:
        with RunStore(store_path) as run_store:
            run_store.put(result)
        logger.debug("Stored run %s", result.run_id)

    if json_file:
        exporter.export(result, analysis, json_file)

    if json_out:
        click.echo(json.dumps(exporter.export(result, analysis), indent=2, ensure_ascii=False))
        return

    ConsoleOutput(console, show_errors=show_errors).print_report(result, analysis)
    if json_file:
        console.print(f"\n[dim]Results exported to:[/] {json_file.absolute()}")


@main.command()
@click.argument('run_id')
@click.option('--json', 'json_out', is_flag=True, help='Print JSON instead of a report')
@click.option('--show-errors', is_flag=True, help='Show (truncated) error details')
@store_option
def show(run_id: str, json_out: bool, show_errors: bool, store_path: Optional[Path]):
    """Re-analyze a stored run by RUN_ID."""
    run_store = RunStore(store_path)
    result = run_store.get(run_id)
    output = ConsoleOutput(console, show_errors=show_errors)
    if result is None:
        output.print_error(f"run not found: {run_id}")
        recent = run_store.run_ids()[-5:]
        if recent:
            console.print("[dim]Recent runs:[/]")
            for rid in reversed(recent):
                console.print(f"  {rid}", soft_wrap=True)
        sys.exit(1)

    analysis = analyze(result)
    if json_out:
        data = JsonExporter().export(result, analysis)
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    output.print_report(result, analysis)


@main.command(name='catalog')
@domain_options
@click.option('--json', 'json_out', is_flag=True, help='Print JSON instead of a table')
def catalog_command(domain: str, lookup_domain: Optional[str], packet_size: int,
                    json_out: bool):
    """List the supported probes and their endpoints."""
    definitions = catalog(default_options(domain, lookup_domain, packet_size))
    if json_out:
        data = JsonExporter().serialize_catalog(definitions)
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    ConsoleOutput(console).print_catalog(definitions)


if __name__ == '__main__':
    main()
