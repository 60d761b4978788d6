"""
blastr CLI - run remote NCBI BLAST searches from the command line.

Examples:
    blastr search --program blastp --database nr --query-file protein.fasta
    blastr submit --program blastn --database nt --query NM_000546
    blastr search --rid 3RX1K7N7016 --output results.json
    blastr status 3RX1K7N7016
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from blastr import __version__
from blastr.config import PollerConfig
from blastr.core.errors import BlastrError
from blastr.core.models import Program, SearchRequest
from blastr.poller import JobPoller

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _configure_logging(verbose: bool, level: str) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else level, format=LOG_FORMAT, stream=sys.stderr)


def _load_config(**overrides) -> PollerConfig:
    try:
        return PollerConfig.from_env(**overrides)
    except BlastrError as e:
        raise click.BadParameter(e.message) from e


def _read_query(query: Optional[str], query_file: Optional[str]) -> str:
    if query and query_file:
        raise click.UsageError("Use either --query or --query-file, not both")
    if query_file:
        return Path(query_file).read_text(encoding="utf-8")
    return query or ""


def _fail(error: BlastrError) -> None:
    click.echo(f"Error: {error.message}", err=True)
    sys.exit(1)


def connection_options(func):
    """Options shared by every command that talks to the service."""
    func = click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")(func)
    func = click.option("--endpoint", default=None, help="Override the BLAST URL API endpoint")(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="blastr")
def cli():
    """
    blastr - Remote NCBI BLAST job client.

    Submits a search, polls until it finishes and prints the parsed report.
    """
    pass


@cli.command()
@click.option(
    "--program",
    "-p",
    type=click.Choice(Program.values()),
    default=Program.BLASTP.value,
    show_default=True,
    help="BLAST algorithm",
)
@click.option("--database", "-d", default="nr", show_default=True, help="Target database")
@click.option("--query", "-q", default=None, help="Accession, GI or FASTA text")
@click.option("--query-file", type=click.Path(exists=True, dir_okay=False), help="Read the query from a file")
@click.option("--rid", default=None, help="Resume an already submitted search instead of submitting")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the JSON result to a file")
@click.option("--interval", type=float, default=None, help="Seconds between status checks (default: 30)")
@click.option("--max-polls", type=int, default=None, help="Give up after N status checks (default: unbounded)")
@connection_options
def search(
    program: str,
    database: str,
    query: Optional[str],
    query_file: Optional[str],
    rid: Optional[str],
    output: Optional[str],
    interval: Optional[float],
    max_polls: Optional[int],
    endpoint: Optional[str],
    verbose: bool,
):
    """Run a search to completion and print the result as JSON."""
    query_text = _read_query(query, query_file)
    if not rid and not query_text.strip():
        raise click.UsageError("A query is required unless --rid is given")

    config = _load_config(endpoint=endpoint, tick_interval=interval, max_polls=max_polls)
    _configure_logging(verbose, config.log_level)

    request = SearchRequest(query=query_text, program=program, database=database, existing_job_id=rid)
    try:
        result = asyncio.run(JobPoller(config).execute(request))
    except BlastrError as e:
        _fail(e)
        return

    payload = json.dumps(result, indent=2)
    if output:
        Path(output).write_text(payload, encoding="utf-8")
        click.echo(f"Results written to {output}")
    else:
        click.echo(payload)


@cli.command()
@click.option(
    "--program",
    "-p",
    type=click.Choice(Program.values()),
    default=Program.BLASTP.value,
    show_default=True,
    help="BLAST algorithm",
)
@click.option("--database", "-d", default="nr", show_default=True, help="Target database")
@click.option("--query", "-q", default=None, help="Accession, GI or FASTA text")
@click.option("--query-file", type=click.Path(exists=True, dir_okay=False), help="Read the query from a file")
@connection_options
def submit(
    program: str,
    database: str,
    query: Optional[str],
    query_file: Optional[str],
    endpoint: Optional[str],
    verbose: bool,
):
    """Submit a search without waiting; prints RID and RTOE."""
    query_text = _read_query(query, query_file)
    if not query_text.strip():
        raise click.UsageError("A query is required")

    config = _load_config(endpoint=endpoint)
    _configure_logging(verbose, config.log_level)

    request = SearchRequest(query=query_text, program=program, database=database)
    try:
        job = asyncio.run(JobPoller(config).submit(request))
    except BlastrError as e:
        _fail(e)
        return

    click.echo(f"RID: {job.job_id}")
    click.echo(f"RTOE: {job.estimated_wait_seconds:g}")
    click.echo(f"\nResume with: blastr search --rid {job.job_id}")


@cli.command()
@click.argument("rid")
@connection_options
def status(rid: str, endpoint: Optional[str], verbose: bool):
    """Check the status of a submitted search once."""
    config = _load_config(endpoint=endpoint)
    _configure_logging(verbose, config.log_level)

    try:
        job_status = asyncio.run(JobPoller(config).check_status(rid))
    except BlastrError as e:
        _fail(e)
        return

    click.echo(f"{rid}: {job_status.value.upper()}")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
