import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from .config.settings import Config, ConfigurationError
from .pipeline.export import run_export_from_env
from .utils import setup_logging, utc_timestamp

app = typer.Typer(help="Collection export: MongoDB -> CSV -> Azure Blob Storage")


@app.command("run")
def run_command(
    env_file: Annotated[Optional[Path], typer.Option("--env-file", help="Explicit .env file to load")] = None,
    environment: Annotated[Optional[str], typer.Option("--environment", "-e", help="Environment name used to pick .env.{environment}")] = None,
    timestamp: Annotated[Optional[str], typer.Option("--timestamp", help="Override the invocation timestamp (ISO 8601)")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable detailed logging output")] = False,
    log_to_file: Annotated[bool, typer.Option("--log-to-file", help="Create timestamped log files")] = False,
    fail_on_error: Annotated[bool, typer.Option("--fail-on-error", help="Exit with status 1 when the export does not succeed")] = False,
):
    """
    Run one export now.

    Reads every document of the configured collection, writes it as CSV and
    uploads it as data-export-<timestamp>.csv. Failures are logged and
    reported; the exit status is 0 unless --fail-on-error is given.

    Examples:
        mongo2blob run
        mongo2blob run --env-file .env.production --fail-on-error
    """
    setup_logging(verbose, enable_file_logging=log_to_file)

    invocation_timestamp = timestamp or utc_timestamp()
    logging.info(f"Execution timestamp: {invocation_timestamp}")

    result = run_export_from_env(invocation_timestamp, env_file=env_file, environment=environment)
    typer.echo(result.summary())
    for release_error in result.release_errors:
        typer.echo(f"WARNING: {release_error}")

    if fail_on_error and not result.ok:
        raise typer.Exit(1)


@app.command("check-config")
def check_config(
    env_file: Annotated[Optional[Path], typer.Option("--env-file", help="Explicit .env file to load")] = None,
    environment: Annotated[Optional[str], typer.Option("--environment", "-e", help="Environment name used to pick .env.{environment}")] = None,
):
    """
    Validate configuration without contacting MongoDB or Blob Storage.

    Prints the resolved settings with credentials redacted.
    """
    try:
        config = Config(environment=environment, env_file=env_file)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("Export Configuration")
    typer.echo("=" * 50)
    for key, value in config.get_security_summary().items():
        typer.echo(f"  {key}: {value}")


if __name__ == "__main__":
    app()
