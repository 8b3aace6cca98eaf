"""CLI tools: httprelay init, validate, request, run."""

from __future__ import annotations

from importlib import metadata

import typer
from pydantic import ValidationError
from rich.console import Console

from httprelay.cli.init_config import init_config_command
from httprelay.cli.relay_commands import configure_logging, request_command, run_command, validate_config_command
from httprelay.config.loader import ConfigLoadError, YAMLConfigLoader
from httprelay.processor.errors import ExpressionConfigError, HttpRelayError

app = typer.Typer(
    name="httprelay",
    help="httprelay: derive HTTP requests from messages and relay the replies.",
    no_args_is_help=True,
)

err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if not value:
        return
    try:
        version = metadata.version("httprelay")
    except metadata.PackageNotFoundError:
        version = "unknown"
    typer.echo(f"httprelay {version}")
    raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print version and exit.",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level; overrides log_level from the configuration.",
    ),
) -> None:
    """Configure logging before any command runs."""
    ctx.obj = {"log_level": log_level}
    configure_logging(log_level or "WARNING")


def _config_path(config: str) -> str:
    return str(YAMLConfigLoader.resolve_path(config or None))


def _log_level(ctx: typer.Context) -> str | None:
    return (ctx.obj or {}).get("log_level")


@app.command("init")
def init_command(
    path: str = typer.Option(".", "--path", help="Output directory"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing httprelay.yaml"),
) -> None:
    """Generate a default httprelay.yaml in the target directory."""
    try:
        init_config_command(path=path, force=force)
    except FileExistsError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


@app.command("validate")
def validate_command(
    ctx: typer.Context,
    config: str = typer.Option("", "--config", "-c", help="Config file path"),
) -> None:
    """Load the configuration and print the effective processor settings."""
    try:
        validate_config_command(config=_config_path(config), log_level=_log_level(ctx))
    except (ConfigLoadError, ValidationError) as exc:
        err_console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc


@app.command("request")
def request_cli_command(
    ctx: typer.Context,
    payload: str = typer.Argument(..., help="Message payload"),
    config: str = typer.Option("", "--config", "-c", help="Config file path"),
    header: list[str] = typer.Option([], "--header", "-H", help="Message header as name=value; repeatable"),
    as_json: bool = typer.Option(False, "--json", help="Parse the payload as JSON"),
) -> None:
    """Relay one payload and print the reply."""
    try:
        request_command(
            payload,
            config=_config_path(config),
            headers=header,
            as_json=as_json,
            log_level=_log_level(ctx),
        )
    except (ConfigLoadError, ValidationError, ExpressionConfigError) as exc:
        err_console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    except HttpRelayError as exc:
        err_console.print(f"[red]{type(exc).__name__}:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=2) from exc


@app.command("run")
def run_cli_command(
    ctx: typer.Context,
    input_file: str = typer.Argument(..., help="File with one message body per line"),
    config: str = typer.Option("", "--config", "-c", help="Config file path"),
) -> None:
    """Relay every line of a file through the channel binder."""
    try:
        _, dead_letters = run_command(input_file, config=_config_path(config), log_level=_log_level(ctx))
    except (ConfigLoadError, ValidationError, ExpressionConfigError) as exc:
        err_console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    except FileNotFoundError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    if dead_letters:
        raise typer.Exit(code=1)


def main() -> None:
    app()
