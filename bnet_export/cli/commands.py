"""CLI command implementations."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional
import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..core.config import ConfigManager
from ..core.exceptions import BnetExportError
from ..core.models import Credentials, ExportResult, ErrorDescriptor
from ..services.pipeline import describe_error, export_authenticator

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)

RESTORE_CODE_WARNING = (
    "The restore code is sent to Battle.net's authenticator restore endpoint. "
    "Restore codes are commonly single-use, so this one may stop working after this run."
)


def setup_logging(log_level: str = "WARNING", log_file: Optional[str] = None,
                  log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"):
    """Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to write logs to in addition to stderr
        log_format: Log record format
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=log_format, handlers=handlers, force=True)

    # Reduce HTTP logging noise
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _resolve(value: Optional[str], env_value: Optional[str], prompt: str, hide_input: bool) -> str:
    """Pick a credential from the option, the environment, or a prompt."""
    if value:
        return value
    if env_value:
        return env_value
    return click.prompt(prompt, hide_input=hide_input, default="", show_default=False)


def _fail(error: BnetExportError, as_json: bool):
    descriptor = describe_error(error)
    if as_json:
        click.echo(descriptor.model_dump_json(exclude_none=True))
    else:
        _display_error(descriptor)
    sys.exit(1)


def _display_error(descriptor: ErrorDescriptor):
    error_console.print(f"[red]{descriptor.kind}: {escape(descriptor.message)}[/red]")


def _display_result(result: ExportResult):
    summary = Table.grid(padding=(0, 2))
    summary.add_row("Serial:", result.serial)
    summary.add_row("Issuer:", result.issuer)
    summary.add_row("Label:", result.label)
    summary.add_row("TOTP settings:", f"{result.algorithm} / {result.digits} digits / {result.period}s")
    console.print(Panel(summary, title="Battle.net export succeeded", border_style="green"))

    console.print("\notpauth URI (paste into your authenticator app):")
    # Plain echo so the URI is never wrapped or styled
    click.echo(result.uri)


@click.command()
@click.option("--session-token", "-t", help="Session token (ST=...); read from BNET_SESSION_TOKEN or prompted if omitted")
@click.option("--serial", "-s", help="Authenticator serial; read from BNET_SERIAL or prompted if omitted")
@click.option("--restore-code", "-r", help="Restore code; read from BNET_RESTORE_CODE or prompted if omitted")
@click.option("--issuer", help="Issuer shown in the TOTP app (default from config)")
@click.option("--label", help="Account label shown in the TOTP app (default: serial)")
@click.option("--config", "-c",
              type=click.Path(),
              help="Path to configuration file")
@click.option("--log-level", "-l",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
              help="Logging level (default from config)")
@click.option("--json", "as_json", is_flag=True, help="Print the result or error as JSON")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation before using the restore code")
def export(session_token: Optional[str], serial: Optional[str], restore_code: Optional[str],
           issuer: Optional[str], label: Optional[str], config: Optional[str],
           log_level: Optional[str], as_json: bool, yes: bool):
    """Export a Battle.net authenticator as an otpauth:// URI.

    Examples:
        bnet-export export
        bnet-export export --serial US-1234-5678-9012 --label "Player#1234"
        bnet-export export --json --yes
    """
    try:
        config_manager = ConfigManager(config)
        app_config = config_manager.get_config()
    except BnetExportError as e:
        _fail(e, as_json)

    setup_logging(log_level or app_config.logging.level, app_config.logging.file, app_config.logging.format)

    env = config_manager.get_credentials()
    session_token = _resolve(session_token, env.get("session_token"), "Session Token (ST=...)", True)
    serial = _resolve(serial, env.get("serial"), "Authenticator Serial", False)
    restore_code = _resolve(restore_code, env.get("restore_code"), "Restore Code", True)

    try:
        credentials = Credentials(session_token=session_token, serial=serial, restore_code=restore_code)
    except BnetExportError as e:
        _fail(e, as_json)

    if not yes:
        error_console.print(f"[yellow]{RESTORE_CODE_WARNING}[/yellow]")
        if not click.confirm("Continue?", default=True, err=True):
            error_console.print("Export cancelled.")
            sys.exit(1)

    try:
        result = export_authenticator(credentials, app_config, label=label, issuer=issuer)
    except BnetExportError as e:
        logger.debug(f"Export failed: {e.kind}")
        _fail(e, as_json)

    if as_json:
        click.echo(json.dumps({"serial": result.serial, "uri": result.uri}))
    else:
        _display_result(result)


@click.command()
@click.option("--config", "-c",
              type=click.Path(),
              help="Path to configuration file")
def validate_config(config: Optional[str]):
    """Validate configuration file and show the effective settings."""
    try:
        config_manager = ConfigManager(config)
        app_config = config_manager.get_config()
    except BnetExportError as e:
        _fail(e, False)

    table = Table(title="Effective configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    endpoints = app_config.endpoints
    table.add_row("SSO URL", endpoints.sso_url)
    table.add_row("Restore URL", endpoints.restore_url)
    table.add_row("Client ID", endpoints.client_id)
    table.add_row("Scope", endpoints.scope)
    table.add_row("User-Agent", endpoints.user_agent)
    table.add_row("Request timeout", str(endpoints.request_timeout) if endpoints.request_timeout else "transport default")
    table.add_row("Issuer", app_config.provisioning.issuer)
    table.add_row("Log level", app_config.logging.level)
    table.add_row("Log file", app_config.logging.file or "-")

    env = config_manager.get_credentials()
    table.add_row("Credentials from environment", ", ".join(sorted(env)) or "none")

    console.print(table)
    console.print("[green]Configuration is valid[/green]")
