"""CLI main entry point for bnet-export."""

import click

from .. import __version__
from .commands import export, validate_config


@click.group()
@click.version_option(version=__version__, prog_name="bnet-export")
def cli():
    """Battle.net authenticator exporter.

    Reads the secret of a Battle.net mobile authenticator and prints it as an
    otpauth:// URI that any TOTP app can import.

    You need three things: a session token (the ST cookie from a logged-in
    browser session, used within a few minutes), the authenticator serial and
    its restore code.

    Examples:
        bnet-export export
        bnet-export validate-config --config config.yml
    """


cli.add_command(export)
cli.add_command(validate_config, name="validate-config")


if __name__ == "__main__":
    cli()
