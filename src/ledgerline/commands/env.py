"""
Env - configuration helpers.
"""

from __future__ import annotations

from pathlib import Path

import click

from ..config import ENV_TEMPLATE_NAME, write_env_template
from ..tx.builder import account_address
from .context import AppContext, pass_app


@click.command("env-template")
@click.option(
    "--output",
    "-o",
    default=ENV_TEMPLATE_NAME,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Where to write the template",
)
def env_template(output: str) -> None:
    """Generate a .env template in the current directory."""
    path = write_env_template(Path(output))
    click.echo(f"Env template written: {path}")
    click.echo("Fill it in and rename it to .env")


@click.command()
@pass_app
def whoami(app: AppContext) -> None:
    """Show the address of the configured private key."""
    address = account_address(app.settings.private_key)
    click.echo(f"Address: {address}")
