"""
ledgerline CLI

Command-line client for an Ethereum-compatible node: query blocks, send
ETH, and deploy / call a counter contract.

Commands:
  blocks        - Query a block by number
  transactions  - Transfer ETH and wait for confirmation
  contracts     - Deploy / call the counter contract
  env-template  - Write a .env template
  whoami        - Show the configured account address
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click

from .commands.context import AppContext
from .errors import LedgerlineError

logger = logging.getLogger("ledgerline")


# ============ Constants ============

VERSION = "0.1.0"

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        L E D G E R L I N E", fg="bright_white", bold=True)
        + click.style(f"     v{VERSION}", dim=True)
    )
    click.secho("        ─── Ethereum node client ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Error Handling ============


class LedgerlineGroup(click.Group):
    """Root group: turns any surfaced ledgerline error into log + exit code."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except LedgerlineError as exc:
            logger.error("%s: %s", type(exc).__name__, exc.message)
            click.secho(f"ERROR: {exc.message}", fg="red", err=True)
            ctx.exit(exc.exit_code)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# ============ Main CLI Group ============


@click.group(cls=LedgerlineGroup, invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="ledgerline")
@click.option(
    "--env-file",
    "-e",
    default=None,
    type=click.Path(path_type=Path),
    help="Env file to load (default: nearest .env)",
)
@click.option(
    "--transport",
    type=click.Choice(["http", "ws"]),
    default="http",
    show_default=True,
    help="Node transport: RPC_URL over HTTP or WS_URL over a websocket",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    env_file: Optional[Path],
    transport: str,
    verbose: bool,
) -> None:
    """ledgerline: Ethereum node client."""
    _configure_logging(verbose)
    ctx.obj = AppContext(env_file=env_file, transport=transport)
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .commands.blocks import blocks
from .commands.contracts import contracts
from .commands.env import env_template, whoami
from .commands.transactions import transactions

cli.add_command(blocks)
cli.add_command(transactions)
cli.add_command(contracts)
cli.add_command(env_template)
cli.add_command(whoami)


# ============ Entry Points ============


def main() -> None:
    """ledgerline CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    cli()


if __name__ == "__main__":
    main()
