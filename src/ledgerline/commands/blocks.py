"""
Blocks - query a block by number.
"""

from __future__ import annotations

import click

from ..display import show_block
from .context import AppContext, pass_app


@click.command()
@click.option("--id", "-i", "block_id", required=True, type=int, help="Block number")
@pass_app
def blocks(app: AppContext, block_id: int) -> None:
    """Show hash, timestamp and transaction count of a block."""
    if block_id <= 0:
        raise click.BadParameter("block number must be a positive integer", param_hint="--id")

    with app.open_client() as client:
        block = client.get_block(block_id)

    show_block(block)
