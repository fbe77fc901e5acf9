"""
Transactions - send native currency and wait for confirmation.

The transferred value is ``amount * 10^digits`` wei:

\b
  --amount 1 --digits 18   1 ETH
  --amount 1 --digits 15   0.001 ETH
  --amount 5 --digits 0    5 wei
"""

from __future__ import annotations

import click

from ..display import show_transfer
from ..tx.transfer import send_transfer
from .context import AppContext, pass_app


@click.command()
@click.option("--to", "-t", "recipient", required=True, help="Recipient address (0x...)")
@click.option("--amount", "-a", required=True, type=int, help="Integer amount")
@click.option(
    "--digits",
    "-d",
    required=True,
    type=click.IntRange(min=0),
    help="Decimal places: value is amount * 10^digits wei",
)
@pass_app
def transactions(app: AppContext, recipient: str, amount: int, digits: int) -> None:
    """Transfer ETH to a recipient.

    \b
    Examples:
      ledgerline transactions --to 0xAbc... --amount 1 --digits 15
    """
    if not recipient.strip():
        raise click.BadParameter("recipient must not be empty", param_hint="--to")
    if amount <= 0:
        raise click.BadParameter("amount must be positive", param_hint="--amount")

    settings = app.settings
    private_key = settings.private_key

    with app.open_client() as client:
        result = send_transfer(
            client,
            private_key,
            recipient.strip(),
            amount,
            digits,
            max_attempts=settings.confirm_max_attempts,
            poll_interval=settings.confirm_poll_interval,
        )

    show_transfer(result)
