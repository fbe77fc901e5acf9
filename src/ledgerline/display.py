"""Human-readable output for blocks, receipts and calls."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from .contracts.service import CallResult
from .node.models import Block, Receipt
from .tx.transfer import TransferResult


def _row(label: str, value: object, **style: object) -> None:
    click.echo(click.style(f"  {label:<13}", dim=True) + click.style(str(value), **style))


def show_block(block: Block) -> None:
    when = datetime.fromtimestamp(block.timestamp, tz=timezone.utc)
    click.secho(f"  Block #{block.number}", fg="bright_white", bold=True)
    click.echo("  ─────────────────────────────")
    _row("Hash:", block.hash)
    _row("Parent:", block.parent_hash)
    _row("Timestamp:", f"{block.timestamp} ({when.isoformat().replace('+00:00', 'Z')})")
    _row("Transactions:", block.transaction_count)
    _row("Gas used:", block.gas_used)
    if block.miner:
        _row("Miner:", block.miner)


def show_receipt(receipt: Receipt) -> None:
    if receipt.success:
        status = click.style("success", fg="green", bold=True)
    else:
        status = click.style("failed", fg="red", bold=True)
    click.echo(click.style(f"  {'Transaction:':<13}", dim=True) + receipt.tx_hash)
    click.echo(click.style(f"  {'Status:':<13}", dim=True) + status)
    _row("Block hash:", receipt.block_hash)
    _row("Block:", receipt.block_number)
    _row("Index:", receipt.transaction_index)
    if receipt.gas_used is not None:
        _row("Gas used:", receipt.gas_used)
    if receipt.has_contract_address:
        _row("Contract:", receipt.contract_address, fg="bright_white")
    _row("Logs:", len(receipt.logs))


def show_transfer(result: TransferResult) -> None:
    click.secho("  Transfer confirmed!", fg="green", bold=True)
    _row("From:", result.sender)
    _row("To:", result.recipient)
    _row("Value:", f"{result.value} wei")
    show_receipt(result.receipt)


def show_call(result: CallResult) -> None:
    if result.is_transaction:
        click.secho(f"  {result.method}() confirmed!", fg="green", bold=True)
        if result.receipt is not None:
            show_receipt(result.receipt)
        return
    click.echo(
        click.style(f"  {result.method}(): ", dim=True)
        + click.style(str(result.value), fg="bright_white", bold=True)
    )
