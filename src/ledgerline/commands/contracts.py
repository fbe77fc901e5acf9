"""
Contracts - deploy the counter contract and call its methods.

The deployed address is remembered in a file (``--path``) so that later
``call`` invocations find it.
"""

from __future__ import annotations

from typing import Optional

import click

from ..contracts.service import SUPPORTED_METHODS, AddressStore, ContractService
from ..display import show_call, show_receipt
from .context import AppContext, pass_app

PATH_HELP = "Contract address file (default: CONTRACT_ADDRESS_FILE)"


def _open_service(app: AppContext, ctx: click.Context, path: Optional[str]) -> ContractService:
    settings = app.settings
    path = path or ctx.meta.get("ledgerline.address_path")
    store = AddressStore(path or settings.contract_address_file)
    private_key = settings.private_key
    max_attempts = settings.confirm_max_attempts
    poll_interval = settings.confirm_poll_interval
    # Settings are read first so a config error never leaves a client open.
    client = app.open_client()
    try:
        return ContractService(
            client,
            private_key,
            store,
            max_attempts=max_attempts,
            poll_interval=poll_interval,
        )
    except Exception:
        client.close()
        raise


@click.group()
@click.option("--path", "-p", default=None, help=PATH_HELP)
@click.pass_context
def contracts(ctx: click.Context, path: Optional[str]) -> None:
    """Deploy and call the counter contract."""
    ctx.meta["ledgerline.address_path"] = path


@contracts.command()
@click.option("--redeploy", "-r", is_flag=True, help="Deploy again even if already deployed")
@click.option("--path", "-p", default=None, help=PATH_HELP)
@click.pass_context
@pass_app
def deploy(app: AppContext, ctx: click.Context, redeploy: bool, path: Optional[str]) -> None:
    """Deploy the counter contract and remember its address."""
    with _open_service(app, ctx, path) as service:
        cached = service.address
        address = service.deploy(force_redeploy=redeploy)
        receipt = service.last_receipt

    if cached and not redeploy:
        click.echo(f"  Already deployed at {address}")
        click.echo("  Use --redeploy to deploy a fresh copy.")
        return

    click.secho("  Counter deployed!", fg="green", bold=True)
    if receipt is not None:
        show_receipt(receipt)
    click.echo(click.style("  Saved to:    ", dim=True) + str(service.store.path))


@contracts.command()
@click.option(
    "--method",
    "-m",
    required=True,
    help=f"Method to call: {' or '.join(SUPPORTED_METHODS)}",
)
@click.option("--path", "-p", default=None, help=PATH_HELP)
@click.pass_context
@pass_app
def call(app: AppContext, ctx: click.Context, method: str, path: Optional[str]) -> None:
    """Call a counter method."""
    with _open_service(app, ctx, path) as service:
        result = service.call(method)

    show_call(result)
