#!/usr/bin/env python3
"""
SimpleDEX CLI

Usage:
    simpledex quote --reserve-in R --reserve-out R --amount-in N
    simpledex simulate [--config FILE] [--liquidity N] [--swap N]
    simpledex show-config [--config FILE]
"""

import hashlib
import json
from pathlib import Path
from typing import Optional

import click

from .config import load_config
from .constants import FEE_DENOMINATOR, FEE_NUMERATOR, TOKEN_UNIT
from .deploy import deploy_reference_pool
from .exceptions import SimpleDEXException
from .exchange import pricing
from .logger import configure_logging


def actor_address(label: str) -> str:
    """Deterministic address for a named simulation actor."""
    return "0x" + hashlib.blake2b(f"actor:{label}".encode(), digest_size=20).hexdigest()


def format_address(address: str, short: bool = False) -> str:
    if short:
        return f"{address[:10]}...{address[-8:]}"
    return address


@click.group()
@click.version_option(version="1.0.0", prog_name="simpledex")
def cli():
    """SimpleDEX constant-product pool tools."""
    pass


@cli.command("quote")
@click.option("--reserve-in", type=click.IntRange(min=0), required=True, help="Input-side reserve (base units)")
@click.option("--reserve-out", type=click.IntRange(min=0), required=True, help="Output-side reserve (base units)")
@click.option("--amount-in", type=click.IntRange(min=1), required=True, help="Gross input amount (base units)")
def quote_cmd(reserve_in: int, reserve_out: int, amount_in: int):
    """Quote a swap against the given reserves.

    Example:

        simpledex quote --reserve-in 5000 --reserve-out 5000 --amount-in 100
    """
    fee, net_in, out = pricing.quote(amount_in, reserve_in, reserve_out)
    click.echo(f"Fee ({FEE_NUMERATOR}/{FEE_DENOMINATOR}): {fee}")
    click.echo(f"Net input:       {net_in}")
    click.echo(f"Amount out:      {out}")


@cli.command("simulate")
@click.option("--config", "config_path", type=click.Path(), default=None, help="Path to simpledex.toml")
@click.option("--liquidity", type=click.IntRange(min=1), default=5000, show_default=True,
              help="Whole tokens of each asset the provider deposits")
@click.option("--swap", "swap_amount", type=click.IntRange(min=1), default=100, show_default=True,
              help="Whole tokens of asset A the trader sells")
def simulate_cmd(config_path: Optional[str], liquidity: int, swap_amount: int):
    """Deploy a reference pool, then deposit, swap and withdraw."""
    try:
        config = load_config(config_path)
    except SimpleDEXException as e:
        raise click.ClickException(str(e))

    configure_logging(
        log_level=config.logging.level,
        console_output=config.logging.console_output,
        file_output=config.logging.file_output,
        log_file=Path(config.logging.file) if config.logging.file else None,
    )

    deployer = actor_address("deployer")
    provider = actor_address("provider")
    trader = actor_address("trader")

    collector = config.pool.fee_collector or actor_address("fee-collector")

    deployment = deploy_reference_pool(deployer, collector, config=config)
    dex = deployment.dex
    deployment.fund([provider, trader], 10_000 * TOKEN_UNIT)

    deposit = liquidity * TOKEN_UNIT
    sell = swap_amount * TOKEN_UNIT

    try:
        deployment.approve(provider, deposit, deposit)
        dex.add_liquidity(provider, deposit, deposit)

        deployment.token_a.approve(trader, dex.address, sell)
        dex.swap(trader, dex.token_a, dex.token_b, sell)

        dex.remove_liquidity(provider, dex.balance_of(provider))
    except SimpleDEXException as e:
        raise click.ClickException(f"{type(e).__name__}: {e}")

    click.echo(click.style(f"Pool {format_address(dex.address, short=True)}", fg="green"))
    for event in dex.events:
        click.echo(json.dumps(event.to_dict(), default=str))
    click.echo(json.dumps(dex.to_dict(), indent=2))
    click.echo(f"Fee collector TKA balance: {deployment.token_a.balance_of(dex.fee_collector)}")


@cli.command("show-config")
@click.option("--config", "config_path", type=click.Path(), default=None, help="Path to simpledex.toml")
def show_config_cmd(config_path: Optional[str]):
    """Print the resolved configuration."""
    try:
        config = load_config(config_path)
    except SimpleDEXException as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(config.to_dict(), indent=2))


if __name__ == "__main__":
    cli()
