"""
Deployment helpers.

Deploys two reference asset tokens (TKA / TKB, each with a 1,000,000 token
supply credited to the deployer) and a SimpleDEX pool trading them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .config import DexConfig
from .constants import REFERENCE_TOKEN_SUPPLY
from .exchange.pool import SimpleDEX
from .logger import get_logger
from .tokens.token import Token

logger = get_logger(__name__)


@dataclass
class Deployment:
    token_a: Token
    token_b: Token
    dex: SimpleDEX
    deployer: str

    def fund(self, accounts: Iterable[str], amount: int) -> None:
        """Send *amount* of both assets from the deployer to each account."""
        for account in accounts:
            self.token_a.transfer(self.deployer, account, amount)
            self.token_b.transfer(self.deployer, account, amount)

    def approve(self, owner: str, amount_a: int, amount_b: int) -> None:
        """Approve the pool to pull from *owner* on both asset ledgers."""
        self.token_a.approve(owner, self.dex.address, amount_a)
        self.token_b.approve(owner, self.dex.address, amount_b)


def deploy_reference_pool(
    deployer: str,
    fee_collector: Optional[str] = None,
    config: Optional[DexConfig] = None,
    supply: int = REFERENCE_TOKEN_SUPPLY,
) -> Deployment:
    """
    Deploy TKA, TKB and a pool.

    *fee_collector* defaults to the configured collector, then to the deployer.
    """
    config = config or DexConfig()
    pool_cfg = config.pool

    token_a = Token("MyTokenA", "TKA", supply, deployer, address=pool_cfg.token_a or None)
    token_b = Token("MyTokenB", "TKB", supply, deployer, address=pool_cfg.token_b or None)

    collector = fee_collector or pool_cfg.fee_collector or deployer
    dex = SimpleDEX(
        token_a,
        token_b,
        collector,
        share_name=pool_cfg.share_name,
        share_symbol=pool_cfg.share_symbol,
        imbalance_policy=pool_cfg.policy,
    )
    logger.info(f"Reference pool deployed at {dex.address} by {deployer}")
    return Deployment(token_a=token_a, token_b=token_b, dex=dex, deployer=deployer)
