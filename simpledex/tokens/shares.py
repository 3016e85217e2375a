"""
Share ledger: the pool's proportional-ownership (LP) token.

Holders move shares freely with transfer / approve / transfer_from. Supply
changes only through mint / burn, which the liquidity engine alone calls.
"""

from ..logger import get_logger
from .base import FungibleLedger

logger = get_logger(__name__)


class ShareLedger(FungibleLedger):
    """LP token whose supply tracks liquidity deposits and withdrawals."""

    def mint(self, recipient: str, amount: int) -> None:
        self._mint(recipient, amount)
        logger.debug(f"Mint: {amount} {self.symbol} -> {recipient}, supply={self._total_supply}")

    def burn(self, holder: str, amount: int) -> None:
        self._burn(holder, amount)
        logger.debug(f"Burn: {holder} burned {amount} {self.symbol}, supply={self._total_supply}")
