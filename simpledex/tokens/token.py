"""
Reference asset token.

In-process ERC-20 style ledger satisfying the AssetLedger contract. Used by
the deployment helpers, the simulator and the test-suite as the two assets a
pool trades.
"""

import hashlib
from typing import Any, Dict, Optional

from ..constants import TOKEN_DEFAULT_DECIMALS
from ..exceptions import LedgerError
from ..logger import get_logger
from .base import FungibleLedger

logger = get_logger(__name__)


def token_address(symbol: str, deployer: str, salt: int = 0) -> str:
    """Deterministic 20-byte hex address for a deployed token."""
    raw = f"token:{symbol}:{deployer}:{salt}".encode()
    return "0x" + hashlib.blake2b(raw, digest_size=20).hexdigest()


class Token(FungibleLedger):
    """
    Fungible asset with a fixed supply credited to the deployer.

    Mirrors ERC-20 semantics:
        - balance_of(address) -> int
        - transfer(sender, recipient, amount)
        - approve(owner, spender, amount)
        - transfer_from(spender, owner, recipient, amount)
        - total_supply -> int
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        total_supply: int = 0,
        deployer: str = "",
        *,
        decimals: int = TOKEN_DEFAULT_DECIMALS,
        address: Optional[str] = None,
    ):
        super().__init__(name, symbol, decimals)
        if total_supply < 0:
            raise LedgerError("Total supply cannot be negative")
        if total_supply > 0 and not deployer:
            raise LedgerError("Initial supply requires a deployer")

        self.deployer = deployer
        self.address = address or token_address(symbol, deployer)

        if total_supply > 0:
            self._mint(deployer, total_supply)

        logger.info(f"Token deployed: {symbol} ({name}) at {self.address}, supply={total_supply}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"address": self.address, "deployer": self.deployer})
        return data
