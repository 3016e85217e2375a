"""
SimpleDEX ledgers

Provides:
  - FungibleLedger : ERC-20 style integer ledger with checkpoint / rollback
  - Token          : reference asset with a fixed deployer supply
  - ShareLedger    : the pool's LP token (mint / burn hooks)
  - AssetLedger    : contract an external asset ledger must satisfy
"""

from .base import (
    ApprovalEvent,
    FungibleLedger,
    LedgerCheckpoint,
    TransferEvent,
    is_null_address,
)
from .ledger import AssetLedger
from .shares import ShareLedger
from .token import Token, token_address

__all__ = [
    "ApprovalEvent",
    "AssetLedger",
    "FungibleLedger",
    "LedgerCheckpoint",
    "ShareLedger",
    "Token",
    "TransferEvent",
    "is_null_address",
    "token_address",
]
