"""
Fungible ledger core shared by the reference asset token and the pool's
share (LP) token.

ERC-20 style semantics:
  - balance_of / allowance views
  - transfer, approve, transfer_from
  - internal _mint / _burn, total supply tracked incrementally
  - Transfer / Approval event records
  - checkpoint / rollback for the owner of the ledger (the pool uses it on
    its own share ledger only)
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..constants import MAX_UINT256, TOKEN_DEFAULT_DECIMALS, ZERO_ADDRESS
from ..exceptions import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidAmount,
    InvalidRecipient,
    InvariantViolation,
    LedgerError,
)
from ..logger import get_logger

logger = get_logger(__name__)


def is_null_address(address: Optional[str]) -> bool:
    """True for the null identity (zero address, empty or missing)."""
    return not address or address == ZERO_ADDRESS


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every balance movement (mint: sender is null, burn: recipient is null)."""
    token_symbol: str
    sender: str
    recipient: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ApprovalEvent:
    """Emitted on every successful approve."""
    token_symbol: str
    owner: str
    spender: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "token": self.token_symbol,
            "owner": self.owner,
            "spender": self.spender,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class LedgerCheckpoint:
    """Opaque copy of a ledger's mutable state."""
    balances: Dict[str, int]
    allowances: Dict[Tuple[str, str], int]
    total_supply: int
    event_count: int


# ══════════════════════════════════════════════════════════════════════
#  FUNGIBLE LEDGER
# ══════════════════════════════════════════════════════════════════════

class FungibleLedger:
    """
    Integer-denominated fungible ledger.

    Zero-amount transfers, transfers to the null identity and transfers
    above balance or allowance are rejected. Balance entries are created
    lazily on first credit and never deleted.
    """

    def __init__(self, name: str, symbol: str, decimals: int = TOKEN_DEFAULT_DECIMALS):
        if not name:
            raise LedgerError("Token name cannot be empty")
        if not symbol:
            raise LedgerError("Token symbol cannot be empty")
        if decimals < 0 or decimals > 18:
            raise LedgerError(f"Decimals must be 0-18, got {decimals}")

        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._total_supply: int = 0
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}  # (owner, spender)
        self._events: List[Any] = []

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    @property
    def holders(self) -> int:
        return len([b for b in self._balances.values() if b > 0])

    # ── Core operations ───────────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move *amount* from *sender* to *recipient*."""
        self._move(sender, recipient, amount)
        logger.debug(f"Transfer: {sender} -> {recipient} {amount} {self.symbol}")
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Set *spender*'s allowance over *owner*'s balance (overwrites)."""
        if amount < 0:
            raise InvalidAmount("Allowance amount cannot be negative")
        if is_null_address(spender):
            raise InvalidRecipient("Cannot approve the null address")

        self._allowances[(owner, spender)] = amount
        self._events.append(
            ApprovalEvent(token_symbol=self.symbol, owner=owner, spender=spender, amount=amount)
        )
        logger.debug(f"Approve: {owner} -> {spender} allowance={amount} {self.symbol}")
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """Transfer on behalf of *owner* using *spender*'s allowance."""
        allow = self.allowance(owner, spender)
        if amount > 0 and allow < amount:
            raise InsufficientAllowanceError(
                f"Allowance {allow} < transfer amount {amount}"
            )

        self._move(owner, recipient, amount)
        self._allowances[(owner, spender)] = allow - amount
        logger.debug(
            f"transferFrom: spender={spender} {owner} -> {recipient} {amount} {self.symbol}"
        )
        return True

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmount("Transfer amount must be positive")
        if is_null_address(recipient):
            raise InvalidRecipient("Cannot transfer to the null address")

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        self._balances[sender] = bal - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        self._events.append(
            TransferEvent(token_symbol=self.symbol, sender=sender, recipient=recipient, amount=amount)
        )

    # ── Supply hooks ──────────────────────────────────────────────────

    def _mint(self, recipient: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmount("Mint amount must be positive")
        if is_null_address(recipient):
            raise InvalidRecipient("Cannot mint to the null address")

        new_supply = self._total_supply + amount
        if new_supply > MAX_UINT256:
            raise InvariantViolation(f"Minting {amount} would overflow total supply")

        self._total_supply = new_supply
        self._balances[recipient] = self.balance_of(recipient) + amount
        self._events.append(
            TransferEvent(token_symbol=self.symbol, sender=ZERO_ADDRESS, recipient=recipient, amount=amount)
        )

    def _burn(self, holder: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmount("Burn amount must be positive")

        bal = self.balance_of(holder)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{holder} balance {bal} < burn amount {amount}"
            )

        self._balances[holder] = bal - amount
        self._total_supply -= amount
        self._events.append(
            TransferEvent(token_symbol=self.symbol, sender=holder, recipient=ZERO_ADDRESS, amount=amount)
        )

    # ── Atomicity ─────────────────────────────────────────────────────

    def checkpoint(self) -> LedgerCheckpoint:
        return LedgerCheckpoint(
            balances=dict(self._balances),
            allowances=dict(self._allowances),
            total_supply=self._total_supply,
            event_count=len(self._events),
        )

    def rollback(self, checkpoint: LedgerCheckpoint) -> None:
        self._balances = dict(checkpoint.balances)
        self._allowances = dict(checkpoint.allowances)
        self._total_supply = checkpoint.total_supply
        del self._events[checkpoint.event_count:]

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": self._total_supply,
            "holders": self.holders,
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.symbol} supply={self._total_supply}>"
