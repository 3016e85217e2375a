"""
Asset movements between traders, the pool and the fee collector.

A falsy return from the external ledger becomes TransferFailed; exceptions
raised by the ledger propagate unchanged.

Every movement that succeeds is journaled. Unwinding a failed operation
replays the journal backwards as compensating transfers, so only the
movements this pool made are undone and the rest of each ledger is left
alone. Allowance consumed by a pull is granted back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..exceptions import InvariantViolation, TransferFailed
from ..tokens.ledger import AssetLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Movement:
    """One completed transfer. *spender* is set when an allowance was consumed."""
    ledger: AssetLedger
    sender: str
    recipient: str
    amount: int
    spender: Optional[str] = None


class Settlement:
    """Moves assets on behalf of one pool and keeps the undo journal."""

    def __init__(self, pool: str):
        self.pool = pool
        self._journal: List[Movement] = []

    @property
    def journal(self) -> List[Movement]:
        return list(self._journal)

    def reset(self) -> None:
        self._journal.clear()

    def pull(self, ledger: AssetLedger, owner: str, recipient: str, amount: int) -> None:
        """Move *amount* from *owner* to *recipient* on the pool's allowance."""
        if not ledger.transfer_from(self.pool, owner, recipient, amount):
            raise TransferFailed(
                f"{ledger.address}: transfer of {amount} from {owner} to {recipient} refused"
            )
        self._journal.append(Movement(ledger, owner, recipient, amount, spender=self.pool))
        logger.debug("Pulled %d of %s from %s to %s", amount, ledger.address, owner, recipient)

    def push(self, ledger: AssetLedger, recipient: str, amount: int) -> None:
        """Move *amount* of the pool's own holding to *recipient*."""
        if not ledger.transfer(self.pool, recipient, amount):
            raise TransferFailed(
                f"{ledger.address}: transfer of {amount} from pool to {recipient} refused"
            )
        self._journal.append(Movement(ledger, self.pool, recipient, amount))
        logger.debug("Pushed %d of %s to %s", amount, ledger.address, recipient)

    def unwind(self) -> None:
        """
        Reverse every journaled movement, newest first.

        Raises:
            InvariantViolation: when a compensating transfer is refused; the
                remaining movements are still attempted.
        """
        stuck = []
        while self._journal:
            m = self._journal.pop()
            try:
                if not m.ledger.transfer(m.recipient, m.sender, m.amount):
                    raise TransferFailed(f"{m.ledger.address}: compensating transfer refused")
                if m.spender is not None:
                    restored = m.ledger.allowance(m.sender, m.spender) + m.amount
                    m.ledger.approve(m.sender, m.spender, restored)
            except Exception as e:
                logger.error(
                    "Could not reverse %d of %s from %s to %s: %s",
                    m.amount, m.ledger.address, m.sender, m.recipient, e,
                )
                stuck.append(m)
            else:
                logger.debug(
                    "Reversed %d of %s back to %s", m.amount, m.ledger.address, m.sender
                )
        if stuck:
            raise InvariantViolation(
                f"Rollback incomplete: {len(stuck)} transfer(s) could not be reversed"
            )
