"""
Contract the pool expects from an external asset ledger.

The pool never owns these ledgers. It calls them synchronously, treats a
falsy return from a transfer as a refusal, and lets any exception they raise
abort the enclosing operation. A ledger may call back into the pool from
inside a transfer. A failed operation is undone with compensating transfers,
never by rewriting ledger state.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetLedger(Protocol):
    """ERC-20 style capability."""

    address: str

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, owner: str, spender: str, amount: int) -> bool: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool: ...
