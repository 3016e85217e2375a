"""
SimpleDEX Exceptions

Typed rejections raised by the exchange engine and its ledgers.
"""


class SimpleDEXException(Exception):
    """Base exception for SimpleDEX."""
    pass


# -- Input validation ------------------------------------------------------

class ValidationError(SimpleDEXException):
    """Input rejected before any external call."""
    pass


class InvalidAmounts(ValidationError):
    """A liquidity deposit amount is zero or negative."""
    pass


class InvalidAmount(ValidationError):
    """A swap or transfer amount is zero or negative."""
    pass


class InvalidShareAmount(ValidationError):
    """A withdrawal share amount is zero or negative."""
    pass


class InvalidInputToken(ValidationError):
    """Swap input asset is null or not one of the pool's assets."""
    pass


class InvalidOutputToken(ValidationError):
    """Swap output asset is null or not one of the pool's assets."""
    pass


class SameTokenSwap(ValidationError):
    """Swap input and output asset are identical."""
    pass


class InvalidRecipient(ValidationError):
    """Transfer to the null identity."""
    pass


class RatioMismatch(ValidationError):
    """Deposit is not in the current reserve ratio and the pool rejects imbalance."""
    pass


# -- Ledger ----------------------------------------------------------------

class LedgerError(SimpleDEXException):
    """Base exception for fungible ledger operations."""
    pass


class InsufficientBalanceError(LedgerError):
    """Raised when sender balance is too low."""
    pass


class InsufficientAllowanceError(LedgerError):
    """Raised when spender allowance is too low."""
    pass


# -- External dependency ---------------------------------------------------

class TransferFailed(SimpleDEXException):
    """An external asset ledger refused to move funds."""
    pass


# -- Invariants ------------------------------------------------------------

class InvariantViolation(SimpleDEXException):
    """Arithmetic underflow/overflow or a broken reserve relation."""
    pass


class InsufficientLiquidity(InvariantViolation):
    """Reserves cannot cover the computed swap output."""
    pass


class LiquidityError(SimpleDEXException):
    """Deposit would mint no shares."""
    pass


class InsufficientInitialLiquidity(LiquidityError):
    """First deposit rounds to zero shares."""
    pass


class InsufficientLiquidityMinted(LiquidityError):
    """Deposit into a seeded pool rounds to zero shares."""
    pass


# -- Concurrency -----------------------------------------------------------

class ReentrantCall(SimpleDEXException):
    """Mutating entry point invoked while another is in flight."""
    pass


class ConfigurationError(SimpleDEXException):
    """Configuration error."""
    pass
