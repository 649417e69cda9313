"""
Banking Exceptions Module

Domain-specific errors for account, card and payment operations. Every error
derives from ValueError so callers that only know about rule violations in
general can still catch them, while callers that care can tell insufficient
funds apart from a closed account or an unknown identifier.
"""

from decimal import Decimal
from typing import Optional


class BankingError(ValueError):
    """Base class for all banking rule violations"""
    pass


class InvalidOperation(BankingError):
    """
    Raised when a mutation is attempted on a closed account, or any other
    structurally disallowed state transition.
    """
    pass


class InvalidAmount(InvalidOperation):
    """
    Raised when an amount is not a non-negative exact decimal:
    - float, bool or non-numeric input
    - NaN or infinity
    - negative value (or zero where a positive amount is required)
    """
    pass


class InsufficientFunds(BankingError):
    """Raised when a withdrawal exceeds the available balance"""

    def __init__(
        self,
        message: str,
        requested: Optional[Decimal] = None,
        available: Optional[Decimal] = None
    ):
        super().__init__(message)
        self.requested = requested
        self.available = available


class NotFound(BankingError):
    """Raised when an account or card identifier is unknown"""

    def __init__(self, message: str, identifier: Optional[str] = None):
        super().__init__(message)
        self.identifier = identifier
