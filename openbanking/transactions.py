"""
Transaction Record Module

A transaction is an immutable record of a completed movement of funds, kept
for audit purposes. Creating one never touches a balance.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from .exceptions import InvalidAmount


class TransactionType(Enum):
    """Types of fund movements"""
    PAYMENT = "payment"  # Transfer between two accounts


@dataclass(frozen=True)
class Transaction:
    """
    Completed movement of funds
    """
    amount: Decimal
    description: str
    transaction_type: TransactionType = TransactionType.PAYMENT
    from_account: Optional[str] = None  # Source account number
    to_account: Optional[str] = None    # Destination account number
    transaction_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            raise InvalidAmount("Transaction amount must be a Decimal")

        if not self.amount.is_finite() or self.amount <= Decimal('0'):
            raise InvalidAmount("Transaction amount must be positive")

        if not self.from_account and not self.to_account:
            raise ValueError("Transaction must reference at least one account")

    @property
    def is_self_transfer(self) -> bool:
        """Check if funds moved from an account back to itself"""
        return self.from_account is not None and self.from_account == self.to_account

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and audit metadata"""
        return {
            'transaction_id': self.transaction_id,
            'transaction_type': self.transaction_type.value,
            'amount': str(self.amount),
            'description': self.description,
            'from_account': self.from_account,
            'to_account': self.to_account,
            'timestamp': self.timestamp.isoformat()
        }
