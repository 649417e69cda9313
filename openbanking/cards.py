"""
Credit Card Module

Card lifecycle only: a card is issued active, can be suspended, and can be
reported stolen. Neither transition can be undone here; reinstating a card
is a manual review process outside this core.
"""

import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from .customers import Customer


class CreditCardType(Enum):
    """Card schemes a card can be issued under"""
    VISA = "visa"
    MASTERCARD = "mastercard"
    BITCOIN = "bitcoin"
    ETHEREUM = "ethereum"
    SUI = "sui"


class CreditCard:
    """
    Credit card tied to a customer, independent of account balances

    Invariants: a stolen card is never active, and an inactive card never
    becomes active again.
    """

    def __init__(
        self,
        card_number: str,
        owner: Customer,
        card_type: CreditCardType = CreditCardType.VISA,
        issued_at: Optional[datetime] = None
    ):
        if not card_number:
            raise ValueError("Card number is required")

        self._card_number = card_number
        self._owner = owner
        self._card_type = card_type
        self._issued_at = issued_at or datetime.now(timezone.utc)
        self._active = True
        self._stolen = False
        self._deactivated_at: Optional[datetime] = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"CreditCard(card_number={self._card_number!r}, "
            f"owner_id={self._owner.customer_id!r}, "
            f"active={self.is_active}, stolen={self.is_stolen})"
        )

    @property
    def card_number(self) -> str:
        return self._card_number

    @property
    def owner(self) -> Customer:
        return self._owner

    @property
    def card_type(self) -> CreditCardType:
        return self._card_type

    @property
    def issued_at(self) -> datetime:
        return self._issued_at

    @property
    def deactivated_at(self) -> Optional[datetime]:
        """When the card first stopped being active"""
        with self._lock:
            return self._deactivated_at

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    @property
    def is_stolen(self) -> bool:
        with self._lock:
            return self._stolen

    def suspend(self) -> bool:
        """
        Deactivate the card. Idempotent.

        Returns:
            True if this call deactivated the card
        """
        with self._lock:
            if not self._active:
                return False
            self._deactivate()
            return True

    def report_stolen(self) -> bool:
        """
        Mark the card stolen and inactive in one step. Idempotent and
        irreversible.

        Returns:
            True if this call marked the card stolen
        """
        with self._lock:
            if self._stolen:
                return False
            self._stolen = True
            if self._active:
                self._deactivate()
            return True

    def to_dict(self) -> Dict[str, Any]:
        """Consistent snapshot of the card"""
        with self._lock:
            return {
                'card_number': self._card_number,
                'owner_id': self._owner.customer_id,
                'owner_name': self._owner.name,
                'card_type': self._card_type.value,
                'active': self._active,
                'stolen': self._stolen,
                'issued_at': self._issued_at.isoformat(),
                'deactivated_at': self._deactivated_at.isoformat() if self._deactivated_at else None
            }

    def _deactivate(self) -> None:
        # Caller must hold self._lock
        self._active = False
        self._deactivated_at = datetime.now(timezone.utc)
