"""
Account Module

An account holds an exact Decimal balance for one customer. Deposits,
withdrawals and closing are serialized per account through a re-entrant lock,
so the funds check and the balance write in a withdrawal can never interleave
with another mutation of the same account.
"""

import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from .customers import Customer
from .exceptions import InsufficientFunds, InvalidOperation
from .money import (
    ZERO, AmountLike, exact_add, exact_subtract, to_non_negative_amount
)


class Account:
    """
    Bank account with a non-negative balance

    Balance starts at zero. Once closed, the balance is frozen and every
    further deposit or withdrawal fails with InvalidOperation; the account
    itself stays queryable.
    """

    def __init__(
        self,
        account_number: str,
        customer: Customer,
        created_at: Optional[datetime] = None
    ):
        if not account_number:
            raise ValueError("Account number is required")

        now = created_at or datetime.now(timezone.utc)
        self._account_number = account_number
        self._customer = customer
        self._balance = ZERO
        self._closed = False
        self._created_at = now
        self._updated_at = now
        self._closed_at: Optional[datetime] = None
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return (
            f"Account(account_number={self._account_number!r}, "
            f"customer_id={self._customer.customer_id!r}, "
            f"balance={self.balance}, closed={self.is_closed})"
        )

    @property
    def account_number(self) -> str:
        return self._account_number

    @property
    def customer(self) -> Customer:
        return self._customer

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        with self._lock:
            return self._updated_at

    @property
    def closed_at(self) -> Optional[datetime]:
        with self._lock:
            return self._closed_at

    @property
    def lock(self) -> threading.RLock:
        """Per-account lock; held by payments spanning two accounts"""
        return self._lock

    @property
    def balance(self) -> Decimal:
        """Current balance"""
        with self._lock:
            return self._balance

    def get_balance(self) -> Decimal:
        return self.balance

    @property
    def is_closed(self) -> bool:
        """Check if account has been closed"""
        with self._lock:
            return self._closed

    def can_transact(self) -> bool:
        """Check if account can process deposits and withdrawals"""
        return not self.is_closed

    def deposit(self, amount: AmountLike) -> Decimal:
        """
        Credit the account

        Args:
            amount: Non-negative exact amount

        Returns:
            New balance

        Raises:
            InvalidAmount: If amount is negative or not an exact decimal
            InvalidOperation: If the account is closed
        """
        value = to_non_negative_amount(amount)

        with self._lock:
            self._ensure_open("deposit to")
            self._balance = exact_add(self._balance, value)
            self._updated_at = datetime.now(timezone.utc)
            return self._balance

    def withdraw(self, amount: AmountLike) -> Decimal:
        """
        Debit the account

        Withdrawing exactly the balance drains the account to zero.

        Args:
            amount: Non-negative exact amount

        Returns:
            New balance

        Raises:
            InvalidAmount: If amount is negative or not an exact decimal
            InvalidOperation: If the account is closed
            InsufficientFunds: If amount exceeds the balance
        """
        value = to_non_negative_amount(amount)

        with self._lock:
            self._ensure_open("withdraw from")
            if value > self._balance:
                raise InsufficientFunds(
                    f"Insufficient funds in account {self._account_number}: "
                    f"requested {value}, available {self._balance}",
                    requested=value,
                    available=self._balance
                )
            self._balance = exact_subtract(self._balance, value)
            self._updated_at = datetime.now(timezone.utc)
            return self._balance

    def close(self) -> bool:
        """
        Close the account, freezing its balance

        Idempotent: closing an already-closed account changes nothing.

        Returns:
            True if this call closed the account, False if it was already closed
        """
        with self._lock:
            if self._closed:
                return False
            now = datetime.now(timezone.utc)
            self._closed = True
            self._closed_at = now
            self._updated_at = now
            return True

    def to_dict(self) -> Dict[str, Any]:
        """Consistent snapshot of the account for logging and display"""
        with self._lock:
            return {
                'account_number': self._account_number,
                'customer_id': self._customer.customer_id,
                'customer_name': self._customer.name,
                'balance': str(self._balance),
                'closed': self._closed,
                'created_at': self._created_at.isoformat(),
                'updated_at': self._updated_at.isoformat(),
                'closed_at': self._closed_at.isoformat() if self._closed_at else None
            }

    def _ensure_open(self, verb: str) -> None:
        # Caller must hold self._lock
        if self._closed:
            raise InvalidOperation(
                f"Cannot {verb} closed account {self._account_number}"
            )
