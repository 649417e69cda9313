"""
Payment Module

Moves funds between two accounts as one logical operation: withdraw from the
source, then deposit into the destination. Both accounts stay locked for the
whole operation, so no other caller can observe a half-finished transfer.
If the deposit fails after the withdrawal succeeded, the withdrawn amount is
put back before the failure is reported. Errors other than BankingError are
re-raised after the withdrawal is put back.

Failures are returned as PaymentResult values rather than raised, so the
caller has to look at the outcome of every transfer.
"""

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional

from .accounts import Account
from .audit import AuditTrail, AuditEventType
from .exceptions import (
    BankingError, InsufficientFunds, InvalidAmount, NotFound
)
from .logging_config import get_logger, log_action
from .money import AmountLike, to_positive_amount
from .transactions import Transaction, TransactionType


class FailureReason(Enum):
    """Why a payment was rejected"""
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_OPERATION = "invalid_operation"  # e.g. closed account
    INVALID_AMOUNT = "invalid_amount"
    NOT_FOUND = "not_found"


def failure_reason_for(error: BankingError) -> FailureReason:
    """Map a banking error onto the reason reported to callers"""
    if isinstance(error, InsufficientFunds):
        return FailureReason.INSUFFICIENT_FUNDS
    if isinstance(error, NotFound):
        return FailureReason.NOT_FOUND
    if isinstance(error, InvalidAmount):
        return FailureReason.INVALID_AMOUNT
    return FailureReason.INVALID_OPERATION


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of a payment"""
    success: bool
    transaction: Optional[Transaction] = None
    reason: Optional[FailureReason] = None
    message: Optional[str] = None
    error: Optional[BankingError] = None
    rolled_back: bool = False  # Withdrawal was reversed after the deposit failed

    @classmethod
    def completed(cls, transaction: Transaction) -> 'PaymentResult':
        return cls(success=True, transaction=transaction)

    @classmethod
    def failed(cls, error: BankingError, rolled_back: bool = False) -> 'PaymentResult':
        return cls(
            success=False,
            reason=failure_reason_for(error),
            message=str(error),
            error=error,
            rolled_back=rolled_back
        )

    def raise_for_error(self) -> None:
        """Re-raise the typed error of a failed payment"""
        if self.error is not None:
            raise self.error


@contextmanager
def lock_accounts(*accounts: Account) -> Iterator[None]:
    """
    Hold the locks of several accounts at once

    Locks are always taken in ascending account-number order, so two
    payments moving funds in opposite directions between the same pair of
    accounts cannot deadlock. The same account passed twice is locked once.
    """
    unique = {id(account): account for account in accounts}.values()
    ordered = sorted(unique, key=lambda a: (a.account_number, id(a)))

    with ExitStack() as stack:
        for account in ordered:
            stack.enter_context(account.lock)
        yield


class Payment:
    """
    Stateless two-account transfer
    """

    def __init__(self, audit_trail: Optional[AuditTrail] = None):
        self.audit_trail = audit_trail
        self.logger = get_logger("openbanking.payments")

    def make_payment(
        self,
        from_account: Account,
        to_account: Account,
        amount: AmountLike,
        description: str = "Payment"
    ) -> PaymentResult:
        """
        Transfer funds from one account to another

        Args:
            from_account: Account to debit
            to_account: Account to credit (may be the same account)
            amount: Positive exact amount
            description: Free text kept on the transaction record

        Returns:
            PaymentResult with the Transaction on success, or the failure
            reason with neither balance changed
        """
        try:
            value = to_positive_amount(amount)
        except InvalidAmount as e:
            result = PaymentResult.failed(e)
            self._record_failure(from_account, to_account, str(amount), result)
            return result

        with lock_accounts(from_account, to_account):
            result = self._transfer_locked(from_account, to_account, value, description)

        if result.success:
            self._record_success(result.transaction)
        else:
            self._record_failure(from_account, to_account, str(value), result)

        return result

    def _transfer_locked(
        self,
        from_account: Account,
        to_account: Account,
        value: Decimal,
        description: str
    ) -> PaymentResult:
        # Caller holds both account locks
        try:
            from_account.withdraw(value)
        except BankingError as e:
            return PaymentResult.failed(e)

        try:
            to_account.deposit(value)
        except BankingError as e:
            # Source is locked and was open for the withdrawal, so this succeeds
            from_account.deposit(value)
            return PaymentResult.failed(e, rolled_back=True)
        except Exception:
            from_account.deposit(value)
            log_action(
                self.logger, "error", "Payment rolled back after unexpected error",
                action="make_payment", resource=f"account:{from_account.account_number}",
                extra={"to_account": to_account.account_number, "amount": str(value)}
            )
            raise

        transaction = Transaction(
            amount=value,
            description=description,
            transaction_type=TransactionType.PAYMENT,
            from_account=from_account.account_number,
            to_account=to_account.account_number
        )
        return PaymentResult.completed(transaction)

    def _record_success(self, transaction: Transaction) -> None:
        log_action(
            self.logger, "info", "Payment completed",
            action="make_payment", resource=f"transaction:{transaction.transaction_id}",
            extra=transaction.to_dict()
        )

        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=AuditEventType.PAYMENT_COMPLETED,
                entity_type="payment",
                entity_id=transaction.transaction_id,
                metadata=transaction.to_dict()
            )

    def _record_failure(
        self,
        from_account: Account,
        to_account: Account,
        amount: str,
        result: PaymentResult
    ) -> None:
        details = {
            "from_account": from_account.account_number,
            "to_account": to_account.account_number,
            "amount": amount,
            "reason": result.reason.value,
            "message": result.message,
            "rolled_back": result.rolled_back
        }

        log_action(
            self.logger, "warning", f"Payment rejected: {result.reason.value}",
            action="make_payment", resource=f"account:{from_account.account_number}",
            extra=details
        )

        if not self.audit_trail:
            return

        if result.rolled_back:
            self.audit_trail.log_event(
                event_type=AuditEventType.PAYMENT_ROLLED_BACK,
                entity_type="account",
                entity_id=from_account.account_number,
                metadata=details
            )

        self.audit_trail.log_event(
            event_type=AuditEventType.PAYMENT_FAILED,
            entity_type="account",
            entity_id=from_account.account_number,
            metadata=details
        )
