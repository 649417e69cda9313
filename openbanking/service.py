"""
Bank Service Module

The bank service issues accounts and credit cards, assigns their numbers, and
is the single registry for looking them up. Closed accounts and deactivated
cards stay registered, so a number is never handed out again while the
service is alive.
"""

import threading
from typing import Dict, List, Optional

from .accounts import Account
from .audit import AuditTrail, AuditEventType
from .cards import CreditCard, CreditCardType
from .config import BankConfig, get_config
from .customers import Customer
from .exceptions import NotFound
from .identifiers import IdentifierAllocator, SequentialIdAllocator
from .logging_config import get_logger, log_action
from .money import AmountLike, Currency, format_amount
from .payments import Payment, PaymentResult


class BankService:
    """
    Registry and lifecycle entry point for accounts and credit cards
    """

    def __init__(
        self,
        config: Optional[BankConfig] = None,
        account_numbers: Optional[IdentifierAllocator] = None,
        card_numbers: Optional[IdentifierAllocator] = None,
        audit_trail: Optional[AuditTrail] = None
    ):
        self.config = config or get_config()
        self.currency = Currency[self.config.currency]

        self._account_numbers = account_numbers or SequentialIdAllocator(
            self.config.account_number_prefix, self.config.account_number_start
        )
        self._card_numbers = card_numbers or SequentialIdAllocator(
            self.config.card_number_prefix, self.config.card_number_start
        )

        if audit_trail is None and self.config.enable_audit_logging:
            audit_trail = AuditTrail()
        self.audit_trail = audit_trail

        self.payment = Payment(self.audit_trail)
        self.logger = get_logger("openbanking.service")

        # Insertion order doubles as issue order
        self._accounts: Dict[str, Account] = {}
        self._cards: Dict[str, CreditCard] = {}
        self._lock = threading.RLock()

    # Accounts

    def open_account(self, customer: Customer) -> Account:
        """
        Open a zero-balance account for a customer

        Args:
            customer: Owner of the new account

        Returns:
            The registered Account
        """
        with self._lock:
            account_number = self._allocate(self._account_numbers, self._accounts, "account")
            account = Account(account_number, customer)
            self._accounts[account_number] = account

        log_action(
            self.logger, "info", f"Account opened: {account_number}",
            action="open_account", resource=f"account:{account_number}",
            extra={"customer_id": customer.customer_id}
        )
        self._audit(
            AuditEventType.ACCOUNT_OPENED, "account", account_number,
            {"customer_id": customer.customer_id, "customer_name": customer.name}
        )

        return account

    def close_account(self, account: Account) -> None:
        """Close an account. It stays registered and queryable."""
        if not account.close():
            return

        balance = account.balance
        log_action(
            self.logger, "info", f"Account closed: {account.account_number}",
            action="close_account", resource=f"account:{account.account_number}",
            extra={"final_balance": format_amount(balance, self.currency)}
        )
        self._audit(
            AuditEventType.ACCOUNT_CLOSED, "account", account.account_number,
            {"final_balance": balance}
        )

    def get_account(self, account_number: str) -> Optional[Account]:
        """Get account by number, or None if unknown"""
        with self._lock:
            return self._accounts.get(account_number)

    def require_account(self, account_number: str) -> Account:
        """Get account by number, raising NotFound if unknown"""
        account = self.get_account(account_number)
        if account is None:
            raise NotFound(f"Account {account_number} not found", identifier=account_number)
        return account

    def list_accounts(self, customer: Optional[Customer] = None) -> List[Account]:
        """All accounts in the order they were opened, optionally for one customer"""
        with self._lock:
            accounts = list(self._accounts.values())

        if customer is not None:
            accounts = [a for a in accounts if a.customer.customer_id == customer.customer_id]
        return accounts

    # Credit cards

    def issue_credit_card(
        self,
        customer: Customer,
        card_type: CreditCardType = CreditCardType.VISA
    ) -> CreditCard:
        """
        Issue an active credit card to a customer

        Args:
            customer: Card owner
            card_type: Card scheme

        Returns:
            The registered CreditCard
        """
        with self._lock:
            card_number = self._allocate(self._card_numbers, self._cards, "card")
            card = CreditCard(card_number, customer, card_type)
            self._cards[card_number] = card

        log_action(
            self.logger, "info", f"Credit card issued: {card_number}",
            action="issue_credit_card", resource=f"card:{card_number}",
            extra={"customer_id": customer.customer_id, "card_type": card_type.value}
        )
        self._audit(
            AuditEventType.CARD_ISSUED, "card", card_number,
            {"customer_id": customer.customer_id, "card_type": card_type}
        )

        return card

    def suspend_credit_card(self, card: CreditCard) -> None:
        """Suspend a credit card"""
        if not card.suspend():
            return

        log_action(
            self.logger, "info", f"Credit card suspended: {card.card_number}",
            action="suspend_credit_card", resource=f"card:{card.card_number}"
        )
        self._audit(AuditEventType.CARD_SUSPENDED, "card", card.card_number)

    def report_credit_card_stolen(self, card: CreditCard) -> None:
        """Report a credit card stolen, deactivating it permanently"""
        if not card.report_stolen():
            return

        log_action(
            self.logger, "warning", f"Credit card reported stolen: {card.card_number}",
            action="report_credit_card_stolen", resource=f"card:{card.card_number}"
        )
        self._audit(AuditEventType.CARD_REPORTED_STOLEN, "card", card.card_number)

    def get_credit_card(self, card_number: str) -> Optional[CreditCard]:
        """Get credit card by number, or None if unknown"""
        with self._lock:
            return self._cards.get(card_number)

    def require_credit_card(self, card_number: str) -> CreditCard:
        """Get credit card by number, raising NotFound if unknown"""
        card = self.get_credit_card(card_number)
        if card is None:
            raise NotFound(f"Credit card {card_number} not found", identifier=card_number)
        return card

    def list_credit_cards(self, customer: Optional[Customer] = None) -> List[CreditCard]:
        """All cards in the order they were issued, optionally for one customer"""
        with self._lock:
            cards = list(self._cards.values())

        if customer is not None:
            cards = [c for c in cards if c.owner.customer_id == customer.customer_id]
        return cards

    # Payments

    def transfer(
        self,
        from_account_number: str,
        to_account_number: str,
        amount: AmountLike,
        description: Optional[str] = None
    ) -> PaymentResult:
        """
        Transfer funds between two registered accounts by number

        Unknown account numbers produce a NOT_FOUND failure result; every other
        outcome comes from Payment.make_payment.
        """
        try:
            from_account = self.require_account(from_account_number)
            to_account = self.require_account(to_account_number)
        except NotFound as e:
            log_action(
                self.logger, "warning", f"Transfer rejected: {e}",
                action="transfer", resource=f"account:{e.identifier}",
                extra={"from_account": from_account_number, "to_account": to_account_number}
            )
            return PaymentResult.failed(e)

        if description is None:
            description = self.config.default_payment_description

        return self.payment.make_payment(from_account, to_account, amount, description)

    def _allocate(self, allocator: IdentifierAllocator, registry: Dict, kind: str) -> str:
        # Caller holds self._lock
        identifier = allocator.next_id()
        if identifier in registry:
            raise RuntimeError(f"Identifier allocator reissued {kind} number {identifier}")
        return identifier

    def _audit(self, event_type: AuditEventType, entity_type: str, entity_id: str, metadata=None) -> None:
        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                metadata=metadata
            )
