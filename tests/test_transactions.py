"""
Test suite for transaction records and customer references
"""

import dataclasses
import pytest
from decimal import Decimal

from openbanking.customers import Customer
from openbanking.exceptions import InvalidAmount
from openbanking.transactions import Transaction, TransactionType


class TestTransaction:
    """Test the immutable transaction record"""

    def test_defaults(self):
        """Test id and timestamp are assigned at construction"""
        transaction = Transaction(
            amount=Decimal('10.00'),
            description="Payment",
            from_account="ACC1001",
            to_account="ACC1002"
        )

        assert transaction.transaction_type == TransactionType.PAYMENT
        assert transaction.transaction_id
        assert transaction.timestamp.tzinfo is not None
        assert not transaction.is_self_transfer

    def test_payment_is_the_only_type(self):
        """Test only payments produce transaction records"""
        assert [t.value for t in TransactionType] == ["payment"]

    def test_ids_are_unique(self):
        """Test two records never share an id"""
        first = Transaction(amount=Decimal('1'), description="a", to_account="ACC1001")
        second = Transaction(amount=Decimal('1'), description="a", to_account="ACC1001")

        assert first.transaction_id != second.transaction_id

    def test_record_is_immutable(self):
        """Test fields cannot be reassigned"""
        transaction = Transaction(amount=Decimal('1'), description="a", to_account="ACC1001")

        with pytest.raises(dataclasses.FrozenInstanceError):
            transaction.amount = Decimal('2')

    @pytest.mark.parametrize("amount", [Decimal('0'), Decimal('-1'), Decimal('NaN'), 5])
    def test_amount_must_be_positive_decimal(self, amount):
        """Test zero, negative, non-finite and non-Decimal amounts are rejected"""
        with pytest.raises(InvalidAmount):
            Transaction(amount=amount, description="bad", to_account="ACC1001")

    def test_requires_an_account(self):
        """Test a record without any account is rejected"""
        with pytest.raises(ValueError, match="at least one account"):
            Transaction(amount=Decimal('1'), description="orphan")

    def test_to_dict(self):
        """Test dictionary form used for logs and audit metadata"""
        transaction = Transaction(
            amount=Decimal('2.50'),
            description="Coffee",
            transaction_type=TransactionType.PAYMENT,
            from_account="ACC1001"
        )
        data = transaction.to_dict()

        assert data['amount'] == "2.50"
        assert data['transaction_type'] == "payment"
        assert data['to_account'] is None
        assert data['timestamp'] == transaction.timestamp.isoformat()


class TestCustomer:
    """Test the opaque customer reference"""

    def test_display(self):
        customer = Customer(customer_id="CUST001", name="Alice")
        assert str(customer) == "Alice"
        assert customer == Customer("CUST001", "Alice")

    def test_id_required(self):
        with pytest.raises(ValueError, match="Customer ID is required"):
            Customer(customer_id="", name="Nobody")
