"""
Test suite for accounts module

Tests account lifecycle, exact Decimal balance arithmetic, closed-account
immutability, and serialization of concurrent withdrawals.
"""

import threading
import pytest
from decimal import Decimal

from openbanking.customers import Customer
from openbanking.accounts import Account
from openbanking.exceptions import (
    BankingError, InsufficientFunds, InvalidAmount, InvalidOperation
)


class TestAccount:
    """Test Account balance operations"""

    def setup_method(self):
        """Set up test fixtures"""
        self.customer = Customer(customer_id="CUST001", name="Alice")
        self.account = Account("ACC1001", self.customer)

    def test_new_account_defaults(self):
        """Test that a new account is open with zero balance"""
        assert self.account.account_number == "ACC1001"
        assert self.account.customer == self.customer
        assert self.account.balance == Decimal('0')
        assert self.account.get_balance() == Decimal('0')
        assert not self.account.is_closed
        assert self.account.can_transact()
        assert self.account.closed_at is None

    def test_account_number_required(self):
        """Test that an empty account number is rejected"""
        with pytest.raises(ValueError, match="Account number is required"):
            Account("", self.customer)

    def test_deposit_increases_balance(self):
        """Test deposit adds exactly the amount"""
        new_balance = self.account.deposit(Decimal('100.00'))

        assert new_balance == Decimal('100.00')
        assert self.account.balance == Decimal('100.00')

    def test_deposit_accepts_int_and_string(self):
        """Test deposit accepts exact non-Decimal inputs"""
        self.account.deposit(10)
        self.account.deposit("2.50")

        assert self.account.balance == Decimal('12.50')

    def test_deposit_zero_is_allowed(self):
        """Test zero deposit is a valid no-op"""
        self.account.deposit(Decimal('0'))
        assert self.account.balance == Decimal('0')

    def test_deposit_rejects_negative_amount(self):
        """Test negative deposit is rejected without touching the balance"""
        self.account.deposit(Decimal('5'))

        with pytest.raises(InvalidAmount):
            self.account.deposit(Decimal('-1'))

        assert self.account.balance == Decimal('5')

    def test_deposit_rejects_float(self):
        """Test float amounts never reach the balance"""
        with pytest.raises(InvalidAmount, match="exact decimal"):
            self.account.deposit(0.1)

        assert self.account.balance == Decimal('0')

    def test_no_representation_error_across_cycles(self):
        """Test repeated small deposits sum exactly"""
        for _ in range(10):
            self.account.deposit(Decimal('0.1'))

        assert self.account.balance == Decimal('1.0')

        for _ in range(10):
            self.account.withdraw(Decimal('0.1'))

        assert self.account.balance == Decimal('0')

    def test_large_amounts_are_not_rounded(self):
        """Test additions beyond the default Decimal precision stay exact"""
        self.account.deposit(Decimal('1E+40'))
        self.account.deposit(Decimal('0.01'))

        assert self.account.balance == Decimal('10000000000000000000000000000000000000000.01')

    def test_amounts_beyond_default_exponent_range(self):
        """Test amounts past the default Decimal exponent limit do not overflow"""
        self.account.deposit(Decimal('9E+999999'))
        self.account.deposit(Decimal('9E+999999'))
        assert self.account.balance == Decimal('18E+999999')

        self.account.deposit(Decimal('1E+1000000'))
        assert self.account.balance == Decimal('28E+999999')

        self.account.withdraw(Decimal('28E+999999'))
        assert self.account.balance == Decimal('0')

    def test_withdraw_decreases_balance(self):
        """Test withdraw subtracts exactly the amount"""
        self.account.deposit(Decimal('100.00'))
        new_balance = self.account.withdraw(Decimal('40.00'))

        assert new_balance == Decimal('60.00')
        assert self.account.balance == Decimal('60.00')

    def test_withdraw_full_balance_drains_to_zero(self):
        """Test withdrawing exactly the balance succeeds"""
        self.account.deposit(Decimal('75.25'))
        self.account.withdraw(Decimal('75.25'))

        assert self.account.balance == Decimal('0')

    def test_withdraw_more_than_balance_fails(self):
        """Test withdrawing balance + epsilon fails and leaves balance unchanged"""
        self.account.deposit(Decimal('50.00'))

        with pytest.raises(InsufficientFunds) as exc_info:
            self.account.withdraw(Decimal('50.01'))

        assert exc_info.value.requested == Decimal('50.01')
        assert exc_info.value.available == Decimal('50.00')
        assert self.account.balance == Decimal('50.00')

    def test_deposit_then_withdraw_round_trip(self):
        """Test deposit d then withdraw d leaves balance unchanged"""
        self.account.deposit(Decimal('20.00'))
        before = self.account.balance

        self.account.deposit(Decimal('33.33'))
        self.account.withdraw(Decimal('33.33'))

        assert self.account.balance == before

    def test_close_freezes_balance(self):
        """Test closed accounts reject every mutation"""
        self.account.deposit(Decimal('60.00'))
        assert self.account.close() is True

        assert self.account.is_closed
        assert not self.account.can_transact()
        assert self.account.closed_at is not None

        with pytest.raises(InvalidOperation, match="closed"):
            self.account.deposit(Decimal('1.00'))

        with pytest.raises(InvalidOperation, match="closed"):
            self.account.withdraw(Decimal('1.00'))

        assert self.account.balance == Decimal('60.00')

    def test_close_is_idempotent(self):
        """Test closing twice leaves the same observable state"""
        self.account.deposit(Decimal('10'))
        self.account.close()
        first_closed_at = self.account.closed_at
        first_snapshot = self.account.to_dict()

        assert self.account.close() is False
        assert self.account.closed_at == first_closed_at
        assert self.account.to_dict() == first_snapshot

    def test_insufficient_funds_on_closed_account_reports_closed(self):
        """Test closed check comes before the funds check"""
        self.account.close()

        with pytest.raises(InvalidOperation):
            self.account.withdraw(Decimal('1000'))

    def test_errors_are_banking_errors(self):
        """Test all account errors share the banking base class"""
        with pytest.raises(BankingError):
            self.account.withdraw(Decimal('1'))
        with pytest.raises(ValueError):
            self.account.withdraw(Decimal('1'))

    def test_to_dict_snapshot(self):
        """Test snapshot contents"""
        self.account.deposit(Decimal('12.34'))
        snapshot = self.account.to_dict()

        assert snapshot['account_number'] == "ACC1001"
        assert snapshot['customer_id'] == "CUST001"
        assert snapshot['customer_name'] == "Alice"
        assert snapshot['balance'] == "12.34"
        assert snapshot['closed'] is False
        assert snapshot['closed_at'] is None

    def test_alice_scenario(self):
        """Test the full open/deposit/withdraw/close walkthrough"""
        assert self.account.balance == Decimal('0.00')

        self.account.deposit(Decimal('100.00'))
        assert self.account.balance == Decimal('100.00')

        self.account.withdraw(Decimal('40.00'))
        assert self.account.balance == Decimal('60.00')

        with pytest.raises(InsufficientFunds):
            self.account.withdraw(Decimal('100.00'))
        assert self.account.balance == Decimal('60.00')

        self.account.close()
        assert self.account.balance == Decimal('60.00')

        with pytest.raises(InvalidOperation):
            self.account.deposit(Decimal('1.00'))


class TestAccountConcurrency:
    """Test that concurrent mutations never break the balance invariant"""

    def test_concurrent_withdrawals_never_overdraw(self):
        """Test only as many withdrawals succeed as the balance covers"""
        account = Account("ACC1001", Customer("CUST001", "Alice"))
        account.deposit(Decimal('100'))

        successes = []
        failures = []
        start = threading.Barrier(50)

        def withdraw():
            start.wait()
            try:
                account.withdraw(Decimal('10'))
                successes.append(1)
            except InsufficientFunds:
                failures.append(1)

        threads = [threading.Thread(target=withdraw) for _ in range(50)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(successes) == 10
        assert len(failures) == 40
        assert account.balance == Decimal('0')

    def test_concurrent_deposits_are_not_lost(self):
        """Test no deposit is lost to an interleaved update"""
        account = Account("ACC1001", Customer("CUST001", "Alice"))

        def deposit_many():
            for _ in range(200):
                account.deposit(Decimal('0.01'))

        threads = [threading.Thread(target=deposit_many) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert account.balance == Decimal('20.00')

    def test_close_during_deposits_freezes_balance(self):
        """Test balance does not move once close() has returned"""
        account = Account("ACC1001", Customer("CUST001", "Alice"))
        stop = threading.Event()

        def deposit_until_closed():
            while not stop.is_set():
                try:
                    account.deposit(Decimal('1'))
                except InvalidOperation:
                    return

        thread = threading.Thread(target=deposit_until_closed)
        thread.start()
        account.close()
        frozen = account.balance
        stop.set()
        thread.join()

        assert account.balance == frozen
