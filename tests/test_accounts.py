"""
Tests for accounts and payment records
"""

import pytest
import uuid
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone
from decimal import Decimal

from wallet_ledger.accounts import Account, parse_account_id
from wallet_ledger.currency import Currency, Money
from wallet_ledger.errors import (
    EmptyAccountID, InsufficientBalance, InvalidAccountID, InvalidAmount, InvalidCurrency,
)
from wallet_ledger.payments import ExternalCredit, Payment, Transfer, make_payment


def money(text: str) -> Money:
    return Money(Decimal(text))


class TestAccount:
    """Test account balance rules"""

    def setup_method(self):
        self.account = Account.register(
            "d3f05a8d-1708-47de-8e1c-304e7fb5a93f", "USD", "100.00"
        )

    def test_register(self):
        assert self.account.id == uuid.UUID("d3f05a8d-1708-47de-8e1c-304e7fb5a93f")
        assert self.account.currency is Currency.USD
        assert self.account.balance == money("100")

    def test_default_balance_is_zero(self):
        account = Account(id=uuid.uuid4(), currency=Currency.EUR)
        assert account.balance.is_zero()

    def test_register_rejects_bad_inputs(self):
        with pytest.raises(InvalidCurrency):
            Account.register(uuid.uuid4(), "XYZ")
        with pytest.raises(InvalidAccountID):
            Account.register("not-a-uuid", "USD")
        with pytest.raises(InvalidAmount):
            Account(id=uuid.uuid4(), currency=Currency.USD, balance=money("-1"))

    def test_credit_and_debit(self):
        self.account.credit(money("0.50"))
        assert self.account.balance == money("100.50")

        self.account.debit(money("100.50"))
        assert self.account.balance.is_zero()

    def test_debit_never_overdraws(self):
        with pytest.raises(InsufficientBalance) as exc_info:
            self.account.debit(money("100.01"))

        assert exc_info.value.account_id == self.account.id
        assert exc_info.value.balance == money("100")
        assert self.account.balance == money("100")
        assert not self.account.can_debit(money("100.01"))
        assert self.account.can_debit(money("100"))

    def test_non_positive_amounts_rejected(self):
        with pytest.raises(InvalidAmount):
            self.account.credit(Money.zero())
        with pytest.raises(InvalidAmount):
            self.account.debit(money("-1"))

    def test_currency_is_fixed(self):
        with pytest.raises(AttributeError):
            self.account.currency = Currency.EUR

    def test_to_dict(self):
        assert self.account.to_dict() == {
            "id": "d3f05a8d-1708-47de-8e1c-304e7fb5a93f",
            "currency": "USD",
            "balance": "100.00",
        }


class TestParseAccountID:

    def test_valid(self):
        account_id = uuid.uuid4()
        assert parse_account_id(str(account_id)) == account_id
        assert parse_account_id(account_id) is account_id

    def test_empty(self):
        with pytest.raises(EmptyAccountID):
            parse_account_id("")
        with pytest.raises(EmptyAccountID):
            parse_account_id(None)

    def test_malformed_names_the_field(self):
        with pytest.raises(InvalidAccountID) as exc_info:
            parse_account_id("abc", "to")
        assert exc_info.value.field == "to"
        assert exc_info.value.message.startswith('Invalid account ID for field "to": ')


class TestPayments:
    """Test payment variants"""

    def setup_method(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.to = uuid.uuid4()
        self.source = uuid.uuid4()

    def test_transfer(self):
        payment = Transfer(
            id=uuid.uuid4(), to=self.to, from_account=self.source,
            amount=money("12.3"), timestamp=self.now,
        )
        assert payment.source == self.source
        assert payment.to_dict() == {
            "id": str(payment.id),
            "to": str(self.to),
            "from": str(self.source),
            "amount": "12.30",
        }

    def test_external_credit_omits_from(self):
        payment = ExternalCredit(id=uuid.uuid4(), to=self.to, amount=money("5"), timestamp=self.now)
        assert payment.source is None
        assert "from" not in payment.to_dict()
        assert payment.to_dict()["amount"] == "5.00"

    def test_invariants(self):
        with pytest.raises(InvalidAmount):
            ExternalCredit(id=uuid.uuid4(), to=self.to, amount=Money.zero(), timestamp=self.now)
        with pytest.raises(ValueError):
            Transfer(id=uuid.uuid4(), to=self.to, from_account=self.to,
                     amount=money("1"), timestamp=self.now)
        with pytest.raises(ValueError):
            ExternalCredit(id=uuid.uuid4(), to=self.to, amount=money("1"),
                           timestamp=datetime(2024, 1, 1))

    def test_payments_are_immutable(self):
        payment = ExternalCredit(id=uuid.uuid4(), to=self.to, amount=money("5"), timestamp=self.now)
        with pytest.raises(FrozenInstanceError):
            payment.amount = money("6")

    def test_make_payment_picks_variant(self):
        credit = make_payment(uuid.uuid4(), self.to, None, money("1"), self.now)
        transfer = make_payment(uuid.uuid4(), self.to, self.source, money("1"), self.now)
        assert isinstance(credit, ExternalCredit)
        assert isinstance(transfer, Transfer)
        assert transfer.from_account == self.source

    def test_base_payment_cannot_be_built(self):
        """Only the two variants carry a source, so the base is abstract"""
        with pytest.raises(TypeError):
            Payment(id=uuid.uuid4(), to=self.to, amount=money("1"), timestamp=self.now)
