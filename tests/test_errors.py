"""
Tests for the ledger error taxonomy
"""

import uuid
from decimal import Decimal

from wallet_ledger.currency import Money
from wallet_ledger.errors import (
    AccountNotFound, CurrencyMismatch, DeadlineExceeded, DomainError, ErrorCategory,
    ErrorKind, InfrastructureError, InsufficientBalance, InvalidAccountID, LedgerError,
    LockTimeout, MissingField, NotPositive, OperationCancelled, SameAccount,
    StorageFailure, ValidationError, is_client_error,
)


class TestErrorKinds:

    def test_every_kind_has_a_category(self):
        for kind in ErrorKind:
            assert isinstance(kind.category, ErrorCategory)
            assert kind.code == kind.name.lower()

    def test_categories(self):
        assert ErrorKind.NOT_POSITIVE.category == ErrorCategory.VALIDATION
        assert ErrorKind.ACCOUNT_NOT_FOUND.category == ErrorCategory.DOMAIN
        assert ErrorKind.LOCK_TIMEOUT.category == ErrorCategory.INFRASTRUCTURE
        assert ErrorKind.DEADLINE_EXCEEDED.category == ErrorCategory.CANCELLED


class TestLedgerErrors:

    def test_messages(self):
        account_id = uuid.uuid4()
        assert AccountNotFound(account_id).message == "Account does not exist"
        assert CurrencyMismatch("USD", "EUR").message == "Transfers must use the same currency"
        assert SameAccount(account_id).message == "Transfers must be between different accounts"
        assert MissingField("to").message == "to is required"
        assert InvalidAccountID("from", "badly formed").message == \
            'Invalid account ID for field "from": badly formed'

    def test_hierarchy(self):
        assert isinstance(NotPositive(), ValidationError)
        assert isinstance(NotPositive(), ValueError)
        assert isinstance(SameAccount(uuid.uuid4()), DomainError)
        assert isinstance(StorageFailure("commit"), InfrastructureError)
        assert isinstance(OperationCancelled(), LedgerError)

    def test_structured_fields(self):
        account_id = uuid.uuid4()
        error = InsufficientBalance(account_id, Money(Decimal("1")), Money(Decimal("2")))

        assert error.kind is ErrorKind.INSUFFICIENT_BALANCE
        assert error.category is ErrorCategory.DOMAIN
        assert error.to_dict() == {
            "kind": "insufficient_balance",
            "category": "domain",
            "message": "Account has an insufficient balance",
            "account_id": str(account_id),
            "balance": "1.00",
            "amount": "2.00",
        }

    def test_none_fields_dropped_from_dict(self):
        data = StorageFailure("begin").to_dict()
        assert "reason" not in data
        assert data["operation"] == "begin"

    def test_is_client_error(self):
        assert is_client_error(NotPositive())
        assert is_client_error(AccountNotFound(uuid.uuid4()))
        assert not is_client_error(LockTimeout(None, 1.0))
        assert not is_client_error(DeadlineExceeded(1.0))
        assert not is_client_error(ValueError("plain"))
