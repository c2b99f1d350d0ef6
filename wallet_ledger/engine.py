"""
Transfer Engine

Moves money between ledger accounts. Each operation validates its inputs
without touching storage, then does all of its reads and writes inside one
transaction scope: both accounts are loaded with write-intent locks, the
business rules are checked against the locked values, and the debit, credit
and payment record are committed together or not at all.

The engine holds no state between calls and takes no locks of its own, so a
single instance can be shared by any number of request threads.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterator, List, Optional, Union
import time
import uuid

from .accounts import Account, parse_account_id
from .cancellation import Cancellation, check
from .currency import Currency, Money, parse_amount, validate_transfer_amount
from .errors import (
    CurrencyMismatch, ErrorCategory, InsufficientBalance, LedgerError, SameAccount,
)
from .logging_config import get_logger, log_action
from .payments import ExternalCredit, Payment, Transfer
from .storage import AccountStore, LedgerStorage, PaymentStore, TransactionScope


AmountInput = Union[str, Decimal, Money, None]
AccountIdInput = Union[str, uuid.UUID]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_transfer_amount(amount: AmountInput) -> Money:
    """
    Turn caller input into a validated transfer amount.

    Strings go through parse_amount() first, so "-1" reports Negative and
    "1.234" reports InvalidPrecision; everything then must pass
    validate_transfer_amount().
    """
    if isinstance(amount, str):
        amount = parse_amount(amount)
    validate_transfer_amount(amount)
    if isinstance(amount, Money):
        return amount
    return Money(amount)


class TransferEngine:
    """
    Orchestrates transfers and external credits over the storage contracts
    """

    def __init__(
        self,
        accounts: AccountStore,
        payments: PaymentStore,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4
    ):
        self.accounts_store = accounts
        self.payments_store = payments
        self._clock = clock
        self._new_id = id_factory
        self.logger = get_logger("wallet.engine")

    @classmethod
    def from_storage(cls, storage: LedgerStorage, **kwargs) -> 'TransferEngine':
        return cls(storage.accounts, storage.payments, **kwargs)

    @contextmanager
    def _logged(self, operation: str, **fields) -> Iterator[None]:
        """Log one engine call with its duration and outcome"""
        begin = time.monotonic()
        try:
            yield
        except LedgerError as e:
            took = round((time.monotonic() - begin) * 1000, 3)
            if e.category == ErrorCategory.INFRASTRUCTURE:
                log_action(self.logger, "error", f"{operation} failed", action=operation,
                           extra={**fields, "took_ms": took, "error": e.to_dict()}, exc_info=e)
            else:
                log_action(self.logger, "info", f"{operation} rejected", action=operation,
                           extra={**fields, "took_ms": took, "error": e.to_dict()})
            raise
        except Exception as e:
            took = round((time.monotonic() - begin) * 1000, 3)
            log_action(self.logger, "error", f"{operation} failed unexpectedly", action=operation,
                       extra={**fields, "took_ms": took}, exc_info=e)
            raise
        else:
            took = round((time.monotonic() - begin) * 1000, 3)
            log_action(self.logger, "info", operation, action=operation,
                       extra={**fields, "took_ms": took})

    def transfer(
        self,
        to: AccountIdInput,
        from_account: AccountIdInput,
        amount: AmountInput,
        cancellation: Optional[Cancellation] = None
    ) -> Transfer:
        """
        Transfer an amount from one account to another

        Args:
            to: Destination account ID
            from_account: Source account ID
            amount: Decimal string, Decimal or Money; must be > 0
            cancellation: Optional token; firing it before commit aborts the call

        Returns:
            The committed Transfer payment

        Raises:
            ValidationError: bad amount or identifiers (no storage access)
            SameAccount: to and from_account are equal (no storage access)
            AccountNotFound, CurrencyMismatch, InsufficientBalance: the
                transaction is rolled back
            InfrastructureError: storage failure, rolled back
            CancellationError: cancelled or past its deadline, rolled back
        """
        fields = {"to": str(to), "from": str(from_account), "amount": str(amount)}
        with self._logged("transfer", **fields):
            value = coerce_transfer_amount(amount)
            to_id = parse_account_id(to, "to")
            from_id = parse_account_id(from_account, "from")

            if to_id == from_id:
                raise SameAccount(to_id)

            check(cancellation)

            def transfer_tx(scope: TransactionScope) -> Transfer:
                return self._transfer_tx(scope, to_id, from_id, value, cancellation)

            return self.payments_store.run_in_transaction(transfer_tx)

    def _lock_accounts(self, scope: TransactionScope, *account_ids: uuid.UUID) -> Dict[uuid.UUID, Account]:
        """Load accounts for update in a fixed order so lock waits cannot cycle"""
        return {
            account_id: self.accounts_store.get_for_update(account_id, scope)
            for account_id in sorted(set(account_ids), key=str)
        }

    def _transfer_tx(
        self,
        scope: TransactionScope,
        to_id: uuid.UUID,
        from_id: uuid.UUID,
        amount: Money,
        cancellation: Optional[Cancellation]
    ) -> Transfer:
        locked = self._lock_accounts(scope, to_id, from_id)
        to_account = locked[to_id]
        from_account = locked[from_id]
        check(cancellation)

        if to_account.currency != from_account.currency:
            raise CurrencyMismatch(to_account.currency.code, from_account.currency.code)

        if from_account.balance < amount:
            raise InsufficientBalance(from_account.id, from_account.balance, amount)

        payment = Transfer(
            id=self._new_id(),
            to=to_account.id,
            from_account=from_account.id,
            amount=amount,
            timestamp=self._clock(),
        )

        from_account.debit(amount)
        to_account.credit(amount)
        self.accounts_store.store(from_account, scope)
        self.accounts_store.store(to_account, scope)
        self.payments_store.store(payment, scope)

        # Last chance to abort before commit
        check(cancellation)
        return payment

    def credit_external(
        self,
        to: AccountIdInput,
        amount: AmountInput,
        cancellation: Optional[Cancellation] = None
    ) -> ExternalCredit:
        """
        Credit funds entering the ledger from outside, with no paired debit
        """
        with self._logged("credit_external", to=str(to), amount=str(amount)):
            value = coerce_transfer_amount(amount)
            to_id = parse_account_id(to, "to")
            check(cancellation)

            def credit_tx(scope: TransactionScope) -> ExternalCredit:
                account = self.accounts_store.get_for_update(to_id, scope)
                check(cancellation)
                payment = ExternalCredit(
                    id=self._new_id(),
                    to=account.id,
                    amount=value,
                    timestamp=self._clock(),
                )
                account.credit(value)
                self.accounts_store.store(account, scope)
                self.payments_store.store(payment, scope)
                check(cancellation)
                return payment

            return self.payments_store.run_in_transaction(credit_tx)

    def register_account(
        self,
        currency: Union[str, Currency],
        account_id: Optional[AccountIdInput] = None,
        cancellation: Optional[Cancellation] = None
    ) -> Account:
        """Register a new zero-balance account; a random id is used when none is given"""
        with self._logged("register_account", account_id=str(account_id), currency=str(currency)):
            account = Account(
                id=parse_account_id(account_id) if account_id is not None else self._new_id(),
                currency=Currency.from_code(currency),
            )
            check(cancellation)

            def register_tx(scope: TransactionScope) -> Account:
                self.accounts_store.add(account, scope)
                check(cancellation)
                return account

            return self.payments_store.run_in_transaction(register_tx)

    def get_account(self, account_id: AccountIdInput) -> Account:
        return self.accounts_store.get(parse_account_id(account_id))

    def accounts(self) -> List[Account]:
        """All accounts, in store order"""
        with self._logged("accounts"):
            return self.accounts_store.list()

    def payments(self) -> List[Payment]:
        """All payments, in store order"""
        with self._logged("payments"):
            return self.payments_store.list()
