"""
Demo Data

Registers six demo accounts, two per currency, each funded with an external
credit of 100.00. Identifiers are fixed so repeated runs and manual API
testing can refer to the same accounts.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Tuple
import uuid

from .accounts import Account
from .currency import Currency, Money
from .logging_config import get_logger, log_action
from .payments import ExternalCredit
from .storage import LedgerStorage, TransactionScope


logger = get_logger("wallet.seed")

OPENING_CREDIT = Money(Decimal("100.00"))

# (account id, currency, id of the payment that funds it)
DEMO_ACCOUNTS: List[Tuple[str, Currency, str]] = [
    ("d3f05a8d-1708-47de-8e1c-304e7fb5a93f", Currency.USD, "8c7ecafb-df60-400a-a985-8f260c2fbb2a"),
    ("5e0281df-cb1e-4b2f-bf61-0286295d07c9", Currency.EUR, "18da7d72-c33a-410b-ae6a-c3bd027082fd"),
    ("46e0b1dd-5cb2-4b40-b4d9-06b5e3d51059", Currency.SGD, "8d84d67e-2cf6-43fa-a2a1-e2e121db8ee3"),
    ("92820a1f-4249-44fd-a152-b956fb001274", Currency.USD, "ef1ac34e-e7e7-4946-9ae4-fa1da6dccca7"),
    ("a88d1536-73c0-4aef-bf1c-a89e355a00fe", Currency.EUR, "0ed53dc7-946b-45c4-a717-9946aab1ac3f"),
    ("ab5977f7-cb1a-4619-b76c-25a437d07ea7", Currency.SGD, "38f4b350-c848-400d-bc91-a112fb4f58df"),
]


def _seed_account(storage: LedgerStorage, account: Account, credit: ExternalCredit) -> Account:
    def seed_tx(scope: TransactionScope) -> Account:
        storage.accounts.add(account, scope)
        storage.payments.store(credit, scope)
        return account

    return storage.payments.run_in_transaction(seed_tx)


def seed_ledger(storage: LedgerStorage) -> List[Account]:
    """
    Add the demo accounts that are not present yet

    Each account and its funding credit are written in one transaction, so
    a partially seeded ledger never holds an unfunded demo account.

    Returns:
        The accounts created by this call
    """
    existing = {account.id for account in storage.accounts.list()}
    now = datetime.now(timezone.utc)
    created = []

    for account_id, currency, payment_id in DEMO_ACCOUNTS:
        account_uuid = uuid.UUID(account_id)
        if account_uuid in existing:
            log_action(logger, "info", "Demo account already present",
                       action="seed", resource=account_id)
            continue

        account = Account(id=account_uuid, currency=currency, balance=OPENING_CREDIT)
        credit = ExternalCredit(
            id=uuid.UUID(payment_id),
            to=account_uuid,
            amount=OPENING_CREDIT,
            timestamp=now,
        )
        created.append(_seed_account(storage, account, credit))
        log_action(logger, "info", "Demo account seeded", action="seed", resource=account_id,
                   extra={"currency": currency.code, "balance": str(OPENING_CREDIT)})

    return created
