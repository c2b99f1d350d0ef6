"""
Account Module

Balance-holding accounts. An account is registered once with a currency and
afterwards only its balance moves, through credit() and debit(), which the
transfer engine calls inside a locked transaction.
"""

from dataclasses import dataclass, field
from typing import Union
import uuid

from .currency import Currency, Money, parse_amount
from .errors import EmptyAccountID, InsufficientBalance, InvalidAccountID, InvalidAmount


@dataclass
class Account:
    """
    Ledger account.

    The balance is never negative: debit() refuses any amount larger than the
    current balance and leaves the account untouched when it does.
    """
    id: uuid.UUID
    currency: Currency
    balance: Money = field(default_factory=Money.zero)

    def __post_init__(self):
        if self.balance.is_negative():
            raise InvalidAmount(self.balance)

    def __setattr__(self, name, value):
        # Currency is fixed at registration
        if name == 'currency' and 'currency' in self.__dict__:
            raise AttributeError("Account currency cannot be changed")
        super().__setattr__(name, value)

    @classmethod
    def register(
        cls,
        account_id: Union[str, uuid.UUID],
        currency: Union[str, Currency],
        balance: str = "0.00"
    ) -> 'Account':
        """
        Build a new account from raw inputs

        Args:
            account_id: UUID or its string form
            currency: Currency or ISO code
            balance: Opening balance as a decimal string

        Raises:
            EmptyAccountID, InvalidAccountID, InvalidCurrency, and any
            parse_amount error for the balance
        """
        return cls(
            id=parse_account_id(account_id),
            currency=Currency.from_code(currency),
            balance=parse_amount(balance),
        )

    def credit(self, amount: Money) -> None:
        """Increase the balance by a strictly positive amount"""
        if not amount.is_positive():
            raise InvalidAmount(amount)
        self.balance = self.balance + amount

    def debit(self, amount: Money) -> None:
        """Decrease the balance by a strictly positive amount, never below zero"""
        if not amount.is_positive():
            raise InvalidAmount(amount)
        if amount > self.balance:
            raise InsufficientBalance(self.id, self.balance, amount)
        self.balance = self.balance - amount

    def can_debit(self, amount: Money) -> bool:
        return amount.is_positive() and amount <= self.balance

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "currency": self.currency.code,
            "balance": str(self.balance),
        }


def parse_account_id(value: Union[str, uuid.UUID], field_name: str = "id") -> uuid.UUID:
    """Parse an account identifier, rejecting empty and malformed values"""
    if isinstance(value, uuid.UUID):
        return value
    if value is None or value == "":
        raise EmptyAccountID()
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise InvalidAccountID(field_name, str(e)) from None
