"""
Payment Records

A payment is the immutable, append-only record of one completed balance
movement. There are exactly two variants:

- Transfer: value moved from one ledger account to another.
- ExternalCredit: value entering the ledger from outside, with no source
  account and no paired debit.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
import uuid

from .currency import Money, format_amount
from .errors import InvalidAmount


@dataclass(frozen=True)
class Payment(ABC):
    """Fields shared by every payment variant"""
    id: uuid.UUID
    to: uuid.UUID
    amount: Money
    timestamp: datetime

    def __post_init__(self):
        if not self.amount.is_positive():
            raise InvalidAmount(self.amount)
        if self.timestamp.tzinfo is None:
            raise ValueError("Payment timestamp must be timezone-aware")

    @property
    @abstractmethod
    def source(self) -> Optional[uuid.UUID]:
        """Account the value came from, or None for external credits"""

    def to_dict(self) -> Dict[str, Any]:
        """JSON-representable form; 'from' is omitted for external credits"""
        data = {"id": str(self.id), "to": str(self.to)}
        if self.source is not None:
            data["from"] = str(self.source)
        data["amount"] = format_amount(self.amount)
        return data


@dataclass(frozen=True)
class Transfer(Payment):
    """Balance-to-balance movement between two distinct accounts"""
    from_account: uuid.UUID

    def __post_init__(self):
        super().__post_init__()
        if self.from_account == self.to:
            raise ValueError("Transfer source and destination must differ")

    @property
    def source(self) -> Optional[uuid.UUID]:
        return self.from_account


@dataclass(frozen=True)
class ExternalCredit(Payment):
    """Funds entering the ledger from outside the system"""

    @property
    def source(self) -> Optional[uuid.UUID]:
        return None


def make_payment(
    payment_id: uuid.UUID,
    to: uuid.UUID,
    source: Optional[uuid.UUID],
    amount: Money,
    timestamp: datetime
) -> Payment:
    """Rebuild the right variant from a stored row"""
    if source is None:
        return ExternalCredit(id=payment_id, to=to, amount=amount, timestamp=timestamp)
    return Transfer(id=payment_id, to=to, from_account=source, amount=amount, timestamp=timestamp)
