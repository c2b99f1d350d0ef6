"""
Ledger Error Taxonomy

Every failure the ledger can report is a LedgerError carrying an ErrorKind.
Kinds belong to exactly one category so that transports can map them to a
stable external status without looking at message text.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Broad classes of failure"""
    VALIDATION = "validation"          # Client-correctable, no I/O performed
    DOMAIN = "domain"                  # Business rule violated inside a transaction
    INFRASTRUCTURE = "infrastructure"  # Storage or connection failure
    CANCELLED = "cancelled"            # Caller cancelled or deadline passed


class ErrorKind(Enum):
    """Closed enumeration of ledger error kinds"""
    INVALID_FORMAT = ("invalid_format", ErrorCategory.VALIDATION)
    NOT_FINITE = ("not_finite", ErrorCategory.VALIDATION)
    NEGATIVE = ("negative", ErrorCategory.VALIDATION)
    INVALID_PRECISION = ("invalid_precision", ErrorCategory.VALIDATION)
    AMOUNT_TOO_LARGE = ("amount_too_large", ErrorCategory.VALIDATION)
    AMOUNT_NIL = ("amount_nil", ErrorCategory.VALIDATION)
    NOT_POSITIVE = ("not_positive", ErrorCategory.VALIDATION)
    INVALID_AMOUNT = ("invalid_amount", ErrorCategory.VALIDATION)
    INVALID_CURRENCY = ("invalid_currency", ErrorCategory.VALIDATION)
    EMPTY_ACCOUNT_ID = ("empty_account_id", ErrorCategory.VALIDATION)
    INVALID_ACCOUNT_ID = ("invalid_account_id", ErrorCategory.VALIDATION)
    MISSING_FIELD = ("missing_field", ErrorCategory.VALIDATION)

    ACCOUNT_NOT_FOUND = ("account_not_found", ErrorCategory.DOMAIN)
    CURRENCY_MISMATCH = ("currency_mismatch", ErrorCategory.DOMAIN)
    SAME_ACCOUNT = ("same_account", ErrorCategory.DOMAIN)
    INSUFFICIENT_BALANCE = ("insufficient_balance", ErrorCategory.DOMAIN)
    DUPLICATE_ACCOUNT = ("duplicate_account", ErrorCategory.DOMAIN)

    STORAGE_FAILURE = ("storage_failure", ErrorCategory.INFRASTRUCTURE)
    LOCK_TIMEOUT = ("lock_timeout", ErrorCategory.INFRASTRUCTURE)

    CANCELLED = ("cancelled", ErrorCategory.CANCELLED)
    DEADLINE_EXCEEDED = ("deadline_exceeded", ErrorCategory.CANCELLED)

    def __init__(self, code: str, category: ErrorCategory):
        self.code = code
        self.category = category


class LedgerError(Exception):
    """Base class for all ledger errors"""

    kind: ErrorKind

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for logging"""
        return {
            "kind": self.kind.code,
            "category": self.category.value,
            "message": self.message,
            **{k: str(v) for k, v in self.details.items() if v is not None},
        }


class ValidationError(LedgerError, ValueError):
    """Input rejected before any storage access"""


class DomainError(LedgerError):
    """Business rule violated inside a transaction"""


class InfrastructureError(LedgerError):
    """Storage failure; the original cause is chained as __cause__"""


class CancellationError(LedgerError):
    """The caller cancelled the operation before it committed"""


# Amount validation

class InvalidFormat(ValidationError):
    kind = ErrorKind.INVALID_FORMAT

    def __init__(self, text: Any):
        super().__init__(f"Amount {text!r} is not a decimal number", text=text)
        self.text = text


class NotFinite(ValidationError):
    kind = ErrorKind.NOT_FINITE

    def __init__(self):
        super().__init__("Amount is not finite")


class Negative(ValidationError):
    kind = ErrorKind.NEGATIVE

    def __init__(self):
        super().__init__("Amount must not be negative")


class InvalidPrecision(ValidationError):
    kind = ErrorKind.INVALID_PRECISION

    def __init__(self):
        super().__init__("Amount must not have more than two digits of precision")


class AmountTooLarge(ValidationError):
    kind = ErrorKind.AMOUNT_TOO_LARGE

    def __init__(self, limit: Any):
        super().__init__(f"Amount must not exceed {limit}", limit=limit)
        self.limit = limit


class AmountNil(ValidationError):
    kind = ErrorKind.AMOUNT_NIL

    def __init__(self):
        super().__init__("Amount is required")


class NotPositive(ValidationError):
    kind = ErrorKind.NOT_POSITIVE

    def __init__(self):
        super().__init__("Amount must be greater than zero")


class InvalidAmount(ValidationError):
    """Raised by Account.credit/debit for a non-positive amount"""
    kind = ErrorKind.INVALID_AMOUNT

    def __init__(self, amount: Any):
        super().__init__(f"Invalid amount {amount}: must be greater than zero", amount=amount)
        self.amount = amount


# Identifier and field validation

class InvalidCurrency(ValidationError):
    kind = ErrorKind.INVALID_CURRENCY

    def __init__(self, code: Any):
        super().__init__("Invalid currency code", code=code)
        self.code = code


class EmptyAccountID(ValidationError):
    kind = ErrorKind.EMPTY_ACCOUNT_ID

    def __init__(self):
        super().__init__("Account ID must not be empty")


class InvalidAccountID(ValidationError):
    kind = ErrorKind.INVALID_ACCOUNT_ID

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid account ID for field \"{field}\": {reason}", field=field)
        self.field = field
        self.reason = reason


class MissingField(ValidationError):
    kind = ErrorKind.MISSING_FIELD

    def __init__(self, field: str):
        super().__init__(f"{field} is required", field=field)
        self.field = field


# Business rules

class AccountNotFound(DomainError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND

    def __init__(self, account_id: Any):
        super().__init__("Account does not exist", account_id=account_id)
        self.account_id = account_id


class CurrencyMismatch(DomainError):
    kind = ErrorKind.CURRENCY_MISMATCH

    def __init__(self, to_currency: Any, from_currency: Any):
        super().__init__(
            "Transfers must use the same currency",
            to_currency=to_currency,
            from_currency=from_currency,
        )
        self.to_currency = to_currency
        self.from_currency = from_currency


class SameAccount(DomainError):
    kind = ErrorKind.SAME_ACCOUNT

    def __init__(self, account_id: Any):
        super().__init__("Transfers must be between different accounts", account_id=account_id)
        self.account_id = account_id


class InsufficientBalance(DomainError):
    kind = ErrorKind.INSUFFICIENT_BALANCE

    def __init__(self, account_id: Any, balance: Any, amount: Any):
        super().__init__(
            "Account has an insufficient balance",
            account_id=account_id,
            balance=balance,
            amount=amount,
        )
        self.account_id = account_id
        self.balance = balance
        self.amount = amount


class DuplicateAccount(DomainError):
    kind = ErrorKind.DUPLICATE_ACCOUNT

    def __init__(self, account_id: Any):
        super().__init__("Account already exists", account_id=account_id)
        self.account_id = account_id


# Infrastructure

class StorageFailure(InfrastructureError):
    kind = ErrorKind.STORAGE_FAILURE

    def __init__(self, operation: str, reason: Optional[str] = None):
        super().__init__(f"Storage failure during {operation}", operation=operation, reason=reason)
        self.operation = operation


class LockTimeout(InfrastructureError):
    kind = ErrorKind.LOCK_TIMEOUT

    def __init__(self, account_id: Any, timeout: float):
        super().__init__(
            f"Timed out after {timeout}s waiting for account lock",
            account_id=account_id,
            timeout=timeout,
        )
        self.account_id = account_id
        self.timeout = timeout


# Cancellation

class OperationCancelled(CancellationError):
    kind = ErrorKind.CANCELLED

    def __init__(self):
        super().__init__("Operation was cancelled")


class DeadlineExceeded(CancellationError):
    kind = ErrorKind.DEADLINE_EXCEEDED

    def __init__(self, timeout: Optional[float] = None):
        super().__init__("Operation deadline exceeded", timeout=timeout)
        self.timeout = timeout


def is_client_error(error: BaseException) -> bool:
    """True for errors caused by the request rather than the system"""
    return isinstance(error, LedgerError) and error.category in (
        ErrorCategory.VALIDATION, ErrorCategory.DOMAIN
    )
