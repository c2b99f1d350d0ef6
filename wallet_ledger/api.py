"""
Wallet Ledger API Application Factory

Thin HTTP layer over the transfer engine:

    POST /v1/transfer   {"to": UUID, "from": UUID, "amount": "12.34"}
    GET  /v1/payments
    GET  /v1/accounts

Every response, errors included, is JSON with an explicit utf-8 charset.
Errors are {"error": "<message>"} and their status depends only on the
error kind.
"""

from typing import Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .accounts import parse_account_id
from .cancellation import Cancellation
from .config import get_config
from .engine import TransferEngine
from .errors import ErrorCategory, ErrorKind, LedgerError, MissingField
from .logging_config import get_logger, log_action
from .storage import create_storage


logger = get_logger("wallet.api")

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Exactly one HTTP status per error kind
STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_FORMAT: 400,
    ErrorKind.NOT_FINITE: 400,
    ErrorKind.NEGATIVE: 400,
    ErrorKind.INVALID_PRECISION: 400,
    ErrorKind.AMOUNT_TOO_LARGE: 400,
    ErrorKind.AMOUNT_NIL: 400,
    ErrorKind.NOT_POSITIVE: 400,
    ErrorKind.INVALID_AMOUNT: 400,
    ErrorKind.INVALID_CURRENCY: 400,
    ErrorKind.EMPTY_ACCOUNT_ID: 400,
    ErrorKind.INVALID_ACCOUNT_ID: 400,
    ErrorKind.MISSING_FIELD: 400,
    ErrorKind.ACCOUNT_NOT_FOUND: 404,
    ErrorKind.CURRENCY_MISMATCH: 400,
    ErrorKind.SAME_ACCOUNT: 400,
    ErrorKind.INSUFFICIENT_BALANCE: 400,
    ErrorKind.DUPLICATE_ACCOUNT: 409,
    ErrorKind.STORAGE_FAILURE: 500,
    ErrorKind.LOCK_TIMEOUT: 500,
    ErrorKind.CANCELLED: 503,
    ErrorKind.DEADLINE_EXCEEDED: 504,
}


def status_for(kind: ErrorKind) -> int:
    return STATUS_BY_KIND[kind]


class UTF8JSONResponse(JSONResponse):
    # charset=utf-8 mitigates some old browser vulnerabilities
    media_type = "application/json; charset=utf-8"


def error_response(status_code: int, message: str) -> UTF8JSONResponse:
    return UTF8JSONResponse(status_code=status_code, content={"error": message})


class TransferRequest(BaseModel):
    """Raw transfer body; fields are checked by hand for stable error messages"""
    model_config = ConfigDict(populate_by_name=True)

    to: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    amount: Optional[str] = None


def get_engine(request: Request) -> TransferEngine:
    return request.app.state.engine


def get_cancellation(request: Request) -> Cancellation:
    return Cancellation(timeout=request.app.state.request_timeout)


def create_app(
    engine: Optional[TransferEngine] = None,
    request_timeout: Optional[float] = None
) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = get_config()
    if engine is None:
        storage = create_storage(
            config.database_url,
            lock_timeout=config.lock_timeout_seconds,
            pool_min=config.database_pool_min,
            pool_max=config.database_pool_max,
        )
        engine = TransferEngine.from_storage(storage)

    app = FastAPI(
        title="Wallet Ledger API",
        description="Atomic money transfers between ledger accounts",
        version=__version__,
        default_response_class=UTF8JSONResponse,
    )
    app.state.engine = engine
    app.state.request_timeout = (
        request_timeout if request_timeout is not None else config.request_timeout_seconds
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        status_code = status_for(exc.kind)
        if exc.category == ErrorCategory.INFRASTRUCTURE:
            log_action(logger, "error", "Request failed", action=request.url.path,
                       extra=exc.to_dict(), exc_info=exc)
            return error_response(status_code, INTERNAL_ERROR_MESSAGE)
        return error_response(status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
        return error_response(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        log_action(logger, "error", "Unhandled error", action=request.url.path, exc_info=exc)
        return error_response(500, INTERNAL_ERROR_MESSAGE)

    @app.post("/v1/transfer")
    def transfer(
        body: TransferRequest,
        engine: TransferEngine = Depends(get_engine),
        cancellation: Cancellation = Depends(get_cancellation)
    ):
        """Transfer an amount between two accounts"""
        if not body.from_:
            raise MissingField("from")
        if not body.to:
            raise MissingField("to")
        if not body.amount:
            raise MissingField("amount")

        from_id = parse_account_id(body.from_, "from")
        to_id = parse_account_id(body.to, "to")

        payment = engine.transfer(to_id, from_id, body.amount, cancellation=cancellation)
        return {"payment": payment.to_dict()}

    @app.get("/v1/payments")
    def list_payments(engine: TransferEngine = Depends(get_engine)):
        """List all payments"""
        payments = engine.payments()
        if not payments:
            return {}
        return {"payments": [p.to_dict() for p in payments]}

    @app.get("/v1/accounts")
    def list_accounts(engine: TransferEngine = Depends(get_engine)):
        """List all accounts with balances"""
        accounts = engine.accounts()
        if not accounts:
            return {}
        return {"accounts": [a.to_dict() for a in accounts]}

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "wallet_ledger",
            "version": __version__
        }

    return app
