"""Error Hierarchy — typed, categorized exceptions for all SwapBridge failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the {status, success, result} REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with BridgeError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - DispatchError is the only retryable settlement failure; InvalidSwapTypeError is fatal
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    client_account_uuid: str | None = None
    swap_direction: str | None = None
    batch_uuid: str | None = None
    debug_info: dict[str, Any] | None = None


class BridgeError(Exception):
    """Base exception for all SwapBridge errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the standard {status, success, result} envelope."""
        return {
            "status": self.http_status,
            "success": False,
            "result": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            },
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(BridgeError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            "Unable to find swap details",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class NoDepositError(BridgeError):
    """No incoming transaction exists for the deposit address."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Unable to find a deposit",
            "NO_DEPOSIT", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.INFO, context, 400,
        )


class NoNewDepositError(BridgeError):
    """Every incoming transaction is already recorded as a swap."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Unable to find any new deposits",
            "NO_NEW_DEPOSIT", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.INFO, context, 400,
        )


class FeeExceedsAmountError(BridgeError):
    """Withdrawal fee would leave a non-positive payout."""
    def __init__(self, address: str, amount: int, fee: int, context: ErrorContext | None = None):
        super().__init__(
            f"Withdrawal fee {fee} leaves nothing to pay {address} (amount {amount})",
            "FEE_EXCEEDS_AMOUNT", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.address = address
        self.amount = amount
        self.fee = fee


# ─── Fatal Errors (programming / configuration) ─────────────────

class AccountCreationError(BridgeError):
    """No minting capability applies to the requested deposit network."""
    def __init__(self, network: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid swap: cannot create a deposit account on '{network}'",
            "ACCOUNT_CREATION_FAILED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.network = network


class InvalidSwapTypeError(BridgeError):
    """Direction outside the SwapDirection enumeration."""
    def __init__(self, direction: object, context: ErrorContext | None = None):
        super().__init__(
            "Invalid swap type",
            "INVALID_SWAP_TYPE", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.direction = direction


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(BridgeError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class NetworkClientError(BridgeError):
    """Wallet RPC / chain API call failed."""
    def __init__(
        self,
        message: str,
        network: str,
        error_type: str,
        context: ErrorContext | None = None,
    ):
        category = (
            ErrorCategory.TIMEOUT if error_type == "timeout"
            else ErrorCategory.EXTERNAL_API
        )
        super().__init__(
            f"{network} client error ({error_type}): {message}",
            "NETWORK_CLIENT_ERROR", category,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.network = network
        self.error_type = error_type


class DispatchError(BridgeError):
    """Batched payout could not be submitted — retried by the next run."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Settlement dispatch failed: {message}",
            "DISPATCH_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 503,
        )
