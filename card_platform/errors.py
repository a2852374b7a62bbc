"""
Error Hierarchy

Typed, categorized exceptions for card operations. Validation, not-found
and business-rule errors are raised before anything is written. Version
conflicts are not exceptions: the card store reports them as values and the
balance mutation engine only raises once its retry budget is spent.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling"""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    BUSINESS_RULE = "business_rule"
    CONFLICT = "conflict"
    FATAL = "fatal"


class CardPlatformError(Exception):
    """Base exception for all card platform errors"""

    code = "card_platform_error"
    category = ErrorCategory.FATAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message
        }


class InvalidAmountError(CardPlatformError, ValueError):
    """Amount is not a finite decimal in the allowed range"""

    code = "invalid_amount"
    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, amount: Any = None):
        super().__init__(message)
        self.amount = amount


class InvalidCardholderError(CardPlatformError, ValueError):
    code = "invalid_cardholder"
    category = ErrorCategory.VALIDATION


class CardNotFoundError(CardPlatformError):
    code = "card_not_found"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, card_id: str):
        super().__init__(f"Card not found with ID: {card_id}")
        self.card_id = card_id


class InsufficientBalanceError(CardPlatformError):
    code = "insufficient_balance"
    category = ErrorCategory.BUSINESS_RULE

    def __init__(self, card_id: str, balance: Decimal, amount: Decimal):
        super().__init__(f"Insufficient balance for card ID: {card_id}")
        self.card_id = card_id
        self.balance = balance
        self.amount = amount


class ConcurrencyExhaustedError(CardPlatformError):
    """
    Every attempt of a balance mutation lost the version race.

    ``last_conflict`` is the VersionConflict observed on the final attempt.
    """

    code = "concurrency_exhausted"
    category = ErrorCategory.CONFLICT

    def __init__(self, card_id: str, attempts: int, last_conflict: Optional[Any] = None):
        super().__init__(
            f"Unable to update card {card_id} after {attempts} attempts "
            f"due to concurrent modifications"
        )
        self.card_id = card_id
        self.attempts = attempts
        self.last_conflict = last_conflict


class LedgerWriteError(CardPlatformError):
    """The ledger append failed; the balance write was rolled back with it"""

    code = "ledger_write_failed"
    category = ErrorCategory.FATAL

    def __init__(self, card_id: str, message: Optional[str] = None):
        super().__init__(message or f"Failed to record ledger entry for card {card_id}")
        self.card_id = card_id


class RetryInterruptedError(CardPlatformError):
    code = "retry_interrupted"
    category = ErrorCategory.FATAL

    def __init__(self, card_id: str, attempt: int):
        super().__init__(f"Interrupted while waiting to retry card {card_id} after attempt {attempt}")
        self.card_id = card_id
        self.attempt = attempt
