"""
Balance Mutation Engine

Applies spends and top-ups to card balances under concurrent access.

Each attempt loads the card, applies the business rule and writes the new
balance with a compare-and-swap on the version it read. The versioned write
and the ledger append share one storage unit of work, so an entry exists
exactly when its balance write committed. A lost version race is retried
with a fresh load after a randomized delay, up to the attempt budget.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union
import random
import threading
import time

from .amounts import exact_add, exact_subtract, require_positive
from .cards import Card, CardStore, VersionConflict
from .ledger import LedgerStore, Transaction, TransactionType
from .errors import (
    CardNotFoundError, InsufficientBalanceError, ConcurrencyExhaustedError,
    LedgerWriteError, RetryInterruptedError
)
from .logging_config import get_logger, log_card_event


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with randomized delay

    The delay before retrying after attempt ``n`` is
    ``base + random(0, base * n)`` milliseconds.
    """
    max_attempts: int = 3
    base_delay_ms: int = 10

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms cannot be negative")

    def delay_for(self, attempt: int, rand: Callable[[], float] = random.random) -> float:
        """Delay in seconds to wait after a failed attempt"""
        base = self.base_delay_ms
        return (base + rand() * base * attempt) / 1000.0


def interruptible_sleep(event: threading.Event) -> Callable[[float], None]:
    """
    Sleep function that raises InterruptedError as soon as ``event`` is set.

    Pass the result as the engine's ``sleep`` to make backoff cancellable.
    """
    def _sleep(seconds: float) -> None:
        if event.wait(seconds):
            raise InterruptedError("Retry backoff interrupted")
    return _sleep


class BalanceMutationEngine:
    """
    Spend and top-up with optimistic concurrency control

    Only version conflicts are retried. Validation, missing cards and
    insufficient balance fail on the first attempt without side effects.
    """

    def __init__(
        self,
        card_store: CardStore,
        ledger_store: LedgerStore,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Any] = time.sleep,
        rand: Callable[[], float] = random.random
    ):
        if card_store.storage is not ledger_store.storage:
            raise ValueError("Card and ledger stores must share one storage backend")

        self.card_store = card_store
        self.ledger_store = ledger_store
        self.storage = card_store.storage
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._rand = rand
        self.logger = get_logger("card_platform.engine")

    def spend(self, card_id: str, amount: Any) -> Card:
        """
        Deduct ``amount`` from the card balance

        Raises:
            InvalidAmountError: If amount is not strictly positive
            CardNotFoundError: If the card does not exist
            InsufficientBalanceError: If the balance is below amount
            ConcurrencyExhaustedError: If every attempt hit a version conflict
            LedgerWriteError: If the ledger append failed
            RetryInterruptedError: If the backoff sleep was interrupted
        """
        amount = require_positive(amount, "Spend amount")
        return self._mutate(card_id, amount, TransactionType.SPEND)

    def top_up(self, card_id: str, amount: Any) -> Card:
        """
        Add ``amount`` to the card balance

        Raises the same errors as spend, except InsufficientBalanceError.
        """
        amount = require_positive(amount, "Top-up amount")
        return self._mutate(card_id, amount, TransactionType.TOPUP)

    def _mutate(self, card_id: str, amount: Decimal, transaction_type: TransactionType) -> Card:
        action = transaction_type.value.lower()
        last_conflict = None

        for attempt in range(1, self.policy.max_attempts + 1):
            outcome = self._attempt(card_id, amount, transaction_type, attempt)
            if isinstance(outcome, Card):
                return outcome

            last_conflict = outcome
            log_card_event(
                self.logger, "warning", "Version conflict on card write",
                card_id=card_id, action=action,
                attempt=attempt,
                max_attempts=self.policy.max_attempts,
                expected_version=outcome.expected_version,
                actual_version=outcome.actual_version
            )

            if attempt < self.policy.max_attempts:
                self._backoff(card_id, action, attempt)

        log_card_event(
            self.logger, "error", "Retry budget exhausted on card write",
            card_id=card_id, action=action,
            attempts=self.policy.max_attempts, amount=str(amount)
        )
        raise ConcurrencyExhaustedError(card_id, self.policy.max_attempts, last_conflict)

    def _attempt(
        self,
        card_id: str,
        amount: Decimal,
        transaction_type: TransactionType,
        attempt: int
    ) -> Union[Card, VersionConflict]:
        """One load, check, versioned write and ledger append"""
        action = transaction_type.value.lower()
        card = self.card_store.get(card_id)
        if card is None:
            raise CardNotFoundError(card_id)

        if transaction_type == TransactionType.SPEND:
            if card.balance < amount:
                raise InsufficientBalanceError(card_id, card.balance, amount)
            new_balance = exact_subtract(card.balance, amount)
        else:
            new_balance = exact_add(card.balance, amount)

        with self.storage.atomic():
            result = self.card_store.compare_and_swap(
                card_id, card.version, card.with_balance(new_balance)
            )
            if isinstance(result, VersionConflict):
                return result

            entry = Transaction.record(card_id, transaction_type, amount, result.version)
            try:
                self.ledger_store.insert(entry)
            except Exception as e:
                log_card_event(
                    self.logger, "error", "Ledger append failed, rolling back balance write",
                    card_id=card_id, action=action, transaction_id=entry.id,
                    amount=str(amount)
                )
                raise LedgerWriteError(card_id) from e

        log_card_event(
            self.logger, "info", f"Card {action} committed",
            card_id=card_id, action=action, transaction_id=entry.id,
            amount=str(amount),
            balance=str(result.balance),
            version=result.version,
            attempt=attempt
        )
        return result

    def _backoff(self, card_id: str, action: str, attempt: int) -> None:
        delay = self.policy.delay_for(attempt, self._rand)
        try:
            self._sleep(delay)
        except InterruptedError as e:
            log_card_event(
                self.logger, "error", "Retry backoff interrupted",
                card_id=card_id, action=action, attempt=attempt
            )
            raise RetryInterruptedError(card_id, attempt) from e
