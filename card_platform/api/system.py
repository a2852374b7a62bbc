"""
Card platform wiring and request dependencies
"""

from typing import Optional
import threading

from ..storage import StorageInterface, create_storage
from ..cards import CardStore
from ..ledger import LedgerStore
from ..engine import BalanceMutationEngine, RetryPolicy, interruptible_sleep
from ..manager import CardManager
from ..reconciliation import LedgerReconciler
from ..config import get_config


class CardPlatform:
    """
    Card platform with all components initialized over one storage backend

    Retry backoff sleeps on ``shutdown_event`` unless a ``sleep`` function is
    passed, so ``close()`` wakes every caller waiting to retry.
    """

    def __init__(self, storage: StorageInterface, policy: Optional[RetryPolicy] = None, **engine_options):
        self.storage = storage
        self.shutdown_event = threading.Event()
        engine_options.setdefault("sleep", interruptible_sleep(self.shutdown_event))
        self.card_store = CardStore(self.storage)
        self.ledger_store = LedgerStore(self.storage)
        self.engine = BalanceMutationEngine(
            self.card_store, self.ledger_store, policy=policy, **engine_options
        )
        self.card_manager = CardManager(self.card_store, self.ledger_store, self.engine)
        self.reconciler = LedgerReconciler(self.card_store, self.ledger_store)

    @classmethod
    def from_config(cls) -> 'CardPlatform':
        config = get_config()
        policy = RetryPolicy(
            max_attempts=config.max_retry_attempts,
            base_delay_ms=config.retry_base_delay_ms
        )
        return cls(create_storage(config.database_url), policy=policy)

    def close(self) -> None:
        self.shutdown_event.set()
        self.storage.close()


_platform: Optional[CardPlatform] = None
_platform_lock = threading.Lock()


# Dependency to get the card platform
def get_card_platform() -> CardPlatform:
    global _platform
    with _platform_lock:
        if _platform is None:
            _platform = CardPlatform.from_config()
    return _platform


def close_card_platform() -> None:
    """Close the shared platform, if one was created"""
    global _platform
    with _platform_lock:
        if _platform is not None:
            _platform.close()
            _platform = None
