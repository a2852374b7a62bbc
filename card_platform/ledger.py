"""
Transaction Ledger

Append-only record of committed balance changes. One Transaction is
written for every committed spend or top-up; entries are never updated or
deleted, and folding a card's entries in creation order onto its opening
balance reproduces its current balance.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List
from enum import Enum
import uuid

from .storage import StorageInterface, StorageRecord


class TransactionType(Enum):
    """Types of ledger entries"""
    SPEND = "SPEND"    # Balance decreased
    TOPUP = "TOPUP"    # Balance increased


@dataclass
class Transaction(StorageRecord):
    """
    Immutable ledger entry for one committed balance change

    ``card_version`` is the card version produced by the write this entry
    records.
    """
    card_id: str
    transaction_type: TransactionType
    amount: Decimal
    card_version: int = 0

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))
        if not isinstance(self.transaction_type, TransactionType):
            self.transaction_type = TransactionType(self.transaction_type)

        # Validate amount is positive
        if self.amount <= Decimal('0'):
            raise ValueError("Transaction amount must be positive")

    @classmethod
    def record(
        cls,
        card_id: str,
        transaction_type: TransactionType,
        amount: Decimal,
        card_version: int = 0
    ) -> 'Transaction':
        """Build a new entry with a fresh id and creation timestamp"""
        now = datetime.now(timezone.utc)
        return cls(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            card_id=card_id,
            transaction_type=transaction_type,
            amount=amount,
            card_version=card_version
        )

    @property
    def signed_amount(self) -> Decimal:
        """Delta applied to the card balance"""
        if self.transaction_type == TransactionType.SPEND:
            return self.amount.copy_negate()
        return self.amount


class LedgerStore:
    """Append-only transaction storage"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "transactions"

    def insert(self, transaction: Transaction) -> Transaction:
        """
        Append a ledger entry

        Raises:
            ValueError: If an entry with the same id already exists
        """
        if self.storage.exists(self.table_name, transaction.id):
            raise ValueError(f"Transaction {transaction.id} already recorded")
        self.storage.save(self.table_name, transaction.id, transaction.to_dict())
        return transaction

    def query_by_card_key(self, card_id: str) -> List[Transaction]:
        """All entries for a card in creation order"""
        rows = self.storage.find(self.table_name, {"card_id": card_id})
        transactions = [Transaction.from_dict(row) for row in rows]
        # Stable sort keeps storage order for equal timestamps
        transactions.sort(key=lambda t: (t.created_at, t.card_version))
        return transactions
