"""
Card Records

The Card model and the card record store. Cards are written once at
creation and afterwards only through ``CardStore.compare_and_swap``, which
rejects the write when the card changed since it was read.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, replace
from typing import List, Optional, Union
import uuid

from .storage import StorageInterface, StorageRecord


@dataclass
class Card(StorageRecord):
    """
    Virtual card with a Decimal balance

    ``initial_balance`` is the opening balance the ledger is folded onto.
    ``version`` is assigned by storage and increases on every balance write.
    """
    cardholder_name: str
    balance: Decimal
    initial_balance: Decimal
    version: int = 1

    def __post_init__(self):
        if not isinstance(self.balance, Decimal):
            self.balance = Decimal(str(self.balance))
        if not isinstance(self.initial_balance, Decimal):
            self.initial_balance = Decimal(str(self.initial_balance))

    @classmethod
    def new(cls, cardholder_name: str, initial_balance: Decimal) -> 'Card':
        """Build a card that has not been stored yet"""
        now = datetime.now(timezone.utc)
        return cls(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            cardholder_name=cardholder_name,
            balance=initial_balance,
            initial_balance=initial_balance
        )

    def with_balance(self, balance: Decimal) -> 'Card':
        """Copy of this card carrying a new balance, same version"""
        return replace(self, balance=balance, updated_at=datetime.now(timezone.utc))


@dataclass(frozen=True)
class VersionConflict:
    """
    A versioned write lost the race: the stored card is no longer the
    version the writer read. ``actual_version`` is None when the card
    disappeared.
    """
    card_id: str
    expected_version: int
    actual_version: Optional[int]

    def __str__(self) -> str:
        return (f"Card {self.card_id} expected version {self.expected_version}, "
                f"found {self.actual_version}")


class CardStore:
    """Keyed card storage with optimistic versioning"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "cards"

    def insert(self, card: Card) -> Card:
        """Store a brand new card"""
        self.storage.save(self.table_name, card.id, card.to_dict())
        return card

    def get(self, card_id: str) -> Optional[Card]:
        data = self.storage.load(self.table_name, card_id)
        if data:
            return Card.from_dict(data)
        return None

    def compare_and_swap(
        self,
        card_id: str,
        expected_version: int,
        card: Card
    ) -> Union[Card, VersionConflict]:
        """
        Write ``card`` only if the stored version is still expected_version

        Returns:
            The card as stored (with its incremented version), or a
            VersionConflict when the stored version moved on
        """
        result = self.storage.compare_and_swap(
            self.table_name, card_id, expected_version, card.to_dict()
        )
        if not result.swapped:
            return VersionConflict(
                card_id=card_id,
                expected_version=expected_version,
                actual_version=result.current_version
            )
        return Card.from_dict(result.data)

    def list_all(self) -> List[Card]:
        """All cards ordered by creation time"""
        cards = [Card.from_dict(data) for data in self.storage.load_all(self.table_name)]
        cards.sort(key=lambda c: c.created_at)
        return cards
