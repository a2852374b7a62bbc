"""
Test suite for card records, the card store and the card manager
"""

import pytest
from decimal import Decimal

from card_platform.storage import InMemoryStorage
from card_platform.cards import Card, CardStore, VersionConflict
from card_platform.ledger import LedgerStore
from card_platform.engine import BalanceMutationEngine
from card_platform.manager import CardManager
from card_platform.errors import (
    CardNotFoundError, InvalidAmountError, InvalidCardholderError
)


class TestCard:
    """Test the Card model"""

    def test_new_card(self):
        card = Card.new("Alice", Decimal('100.00'))

        assert card.id
        assert card.cardholder_name == "Alice"
        assert card.balance == Decimal('100.00')
        assert card.initial_balance == Decimal('100.00')
        assert card.version == 1
        assert card.created_at == card.updated_at

    def test_serialization_keeps_decimal_precision(self):
        """Balances survive storage as exact decimal strings"""
        card = Card.new("Alice", Decimal('0.10'))
        data = card.to_dict()

        assert data['balance'] == "0.10"
        assert data['created_at'] == card.created_at.isoformat()

        restored = Card.from_dict(data)
        assert restored == card
        assert isinstance(restored.balance, Decimal)

    def test_with_balance_keeps_identity(self):
        card = Card.new("Alice", Decimal('100.00'))
        updated = card.with_balance(Decimal('75.00'))

        assert updated.id == card.id
        assert updated.version == card.version
        assert updated.created_at == card.created_at
        assert updated.initial_balance == Decimal('100.00')
        assert updated.balance == Decimal('75.00')
        assert card.balance == Decimal('100.00')


class TestCardStore:
    """Test keyed card storage with versioned writes"""

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.store = CardStore(self.storage)
        self.card = self.store.insert(Card.new("Alice", Decimal('100.00')))

    def test_get(self):
        loaded = self.store.get(self.card.id)

        assert loaded == self.card
        assert self.store.get("missing") is None

    def test_compare_and_swap_increments_version(self):
        result = self.store.compare_and_swap(
            self.card.id, 1, self.card.with_balance(Decimal('80.00'))
        )

        assert isinstance(result, Card)
        assert result.version == 2
        assert result.balance == Decimal('80.00')
        assert self.store.get(self.card.id).version == 2

    def test_compare_and_swap_with_stale_version(self):
        self.store.compare_and_swap(self.card.id, 1, self.card.with_balance(Decimal('80.00')))

        result = self.store.compare_and_swap(
            self.card.id, 1, self.card.with_balance(Decimal('10.00'))
        )

        assert result == VersionConflict(card_id=self.card.id, expected_version=1, actual_version=2)
        assert self.store.get(self.card.id).balance == Decimal('80.00')

    def test_compare_and_swap_missing_card(self):
        ghost = Card.new("Ghost", Decimal('1.00'))

        result = self.store.compare_and_swap(ghost.id, 1, ghost)

        assert isinstance(result, VersionConflict)
        assert result.actual_version is None
        assert self.store.get(ghost.id) is None

    def test_list_all_in_creation_order(self):
        second = self.store.insert(Card.new("Bob", Decimal('5.00')))

        assert [c.id for c in self.store.list_all()] == [self.card.id, second.id]


class TestCardManager:
    """Test the card service facade"""

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.card_store = CardStore(self.storage)
        self.ledger_store = LedgerStore(self.storage)
        self.engine = BalanceMutationEngine(
            self.card_store, self.ledger_store, sleep=lambda seconds: None
        )
        self.manager = CardManager(self.card_store, self.ledger_store, self.engine)

    def test_create_card(self):
        card = self.manager.create_card("Alice Smith", Decimal('50.00'))

        assert card.cardholder_name == "Alice Smith"
        assert card.balance == Decimal('50.00')
        assert card.version == 1
        assert self.manager.get_card(card.id) == card

    def test_create_card_accepts_string_and_zero_balance(self):
        card = self.manager.create_card("Bob", "0")

        assert card.balance == Decimal('0')

    def test_create_card_does_not_write_ledger(self):
        card = self.manager.create_card("Alice", Decimal('100.00'))

        assert self.manager.list_transactions(card.id) == []

    def test_create_card_with_negative_balance(self):
        with pytest.raises(InvalidAmountError, match="cannot be negative"):
            self.manager.create_card("John Doe", Decimal('-10.00'))

        assert self.manager.list_cards() == []

    def test_create_card_with_non_numeric_balance(self):
        with pytest.raises(InvalidAmountError):
            self.manager.create_card("John Doe", "ten dollars")

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_create_card_with_blank_name(self, name):
        with pytest.raises(InvalidCardholderError):
            self.manager.create_card(name, Decimal('10.00'))

    def test_get_unknown_card(self):
        assert self.manager.get_card("missing") is None

    def test_list_cards(self):
        alice = self.manager.create_card("Alice", Decimal('100.00'))
        bob = self.manager.create_card("Bob", Decimal('200.00'))

        cards = self.manager.list_cards()

        assert [c.id for c in cards] == [alice.id, bob.id]

    def test_spend_and_top_up_delegate_to_engine(self):
        card = self.manager.create_card("Alice", Decimal('100.00'))

        after_spend = self.manager.spend(card.id, Decimal('30.00'))
        after_top_up = self.manager.top_up(card.id, "5.50")

        assert after_spend.balance == Decimal('70.00')
        assert after_top_up.balance == Decimal('75.50')
        assert after_top_up.version == 3

    def test_list_transactions_for_unknown_card(self):
        with pytest.raises(CardNotFoundError):
            self.manager.list_transactions("missing")
