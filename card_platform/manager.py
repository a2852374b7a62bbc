"""
Card Management Module

Service facade used by the request layer: card creation and lookup, the
balance mutations, and transaction history.
"""

from typing import Any, List, Optional

from .amounts import require_non_negative
from .cards import Card, CardStore
from .ledger import LedgerStore, Transaction
from .engine import BalanceMutationEngine
from .errors import CardNotFoundError, InvalidCardholderError
from .logging_config import get_logger, log_card_event


class CardManager:
    """
    Manages card lifecycle and delegates balance changes to the engine
    """

    def __init__(
        self,
        card_store: CardStore,
        ledger_store: LedgerStore,
        engine: BalanceMutationEngine
    ):
        self.card_store = card_store
        self.ledger_store = ledger_store
        self.engine = engine
        self.logger = get_logger("card_platform.cards")

    def create_card(self, cardholder_name: str, initial_balance: Any) -> Card:
        """
        Create a new virtual card with an initial balance

        Args:
            cardholder_name: Name of the cardholder
            initial_balance: Opening balance, zero or more

        Returns:
            Created Card at version 1

        Raises:
            InvalidCardholderError: If the name is blank
            InvalidAmountError: If the balance is negative or not a number
        """
        if not isinstance(cardholder_name, str) or not cardholder_name.strip():
            raise InvalidCardholderError("Cardholder name is required.")
        balance = require_non_negative(initial_balance, "Initial balance")

        card = self.card_store.insert(Card.new(cardholder_name.strip(), balance))

        log_card_event(
            self.logger, "info", "Card created",
            card_id=card.id, action="create_card",
            initial_balance=str(balance)
        )
        return card

    def get_card(self, card_id: str) -> Optional[Card]:
        """Get a card by ID"""
        return self.card_store.get(card_id)

    def list_cards(self) -> List[Card]:
        return self.card_store.list_all()

    def spend(self, card_id: str, amount: Any) -> Card:
        return self.engine.spend(card_id, amount)

    def top_up(self, card_id: str, amount: Any) -> Card:
        return self.engine.top_up(card_id, amount)

    def list_transactions(self, card_id: str) -> List[Transaction]:
        """
        Transaction history for a card in creation order

        Raises:
            CardNotFoundError: If the card does not exist
        """
        if self.card_store.get(card_id) is None:
            raise CardNotFoundError(card_id)
        return self.ledger_store.query_by_card_key(card_id)
