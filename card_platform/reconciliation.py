"""
Ledger Reconciliation

Re-derives each card balance from its opening balance and ledger entries
and compares it with the stored balance. Reports only; never repairs.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Any, Dict, List

from .amounts import exact_add, exact_subtract
from .cards import Card, CardStore
from .ledger import LedgerStore, TransactionType
from .errors import CardNotFoundError
from .logging_config import get_logger, log_card_event


@dataclass(frozen=True)
class ReconciliationReport:
    """Stored balance versus ledger-derived balance for one card"""
    card_id: str
    initial_balance: Decimal
    stored_balance: Decimal
    ledger_balance: Decimal
    entry_count: int
    spend_count: int
    topup_count: int

    @property
    def consistent(self) -> bool:
        return self.stored_balance == self.ledger_balance

    @property
    def discrepancy(self) -> Decimal:
        return exact_subtract(self.stored_balance, self.ledger_balance)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "card_id": self.card_id,
            "initial_balance": str(self.initial_balance),
            "stored_balance": str(self.stored_balance),
            "ledger_balance": str(self.ledger_balance),
            "discrepancy": str(self.discrepancy),
            "entry_count": self.entry_count,
            "spend_count": self.spend_count,
            "topup_count": self.topup_count,
            "consistent": self.consistent
        }


class LedgerReconciler:
    def __init__(self, card_store: CardStore, ledger_store: LedgerStore):
        self.card_store = card_store
        self.ledger_store = ledger_store
        self.logger = get_logger("card_platform.reconciliation")

    def reconcile(self, card_id: str) -> ReconciliationReport:
        """
        Fold the card's ledger onto its opening balance

        Raises:
            CardNotFoundError: If the card does not exist
        """
        card = self.card_store.get(card_id)
        if card is None:
            raise CardNotFoundError(card_id)
        return self._reconcile_card(card)

    def reconcile_all(self) -> List[ReconciliationReport]:
        return [self._reconcile_card(card) for card in self.card_store.list_all()]

    def _reconcile_card(self, card: Card) -> ReconciliationReport:
        entries = self.ledger_store.query_by_card_key(card.id)

        ledger_balance = card.initial_balance
        spend_count = 0
        for entry in entries:
            ledger_balance = exact_add(ledger_balance, entry.signed_amount)
            if entry.transaction_type == TransactionType.SPEND:
                spend_count += 1

        report = ReconciliationReport(
            card_id=card.id,
            initial_balance=card.initial_balance,
            stored_balance=card.balance,
            ledger_balance=ledger_balance,
            entry_count=len(entries),
            spend_count=spend_count,
            topup_count=len(entries) - spend_count
        )

        if not report.consistent:
            log_card_event(
                self.logger, "error", "Card balance does not match its ledger",
                card_id=card.id, action="reconcile",
                stored_balance=str(report.stored_balance),
                ledger_balance=str(report.ledger_balance),
                discrepancy=str(report.discrepancy),
                entry_count=report.entry_count
            )
        return report
