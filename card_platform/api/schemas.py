"""
Pydantic schemas for API requests and responses
"""

from typing import Union
from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

from ..cards import Card
from ..ledger import Transaction

# Strict members keep JSON booleans from coercing to 1 or 0
Amount = Union[StrictStr, StrictInt, StrictFloat]


class CreateCardRequest(BaseModel):
    cardholder_name: str
    initial_balance: Amount = Field(..., description="Decimal amount, preferably as string")


class AmountRequest(BaseModel):
    amount: Amount = Field(..., description="Decimal amount, preferably as string")


class CardModel(BaseModel):
    id: str
    cardholder_name: str
    balance: str
    created_at: str

    @classmethod
    def from_card(cls, card: Card) -> 'CardModel':
        return cls(
            id=card.id,
            cardholder_name=card.cardholder_name,
            balance=str(card.balance),
            created_at=card.created_at.isoformat()
        )


class TransactionModel(BaseModel):
    id: str
    card_id: str
    type: str
    amount: str
    created_at: str

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> 'TransactionModel':
        return cls(
            id=transaction.id,
            card_id=transaction.card_id,
            type=transaction.transaction_type.value,
            amount=str(transaction.amount),
            created_at=transaction.created_at.isoformat()
        )
