"""
Card endpoints

Routes are plain ``def`` handlers: FastAPI runs them in its threadpool, so
the engine's blocking retry backoff only holds the request's own worker.
"""

from typing import List
from fastapi import APIRouter, HTTPException, Depends, status

from .system import CardPlatform, get_card_platform
from .schemas import CreateCardRequest, AmountRequest, CardModel, TransactionModel
from ..errors import CardPlatformError, CardNotFoundError, ErrorCategory


router = APIRouter()


STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.BUSINESS_RULE: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.FATAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _http_error(error: CardPlatformError) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_CATEGORY[error.category],
        detail=error.to_dict()
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CardModel)
def create_card(
    request: CreateCardRequest,
    platform: CardPlatform = Depends(get_card_platform)
):
    """Create a new virtual card"""
    try:
        card = platform.card_manager.create_card(request.cardholder_name, request.initial_balance)
    except CardPlatformError as e:
        raise _http_error(e)
    return CardModel.from_card(card)


@router.get("", response_model=List[CardModel])
def list_cards(platform: CardPlatform = Depends(get_card_platform)):
    """List all cards"""
    return [CardModel.from_card(card) for card in platform.card_manager.list_cards()]


@router.get("/{card_id}", response_model=CardModel)
def get_card(
    card_id: str,
    platform: CardPlatform = Depends(get_card_platform)
):
    """Get card details"""
    card = platform.card_manager.get_card(card_id)
    if not card:
        raise _http_error(CardNotFoundError(card_id))
    return CardModel.from_card(card)


@router.post("/{card_id}/spend", response_model=CardModel)
def spend(
    card_id: str,
    request: AmountRequest,
    platform: CardPlatform = Depends(get_card_platform)
):
    """Spend from a card"""
    try:
        card = platform.card_manager.spend(card_id, request.amount)
    except CardPlatformError as e:
        raise _http_error(e)
    return CardModel.from_card(card)


@router.post("/{card_id}/topup", response_model=CardModel)
def top_up(
    card_id: str,
    request: AmountRequest,
    platform: CardPlatform = Depends(get_card_platform)
):
    """Add funds to a card"""
    try:
        card = platform.card_manager.top_up(card_id, request.amount)
    except CardPlatformError as e:
        raise _http_error(e)
    return CardModel.from_card(card)


@router.get("/{card_id}/transactions", response_model=List[TransactionModel])
def get_card_transactions(
    card_id: str,
    platform: CardPlatform = Depends(get_card_platform)
):
    """Get transaction history for a card"""
    try:
        transactions = platform.card_manager.list_transactions(card_id)
    except CardPlatformError as e:
        raise _http_error(e)
    return [TransactionModel.from_transaction(txn) for txn in transactions]


@router.get("/{card_id}/reconciliation")
def reconcile_card(
    card_id: str,
    platform: CardPlatform = Depends(get_card_platform)
):
    """Compare the stored balance with the balance derived from the ledger"""
    try:
        report = platform.reconciler.reconcile(card_id)
    except CardPlatformError as e:
        raise _http_error(e)
    return report.to_dict()
