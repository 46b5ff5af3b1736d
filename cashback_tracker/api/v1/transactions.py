"""POST/GET/DELETE /api/transactions - record and remove purchases"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from cashback_tracker.api.dependencies import get_request_id, get_settings_repo, get_transaction_repo
from cashback_tracker.api.v1.schemas import DeleteTransactionResponse, TransactionCreate, TransactionResponse
from cashback_tracker.domain.cashback import calculate_cashback
from cashback_tracker.domain.exceptions import TransactionNotFoundError
from cashback_tracker.infrastructure.observability.logging import log_transaction_created, log_transaction_deleted
from cashback_tracker.infrastructure.observability.metrics import (
    record_transaction_created,
    transactions_deleted_counter,
)
from cashback_tracker.infrastructure.storage.repositories import SettingsRepository, TransactionRepository
from cashback_tracker.utils.date_utils import parse_iso_date

router = APIRouter()


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request_body: TransactionCreate,
    request: Request,
    repo: TransactionRepository = Depends(get_transaction_repo),
    settings_repo: SettingsRepository = Depends(get_settings_repo),
):
    """
    Record a purchase.

    The whole transaction list is rewritten (temp file, then rename).
    """
    request_id = get_request_id(request)

    try:
        transaction = repo.append(
            txn_date=parse_iso_date(request_body.date),
            description=request_body.description,
            amount=request_body.amount,
            category=request_body.category,
        )
        cashback = calculate_cashback(transaction.amount, settings_repo.get().cashback_rate)
    except Exception as e:
        logging.error(f"Failed to create transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_transaction_created(transaction.category, cashback)
    log_transaction_created(request_id, transaction.id, transaction.amount, transaction.category)

    return TransactionResponse(**transaction.to_dict())


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(repo: TransactionRepository = Depends(get_transaction_repo)):
    """All purchases in insertion order"""
    return [TransactionResponse(**t.to_dict()) for t in repo.list_all()]


@router.delete("/transactions/{transaction_id}", response_model=DeleteTransactionResponse)
def delete_transaction(
    transaction_id: str,
    request: Request,
    repo: TransactionRepository = Depends(get_transaction_repo),
):
    """Delete one purchase by id; a second delete of the same id is a 404"""
    try:
        repo.delete(transaction_id)
    except TransactionNotFoundError:
        raise HTTPException(status_code=404, detail="Transaction not found")

    transactions_deleted_counter.inc()
    log_transaction_deleted(get_request_id(request), transaction_id)
    return DeleteTransactionResponse(deletedId=transaction_id)
