"""GET /api/export/transactions.{csv,json} - Download all purchases"""

import csv
import io
import json

from fastapi import APIRouter, Depends
from starlette.responses import Response

from cashback_tracker.api.dependencies import get_settings_repo, get_transaction_repo
from cashback_tracker.domain.cashback import calculate_cashback
from cashback_tracker.infrastructure.storage.repositories import SettingsRepository, TransactionRepository

router = APIRouter()

CSV_COLUMNS = ["id", "date", "description", "category", "amount", "cashback"]


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get("/export/transactions.csv")
def export_csv(
    repo: TransactionRepository = Depends(get_transaction_repo),
    settings_repo: SettingsRepository = Depends(get_settings_repo),
):
    rate = settings_repo.get().cashback_rate
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS)
    writer.writeheader()
    for txn in repo.list_all():
        writer.writerow({**txn.to_dict(), "cashback": f"{calculate_cashback(txn.amount, rate):.2f}"})

    return Response(
        content=buffer.getvalue(),
        media_type="text/csv; charset=utf-8",
        headers=_attachment("transactions.csv"),
    )


@router.get("/export/transactions.json")
def export_json(repo: TransactionRepository = Depends(get_transaction_repo)):
    payload = [t.to_dict() for t in repo.list_all()]
    return Response(
        content=json.dumps(payload, indent=2, ensure_ascii=False),
        media_type="application/json",
        headers=_attachment("transactions.json"),
    )
