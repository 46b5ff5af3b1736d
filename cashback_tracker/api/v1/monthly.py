"""GET /api/monthly - Purchases and cashback for one calendar month"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from cashback_tracker.api.dependencies import get_settings_repo, get_today, get_transaction_repo
from cashback_tracker.api.v1.schemas import MonthlyResponse, MonthlyTotals, MonthlyTransaction
from cashback_tracker.domain.cashback import build_monthly_report
from cashback_tracker.domain.exceptions import InvalidPeriodError
from cashback_tracker.infrastructure.storage.repositories import SettingsRepository, TransactionRepository
from cashback_tracker.utils.date_utils import resolve_period

router = APIRouter()


@router.get("/monthly", response_model=MonthlyResponse)
def get_monthly(
    year: Optional[int] = Query(None, description="Calendar year, defaults to current"),
    month: Optional[int] = Query(None, description="Month 1-12, defaults to current"),
    today: date = Depends(get_today),
    repo: TransactionRepository = Depends(get_transaction_repo),
    settings_repo: SettingsRepository = Depends(get_settings_repo),
):
    """
    Monthly purchase table.

    Returns:
        Totals, per-category spend and every purchase of the month with its cashback
    """
    try:
        year, month = resolve_period(year, month, today)
    except InvalidPeriodError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report = build_monthly_report(repo.list_all(), year, month, settings_repo.get().cashback_rate)

    return MonthlyResponse(
        year=report.year,
        month=report.month,
        label=report.label,
        totals=MonthlyTotals(spent=report.total_spent, cashback=report.total_cashback, count=report.count),
        categorySummary=report.category_totals,
        transactions=[
            MonthlyTransaction(**line.transaction.to_dict(), cashback=line.cashback)
            for line in report.lines
        ],
    )
