"""GET /api/dashboard - Monthly cashback, simulated SOL position and staking"""

import time
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from cashback_tracker.api.dependencies import (
    get_live_price_service,
    get_price_resolver,
    get_request_id,
    get_settings_repo,
    get_today,
    get_transaction_repo,
)
from cashback_tracker.api.v1.schemas import (
    CashbackSchema,
    DashboardResponse,
    PeriodSchema,
    SolSchema,
    SpendingSchema,
    StakingSchema,
    StakingToDateSchema,
)
from cashback_tracker.domain.dashboard import build_dashboard, required_price_dates
from cashback_tracker.domain.exceptions import InvalidPeriodError
from cashback_tracker.infrastructure.observability.logging import log_dashboard_computed
from cashback_tracker.infrastructure.observability.metrics import price_skipped_counter
from cashback_tracker.infrastructure.pricing import HistoricalPriceResolver, LivePriceService
from cashback_tracker.infrastructure.storage.repositories import SettingsRepository, TransactionRepository
from cashback_tracker.utils.date_utils import resolve_period

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    request: Request,
    year: Optional[int] = Query(None, description="Calendar year, defaults to current"),
    month: Optional[int] = Query(None, description="Month 1-12, defaults to current"),
    today: date = Depends(get_today),
    repo: TransactionRepository = Depends(get_transaction_repo),
    settings_repo: SettingsRepository = Depends(get_settings_repo),
    resolver: HistoricalPriceResolver = Depends(get_price_resolver),
    live_prices: LivePriceService = Depends(get_live_price_service),
):
    """
    Monthly dashboard.

    Flow:
    1. Load settings and all transactions
    2. Resolve historical prices for every date the aggregation needs
    3. Resolve today's live price for valuing staking rewards
    4. Aggregate (pure computation)

    Purchases without a historical price are skipped and counted, not failed.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        year, month = resolve_period(year, month, today)
    except InvalidPeriodError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        reward_settings = settings_repo.get()
        transactions = repo.list_all()

        prices = await resolver.resolve_many(required_price_dates(transactions, year, month, today))
        today_price = await live_prices.current_price_or_none()

        summary = build_dashboard(
            transactions,
            year,
            month,
            reward_settings,
            price_for=prices.get,
            today=today,
            today_price=today_price,
        )

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    skipped = summary.sol.skipped_count
    if skipped:
        price_skipped_counter.inc(skipped)
    duration_ms = (time.time() - start_time) * 1000
    log_dashboard_computed(request_id, year, month, summary.count, skipped, duration_ms)

    return DashboardResponse(
        period=PeriodSchema(year=summary.year, month=summary.month, label=summary.label),
        spending=SpendingSchema(count=summary.count, totalSpent=summary.total_spent),
        cashback=CashbackSchema(rate=summary.cashback_rate, totalCashbackUSD=summary.total_cashback_usd),
        sol=SolSchema(
            totalSOL=summary.sol.total_sol,
            totalCashbackUSD=summary.sol.total_cashback_usd,
            avgPriceUSD=summary.sol.avg_price_usd,
            pricedCount=summary.sol.priced_count,
            skippedCount=summary.sol.skipped_count,
        ),
        staking=StakingSchema(
            apr=summary.staking.apr,
            stakedSOL=summary.staking.staked_sol,
            estMonthlyRewardSOL=summary.staking.est_monthly_reward_sol,
            estYearlyRewardSOL=summary.staking.est_yearly_reward_sol,
        ),
        stakingToDate=StakingToDateSchema(
            asOf=summary.staking_to_date.as_of,
            earnedSOL=summary.staking_to_date.earned_sol,
            earnedUSD=summary.staking_to_date.earned_usd,
            priceUSD=summary.staking_to_date.price_usd,
            skippedCount=summary.staking_to_date.skipped_count,
        ),
    )
