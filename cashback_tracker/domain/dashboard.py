"""Monthly dashboard aggregation - cashback, simulated SOL position, staking"""

from datetime import date
from typing import Callable, List, Optional, Sequence

from cashback_tracker.domain.cashback import calculate_cashback, filter_by_month, round2, round6, sum_spent
from cashback_tracker.domain.models import (
    DashboardSummary,
    RewardSettings,
    SolPosition,
    StakingProjection,
    StakingToDate,
    Transaction,
)
from cashback_tracker.utils.date_utils import days_between, month_label

PriceLookup = Callable[[date], Optional[float]]

DAYS_PER_YEAR = 365


def required_price_dates(
    transactions: Sequence[Transaction],
    year: int,
    month: int,
    today: date,
) -> List[date]:
    """
    Dates whose historical price the dashboard needs, in first-use order.

    Covers every transaction of the target month plus every transaction
    on or before today (for the to-date staking accrual).
    """
    needed: List[date] = []
    seen = set()
    for txn in filter_by_month(transactions, year, month) + [t for t in transactions if t.date <= today]:
        if txn.date not in seen:
            seen.add(txn.date)
            needed.append(txn.date)
    return needed


def simulate_sol_position(
    month_transactions: Sequence[Transaction],
    cashback_rate: float,
    price_for: PriceLookup,
) -> tuple[SolPosition, float]:
    """
    Convert each purchase's cashback into SOL at that day's price.

    Transactions without a price are skipped and counted, never valued at zero.

    Returns:
        (position, unrounded SOL total)
    """
    total_sol = 0.0
    total_cashback_usd = 0.0
    priced = 0
    skipped = 0

    for txn in month_transactions:
        cashback_usd = calculate_cashback(txn.amount, cashback_rate)
        price = price_for(txn.date)
        if not price:
            skipped += 1
            continue
        total_sol += cashback_usd / price
        total_cashback_usd += cashback_usd
        priced += 1

    # Guard divide-by-zero: no priced purchases means no average price
    avg_price = round2(total_cashback_usd / total_sol) if total_sol > 0 else None

    position = SolPosition(
        total_sol=round6(total_sol),
        total_cashback_usd=round2(total_cashback_usd),
        avg_price_usd=avg_price,
        priced_count=priced,
        skipped_count=skipped,
    )
    return position, total_sol


def project_staking(total_sol: float, apr: float) -> StakingProjection:
    staked = round6(total_sol)
    return StakingProjection(
        apr=apr,
        staked_sol=staked,
        est_monthly_reward_sol=round6(staked * apr / 12),
        est_yearly_reward_sol=round6(staked * apr),
    )


def accrue_staking_to_date(
    transactions: Sequence[Transaction],
    settings: RewardSettings,
    price_for: PriceLookup,
    today: date,
    today_price: Optional[float],
) -> StakingToDate:
    """
    Time-weighted staking rewards across ALL transactions up to today.

    Each purchase's SOL earns apr * days_staked / 365 from its purchase date.
    """
    earned_sol = 0.0
    skipped = 0

    for txn in transactions:
        if txn.date > today:
            continue
        price = price_for(txn.date)
        if not price:
            skipped += 1
            continue
        sol_bought = calculate_cashback(txn.amount, settings.cashback_rate) / price
        days_staked = days_between(txn.date, today)
        earned_sol += sol_bought * settings.staking_apr * days_staked / DAYS_PER_YEAR

    earned_usd = round2(earned_sol * today_price) if today_price else 0.0

    return StakingToDate(
        as_of=today,
        earned_sol=round6(earned_sol),
        earned_usd=earned_usd,
        price_usd=today_price,
        skipped_count=skipped,
    )


def build_dashboard(
    transactions: Sequence[Transaction],
    year: int,
    month: int,
    settings: RewardSettings,
    price_for: PriceLookup,
    today: date,
    today_price: Optional[float] = None,
) -> DashboardSummary:
    """
    Main entry point: aggregate spend, cashback, SOL position and staking.

    Steps run in a fixed order so results are reproducible:
    1. Filter to the target calendar month
    2. Spend and cashback totals
    3. Simulated SOL purchase per transaction at its date's price
    4. Staking projection for the month's position
    5. Cumulative staking accrual over all transactions up to today
    """
    month_txns = filter_by_month(transactions, year, month)

    total_spent = sum_spent(month_txns)
    total_cashback_usd = round2(total_spent * settings.cashback_rate)

    position, raw_sol = simulate_sol_position(month_txns, settings.cashback_rate, price_for)
    staking = project_staking(raw_sol, settings.staking_apr)
    to_date = accrue_staking_to_date(transactions, settings, price_for, today, today_price)

    return DashboardSummary(
        year=year,
        month=month,
        label=month_label(year, month),
        count=len(month_txns),
        total_spent=total_spent,
        cashback_rate=settings.cashback_rate,
        total_cashback_usd=total_cashback_usd,
        sol=position,
        staking=staking,
        staking_to_date=to_date,
    )
