"""Pydantic schemas for API request/response validation"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from cashback_tracker.utils.date_utils import parse_iso_date


class TransactionCreate(BaseModel):
    """Request body for POST /api/transactions"""

    date: str = Field(..., description="Purchase date, YYYY-MM-DD")
    description: str = Field(..., description="What was bought")
    category: Optional[str] = Field(None, description="Category name, defaults to Uncategorized")
    amount: float = Field(..., gt=0, strict=True, description="Purchase amount in USD, at most 2 decimals")

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        parse_iso_date(value)
        return value

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("description is required and must be a non-empty string")
        return value

    @field_validator("category")
    @classmethod
    def normalize_category(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("amount must be a finite number")
        if Decimal(str(value)).as_tuple().exponent < -2:
            raise ValueError("amount must have at most 2 decimal places")
        return value


class TransactionResponse(BaseModel):
    """Stored purchase"""

    id: str
    date: str
    description: str
    category: str
    amount: float


class DeleteTransactionResponse(BaseModel):
    """Response for DELETE /api/transactions/{id}"""

    ok: bool = True
    deletedId: str


class MonthlyTotals(BaseModel):
    spent: float
    cashback: float
    count: int


class MonthlyTransaction(TransactionResponse):
    """Purchase with its cashback"""

    cashback: float


class MonthlyResponse(BaseModel):
    """Response for GET /api/monthly"""

    year: int
    month: int
    label: str
    totals: MonthlyTotals
    categorySummary: Dict[str, float]
    transactions: List[MonthlyTransaction]


class PeriodSchema(BaseModel):
    year: int
    month: int
    label: str


class SpendingSchema(BaseModel):
    count: int
    totalSpent: float


class CashbackSchema(BaseModel):
    rate: float
    totalCashbackUSD: float


class SolSchema(BaseModel):
    totalSOL: float
    totalCashbackUSD: float
    avgPriceUSD: Optional[float]
    pricedCount: int
    skippedCount: int


class StakingSchema(BaseModel):
    apr: float
    stakedSOL: float
    estMonthlyRewardSOL: float
    estYearlyRewardSOL: float


class StakingToDateSchema(BaseModel):
    asOf: date
    earnedSOL: float
    earnedUSD: float
    priceUSD: Optional[float]
    skippedCount: int


class DashboardResponse(BaseModel):
    """Response for GET /api/dashboard"""

    period: PeriodSchema
    spending: SpendingSchema
    cashback: CashbackSchema
    sol: SolSchema
    staking: StakingSchema
    stakingToDate: StakingToDateSchema


class PriceResponse(BaseModel):
    """Response for GET /api/price/{symbol}"""

    symbol: str
    date: str
    priceUSD: float
    source: str


class LivePriceResponse(BaseModel):
    """Response for GET /api/price/{symbol}/live"""

    symbol: str
    priceUSD: float
    asOf: datetime
    stale: bool
    source: str


class SettingsResponse(BaseModel):
    """Response for GET /api/settings"""

    cashbackRate: float
    stakingAPR: float


class CategoryCreate(BaseModel):
    """Request body for POST /api/categories"""

    name: str = Field(..., max_length=50)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name is required and must be a non-empty string")
        return value


class CategoryResponse(BaseModel):
    name: str


class CategoryListResponse(BaseModel):
    categories: List[str]


class DeleteCategoryResponse(BaseModel):
    ok: bool = True
    deleted: str
