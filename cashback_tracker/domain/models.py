"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

DEFAULT_CATEGORY = "Uncategorized"


@dataclass
class Transaction:
    """Recorded purchase"""

    id: str
    date: date
    description: str
    amount: float
    category: str = DEFAULT_CATEGORY

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """
        Build a transaction from its persisted JSON form.

        Raises:
            KeyError, ValueError, TypeError: On missing or malformed fields
        """
        amount = data["amount"]
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise TypeError(f"amount must be a number, got {type(amount).__name__}")
        if amount <= 0:
            raise ValueError(f"amount must be positive, got {amount}")

        return cls(
            id=str(data["id"]),
            date=date.fromisoformat(data["date"]),
            description=str(data["description"]),
            amount=float(amount),
            category=data.get("category") or DEFAULT_CATEGORY,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "description": self.description,
            "category": self.category,
            "amount": self.amount,
        }


@dataclass
class RewardSettings:
    """Cashback and staking parameters"""

    cashback_rate: float
    staking_apr: float


@dataclass
class PriceQuote:
    """Historical unit price for one asset on one day"""

    symbol: str
    date: date
    price_usd: float
    source: str  # "cache" or "api"


@dataclass
class LivePrice:
    """Current unit price with freshness information"""

    symbol: str
    price_usd: float
    as_of: datetime
    stale: bool
    source: str  # "cache" or "api"


@dataclass
class LivePriceCache:
    """Last fetched live price; empty until the first successful fetch"""

    value: Optional[float] = None
    timestamp: Optional[datetime] = None

    def is_fresh(self, now: datetime, ttl_seconds: float) -> bool:
        if self.value is None or self.timestamp is None:
            return False
        return (now - self.timestamp).total_seconds() < ttl_seconds


@dataclass
class TransactionLine:
    """Transaction with its computed cashback"""

    transaction: Transaction
    cashback: float


@dataclass
class MonthlyReport:
    """Spend and cashback totals for one calendar month"""

    year: int
    month: int
    label: str
    total_spent: float
    total_cashback: float
    count: int
    category_totals: Dict[str, float]
    lines: List[TransactionLine] = field(default_factory=list)


@dataclass
class SolPosition:
    """Cashback converted to SOL at each purchase date's price"""

    total_sol: float
    total_cashback_usd: float
    avg_price_usd: Optional[float]
    priced_count: int
    skipped_count: int


@dataclass
class StakingProjection:
    """Estimated staking rewards for the month's simulated position"""

    apr: float
    staked_sol: float
    est_monthly_reward_sol: float
    est_yearly_reward_sol: float


@dataclass
class StakingToDate:
    """Time-weighted staking rewards accrued up to today"""

    as_of: date
    earned_sol: float
    earned_usd: float
    price_usd: Optional[float]
    skipped_count: int


@dataclass
class DashboardSummary:
    """Output of the monthly dashboard aggregation"""

    year: int
    month: int
    label: str
    count: int
    total_spent: float
    cashback_rate: float
    total_cashback_usd: float
    sol: SolPosition
    staking: StakingProjection
    staking_to_date: StakingToDate
