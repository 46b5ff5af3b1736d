"""Data access layer for transactions, settings, prices and categories"""

import logging
import uuid
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from cashback_tracker.config import settings
from cashback_tracker.domain.exceptions import (
    CategoryExistsError,
    CategoryInUseError,
    CategoryNotFoundError,
    ProtectedCategoryError,
    TransactionNotFoundError,
)
from cashback_tracker.domain.models import DEFAULT_CATEGORY, RewardSettings, Transaction
from cashback_tracker.infrastructure.storage.json_store import JsonDocument

logger = logging.getLogger(__name__)

TRANSACTIONS_FILE = "transactions.json"
SETTINGS_FILE = "settings.json"
PRICES_FILE = "prices.json"
CATEGORIES_FILE = "categories.json"

PROTECTED_CATEGORIES = ("Others", DEFAULT_CATEGORY)
SEED_CATEGORIES = [
    "Groceries",
    "Dining",
    "Transport",
    "Shopping",
    "Bills",
    "Entertainment",
    "Health",
    "Travel",
    "Others",
    DEFAULT_CATEGORY,
]


class TransactionRepository:
    """Repository for recorded purchases, persisted as one JSON array"""

    def __init__(self, data_dir: Path):
        self.document = JsonDocument(Path(data_dir) / TRANSACTIONS_FILE, list)

    def _load_raw(self) -> List[Any]:
        data = self.document.load()
        if not isinstance(data, list):
            logger.warning("Transactions file is not a list, treating as empty")
            return []
        return data

    def list_all(self) -> List[Transaction]:
        """All readable transactions in insertion order"""
        transactions = []
        for entry in self._load_raw():
            try:
                transactions.append(Transaction.from_dict(entry))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed transaction entry", extra={"error": str(e)})
        return transactions

    def list_for_month(self, year: int, month: int) -> List[Transaction]:
        return [t for t in self.list_all() if t.date.year == year and t.date.month == month]

    def append(
        self,
        txn_date: date,
        description: str,
        amount: float,
        category: Optional[str] = None,
    ) -> Transaction:
        """Create a transaction with a fresh id and rewrite the whole list"""
        transaction = Transaction(
            id=str(uuid.uuid4()),
            date=txn_date,
            description=description,
            amount=amount,
            category=category or DEFAULT_CATEGORY,
        )
        raw = self._load_raw()
        raw.append(transaction.to_dict())
        self.document.save(raw)
        return transaction

    def delete(self, transaction_id: str) -> str:
        """
        Remove exactly one entry by id, readable or not. Returns the id.

        Raises:
            TransactionNotFoundError: If no entry has this id (file untouched)
        """
        raw = self._load_raw()
        for index, entry in enumerate(raw):
            if isinstance(entry, dict) and str(entry.get("id")) == transaction_id:
                raw.pop(index)
                self.document.save(raw)
                return transaction_id
        raise TransactionNotFoundError(transaction_id)


class SettingsRepository:
    """Singleton reward settings with per-field defaults"""

    def __init__(self, data_dir: Path):
        self.document = JsonDocument(Path(data_dir) / SETTINGS_FILE, self.defaults_dict, repair=True)

    @staticmethod
    def defaults_dict() -> Dict[str, float]:
        return {
            "cashbackRate": settings.default_cashback_rate,
            "stakingAPR": settings.default_staking_apr,
        }

    @staticmethod
    def _valid_number(value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value

    def get(self) -> RewardSettings:
        defaults = self.defaults_dict()
        data = self.document.load()

        if not isinstance(data, dict):
            logger.warning("Settings file corrupted, rewriting defaults")
            self.document.save(defaults)
            data = defaults

        rate = data.get("cashbackRate")
        if not (self._valid_number(rate) and 0 <= rate <= 1):
            rate = defaults["cashbackRate"]

        apr = data.get("stakingAPR")
        if not (self._valid_number(apr) and apr >= 0):
            apr = defaults["stakingAPR"]

        return RewardSettings(cashback_rate=float(rate), staking_apr=float(apr))


class PriceCacheRepository:
    """Append-only historical prices keyed by symbol then ISO date"""

    def __init__(self, data_dir: Path):
        self.document = JsonDocument(Path(data_dir) / PRICES_FILE, self._empty)

    @staticmethod
    def _empty() -> Dict[str, Dict[str, float]]:
        return {settings.asset_symbol.lower(): {}}

    def _load(self) -> Dict[str, Any]:
        data = self.document.load()
        if not isinstance(data, dict):
            logger.warning("Price cache is not an object, using empty cache")
            return self._empty()
        return data

    def get(self, symbol: str, day: date) -> Optional[float]:
        prices = self._load().get(symbol.lower())
        if not isinstance(prices, dict):
            return None
        price = prices.get(day.isoformat())
        if isinstance(price, (int, float)) and not isinstance(price, bool) and price > 0:
            return float(price)
        return None

    def put(self, symbol: str, day: date, price: float) -> None:
        data = self._load()
        prices = data.get(symbol.lower())
        if not isinstance(prices, dict):
            prices = {}
            data[symbol.lower()] = prices
        prices[day.isoformat()] = price
        self.document.save(data)


class CategoryRepository:
    """User category list; Others and Uncategorized are always present"""

    def __init__(self, data_dir: Path):
        self.document = JsonDocument(Path(data_dir) / CATEGORIES_FILE, lambda: list(SEED_CATEGORIES))

    def _load_stored(self) -> List[str]:
        data = self.document.load()
        if not isinstance(data, list):
            logger.warning("Categories file is not a list, using defaults")
            return list(SEED_CATEGORIES)
        return [c.strip() for c in data if isinstance(c, str) and c.strip()]

    @staticmethod
    def _find(names: Sequence[str], name: str) -> Optional[str]:
        wanted = name.casefold()
        return next((n for n in names if n.casefold() == wanted), None)

    def list_all(self) -> List[str]:
        names: List[str] = []
        for name in self._load_stored() + list(PROTECTED_CATEGORIES):
            if self._find(names, name) is None:
                names.append(name)
        return names

    def add(self, name: str) -> str:
        """
        Raises:
            CategoryExistsError: If a category with this name exists (case-insensitive)
        """
        name = name.strip()
        if self._find(self.list_all(), name) is not None:
            raise CategoryExistsError(f"Category already exists: {name}")
        stored = self._load_stored()
        stored.append(name)
        self.document.save(stored)
        return name

    def delete(self, name: str, transactions: Sequence[Transaction]) -> str:
        """
        Raises:
            ProtectedCategoryError: For Others/Uncategorized
            CategoryNotFoundError: If no such category
            CategoryInUseError: If any transaction references it
        """
        if self._find(PROTECTED_CATEGORIES, name) is not None:
            raise ProtectedCategoryError(f"Category cannot be deleted: {name}")

        stored = self._load_stored()
        existing = self._find(stored, name)
        if existing is None:
            raise CategoryNotFoundError(f"Category not found: {name}")

        usage = sum(1 for t in transactions if t.category.casefold() == existing.casefold())
        if usage:
            raise CategoryInUseError(existing, usage)

        self.document.save([c for c in stored if c != existing])
        return existing


def bootstrap_data_dir(data_dir: Path) -> None:
    """Create the data directory and seed any missing data files"""
    Path(data_dir).mkdir(parents=True, exist_ok=True)
    TransactionRepository(data_dir).document.ensure()
    SettingsRepository(data_dir).document.ensure()
    PriceCacheRepository(data_dir).document.ensure()
    CategoryRepository(data_dir).document.ensure()
