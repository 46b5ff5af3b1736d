"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PriceAPIError(DomainException):
    """Price API returned an error or is unavailable"""

    pass


class LivePriceUnavailableError(DomainException):
    """Live price could not be fetched and no previous value exists"""

    pass


class InvalidPeriodError(DomainException):
    """Year/month query is outside the supported range"""

    pass


class TransactionNotFoundError(DomainException):
    """No transaction with the given id"""

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction not found: {transaction_id}")
        self.transaction_id = transaction_id


class CategoryNotFoundError(DomainException):
    """Category does not exist"""

    pass


class CategoryExistsError(DomainException):
    """Category already exists"""

    pass


class CategoryInUseError(DomainException):
    """Category is referenced by at least one transaction"""

    def __init__(self, name: str, usage_count: int):
        super().__init__(f"Category '{name}' is used by {usage_count} transaction(s)")
        self.name = name
        self.usage_count = usage_count


class ProtectedCategoryError(DomainException):
    """Built-in category cannot be removed"""

    pass
