import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

NOTE_MAX_LENGTH = 100
PERIOD_KEY_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


class ExpenseError(ValueError):
    """Base class for errors raised at the boundary of the core."""


class InvalidInput(ExpenseError):
    pass


class NotFound(ExpenseError):
    pass


class NotOwner(ExpenseError):
    pass


class UnknownLocale(ExpenseError):
    pass


class Category(str, Enum):
    FOOD = "Food"
    TRANSPORT = "Transport"
    CLOTHING = "Clothing"
    HOME = "Home"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Union[str, "Category"]) -> "Category":
        try:
            return cls(value)
        except ValueError:
            raise InvalidInput(f"Unknown category: {value!r}") from None


def to_decimal(value, field: str = "amount") -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"{field} is not a number: {value!r}") from None


def normalize_date(value: Union[date, datetime, str]) -> date:
    """Reduce a date-like value to a calendar day.

    Aware datetimes are shifted to UTC before the day is taken so a timezone
    offset never moves an expense into the neighbouring day.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise InvalidInput(f"Not an ISO date: {value!r}") from None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidInput(f"Not a date: {value!r}")


def parse_period_key(key: str) -> tuple[int, int]:
    match = PERIOD_KEY_RE.match(key or "")
    if not match:
        raise InvalidInput(f"Period key must look like YYYY-MM, got {key!r}")
    return int(match.group(1)), int(match.group(2))


def period_key_of(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


@dataclass(frozen=True)
class ExpenseRecord:
    owner_id: str
    amount: Decimal
    category: Category
    occurred_on: date
    note: str = ""
    id: Optional[str] = None

    def __post_init__(self):
        # frozen: normalized values go through object.__setattr__
        amount = to_decimal(self.amount)
        if not amount.is_finite() or amount <= 0:
            raise InvalidInput(f"Amount must be greater than 0, got {self.amount}")
        note = self.note or ""
        if len(note) > NOTE_MAX_LENGTH:
            raise InvalidInput(f"Note must be {NOTE_MAX_LENGTH} characters or less")
        if not self.owner_id:
            raise InvalidInput("Expense must belong to an owner")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "category", Category.parse(self.category))
        object.__setattr__(self, "occurred_on", normalize_date(self.occurred_on))
        object.__setattr__(self, "note", note)


@dataclass(frozen=True)
class Budget:
    owner_id: str
    period_key: str  # e.g. "2024-06"
    limit: Decimal

    def __post_init__(self):
        parse_period_key(self.period_key)
        limit = to_decimal(self.limit, "limit")
        if not limit.is_finite() or limit <= 0:
            raise InvalidInput(f"Budget limit must be greater than 0, got {self.limit}")
        object.__setattr__(self, "limit", limit)


@dataclass(frozen=True)
class Period:
    start: date
    end: date

    def __post_init__(self):
        object.__setattr__(self, "start", normalize_date(self.start))
        object.__setattr__(self, "end", normalize_date(self.end))
        if self.start > self.end:
            raise InvalidInput(f"Period start {self.start} is after end {self.end}")

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= normalize_date(day) <= self.end

    @classmethod
    def for_month(cls, period_key: str) -> "Period":
        year, month = parse_period_key(period_key)
        start = date(year, month, 1)
        if month == 12:
            end = date(year + 1, 1, 1) - timedelta(days=1)
        else:
            end = date(year, month + 1, 1) - timedelta(days=1)
        return cls(start, end)
