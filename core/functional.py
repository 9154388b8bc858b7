from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from core.domain import Budget, ExpenseError, ExpenseRecord, NOTE_MAX_LENGTH

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):
    """A value that may be absent.

    Used wherever "not set" must stay distinct from zero, e.g. the budget of a
    period or the remaining budget derived from it.
    """

    @staticmethod
    def of(value: Optional[T]) -> 'Maybe[T]':
        if isinstance(value, Maybe):
            return value
        return Nothing() if value is None else Some(value)

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()

    def to_optional(self) -> Optional[T]:
        return self.get_or_else(None)


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value

    def __hash__(self) -> int:
        return hash(("Some", self._value))


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)

    def __hash__(self) -> int:
        return hash("Nothing")


class Either(Generic[E, T], ABC):
    """Right holds a validated value, Left holds an error payload."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def _error(code: str, field: str, message: str) -> dict:
    return {"error": code, "field": field, "message": message}


def validate_expense_input(raw: Mapping[str, Any], owner_id: str) -> Either[dict, ExpenseRecord]:
    """Turn raw form values into an ExpenseRecord, or an error payload.

    Checks run field by field and stop at the first failure, mirroring what
    the expense form reports to the user.
    """
    if raw.get("amount") in (None, ""):
        return Left(_error("amount_required", "amount", "Amount is required"))
    if raw.get("date") in (None, ""):
        return Left(_error("date_required", "date", "A date is required"))
    note = raw.get("note") or ""
    if len(note) > NOTE_MAX_LENGTH:
        return Left(_error(
            "note_too_long", "note",
            f"Note must be {NOTE_MAX_LENGTH} characters or less",
        ))
    try:
        record = ExpenseRecord(
            owner_id=owner_id,
            amount=raw["amount"],
            category=raw.get("category") or "Other",
            occurred_on=raw["date"],
            note=note,
            id=raw.get("id"),
        )
    except ExpenseError as e:
        return Left(_error("invalid_input", "expense", str(e)))
    return Right(record)


def validate_budget_input(owner_id: str, period_key: str, limit: Any) -> Either[dict, Budget]:
    try:
        return Right(Budget(owner_id=owner_id, period_key=period_key, limit=limit))
    except ExpenseError as e:
        return Left(_error("invalid_input", "limit", str(e)))

