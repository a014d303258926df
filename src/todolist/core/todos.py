"""Pure todo domain logic - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone, tzinfo
from enum import Enum


class TodoFilter(Enum):
    """Which todos are visible in the filtered view."""

    ALL = "all"
    TODAY = "today"
    PAST = "past"
    COMPLETED = "completed"


def parse_filter(value) -> TodoFilter | None:
    """Map a string or enum member to a TodoFilter, None if unrecognized."""
    if isinstance(value, TodoFilter):
        return value
    if not isinstance(value, str):
        return None
    try:
        return TodoFilter(value.strip().lower())
    except ValueError:
        return None


def _parse_timestamp(value) -> datetime:
    """Accept datetime, ISO string, epoch seconds or a {"seconds": n} mapping."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, dict) and "seconds" in value:
        return datetime.fromtimestamp(value["seconds"], tz=timezone.utc)
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise ValueError(f"Invalid timestamp: {value!r}")


@dataclass
class Todo:
    """A to-do item mirrored from the document store."""

    id: str | None
    text: str
    expire_date: datetime
    created_date: datetime
    is_completed: bool = False

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def expire_day(self, tz: tzinfo | None = None) -> date:
        """Calendar day the todo expires on."""
        return calendar_day(self.expire_date, tz)

    def is_due_today(self, as_of: date | None = None, tz: tzinfo | None = None) -> bool:
        """Open and expiring today."""
        as_of = as_of or today(tz)
        return not self.is_completed and self.expire_day(tz) == as_of

    def is_past_due(self, as_of: date | None = None, tz: tzinfo | None = None) -> bool:
        """Open and expired before today."""
        as_of = as_of or today(tz)
        return not self.is_completed and self.expire_day(tz) < as_of

    def with_completed(self, completed: bool) -> "Todo":
        return replace(self, is_completed=completed)

    def to_fields(self) -> dict:
        """Document fields as stored remotely. The id is the document key, never a field."""
        return {
            "text": self.text,
            "expireDate": self.expire_date,
            "createdDate": self.created_date,
            "isCompleted": self.is_completed,
        }

    @classmethod
    def from_document(cls, fields: dict, doc_id: str) -> "Todo":
        """Create Todo from a stored document."""
        return cls(
            id=doc_id,
            text=fields.get("text", ""),
            expire_date=_parse_timestamp(fields["expireDate"]),
            created_date=_parse_timestamp(fields["createdDate"]),
            is_completed=bool(fields.get("isCompleted", False)),
        )

    @classmethod
    def create(cls, text: str, expire_date: datetime, now: datetime | None = None) -> "Todo":
        """New, not yet persisted todo."""
        text = text.strip()
        if not text:
            raise ValueError("Todo text cannot be empty")
        return cls(
            id=None,
            text=text,
            expire_date=expire_date,
            created_date=now or datetime.now(timezone.utc),
        )


@dataclass(frozen=True)
class TodoSummary:
    """Counts over the full todo list."""

    total: int
    completed: int
    pending: int
    due_today: int
    past_due: int


def today(tz: tzinfo | None = None) -> date:
    """Current calendar day in tz (local time when tz is None)."""
    return datetime.now(tz).date()


def calendar_day(dt: datetime, tz: tzinfo | None = None) -> date:
    """
    Calendar day of a timestamp.

    Naive datetimes are taken as wall-clock time. Aware ones are converted
    to tz first (the local zone when tz is None).
    """
    if dt.tzinfo is None:
        return dt.date()
    return dt.astimezone(tz).date()


def apply_filter(
    selector: TodoFilter,
    todos: list[Todo],
    as_of: date | None = None,
    tz: tzinfo | None = None,
) -> list[Todo] | None:
    """
    Filter todos for the given selector, preserving order.

    Returns None for an unrecognized selector so callers keep their
    current view. Pure function - no I/O.
    """
    as_of = as_of or today(tz)

    match parse_filter(selector):
        case TodoFilter.ALL:
            return list(todos)
        case TodoFilter.TODAY:
            return [t for t in todos if t.is_due_today(as_of, tz)]
        case TodoFilter.PAST:
            return [t for t in todos if t.is_past_due(as_of, tz)]
        case TodoFilter.COMPLETED:
            return [t for t in todos if t.is_completed]
        case _:
            return None


def sort_by_created(todos: list[Todo]) -> list[Todo]:
    """Newest first. Pure function - no I/O."""
    # timestamp() so naive and aware datetimes sort together
    return sorted(todos, key=lambda t: t.created_date.timestamp(), reverse=True)


def summarize(
    todos: list[Todo],
    as_of: date | None = None,
    tz: tzinfo | None = None,
) -> TodoSummary:
    """Count todos by state."""
    as_of = as_of or today(tz)
    completed = sum(1 for t in todos if t.is_completed)
    return TodoSummary(
        total=len(todos),
        completed=completed,
        pending=len(todos) - completed,
        due_today=sum(1 for t in todos if t.is_due_today(as_of, tz)),
        past_due=sum(1 for t in todos if t.is_past_due(as_of, tz)),
    )
