"""Functional core - pure business logic with no I/O."""

from .todos import (
    Todo,
    TodoFilter,
    TodoSummary,
    apply_filter,
    calendar_day,
    parse_filter,
    sort_by_created,
    summarize,
)

__all__ = [
    "Todo",
    "TodoFilter",
    "TodoSummary",
    "apply_filter",
    "calendar_day",
    "parse_filter",
    "sort_by_created",
    "summarize",
]
