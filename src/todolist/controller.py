"""Todo list state - the in-memory mirror of the remote collection.

Every mutation is written to the store first and only reflected in memory
once the write succeeds. Mutations are keyed by todo id, never by position.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, tzinfo
from enum import Enum
from typing import Callable

from .core.todos import Todo, TodoFilter, TodoSummary, apply_filter, parse_filter, sort_by_created, summarize
from .ports.document_store import DocumentStore, StoreError

logger = logging.getLogger(__name__)


class LoadState(Enum):
    """Initial load progress."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class TodoListState:
    """Published view state."""

    original: tuple[Todo, ...] = ()
    filtered: tuple[Todo, ...] = ()
    filter: TodoFilter = TodoFilter.ALL
    load_state: LoadState = LoadState.IDLE


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a controller operation."""

    ok: bool
    todo: Todo | None = None
    error: str | None = None

    @classmethod
    def failure(cls, error: str, todo: Todo | None = None) -> "OperationResult":
        return cls(ok=False, todo=todo, error=error)


Listener = Callable[[TodoListState], None]


class TodoListController:
    """
    Owns the todo list view and mediates every write to the document store.

    Not safe for concurrent use: an operation started before another one
    finishes works from whatever `original` holds at that moment.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str = "todos",
        tz: tzinfo | None = None,
        todo_filter: TodoFilter = TodoFilter.ALL,
        as_of: Callable[[], date] | None = None,
    ):
        self.store = store
        self.collection = collection
        self.tz = tz
        self._as_of = as_of
        self._state = TodoListState(filter=todo_filter)
        self._listeners: list[Listener] = []

    @property
    def state(self) -> TodoListState:
        return self._state

    @property
    def original(self) -> tuple[Todo, ...]:
        return self._state.original

    @property
    def filtered(self) -> tuple[Todo, ...]:
        return self._state.filtered

    @property
    def current_filter(self) -> TodoFilter:
        return self._state.filter

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with every new state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: TodoListState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"State listener {listener!r} failed: {e}")

    def _today(self) -> date | None:
        return self._as_of() if self._as_of else None

    def _filter(self, selector: TodoFilter, todos: tuple[Todo, ...]) -> tuple[Todo, ...] | None:
        filtered = apply_filter(selector, list(todos), as_of=self._today(), tz=self.tz)
        return None if filtered is None else tuple(filtered)

    def _reflect(self, original: tuple[Todo, ...]) -> None:
        """Publish a new original list with the current filter re-applied."""
        filtered = self._filter(self._state.filter, original)
        if filtered is None:
            filtered = self._state.filtered
        self._publish(replace(self._state, original=original, filtered=filtered))

    def _index_of(self, todo_id: str) -> int | None:
        for i, todo in enumerate(self._state.original):
            if todo.id == todo_id:
                return i
        return None

    # ============== Queries ==============

    def get(self, todo_id: str) -> Todo | None:
        """Todo with this exact id, if present."""
        index = self._index_of(todo_id)
        return None if index is None else self._state.original[index]

    def find(self, prefix: str) -> Todo:
        """
        Resolve an id or unique id prefix.

        Raises KeyError if nothing matches or the prefix is blank, and
        ValueError if the prefix is ambiguous.
        """
        prefix = prefix.strip()
        if not prefix:
            raise KeyError(prefix)
        exact = self.get(prefix)
        if exact:
            return exact
        matches = [t for t in self._state.original if t.id and t.id.startswith(prefix)]
        if not matches:
            raise KeyError(prefix)
        if len(matches) > 1:
            raise ValueError(f"Ambiguous id prefix '{prefix}' matches {len(matches)} todos")
        return matches[0]

    def summary(self) -> TodoSummary:
        return summarize(list(self._state.original), as_of=self._today(), tz=self.tz)

    # ============== Operations ==============

    def load(self) -> OperationResult:
        """Fetch the whole collection, newest first."""
        self._publish(replace(self._state, load_state=LoadState.LOADING))

        try:
            documents = self.store.list_all(self.collection)
            todos = tuple(sort_by_created([Todo.from_document(f, i) for f, i in documents]))
        except (StoreError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to load {self.collection}: {e}")
            self._publish(replace(self._state, load_state=LoadState.FAILED))
            return OperationResult.failure(str(e))

        filtered = self._filter(self._state.filter, todos)
        self._publish(
            replace(
                self._state,
                original=todos,
                filtered=todos if filtered is None else filtered,
                load_state=LoadState.LOADED,
            )
        )
        logger.info(f"Loaded {len(todos)} todos from {self.collection}")
        return OperationResult(ok=True)

    def add(self, todo: Todo) -> OperationResult:
        """Persist a new todo and put it at the top of the list."""
        if todo.is_persisted:
            return OperationResult.failure(f"Todo {todo.id} is already stored", todo)

        try:
            doc_id = self.store.create_document(self.collection, todo.to_fields())
        except StoreError as e:
            logger.error(f"Failed to add todo: {e}")
            return OperationResult.failure(str(e), todo)

        added = replace(todo, id=doc_id)
        self._reflect((added,) + self._state.original)
        logger.info(f"Added todo {doc_id}")
        return OperationResult(ok=True, todo=added)

    def complete(self, todo_id: str) -> OperationResult:
        """Mark a todo completed."""
        return self._set_completed(todo_id, True)

    def undo(self, todo_id: str) -> OperationResult:
        """Mark a todo not completed."""
        return self._set_completed(todo_id, False)

    def _set_completed(self, todo_id: str, completed: bool) -> OperationResult:
        if self._index_of(todo_id) is None:
            return OperationResult.failure(f"Todo {todo_id} not found")

        updated = self.get(todo_id).with_completed(completed)
        try:
            self.store.put_document(self.collection, todo_id, updated.to_fields())
        except StoreError as e:
            logger.error(f"Failed to update todo {todo_id}: {e}")
            return OperationResult.failure(str(e), updated)

        # Position looked up again after the write
        index = self._index_of(todo_id)
        if index is None:
            logger.warning(f"Todo {todo_id} vanished during update")
            return OperationResult.failure(f"Todo {todo_id} not found", updated)
        original = list(self._state.original)
        original[index] = updated
        self._reflect(tuple(original))
        return OperationResult(ok=True, todo=updated)

    def delete(self, todo_id: str) -> OperationResult:
        """Delete a todo."""
        todo = self.get(todo_id)
        if todo is None:
            return OperationResult.failure(f"Todo {todo_id} not found")

        try:
            self.store.delete_document(self.collection, todo_id)
        except StoreError as e:
            logger.error(f"Failed to delete todo {todo_id}: {e}")
            return OperationResult.failure(str(e), todo)

        self._reflect(tuple(t for t in self._state.original if t.id != todo_id))
        logger.info(f"Deleted todo {todo_id}")
        return OperationResult(ok=True, todo=todo)

    def set_filter(self, selector) -> TodoListState:
        """
        User-driven filter change.

        Unrecognized selectors leave the view and the current filter as they are.
        """
        todo_filter = parse_filter(selector)
        if todo_filter is None:
            logger.warning(f"Ignoring unknown filter: {selector!r}")
            return self._state

        filtered = self._filter(todo_filter, self._state.original)
        self._publish(replace(self._state, filter=todo_filter, filtered=filtered))
        return self._state
