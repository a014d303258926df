"""todolist CLI - the terminal front end for the todo list."""

import json
import logging
import sys
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfoNotFoundError

import click

from .app import build_controller
from .config import ViewPrefs, load_config
from .controller import OperationResult, TodoListController
from .core.todos import Todo, TodoFilter, today

FILTER_CHOICES = [f.value for f in TodoFilter]
SHORT_ID = 8


def _open_controller() -> TodoListController:
    """Build the controller from config and load the collection, or exit."""
    config = load_config()
    prefs = ViewPrefs.load()
    try:
        controller = build_controller(config, prefs)
    except (ValueError, ZoneInfoNotFoundError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    result = controller.load()
    if not result.ok:
        click.echo(f"Error: {result.error}", err=True)
        sys.exit(1)
    return controller


def _check(result: OperationResult) -> Todo:
    if not result.ok:
        click.echo(f"Error: {result.error}", err=True)
        sys.exit(1)
    return result.todo


def _resolve(controller: TodoListController, todo_id: str) -> Todo:
    try:
        return controller.find(todo_id)
    except KeyError:
        click.echo(f"Error: No todo with id '{todo_id}'", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def parse_due(value: str, as_of: date | None = None, tz=None) -> datetime:
    """Parse 'today', 'tomorrow', YYYY-MM-DD (end of that day) or an ISO datetime."""
    as_of = as_of or today(tz)
    text = value.strip().lower()
    if text == "today":
        day = as_of
    elif text == "tomorrow":
        day = as_of + timedelta(days=1)
    elif "t" in text or " " in text:
        due = datetime.fromisoformat(value.strip())
        # Offset-less input is wall-clock time in the configured zone
        if due.tzinfo is None and tz is not None:
            due = due.replace(tzinfo=tz)
        return due
    else:
        day = date.fromisoformat(text)
    return datetime.combine(day, time(23, 59, 59), tzinfo=tz)


def _format_todo(todo: Todo, controller: TodoListController) -> str:
    mark = "x" if todo.is_completed else " "
    due = todo.expire_day(controller.tz)
    status = ""
    if todo.is_past_due(tz=controller.tz):
        status = ", OVERDUE"
    elif todo.is_due_today(tz=controller.tz):
        status = ", due TODAY"
    return f"[{mark}] {todo.id[:SHORT_ID]}  {todo.text} (due {due.isoformat()}{status})"


def _serialize(todo: Todo) -> dict:
    return {
        "id": todo.id,
        "text": todo.text,
        "expire_date": todo.expire_date.isoformat(),
        "created_date": todo.created_date.isoformat(),
        "is_completed": todo.is_completed,
    }


def _show_view(controller: TodoListController, as_json: bool = False) -> None:
    """Shared list display logic."""
    todos = controller.filtered
    if as_json:
        click.echo(json.dumps([_serialize(t) for t in todos], indent=2))
        return

    click.echo(f"Filter: {controller.current_filter.value} ({len(todos)} of {len(controller.original)})")
    if not todos:
        click.echo("Nothing to do.")
        return
    for todo in todos:
        click.echo(_format_todo(todo, controller))


@click.group()
@click.version_option(package_name="todolist")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """todolist - a to-do list backed by a document store."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command("list")
@click.option("--filter", "-f", "filter_name", type=click.Choice(FILTER_CHOICES, case_sensitive=False),
              default=None, help="Show this filter without saving it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_todos(filter_name: str | None, as_json: bool):
    """List todos under the current filter."""
    controller = _open_controller()
    if filter_name:
        controller.set_filter(filter_name)
    _show_view(controller, as_json)


@main.command("filter")
@click.argument("filter_name", type=click.Choice(FILTER_CHOICES, case_sensitive=False))
def set_filter(filter_name: str):
    """Change and remember the current filter."""
    controller = _open_controller()
    state = controller.set_filter(filter_name)
    ViewPrefs(filter=state.filter.value).save()
    _show_view(controller)


@main.command()
@click.argument("text")
@click.option("--due", "-d", default="today", show_default=True,
              help="Due date: today, tomorrow, YYYY-MM-DD or ISO datetime")
def add(text: str, due: str):
    """Add a todo."""
    controller = _open_controller()
    try:
        todo = Todo.create(text, parse_due(due, tz=controller.tz))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    added = _check(controller.add(todo))
    click.echo(f"Added {added.id[:SHORT_ID]}: {added.text}")


@main.command()
@click.argument("todo_id")
def complete(todo_id: str):
    """Mark a todo as done."""
    controller = _open_controller()
    todo = _check(controller.complete(_resolve(controller, todo_id).id))
    click.echo(f"✓ {todo.text}")


@main.command()
@click.argument("todo_id")
def undo(todo_id: str):
    """Reopen a completed todo."""
    controller = _open_controller()
    todo = _check(controller.undo(_resolve(controller, todo_id).id))
    click.echo(f"Reopened: {todo.text}")


@main.command()
@click.argument("todo_id")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation")
def delete(todo_id: str, yes: bool):
    """Delete a todo."""
    controller = _open_controller()
    todo = _resolve(controller, todo_id)
    if not yes and not click.confirm(f"Delete '{todo.text}'?"):
        return
    _check(controller.delete(todo.id))
    click.echo(f"Deleted: {todo.text}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def info(as_json: bool):
    """Show todo counts."""
    controller = _open_controller()
    summary = controller.summary()

    if as_json:
        click.echo(json.dumps(
            {
                "total": summary.total,
                "completed": summary.completed,
                "pending": summary.pending,
                "due_today": summary.due_today,
                "past_due": summary.past_due,
            },
            indent=2,
        ))
        return

    click.echo(f"Todos:     {summary.total}")
    click.echo(f"Pending:   {summary.pending}")
    click.echo(f"Completed: {summary.completed}")
    click.echo(f"Due today: {summary.due_today}")
    click.echo(f"Overdue:   {summary.past_due}")


if __name__ == "__main__":
    main()
