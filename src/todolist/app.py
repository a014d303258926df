"""Wiring between configuration, adapters and the controller."""

from pathlib import Path
from zoneinfo import ZoneInfo

from .adapters.file_store import FileDocumentStore
from .adapters.firestore import FirestoreAdapter
from .config import DATA_DIR, Config, ViewPrefs
from .controller import TodoListController
from .core.todos import TodoFilter, parse_filter
from .ports.document_store import DocumentStore


def get_store(config: Config) -> DocumentStore:
    """Resolve the document store backend from config."""
    match config.store:
        case "file":
            data_dir = Path(config.data_dir).expanduser() if config.data_dir else DATA_DIR
            return FileDocumentStore(data_dir)
        case "firestore":
            return FirestoreAdapter(
                project_id=config.firestore_project_id,
                api_key=config.firestore_api_key,
                database=config.firestore_database,
                id_token=config.firestore_id_token,
                timeout=config.request_timeout,
            )
        case _:
            raise ValueError(f"Unknown STORE '{config.store}'. Use 'file' or 'firestore'")


def get_timezone(config: Config) -> ZoneInfo | None:
    """Configured timezone, None for local time."""
    return ZoneInfo(config.timezone) if config.timezone else None


def build_controller(config: Config, prefs: ViewPrefs | None = None) -> TodoListController:
    """Controller for the configured store, starting on the saved filter."""
    prefs = prefs or ViewPrefs()
    return TodoListController(
        get_store(config),
        collection=config.collection_name,
        tz=get_timezone(config),
        todo_filter=parse_filter(prefs.filter) or TodoFilter.ALL,
    )
