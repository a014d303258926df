"""Configuration management for todolist."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TODO_HOME = Path(os.environ.get("TODO_HOME", Path.home() / "todolist"))
CONFIG_FILE = TODO_HOME / "config" / "todo.conf"
PREFS_FILE = TODO_HOME / "config" / ".prefs.json"
DATA_DIR = TODO_HOME / "data"


@dataclass
class Config:
    """todolist configuration."""

    store: str = "file"
    collection_name: str = "todos"
    # Firestore settings
    firestore_project_id: str = ""
    firestore_database: str = "(default)"
    firestore_api_key: str = ""
    firestore_id_token: str = ""
    request_timeout: float = 10
    data_dir: str = ""
    timezone: str = ""


@dataclass
class ViewPrefs:
    """View state that outlives a single command."""

    filter: str = "all"

    def save(self) -> None:
        """Save preferences to file."""
        PREFS_FILE.parent.mkdir(parents=True, exist_ok=True)
        PREFS_FILE.write_text(json.dumps({"filter": self.filter}))

    @classmethod
    def load(cls) -> "ViewPrefs":
        """Load preferences from file."""
        if not PREFS_FILE.exists():
            return cls()
        try:
            data = json.loads(PREFS_FILE.read_text())
            return cls(filter=data.get("filter", "all"))
        except (json.JSONDecodeError, AttributeError):
            return cls()


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from todo.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "store":
                config.store = value.lower()
            case "collection_name":
                config.collection_name = value
            case "firestore_project_id":
                config.firestore_project_id = value
            case "firestore_database":
                config.firestore_database = value
            case "firestore_api_key":
                config.firestore_api_key = value
            case "firestore_id_token":
                config.firestore_id_token = value
            case "request_timeout":
                try:
                    config.request_timeout = float(value)
                except ValueError:
                    logger.warning(f"Ignoring invalid REQUEST_TIMEOUT: {value}")
            case "data_dir":
                config.data_dir = value
            case "timezone":
                config.timezone = value

    return config
