"""File-based document store adapter."""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path

from todolist.ports.document_store import StoreError

logger = logging.getLogger(__name__)


def _default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class FileDocumentStore:
    """
    File-based document storage.

    Implements DocumentStore protocol. Each collection gets a JSON file
    mapping document id to fields. Timestamps are stored as ISO strings.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for_collection(self, collection: str) -> Path:
        """Get the file path for a collection."""
        return self.data_dir / f"{collection}.json"

    def _read(self, collection: str) -> dict[str, dict]:
        path = self._path_for_collection(collection)
        if not path.exists():
            return {}
        try:
            documents = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read {path}: {e}") from e
        if not isinstance(documents, dict):
            raise StoreError(f"Failed to read {path}: expected an object, got {type(documents).__name__}")
        return documents

    def _write(self, collection: str, documents: dict[str, dict]) -> None:
        path = self._path_for_collection(collection)
        try:
            path.write_text(json.dumps(documents, indent=2, default=_default))
        except (OSError, TypeError) as e:
            raise StoreError(f"Failed to write {path}: {e}") from e

    def list_all(self, collection: str) -> list[tuple[dict, str]]:
        """All documents in a collection."""
        return [(fields, doc_id) for doc_id, fields in self._read(collection).items()]

    def create_document(self, collection: str, fields: dict) -> str:
        """Add a document under a new random id."""
        documents = self._read(collection)
        doc_id = uuid.uuid4().hex
        documents[doc_id] = fields
        self._write(collection, documents)
        logger.debug(f"Created {collection}/{doc_id}")
        return doc_id

    def put_document(self, collection: str, doc_id: str, fields: dict) -> None:
        """Write/overwrite a document."""
        documents = self._read(collection)
        documents[doc_id] = fields
        self._write(collection, documents)

    def delete_document(self, collection: str, doc_id: str) -> None:
        """Remove a document. Missing ids are an error."""
        documents = self._read(collection)
        if doc_id not in documents:
            raise StoreError(f"No document {collection}/{doc_id}")
        del documents[doc_id]
        self._write(collection, documents)
