"""Document store interface."""

from typing import Protocol


class StoreError(Exception):
    """Raised when a document store operation fails."""

    pass


class DocumentStore(Protocol):
    """Interface for a collection-of-documents backend keyed by generated ids."""

    def list_all(self, collection: str) -> list[tuple[dict, str]]:
        """Fetch every document as (fields, id) pairs. Order is unspecified."""
        ...

    def create_document(self, collection: str, fields: dict) -> str:
        """Store a new document. Returns the generated id."""
        ...

    def put_document(self, collection: str, doc_id: str, fields: dict) -> None:
        """Overwrite a document entirely."""
        ...

    def delete_document(self, collection: str, doc_id: str) -> None:
        """Delete a document by id."""
        ...
