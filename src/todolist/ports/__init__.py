"""Ports - interfaces/protocols for external dependencies."""

from .document_store import DocumentStore, StoreError

__all__ = [
    "DocumentStore",
    "StoreError",
]
