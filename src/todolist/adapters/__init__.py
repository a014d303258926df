"""Adapters - I/O implementations of ports."""

from .firestore import FirestoreAdapter
from .file_store import FileDocumentStore

__all__ = [
    "FirestoreAdapter",
    "FileDocumentStore",
]
