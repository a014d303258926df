"""Cloud Firestore adapter - REST client for todo documents."""

import logging
import re
from datetime import datetime, timezone

import requests

from todolist.ports.document_store import StoreError

logger = logging.getLogger(__name__)

API_BASE = "https://firestore.googleapis.com/v1"
PAGE_SIZE = 300

_FRACTION_RE = re.compile(r"\.(\d+)")


def encode_value(value) -> dict:
    """Python value to Firestore typed JSON value."""
    # bool before int: bool is an int subclass
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": format_timestamp(value)}
    if isinstance(value, str):
        return {"stringValue": value}
    raise TypeError(f"Unsupported Firestore value: {value!r}")


def decode_value(value: dict):
    """Firestore typed JSON value to Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return value["booleanValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return parse_timestamp(value["timestampValue"])
    if "stringValue" in value:
        return value["stringValue"]
    raise ValueError(f"Unsupported Firestore value: {value}")


def format_timestamp(dt: datetime) -> str:
    """RFC 3339 UTC timestamp. Naive datetimes are treated as local time."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp, truncating nanoseconds to microseconds."""
    text = text.replace("Z", "+00:00")
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def encode_fields(fields: dict) -> dict:
    return {key: encode_value(value) for key, value in fields.items()}


def decode_fields(fields: dict) -> dict:
    return {key: decode_value(value) for key, value in fields.items()}


def document_id(name: str) -> str:
    """Last path segment of a document resource name."""
    return name.rsplit("/", 1)[-1]


class FirestoreAdapter:
    """
    Cloud Firestore adapter.

    Implements DocumentStore protocol over the Firestore REST API. Handles
    value encoding and paging. No business logic - just I/O.
    """

    def __init__(
        self,
        project_id: str,
        api_key: str = "",
        database: str = "(default)",
        id_token: str = "",
        timeout: float = 10,
        session: requests.Session | None = None,
    ):
        self.project_id = project_id
        self.api_key = api_key
        self.database = database
        self.id_token = id_token
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def documents_url(self) -> str:
        return f"{API_BASE}/projects/{self.project_id}/databases/{self.database}/documents"

    def _request(self, method: str, path: str, **kwargs) -> dict:
        """Make a request against the documents endpoint."""
        if not self.project_id:
            raise StoreError("No Firestore project configured. Set FIRESTORE_PROJECT_ID in todo.conf")

        params = kwargs.pop("params", {})
        if self.api_key:
            params["key"] = self.api_key
        headers = {}
        if self.id_token:
            headers["Authorization"] = f"Bearer {self.id_token}"

        url = f"{self.documents_url}/{path}"
        logger.debug(f"{method} {url}")
        try:
            resp = self._session.request(
                method, url, params=params, headers=headers, timeout=self.timeout, **kwargs
            )
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise StoreError(f"Firestore {method} {path} failed: {e.response.status_code} {e.response.text}") from e
        except requests.RequestException as e:
            raise StoreError(f"Firestore {method} {path} failed: {e}") from e

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise StoreError(f"Invalid Firestore response for {method} {path}") from e

    def list_all(self, collection: str) -> list[tuple[dict, str]]:
        """Fetch every document in a collection, following page tokens."""
        documents = []
        page_token = None

        while True:
            params = {"pageSize": PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            data = self._request("GET", collection, params=params)

            for doc in data.get("documents", []):
                documents.append((decode_fields(doc.get("fields", {})), document_id(doc["name"])))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return documents

    def create_document(self, collection: str, fields: dict) -> str:
        """Create a document with a server-generated id."""
        data = self._request("POST", collection, json={"fields": encode_fields(fields)})
        return document_id(data["name"])

    def put_document(self, collection: str, doc_id: str, fields: dict) -> None:
        """Replace a document. No update mask, so omitted fields are removed."""
        self._request("PATCH", f"{collection}/{doc_id}", json={"fields": encode_fields(fields)})

    def delete_document(self, collection: str, doc_id: str) -> None:
        """Delete a document."""
        self._request("DELETE", f"{collection}/{doc_id}")
