"""Tests for the Firestore REST adapter."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests

from todolist.adapters.firestore import (
    FirestoreAdapter,
    decode_fields,
    decode_value,
    document_id,
    encode_fields,
    encode_value,
    parse_timestamp,
)
from todolist.ports.document_store import StoreError

BASE = "https://firestore.googleapis.com/v1/projects/demo/databases/(default)/documents"


def response(data=None, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.content = b"{}" if data is not None else b""
    resp.json.return_value = data
    if status >= 400:
        error = requests.HTTPError(f"{status} Error")
        error.response = resp
        resp.text = "denied"
        resp.raise_for_status.side_effect = error
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def adapter(session):
    return FirestoreAdapter(project_id="demo", api_key="k", session=session)


class TestValueEncoding:
    def test_encode_types(self):
        assert encode_value("hi") == {"stringValue": "hi"}
        assert encode_value(True) == {"booleanValue": True}
        assert encode_value(3) == {"integerValue": "3"}
        assert encode_value(1.5) == {"doubleValue": 1.5}
        assert encode_value(None) == {"nullValue": None}

    def test_encode_timestamp_as_utc(self):
        dt = datetime(2025, 1, 15, 10, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert encode_value(dt) == {"timestampValue": "2025-01-15T15:00:00.000000Z"}

    def test_encode_unsupported(self):
        with pytest.raises(TypeError):
            encode_value(object())

    def test_decode_types(self):
        assert decode_value({"stringValue": "hi"}) == "hi"
        assert decode_value({"booleanValue": False}) is False
        assert decode_value({"integerValue": "42"}) == 42
        assert decode_value({"doubleValue": 2.5}) == 2.5
        assert decode_value({"nullValue": None}) is None

    def test_decode_unsupported(self):
        with pytest.raises(ValueError):
            decode_value({"mapValue": {}})

    def test_parse_timestamp_nanoseconds(self):
        dt = parse_timestamp("2025-01-15T15:00:00.123456789Z")
        assert dt == datetime(2025, 1, 15, 15, 0, 0, 123456, tzinfo=timezone.utc)

    def test_parse_timestamp_short_fraction(self):
        assert parse_timestamp("2025-01-15T15:00:00.5Z").microsecond == 500000

    def test_parse_timestamp_without_fraction(self):
        assert parse_timestamp("2025-01-15T15:00:00Z") == datetime(2025, 1, 15, 15, tzinfo=timezone.utc)

    def test_fields(self):
        fields = {"text": "Buy milk", "isCompleted": False}
        assert decode_fields(encode_fields(fields)) == fields

    def test_document_id(self):
        assert document_id("projects/demo/databases/(default)/documents/todos/abc") == "abc"


class TestFirestoreAdapter:
    def test_documents_url(self, adapter):
        assert adapter.documents_url == BASE

    def test_list_all_follows_pages(self, adapter, session):
        session.request.side_effect = [
            response({
                "documents": [
                    {"name": f"{BASE}/todos/a", "fields": {"text": {"stringValue": "A"}}},
                ],
                "nextPageToken": "p2",
            }),
            response({
                "documents": [
                    {"name": f"{BASE}/todos/b", "fields": {"isCompleted": {"booleanValue": True}}},
                ],
            }),
        ]

        docs = adapter.list_all("todos")

        assert docs == [({"text": "A"}, "a"), ({"isCompleted": True}, "b")]
        assert session.request.call_count == 2
        second = session.request.call_args_list[1]
        assert second.kwargs["params"]["pageToken"] == "p2"
        assert second.kwargs["params"]["key"] == "k"

    def test_list_all_empty_collection(self, adapter, session):
        session.request.return_value = response({})
        assert adapter.list_all("todos") == []

    def test_create_document(self, adapter, session):
        session.request.return_value = response({"name": f"{BASE}/todos/new123"})

        doc_id = adapter.create_document("todos", {"text": "A", "isCompleted": False})

        assert doc_id == "new123"
        method, url = session.request.call_args[0]
        assert method == "POST"
        assert url == f"{BASE}/todos"
        assert session.request.call_args.kwargs["json"] == {
            "fields": {"text": {"stringValue": "A"}, "isCompleted": {"booleanValue": False}}
        }

    def test_put_document_is_full_overwrite(self, adapter, session):
        session.request.return_value = response({"name": f"{BASE}/todos/a"})

        adapter.put_document("todos", "a", {"isCompleted": True})

        method, url = session.request.call_args[0]
        assert method == "PATCH"
        assert url == f"{BASE}/todos/a"
        assert "updateMask.fieldPaths" not in session.request.call_args.kwargs["params"]

    def test_delete_document(self, adapter, session):
        session.request.return_value = response()

        adapter.delete_document("todos", "a")

        method, url = session.request.call_args[0]
        assert method == "DELETE"
        assert url == f"{BASE}/todos/a"

    def test_id_token_sent_as_bearer(self, session):
        adapter = FirestoreAdapter(project_id="demo", id_token="tok", session=session)
        session.request.return_value = response()

        adapter.delete_document("todos", "a")

        assert session.request.call_args.kwargs["headers"] == {"Authorization": "Bearer tok"}
        assert "key" not in session.request.call_args.kwargs["params"]

    def test_http_error_raises_store_error(self, adapter, session):
        session.request.return_value = response({}, status=403)

        with pytest.raises(StoreError, match="403"):
            adapter.delete_document("todos", "a")

    def test_connection_error_raises_store_error(self, adapter, session):
        session.request.side_effect = requests.ConnectionError("no route")

        with pytest.raises(StoreError, match="no route"):
            adapter.list_all("todos")

    def test_invalid_json_raises_store_error(self, adapter, session):
        resp = response({})
        resp.json.side_effect = ValueError("bad json")
        session.request.return_value = resp

        with pytest.raises(StoreError, match="Invalid Firestore response"):
            adapter.list_all("todos")

    def test_missing_project_raises(self, session):
        adapter = FirestoreAdapter(project_id="", session=session)

        with pytest.raises(StoreError, match="FIRESTORE_PROJECT_ID"):
            adapter.list_all("todos")
        session.request.assert_not_called()

    def test_timeout_passed(self, session):
        adapter = FirestoreAdapter(project_id="demo", timeout=3, session=session)
        session.request.return_value = response()

        adapter.delete_document("todos", "a")

        assert session.request.call_args.kwargs["timeout"] == 3
