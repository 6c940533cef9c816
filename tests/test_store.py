"""Unit tests for keyword stores."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from dreamdup.core import store as store_module
from dreamdup.core.config import Config
from dreamdup.core.errors import StoreError
from dreamdup.core.store import (
    InMemoryKeywordStore,
    JsonFileKeywordStore,
    SupabaseKeywordStore,
    create_store,
)
from dreamdup.schemas.keyword import KeywordRecord

ROWS = [
    {"id": 1, "keyword": "뱀꿈", "slug": "snake"},
    {"id": 2, "keyword": "호랑이꿈", "slug": "tiger"},
    {"id": 3, "keyword": None, "slug": "untitled"},
]


def _response(payload, status_error=None):
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


def _http_error(status):
    response = MagicMock()
    response.status_code = status
    return requests.HTTPError(f"{status} error", response=response)


class TestJsonFileKeywordStore:
    """Test file-backed store."""

    def test_json_list(self, tmp_path):
        """A JSON list of records is loaded."""
        path = tmp_path / "dreams.json"
        path.write_text(json.dumps(ROWS, ensure_ascii=False), encoding="utf-8")
        records = JsonFileKeywordStore(path).fetch_keywords()
        assert [r.keyword for r in records] == ["뱀꿈", "호랑이꿈", ""]

    def test_yaml_object(self, tmp_path):
        """A YAML object with a 'dreams' list is loaded."""
        path = tmp_path / "dreams.yaml"
        path.write_text(
            "dreams:\n  - id: a\n    keyword: 불꿈\n    slug: fire\n",
            encoding="utf-8",
        )
        records = JsonFileKeywordStore(path).fetch_keywords()
        assert records == [KeywordRecord(id="a", keyword="불꿈", slug="fire")]

    def test_missing_file(self, tmp_path):
        """A missing file raises StoreError."""
        with pytest.raises(StoreError):
            JsonFileKeywordStore(tmp_path / "nope.json").fetch_keywords()

    def test_invalid_json(self, tmp_path):
        """Malformed JSON raises StoreError."""
        path = tmp_path / "bad.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(StoreError):
            JsonFileKeywordStore(path).fetch_keywords()

    def test_wrong_shape(self, tmp_path):
        """A top-level scalar or a record without id raises StoreError."""
        path = tmp_path / "scalar.json"
        path.write_text("42", encoding="utf-8")
        with pytest.raises(StoreError):
            JsonFileKeywordStore(path).fetch_keywords()

        path.write_text(json.dumps([{"keyword": "뱀꿈"}]), encoding="utf-8")
        with pytest.raises(StoreError):
            JsonFileKeywordStore(path).fetch_keywords()


class TestInMemoryKeywordStore:
    """Test in-memory store."""

    def test_accepts_records_and_dicts(self):
        """Records and plain mappings are both accepted."""
        store = InMemoryKeywordStore([KeywordRecord(id=1, keyword="뱀꿈"), ROWS[1]])
        assert [r.id for r in store.fetch_keywords()] == [1, 2]


class TestSupabaseKeywordStore:
    """Test Supabase (PostgREST) store with a mocked session."""

    def test_requires_credentials(self):
        """URL and key are mandatory."""
        with pytest.raises(StoreError):
            SupabaseKeywordStore(url="", api_key="key")
        with pytest.raises(StoreError):
            SupabaseKeywordStore(url="https://x.supabase.co", api_key="")

    def test_fetch_single_page(self):
        """Rows are fetched with the keyword columns and auth headers."""
        session = MagicMock()
        session.get.side_effect = [_response(ROWS), _response([])]
        store = SupabaseKeywordStore(
            url="https://proj.supabase.co/", api_key="anon-key", session=session
        )

        records = store.fetch_keywords()

        assert [r.id for r in records] == [1, 2, 3]
        args, kwargs = session.get.call_args_list[0]
        assert args[0] == "https://proj.supabase.co/rest/v1/dreams"
        assert kwargs["params"]["select"] == "id,keyword,slug"
        assert kwargs["params"]["offset"] == 0
        assert kwargs["headers"]["apikey"] == "anon-key"
        assert kwargs["headers"]["Authorization"] == "Bearer anon-key"

    def test_pagination(self, monkeypatch):
        """Pages are requested until an empty page arrives."""
        monkeypatch.setattr(store_module, "PAGE_SIZE", 2)
        session = MagicMock()
        session.get.side_effect = [_response(ROWS[:2]), _response(ROWS[2:]), _response([])]
        store = SupabaseKeywordStore(url="https://proj.supabase.co", api_key="k", session=session)

        records = store.fetch_keywords()

        assert len(records) == 3
        offsets = [call.kwargs["params"]["offset"] for call in session.get.call_args_list]
        assert offsets == [0, 2, 3]

    def test_pages_capped_by_server(self, monkeypatch):
        """A server returning fewer rows than requested is still read to the end."""
        monkeypatch.setattr(store_module, "PAGE_SIZE", 3)
        rows = [{"id": i, "keyword": f"꿈{i}", "slug": f"s{i}"} for i in range(1, 6)]
        session = MagicMock()
        session.get.side_effect = [
            _response(rows[0:2]),
            _response(rows[2:4]),
            _response(rows[4:5]),
            _response([]),
        ]
        store = SupabaseKeywordStore(url="https://proj.supabase.co", api_key="k", session=session)

        records = store.fetch_keywords()

        assert [r.id for r in records] == [1, 2, 3, 4, 5]
        offsets = [call.kwargs["params"]["offset"] for call in session.get.call_args_list]
        assert offsets == [0, 2, 4, 5]

    def test_transport_error(self):
        """Connection errors become StoreError after retries."""
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")
        store = SupabaseKeywordStore(
            url="https://proj.supabase.co",
            api_key="k",
            session=session,
            max_retries=1,
            retry_delay=0.0,
        )
        with pytest.raises(StoreError):
            store.fetch_keywords()
        assert session.get.call_count == 2

    def test_http_error(self):
        """Non-2xx responses become StoreError."""
        session = MagicMock()
        session.get.return_value = _response({}, status_error=_http_error(500))
        store = SupabaseKeywordStore(
            url="https://proj.supabase.co", api_key="k", session=session, max_retries=0
        )
        with pytest.raises(StoreError):
            store.fetch_keywords()

    @pytest.mark.parametrize("status", [401, 403, 404])
    def test_client_error_not_retried(self, status):
        """Rejected credentials fail on the first request with default retries."""
        session = MagicMock()
        session.get.return_value = _response({}, status_error=_http_error(status))
        store = SupabaseKeywordStore(url="https://proj.supabase.co", api_key="k", session=session)
        with pytest.raises(StoreError):
            store.fetch_keywords()
        assert session.get.call_count == 1

    @pytest.mark.parametrize("status", [429, 503])
    def test_transient_status_retried(self, status):
        """Rate limits and server errors are retried before giving up."""
        session = MagicMock()
        session.get.side_effect = [
            _response({}, status_error=_http_error(status)),
            _response(ROWS),
            _response([]),
        ]
        store = SupabaseKeywordStore(
            url="https://proj.supabase.co", api_key="k", session=session, retry_delay=0.0
        )
        assert len(store.fetch_keywords()) == 3
        assert session.get.call_count == 3

    def test_unexpected_payload(self):
        """A non-list payload becomes StoreError."""
        session = MagicMock()
        session.get.return_value = _response({"message": "oops"})
        store = SupabaseKeywordStore(url="https://proj.supabase.co", api_key="k", session=session)
        with pytest.raises(StoreError):
            store.fetch_keywords()


class TestCreateStore:
    """Test store selection from configuration."""

    def test_corpus_file_preferred(self, tmp_path):
        """A corpus file wins over Supabase settings."""
        config = Config()
        config.corpus_file = str(tmp_path / "dreams.json")
        config.supabase_url = "https://proj.supabase.co"
        config.supabase_key = "k"
        assert isinstance(create_store(config), JsonFileKeywordStore)

    def test_supabase(self):
        """Supabase settings give a Supabase store for the configured table."""
        config = Config()
        config.supabase_url = "https://proj.supabase.co"
        config.supabase_key = "k"
        config.table = "dream_entries"
        store = create_store(config)
        assert isinstance(store, SupabaseKeywordStore)
        assert store.endpoint.endswith("/rest/v1/dream_entries")

    def test_nothing_configured(self):
        """Without a source StoreError is raised."""
        with pytest.raises(StoreError):
            create_store(Config())
