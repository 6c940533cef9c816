"""Keyword stores: where the comparison corpus comes from."""

import json
import time
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

import requests
import yaml
from pydantic import ValidationError

from dreamdup.core.errors import StoreError
from dreamdup.core.logging import get_logger
from dreamdup.core.retry import retry_with_exponential_backoff
from dreamdup.schemas.keyword import KeywordRecord

logger = get_logger("dreamdup.store")

PAGE_SIZE = 1000


class KeywordStore(Protocol):
    """Protocol for anything that can list the existing keyword records."""

    def fetch_keywords(self) -> list[KeywordRecord]:
        """
        Fetch ``{id, keyword, slug}`` for every existing record.

        Returns:
            All keyword records

        Raises:
            StoreError: If the records cannot be fetched
        """
        ...


def is_transient_http_error(error: Exception) -> bool:
    """True for connection errors, timeouts, 429 and 5xx responses."""
    if isinstance(error, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(error, requests.HTTPError) and error.response is not None:
        status = error.response.status_code
        return status == 429 or status >= 500
    return False


def _parse_records(rows: Iterable[Any], source: str) -> list[KeywordRecord]:
    records = []
    for row in rows:
        if not isinstance(row, dict):
            raise StoreError(f"Unexpected row in {source}: {row!r}")
        try:
            records.append(KeywordRecord.model_validate(row))
        except ValidationError as e:
            raise StoreError(f"Invalid keyword record in {source}: {e}") from e
    return records


class InMemoryKeywordStore:
    """Store over records that were already fetched by the caller."""

    def __init__(self, records: Iterable[Any]):
        self.records = _parse_records(
            (r.model_dump() if isinstance(r, KeywordRecord) else r for r in records),
            "memory",
        )

    def fetch_keywords(self) -> list[KeywordRecord]:
        return list(self.records)


class JsonFileKeywordStore:
    """Store reading an exported JSON or YAML file of keyword records."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def fetch_keywords(self) -> list[KeywordRecord]:
        """
        Read records from the file.

        The file holds either a list of records or an object with a
        ``records`` or ``dreams`` list.

        Raises:
            StoreError: If the file is missing or malformed
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot read corpus file {self.path}: {e}") from e

        try:
            if self.path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)
        except (ValueError, yaml.YAMLError) as e:
            raise StoreError(f"Cannot parse corpus file {self.path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("records", data.get("dreams"))
        if not isinstance(data, list):
            raise StoreError(
                f"Corpus file {self.path} must contain a list of records "
                "or an object with a 'records' list"
            )

        records = _parse_records(data, str(self.path))
        logger.log_store_fetch(str(self.path), len(records))
        return records


class SupabaseKeywordStore:
    """Store reading the keyword columns of a Supabase (PostgREST) table."""

    def __init__(
        self,
        url: str,
        api_key: str,
        table: str = "dreams",
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Supabase store.

        Args:
            url: Project URL, e.g. https://<ref>.supabase.co
            api_key: Anon or service-role key
            table: Table holding the keyword records
            timeout: Request timeout in seconds
            max_retries: Retry attempts per page request
            retry_delay: Initial backoff delay in seconds
            session: Optional requests session (connection reuse, tests)

        Raises:
            StoreError: If url or api_key is missing
        """
        if not url:
            raise StoreError("SUPABASE_URL is required for the Supabase store")
        if not api_key:
            raise StoreError("SUPABASE_KEY is required for the Supabase store")

        self.url = url.rstrip("/")
        self.api_key = api_key.strip().strip('"').strip("'")
        self.table = table
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.url}/rest/v1/{self.table}"

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    def _request_page(self, offset: int) -> list[Any]:
        response = self.session.get(
            self.endpoint,
            params={
                "select": "id,keyword,slug",
                "order": "id.asc",
                "limit": PAGE_SIZE,
                "offset": offset,
            },
            headers=self._headers(),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def fetch_keywords(self) -> list[KeywordRecord]:
        """
        Fetch all records page by page.

        The server may cap a page below PAGE_SIZE (PostgREST ``max-rows``),
        so paging continues until an empty page comes back.

        Raises:
            StoreError: On transport errors, non-2xx responses or bad payloads
        """
        request_page = retry_with_exponential_backoff(
            max_retries=self.max_retries,
            initial_delay=self.retry_delay,
            retryable_exceptions=(requests.RequestException,),
            retry_if=is_transient_http_error,
            logger_instance=logger,
        )(self._request_page)

        start = time.time()
        rows: list[Any] = []
        offset = 0
        while True:
            try:
                page = request_page(offset)
            except requests.RequestException as e:
                raise StoreError(f"Failed to fetch keywords from {self.table}: {e}") from e
            except ValueError as e:
                raise StoreError(f"Invalid JSON from {self.table}: {e}") from e

            if not isinstance(page, list):
                raise StoreError(f"Unexpected response from {self.table}: {page!r}")
            if not page:
                break
            rows.extend(page)
            offset += len(page)

        records = _parse_records(rows, self.table)
        logger.log_store_fetch(
            self.table,
            len(records),
            duration_ms=(time.time() - start) * 1000,
        )
        return records


def create_store(config) -> KeywordStore:
    """
    Pick a store from configuration: corpus file first, then Supabase.

    Args:
        config: Config with corpus_file or supabase_url/supabase_key

    Returns:
        Keyword store

    Raises:
        StoreError: If neither source is configured
    """
    if config.corpus_file:
        return JsonFileKeywordStore(Path(config.corpus_file))
    if config.supabase_url or config.supabase_key:
        return SupabaseKeywordStore(
            url=config.supabase_url,
            api_key=config.supabase_key,
            table=config.table,
            timeout=float(config.request_timeout),
        )
    raise StoreError(
        "No keyword source configured. Pass --corpus FILE or set SUPABASE_URL and SUPABASE_KEY."
    )
