"""Thin wrapper around httpx for authenticated Airtable API access."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

API_URL = "https://api.airtable.com/v0"
PAGE_SIZE = 100
MAX_RETRIES = 3
RETRY_BASE_DELAY = 2.0  # seconds


class AirtableError(Exception):
    """An Airtable request failed (non-2xx status or exhausted retries)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AirtableClient:
    """Authenticated Airtable client.

    Usage:
        with AirtableClient(api_key="pat...") as client:
            for page in client.iter_pages("appXXX", "Info Collection", view="Pending"):
                ...
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        sleep=time.sleep,
    ) -> None:
        self._api_key = api_key
        self._sleep = sleep
        # Built up front: the fetcher's worker threads share it
        self.http = httpx.Client(
            base_url=API_URL,
            headers={"Authorization": self._auth_header()},
            timeout=timeout,
            transport=transport,
        )

    def _auth_header(self) -> str:
        if self._api_key.startswith("Bearer "):
            return self._api_key
        return f"Bearer {self._api_key}"

    def iter_pages(
        self, base_id: str, table: str, view: str, page_size: int = PAGE_SIZE
    ) -> Iterator[list[dict]]:
        """Yield each page of records from a view, following the offset cursor."""
        path = f"/{base_id}/{quote(table, safe='')}"
        offset: str | None = None

        while True:
            params: dict[str, str | int] = {"view": view, "pageSize": page_size}
            if offset:
                params["offset"] = offset

            payload = self._get_json(path, params)
            records = payload.get("records")
            if not isinstance(records, list):
                raise AirtableError(f"Malformed listing response for {table}: no records")
            yield records

            offset = payload.get("offset")
            if not offset:
                break

    def list_records(
        self, base_id: str, table: str, view: str, page_size: int = PAGE_SIZE
    ) -> list[dict]:
        records: list[dict] = []
        for page in self.iter_pages(base_id, table, view, page_size):
            records.extend(page)
        return records

    def get_record(self, base_id: str, table: str, record_id: str) -> dict:
        """Fetch a single record, bypassing any intermediate cache."""
        path = f"/{base_id}/{quote(table, safe='')}/{record_id}"
        return self._get_json(path, {"_t": int(time.time() * 1000)})

    def _get_json(self, path: str, params: dict) -> dict:
        for attempt in range(MAX_RETRIES):
            response = self.http.get(path, params=params)
            if response.status_code != 429:
                break
            if attempt < MAX_RETRIES - 1:
                delay = self._retry_delay(response, attempt)
                logger.warning(f"Rate limited on {path}, retrying in {delay}s...")
                self._sleep(delay)
            else:
                logger.error(f"Rate limited on {path} after {MAX_RETRIES} retries")
                raise AirtableError(f"Rate limited on {path}", status_code=429)

        if response.is_error:
            raise AirtableError(
                f"Airtable request {path} failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        payload = response.json()
        if not isinstance(payload, dict):
            raise AirtableError(
                f"Unexpected response from {path}: expected an object, "
                f"got {type(payload).__name__}"
            )
        return payload

    def _retry_delay(self, response: httpx.Response, attempt: int) -> float:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass
        return RETRY_BASE_DELAY * (2 ** attempt)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> AirtableClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
