"""Fetches pending actionable records from the Post-TBR and IC bases."""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import httpx

from kamdash.airtable.client import AirtableClient, AirtableError
from kamdash.config import IC_TABLE, IC_VIEW, POST_TBR_TABLE, POST_TBR_VIEW, Config
from kamdash.models import IC, POST_TBR, SOURCES

logger = logging.getLogger(__name__)

FETCH_ERRORS = (AirtableError, httpx.HTTPError, json.JSONDecodeError)


@dataclass
class SourceConfig:
    """Where a source's records live in Airtable."""

    base_id: str
    table: str
    view: str


@dataclass
class FetchResult:
    """Records retrieved for one source.

    ``error`` is set when retrieval stopped early; ``records`` then holds
    whatever pages arrived before the failure.
    """

    source: str
    records: list[dict] = field(default_factory=list)
    error: str | None = None

    @property
    def complete(self) -> bool:
        return self.error is None


def source_configs(config: Config) -> dict[str, SourceConfig]:
    return {
        POST_TBR: SourceConfig(config.post_tbr_base_id, POST_TBR_TABLE, POST_TBR_VIEW),
        IC: SourceConfig(config.ic_base_id, IC_TABLE, IC_VIEW),
    }


class Fetcher:
    """Fetches raw records for both sources."""

    def __init__(self, client: AirtableClient, sources: dict[str, SourceConfig]) -> None:
        self._client = client
        self._sources = sources

    @classmethod
    def from_config(cls, config: Config, client: AirtableClient | None = None) -> Fetcher:
        client = client or AirtableClient(api_key=config.airtable_api_key)
        return cls(client, source_configs(config))

    def fetch_source(self, source: str) -> FetchResult:
        """Fetch every record in the source's view, page by page.

        On failure the pages already received are kept and the error is
        reported on the result instead of being raised.
        """
        cfg = self._sources[source]
        result = FetchResult(source=source)

        try:
            for page in self._client.iter_pages(cfg.base_id, cfg.table, cfg.view):
                result.records.extend(page)
        except FETCH_ERRORS as e:
            result.error = str(e) or e.__class__.__name__
            logger.error(
                f"Error fetching {source} records after {len(result.records)} "
                f"record(s): {result.error}"
            )
        else:
            logger.info(f"Fetched {len(result.records)} {source} record(s)")

        return result

    def fetch_all(self) -> list[FetchResult]:
        """Fetch both sources concurrently; results come back in SOURCES order."""
        with ThreadPoolExecutor(max_workers=len(SOURCES)) as pool:
            futures = [pool.submit(self.fetch_source, source) for source in SOURCES]
            return [f.result() for f in futures]

    def fetch_record(self, record_id: str, source: str) -> dict | None:
        """Fetch one record's current fields, or None if it can't be read."""
        cfg = self._sources[source]
        try:
            record = self._client.get_record(cfg.base_id, cfg.table, record_id)
        except FETCH_ERRORS as e:
            logger.warning(f"Failed to fetch record {record_id} from {source}: {e}")
            return None
        return record

    def close(self) -> None:
        self._client.close()
