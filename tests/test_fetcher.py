"""Tests for kamdash.airtable.fetcher — partial results and concurrency."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx

from kamdash.airtable.client import AirtableError
from kamdash.airtable.fetcher import Fetcher, SourceConfig, source_configs
from kamdash.config import IC_TABLE, POST_TBR_TABLE, Config
from kamdash.models import IC, POST_TBR

SOURCES = {
    POST_TBR: SourceConfig("appP", "tblPT", "Pending PT"),
    IC: SourceConfig("appI", "Info Collection", "Pending IC"),
}


def _fetcher(client: MagicMock) -> Fetcher:
    return Fetcher(client, SOURCES)


class TestSourceConfigs:
    def test_uses_configured_bases(self):
        configs = source_configs(Config(post_tbr_base_id="appA", ic_base_id="appB"))
        assert configs[POST_TBR].base_id == "appA"
        assert configs[POST_TBR].table == POST_TBR_TABLE
        assert configs[IC].base_id == "appB"
        assert configs[IC].table == IC_TABLE


class TestFetchSource:
    def test_collects_all_pages(self):
        client = MagicMock()
        client.iter_pages.return_value = iter([[{"id": "rec1"}], [{"id": "rec2"}]])

        result = _fetcher(client).fetch_source(POST_TBR)

        assert result.complete
        assert [r["id"] for r in result.records] == ["rec1", "rec2"]
        client.iter_pages.assert_called_once_with("appP", "tblPT", "Pending PT")

    def test_keeps_partial_records_on_failure(self):
        def pages(*args, **kwargs):
            yield [{"id": "rec1"}]
            raise AirtableError("Airtable request failed: 500", status_code=500)

        client = MagicMock()
        client.iter_pages.side_effect = pages

        result = _fetcher(client).fetch_source(IC)

        assert not result.complete
        assert "500" in result.error
        assert [r["id"] for r in result.records] == ["rec1"]

    def test_network_error_is_reported(self):
        client = MagicMock()
        client.iter_pages.side_effect = httpx.ConnectError("connection refused")

        result = _fetcher(client).fetch_source(POST_TBR)

        assert result.records == []
        assert "connection refused" in result.error


class TestFetchAll:
    def test_returns_both_sources_in_order(self):
        client = MagicMock()

        def pages(base_id, table, view):
            return iter([[{"id": f"rec-{base_id}"}]])

        client.iter_pages.side_effect = pages

        results = _fetcher(client).fetch_all()

        assert [r.source for r in results] == [POST_TBR, IC]
        assert results[0].records == [{"id": "rec-appP"}]
        assert results[1].records == [{"id": "rec-appI"}]

    def test_one_failing_source_does_not_block_the_other(self):
        client = MagicMock()

        def pages(base_id, table, view):
            if base_id == "appI":
                raise AirtableError("boom")
            return iter([[{"id": "rec1"}]])

        client.iter_pages.side_effect = pages

        post_tbr, ic = _fetcher(client).fetch_all()

        assert post_tbr.complete and len(post_tbr.records) == 1
        assert not ic.complete


class TestFetchRecord:
    def test_returns_record(self):
        client = MagicMock()
        client.get_record.return_value = {"id": "rec1", "fields": {}}

        record = _fetcher(client).fetch_record("rec1", IC)

        assert record == {"id": "rec1", "fields": {}}
        client.get_record.assert_called_once_with("appI", "Info Collection", "rec1")

    def test_returns_none_on_failure(self):
        client = MagicMock()
        client.get_record.side_effect = AirtableError("not found", status_code=404)

        assert _fetcher(client).fetch_record("rec1", POST_TBR) is None
