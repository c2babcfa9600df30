"""Shared test fixtures for kamdash."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from kamdash.airtable.fetcher import FetchResult
from kamdash.models import IC, POST_TBR, ActionableItem
from kamdash.normalize.transform import severity_for
from kamdash.state.persistence import CompletedIdsFile
from kamdash.state.store import DashboardStore

TODAY = date(2024, 1, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def post_tbr_record() -> dict:
    return {
        "id": "recPT1",
        "createdTime": "2024-01-01T09:00:00.000Z",
        "fields": {
            "candidateName": "Asha Rao",
            "Company Name": "Acme Robotics",
            "jobRole": "Backend Engineer",
            "Post TBR Status": "Waiting on client",
            "Update Pending since": 46,
            "internalWeekdayNotes": "",
            "Scheduler Notes": "Prefers mornings",
            "Account Manager (from companyMapperViaUid) (from uidMapped)": ["Priya"],
            "jdUid": 4512,
            "publicIdentifier": "asha-rao-91",
            "Candidate Platform Link": "https://app.example.com/c/asha-rao-91",
            "conversationStatus": "TBR",
            "isRoleActive? (from KAM JD Interface) (from jdUidMapper)": [True],
            "interviewProcessFinal": "3 rounds",
        },
    }


@pytest.fixture
def ic_record() -> dict:
    return {
        "id": "recIC1",
        "createdTime": "2024-01-02T09:00:00.000Z",
        "fields": {
            "Name": "Rahul Mehta",
            "companyName": ["Globex"],
            "Job Role": ["Data Scientist"],
            "Info Call Status": "Availabilities shared",
            "Pending Since": "31",
            "internalWeekdayNotes": "[2024-01-05] [SNOOZE: 2024-01-20] waiting on slots",
            "IC Caller Notes": "Asked about notice period",
            "Flagged Slack Link": "https://slack.example.com/archives/C1/p1",
            "Account Manager": ["Vikram"],
            "JD UID": "7788",
            "Public Identifier": "rahul-mehta-22",
            "PF Link": "https://app.example.com/pf/rahul",
        },
    }


@pytest.fixture
def make_item():
    """Factory for ActionableItems with sensible defaults."""

    def _make(**kwargs) -> ActionableItem:
        defaults = dict(
            id="rec1",
            source=POST_TBR,
            candidate_name="Asha Rao",
            company="Acme Robotics",
            role="Backend Engineer",
            status="Waiting on client",
            stage="",
            pending_days=12,
            display_notes="",
            snooze_until=None,
            jd_uid=4512,
            public_identifier="asha-rao-91",
            kam="Priya",
            platform_link="#",
        )
        defaults.update(kwargs)
        defaults.setdefault("severity", severity_for(defaults["pending_days"]))
        return ActionableItem(**defaults)

    return _make


@pytest.fixture
def fetcher(post_tbr_record: dict, ic_record: dict) -> MagicMock:
    fetcher = MagicMock()
    fetcher.fetch_all.return_value = [
        FetchResult(POST_TBR, [post_tbr_record]),
        FetchResult(IC, [ic_record]),
    ]
    fetcher.fetch_record.return_value = None
    return fetcher


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    return tmp_path / "state.json"


@pytest.fixture
def store(fetcher: MagicMock, state_path: Path) -> DashboardStore:
    return DashboardStore(fetcher, CompletedIdsFile(state_path), today=lambda: TODAY)
