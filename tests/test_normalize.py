"""Tests for kamdash.normalize.transform."""

from __future__ import annotations

import copy

import pytest

from kamdash.models import IC, POST_TBR
from kamdash.normalize.transform import (
    ic_display_notes,
    normalize_ic,
    normalize_post_tbr,
    normalize_source,
    severity_for,
)


class TestSeverity:
    @pytest.mark.parametrize(
        "days, expected",
        [
            (0, "low"),
            (9, "low"),
            (10, "medium"),
            (14, "medium"),
            (15, "high"),
            (29, "high"),
            (30, "critical"),
            (44, "critical"),
            (45, "extreme"),
            (400, "extreme"),
        ],
    )
    def test_bands(self, days, expected):
        assert severity_for(days) == expected


class TestNormalizePostTbr:
    def test_maps_fields(self, post_tbr_record):
        [item] = normalize_post_tbr([post_tbr_record])
        assert item.id == "recPT1"
        assert item.source == POST_TBR
        assert item.candidate_name == "Asha Rao"
        assert item.company == "Acme Robotics"
        assert item.role == "Backend Engineer"
        assert item.status == "Waiting on client"
        assert item.stage == "TBR"
        assert item.kam == "Priya"
        assert item.jd_uid == 4512
        assert item.public_identifier == "asha-rao-91"
        assert item.platform_link == "https://app.example.com/c/asha-rao-91"
        assert item.scheduler_notes == "Prefers mornings"
        assert item.interview_process_final == "3 rounds"
        assert item.role_active is True

    def test_extreme_item_with_empty_notes(self, post_tbr_record):
        [item] = normalize_post_tbr([post_tbr_record])
        assert item.pending_days == 46
        assert item.severity == "extreme"
        assert item.snooze_until is None
        assert item.display_notes == ""

    def test_defaults_for_missing_fields(self):
        [item] = normalize_post_tbr([{"id": "recX", "fields": {}}])
        assert item.candidate_name == "Unknown Candidate"
        assert item.company == "Unknown Company"
        assert item.role == "Unknown Role"
        assert item.status == "Unknown Status"
        assert item.pending_days == 0
        assert item.severity == "low"
        assert item.kam == ""
        assert item.kam_label == "Unassigned"
        assert item.jd_uid == 0
        assert item.platform_link == "#"

    def test_missing_fields_key(self):
        [item] = normalize_post_tbr([{"id": "recX"}])
        assert item.candidate_name == "Unknown Candidate"

    def test_snooze_from_last_marker(self, post_tbr_record):
        post_tbr_record["fields"]["internalWeekdayNotes"] = (
            "[2024-01-01] called\n"
            "[SNOOZE: 2024-01-10] follow up\n"
            "[SNOOZE: 2024-01-20] pushed again"
        )
        [item] = normalize_post_tbr([post_tbr_record])
        assert item.snooze_until == "2024-01-20"

    def test_snooze_from_legacy_comments_field(self, post_tbr_record):
        del post_tbr_record["fields"]["internalWeekdayNotes"]
        post_tbr_record["fields"]["weekdayComments"] = "[SNOOZE: 2024-02-02] legacy"
        [item] = normalize_post_tbr([post_tbr_record])
        assert item.snooze_until == "2024-02-02"
        assert item.display_notes == ""

    def test_negative_pending_days_clamped(self, post_tbr_record):
        post_tbr_record["fields"]["Update Pending since"] = -3
        [item] = normalize_post_tbr([post_tbr_record])
        assert item.pending_days == 0

    def test_preserves_order(self, post_tbr_record):
        second = copy.deepcopy(post_tbr_record)
        second["id"] = "recPT2"
        items = normalize_post_tbr([post_tbr_record, second])
        assert [i.id for i in items] == ["recPT1", "recPT2"]


class TestNormalizeIc:
    def test_maps_fields(self, ic_record):
        [item] = normalize_ic([ic_record])
        assert item.source == IC
        assert item.candidate_name == "Rahul Mehta"
        assert item.company == "Globex"
        assert item.role == "Data Scientist"
        assert item.status == "Availabilities shared"
        assert item.pending_days == 31
        assert item.severity == "critical"
        assert item.kam == "Vikram"
        assert item.jd_uid == 7788
        assert item.public_identifier == "rahul-mehta-22"
        assert item.platform_link == "https://app.example.com/pf/rahul"
        assert item.interview_process_final == ""

    def test_role_active_defaults_true(self, ic_record):
        [item] = normalize_ic([ic_record])
        assert item.role_active is True

    def test_display_notes_concatenation_order(self, ic_record):
        [item] = normalize_ic([ic_record])
        assert item.display_notes.split("\n") == [
            "[2024-01-05] [SNOOZE: 2024-01-20] waiting on slots",
            "Asked about notice period",
            "https://slack.example.com/archives/C1/p1",
        ]

    def test_display_notes_skips_empty_parts(self):
        fields = {"internalWeekdayNotes": "", "IC Caller Notes": "only caller notes"}
        assert ic_display_notes(fields) == "only caller notes"

    def test_display_notes_empty(self):
        assert ic_display_notes({}) == ""

    def test_snooze_only_from_kam_notes(self, ic_record):
        ic_record["fields"]["internalWeekdayNotes"] = ""
        ic_record["fields"]["IC Caller Notes"] = "[SNOOZE: 2024-09-09] typed by caller"
        [item] = normalize_ic([ic_record])
        assert item.snooze_until is None

    def test_snooze_from_kam_notes(self, ic_record):
        [item] = normalize_ic([ic_record])
        assert item.snooze_until == "2024-01-20"

    def test_kam_lookup_takes_priority(self, ic_record):
        ic_record["fields"]["Account Manager (from companyMapperViaUid) (from uidMapped)"] = ["Meera"]
        [item] = normalize_ic([ic_record])
        assert item.kam == "Meera"

    def test_company_fallback_chain(self, ic_record):
        del ic_record["fields"]["companyName"]
        ic_record["fields"]["company (from jdUidMapper)"] = ["Umbrella"]
        [item] = normalize_ic([ic_record])
        assert item.company == "Umbrella"

    def test_platform_link_fallback(self, ic_record):
        del ic_record["fields"]["PF Link"]
        ic_record["fields"]["Candidate Dashboard"] = "https://app.example.com/dash/rahul"
        [item] = normalize_ic([ic_record])
        assert item.platform_link == "https://app.example.com/dash/rahul"


class TestNormalizeProperties:
    def test_idempotent(self, post_tbr_record, ic_record):
        assert normalize_post_tbr([post_tbr_record]) == normalize_post_tbr([post_tbr_record])
        assert normalize_ic([ic_record]) == normalize_ic([ic_record])

    def test_does_not_mutate_input(self, ic_record):
        before = copy.deepcopy(ic_record)
        normalize_ic([ic_record])
        assert ic_record == before

    def test_same_key_different_sources_stay_distinct(self, post_tbr_record, ic_record):
        ic_record["fields"]["JD UID"] = post_tbr_record["fields"]["jdUid"]
        ic_record["fields"]["Public Identifier"] = post_tbr_record["fields"]["publicIdentifier"]
        items = normalize_post_tbr([post_tbr_record]) + normalize_ic([ic_record])
        assert len({i.id for i in items}) == 2
        assert {(i.jd_uid, i.public_identifier) for i in items} == {(4512, "asha-rao-91")}

    def test_normalize_source_dispatch(self, post_tbr_record):
        assert normalize_source(POST_TBR, [post_tbr_record])[0].source == POST_TBR

    def test_normalize_source_unknown(self):
        with pytest.raises(ValueError):
            normalize_source("OTHER", [])
