"""Airtable field names for the Post-TBR and Info Collection bases.

The two bases name the same logical fields differently, and some IC fields
arrive as lookup arrays. Each logical field maps to an ordered list of raw
keys; the first present, non-empty value wins.
"""

from __future__ import annotations

from typing import Any

NOTES_FIELD = "internalWeekdayNotes"
ROLE_ACTIVE_FIELD = "isRoleActive? (from KAM JD Interface) (from jdUidMapper)"
ACCOUNT_MANAGER_LOOKUP = "Account Manager (from companyMapperViaUid) (from uidMapped)"

POST_TBR_FIELDS: dict[str, list[str]] = {
    "candidate_name": ["candidateName"],
    "company": ["Company Name"],
    "role": ["jobRole"],
    "status": ["Post TBR Status"],
    "pending_days": ["Update Pending since"],
    "kam": [ACCOUNT_MANAGER_LOOKUP],
    "jd_uid": ["jdUid"],
    "public_identifier": ["publicIdentifier"],
    "platform_link": ["Candidate Platform Link"],
    "stage": ["conversationStatus"],
    "scheduler_notes": ["Scheduler Notes"],
    "interview_process_final": ["interviewProcessFinal"],
    "role_active": [ROLE_ACTIVE_FIELD],
    "display_notes": [NOTES_FIELD],
    "snooze_notes": [NOTES_FIELD, "weekdayComments"],
}

IC_FIELDS: dict[str, list[str]] = {
    "candidate_name": ["candidateName", "Name", "Candidate Name"],
    "company": [
        "companyName",
        "Company Name",
        "company",
        "Company",
        "company (from jdUidMapper)",
    ],
    "role": ["Job Role", "jobRole", "role", "Designation"],
    "status": ["Info Call Status", "IC Status", "Post TBR Status", "conversationStatus"],
    "pending_days": ["Pending Since"],
    "kam": [ACCOUNT_MANAGER_LOOKUP, "Account Manager", "kam"],
    "jd_uid": ["jdUid", "JD UID"],
    "public_identifier": ["publicIdentifier", "Public Identifier"],
    "platform_link": ["PF Link", "Candidate Dashboard", "Candidate Platform Link"],
    "stage": ["conversationStatus"],
    "scheduler_notes": ["Scheduler Notes"],
    "role_active": [ROLE_ACTIVE_FIELD],
    "snooze_notes": [NOTES_FIELD],
}

# IC display notes, in order: KAM notes, intake-call notes, flagged conversation link
IC_NOTE_PARTS = [NOTES_FIELD, "IC Caller Notes", "Flagged Slack Link"]


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def extract_field(fields: dict, names: str | list[str], default: Any = None) -> Any:
    """Return the first present, non-empty value among ``names``.

    List values (Airtable lookups) contribute their first element.
    """
    if isinstance(names, str):
        names = [names]

    for name in names:
        value = fields.get(name)
        if isinstance(value, list):
            value = value[0] if value else None
        if not _is_empty(value):
            return value

    return default


def to_int(value: Any) -> int:
    """Coerce an Airtable number (int, float, numeric string) to int, else 0."""
    if isinstance(value, str):
        value = value.strip()
    if not isinstance(value, (int, float, str)):
        return 0
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return 0
