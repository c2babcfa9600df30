"""Normalize raw Airtable records from both bases into ActionableItems.

Both normalizers are pure: the same raw records always produce equal items,
and nothing outside the returned list is touched.
"""

from __future__ import annotations

from kamdash.models import IC, POST_TBR, SEVERITY_THRESHOLDS, ActionableItem
from kamdash.normalize.fields import (
    IC_FIELDS,
    IC_NOTE_PARTS,
    POST_TBR_FIELDS,
    extract_field,
    to_int,
)
from kamdash.notes import last_snooze_date


def severity_for(pending_days: int) -> str:
    """Map pending days onto its severity band (lower bound inclusive)."""
    for minimum, severity in SEVERITY_THRESHOLDS:
        if pending_days >= minimum:
            return severity
    return "low"


def _pending_days(fields: dict, names: list[str]) -> int:
    return max(0, to_int(extract_field(fields, names, 0)))


def _text(fields: dict, names: list[str], default: str = "") -> str:
    value = extract_field(fields, names, default)
    return value if isinstance(value, str) else str(value)


def normalize_post_tbr(records: list[dict]) -> list[ActionableItem]:
    """Normalize records from the Post-TBR base."""
    m = POST_TBR_FIELDS
    items: list[ActionableItem] = []

    for record in records:
        f = record.get("fields") or {}
        days = _pending_days(f, m["pending_days"])

        items.append(
            ActionableItem(
                id=record["id"],
                source=POST_TBR,
                candidate_name=_text(f, m["candidate_name"], "Unknown Candidate"),
                company=_text(f, m["company"], "Unknown Company"),
                role=_text(f, m["role"], "Unknown Role"),
                status=_text(f, m["status"], "Unknown Status"),
                stage=_text(f, m["stage"]),
                pending_days=days,
                severity=severity_for(days),
                display_notes=_text(f, m["display_notes"]),
                snooze_until=last_snooze_date(_text(f, m["snooze_notes"])),
                jd_uid=to_int(extract_field(f, m["jd_uid"], 0)),
                public_identifier=_text(f, m["public_identifier"]),
                kam=_text(f, m["kam"]),
                platform_link=_text(f, m["platform_link"], "#"),
                role_active=extract_field(f, m["role_active"]),
                scheduler_notes=_text(f, m["scheduler_notes"]),
                interview_process_final=_text(f, m["interview_process_final"]),
                raw=dict(f),
            )
        )

    return items


def ic_display_notes(fields: dict) -> str:
    """KAM notes, intake-call notes and flagged link, non-empty parts only."""
    parts = [_text(fields, [name]) for name in IC_NOTE_PARTS]
    return "\n".join(p for p in parts if p).strip()


def normalize_ic(records: list[dict]) -> list[ActionableItem]:
    """Normalize records from the Info Collection base."""
    m = IC_FIELDS
    items: list[ActionableItem] = []

    for record in records:
        f = record.get("fields") or {}
        days = _pending_days(f, m["pending_days"])
        role_active = extract_field(f, m["role_active"])

        items.append(
            ActionableItem(
                id=record["id"],
                source=IC,
                candidate_name=_text(f, m["candidate_name"], "Unknown Candidate"),
                company=_text(f, m["company"], "Unknown Company"),
                role=_text(f, m["role"], "Unknown Role"),
                status=_text(f, m["status"], "Unknown Status"),
                stage=_text(f, m["stage"]),
                pending_days=days,
                severity=severity_for(days),
                display_notes=ic_display_notes(f),
                # Only KAM-written notes carry snooze markers
                snooze_until=last_snooze_date(_text(f, m["snooze_notes"])),
                jd_uid=to_int(extract_field(f, m["jd_uid"], 0)),
                public_identifier=_text(f, m["public_identifier"]),
                kam=_text(f, m["kam"]),
                platform_link=_text(f, m["platform_link"], "#"),
                role_active=True if role_active is None else role_active,
                scheduler_notes=_text(f, m["scheduler_notes"]),
                interview_process_final="",
                raw=dict(f),
            )
        )

    return items


def normalize_source(source: str, records: list[dict]) -> list[ActionableItem]:
    if source == POST_TBR:
        return normalize_post_tbr(records)
    if source == IC:
        return normalize_ic(records)
    raise ValueError(f"Unknown source: {source}")
