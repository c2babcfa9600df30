"""Core data models for kamdash."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Sources
POST_TBR = "POST_TBR"
IC = "IC"
SOURCES = (POST_TBR, IC)

SOURCE_LABELS = {
    POST_TBR: "Post-TBR",
    IC: "IC Actionables",
}

# Severity bands, highest first: (minimum pending days, severity)
SEVERITY_THRESHOLDS = [
    (45, "extreme"),
    (30, "critical"),
    (15, "high"),
    (10, "medium"),
    (0, "low"),
]

UNASSIGNED = "Unassigned"


@dataclass
class ActionableItem:
    id: str  # Airtable record id
    source: str  # "POST_TBR" | "IC"
    candidate_name: str
    company: str
    role: str
    status: str
    stage: str
    pending_days: int
    severity: str  # "extreme" | "critical" | "high" | "medium" | "low"
    display_notes: str  # "[YYYY-MM-DD] text" lines, oldest first
    snooze_until: str | None  # YYYY-MM-DD from the last [SNOOZE: ...] marker
    jd_uid: int
    public_identifier: str
    kam: str  # "" when unassigned
    platform_link: str
    role_active: Any = None  # Airtable returns bool or string
    scheduler_notes: str = ""
    interview_process_final: str = ""
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def kam_label(self) -> str:
        return self.kam or UNASSIGNED
