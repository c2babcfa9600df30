"""Configuration loading for kamdash.

Config sources (in priority order):
1. Explicit arguments passed to functions
2. Environment variables (AIRTABLE_API_KEY, etc.)
3. .env file in current directory
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_STATE_PATH = Path(".kamdash-state.json")
DEFAULT_COMPLETION_MARKER = "COMPLETED"
COMPLETION_MARKERS = ("COMPLETED", "SUBMITTED")

# Post-TBR base: table id and the KAM pending view
POST_TBR_TABLE = "tbliHNuWXCvnIZKLy"
POST_TBR_VIEW = "DNT - Vaibhav KAM Pending 10 Days"

# Info Collection base
IC_TABLE = "Info Collection"
IC_VIEW = "DNT - KAM Pending (IC)"


@dataclass
class Config:
    airtable_api_key: str = ""
    post_tbr_base_id: str = ""
    ic_base_id: str = ""
    backend_update_url: str = ""
    backend_identity_id: str = ""
    state_path: Path = DEFAULT_STATE_PATH
    completion_marker: str = DEFAULT_COMPLETION_MARKER

    @classmethod
    def load(cls) -> Config:
        marker = os.getenv("KAMDASH_COMPLETION_MARKER", DEFAULT_COMPLETION_MARKER).upper()
        if marker not in COMPLETION_MARKERS:
            marker = DEFAULT_COMPLETION_MARKER
        return cls(
            airtable_api_key=os.getenv("AIRTABLE_API_KEY", ""),
            post_tbr_base_id=os.getenv("AIRTABLE_BASE_ID", ""),
            ic_base_id=os.getenv("AIRTABLE_IC_BASE_ID", ""),
            backend_update_url=os.getenv("BACKEND_UPDATE_URL", ""),
            backend_identity_id=os.getenv("BACKEND_IDENTITY_ID", ""),
            state_path=Path(os.getenv("KAMDASH_STATE_PATH", str(DEFAULT_STATE_PATH))),
            completion_marker=marker,
        )

    def validate(self) -> list[str]:
        """Return a list of missing config issues."""
        issues = []
        if not self.airtable_api_key:
            issues.append("Airtable API key not set (AIRTABLE_API_KEY)")
        if not self.post_tbr_base_id:
            issues.append("Post-TBR base not set (AIRTABLE_BASE_ID)")
        if not self.ic_base_id:
            issues.append("Info Collection base not set (AIRTABLE_IC_BASE_ID)")
        if not self.backend_update_url:
            issues.append("Backend update URL not set (BACKEND_UPDATE_URL)")
        if not self.backend_identity_id:
            issues.append("Backend identity not set (BACKEND_IDENTITY_ID)")
        return issues
