"""Manual verification: fetch both Airtable views and print what normalizes.

Usage:
    AIRTABLE_API_KEY=pat... uv run python scripts/check_airtable_fetch.py [POST_TBR|IC]

Fetches both sources if no argument is given. Read-only: nothing is written
back to the backend.
"""

from __future__ import annotations

import sys

from kamdash.airtable.fetcher import Fetcher
from kamdash.config import Config
from kamdash.models import SOURCE_LABELS, SOURCES
from kamdash.normalize.transform import normalize_source


def main() -> None:
    config = Config.load()

    if not config.airtable_api_key:
        print("ERROR: Set AIRTABLE_API_KEY environment variable")
        sys.exit(1)

    wanted = [sys.argv[1].upper()] if len(sys.argv) > 1 else list(SOURCES)
    unknown = [s for s in wanted if s not in SOURCES]
    if unknown:
        print(f"ERROR: Unknown source {unknown[0]} (expected one of {', '.join(SOURCES)})")
        sys.exit(1)

    fetcher = Fetcher.from_config(config)

    try:
        for source in wanted:
            print(f"\n--- {SOURCE_LABELS[source]} ---")
            result = fetcher.fetch_source(source)
            items = normalize_source(source, result.records)

            for item in sorted(items, key=lambda i: -i.pending_days)[:5]:
                print(f"  {item.id}: {item.candidate_name} @ {item.company}")
                print(f"    Pending: {item.pending_days}d ({item.severity})")
                print(f"    KAM: {item.kam_label}")
                print(f"    Snooze until: {item.snooze_until or '(none)'}")
                print()

            print(f"{len(items)} records")
            if not result.complete:
                print(f"WARNING: fetch stopped early: {result.error}")

    finally:
        fetcher.close()


if __name__ == "__main__":
    main()
