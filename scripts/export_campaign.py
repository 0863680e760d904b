#!/usr/bin/env python3
"""
Export a campaign's ledger from the database to a JSON file (or stdout).
Usage: python scripts/export_campaign.py <campaign_id or code> [output.json]
From repo root with the package installed (pip install -e .).
"""
import sys

from regional_factions.api.database import session_scope
from regional_factions.api.models import Campaign
from regional_factions.api.store import CampaignLedgerStore
from regional_factions.engine.serialization import export_ledger


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python scripts/export_campaign.py <campaign_id or code> [output.json]", file=sys.stderr)
        sys.exit(1)
    key = sys.argv[1].strip()
    out_path = sys.argv[2] if len(sys.argv) > 2 else None

    with session_scope() as db:
        row = (
            db.query(Campaign).filter(Campaign.id == key).first()
            or db.query(Campaign).filter(Campaign.campaign_code == key.upper()).first()
        )
        if not row:
            print(f"No campaign found for: {key!r}", file=sys.stderr)
            sys.exit(1)
        text = export_ledger(CampaignLedgerStore(db, row.id).load())

    if out_path:
        with open(out_path, "w") as f:
            f.write(text)
        print(f"Exported campaign {row.name!r} to {out_path}")
    else:
        print(text)


if __name__ == "__main__":
    main()
