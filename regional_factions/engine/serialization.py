"""
Ledger export/import.
Import is the one operation that reports failure: malformed text yields a failed
ImportResult and the caller keeps whatever ledger it already had.
"""

import json
import logging
from dataclasses import dataclass

from regional_factions.engine.balance import normalize_all
from regional_factions.engine.state import Ledger

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Result of parsing a ledger document."""
    ok: bool
    ledger: Ledger | None = None
    error: str | None = None


def export_ledger(ledger: Ledger) -> str:
    """Encode the full ledger (regions and reverse index) as indented JSON."""
    return ledger.to_json(indent=2)


def import_ledger(json_str: str) -> ImportResult:
    """
    Decode a ledger document and rebalance every region.
    Hand-edited or stale files may break the power invariant; normalizing on the way in repairs them.
    """
    try:
        data = json.loads(json_str)
    except (TypeError, ValueError) as e:
        logger.warning("Error importing regional data: %s", e)
        return ImportResult(ok=False, error=f"Invalid JSON: {e}")
    if not isinstance(data, dict):
        logger.warning("Error importing regional data: top level is %s, not an object", type(data).__name__)
        return ImportResult(ok=False, error="Ledger document must be a JSON object")

    ledger = Ledger.from_dict(data)
    normalize_all(ledger)
    return ImportResult(ok=True, ledger=ledger)
