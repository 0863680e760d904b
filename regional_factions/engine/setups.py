"""
Seed ledgers for new campaigns.
Each setup lives under data/setups/<setup_id>/: ledger.json (a ledger document) and an
optional manifest.json (display_name, description).
"""

import json
from pathlib import Path

from regional_factions.engine.serialization import import_ledger
from regional_factions.engine.state import Ledger

DATA_DIR = Path(__file__).parent.parent / "data"
SETUPS_DIR = DATA_DIR / "setups"


def _setup_dir(setup_id: str) -> Path:
    return SETUPS_DIR / setup_id


def _read_manifest(setup_dir: Path, setup_id: str) -> dict:
    manifest_path = setup_dir / "manifest.json"
    out = {"id": setup_id, "display_name": setup_id, "description": ""}
    if not manifest_path.exists():
        return out
    try:
        with open(manifest_path, "r") as f:
            m = json.load(f)
    except (json.JSONDecodeError, OSError):
        return out
    if isinstance(m, dict):
        out["display_name"] = str(m.get("display_name", setup_id))
        out["description"] = str(m.get("description", ""))
    return out


def list_setups() -> list[dict]:
    """Return [{ id, display_name, description }, ...] for every setup directory with a ledger.json."""
    out = []
    if not SETUPS_DIR.exists():
        return out
    for d in sorted(SETUPS_DIR.iterdir()):
        if not d.is_dir() or not (d / "ledger.json").exists():
            continue
        out.append(_read_manifest(d, d.name))
    return out


def load_setup(setup_id: str) -> Ledger:
    """
    Load a setup's seed ledger, normalized.
    Raises FileNotFoundError for an unknown setup and ValueError when its ledger.json is malformed.
    """
    setup_dir = _setup_dir(setup_id)
    ledger_path = setup_dir / "ledger.json"
    if not setup_dir.is_dir() or not ledger_path.exists():
        raise FileNotFoundError(f"Setup not found: {setup_id}")
    with open(ledger_path, "r") as f:
        result = import_ledger(f.read())
    if not result.ok:
        raise ValueError(f"Setup {setup_id} has a malformed ledger.json: {result.error}")
    return result.ledger
