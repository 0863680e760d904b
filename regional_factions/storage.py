"""
Persistence adapters.
A store loads and saves a whole ledger; the engine itself never touches storage.
The database-backed store used by the API lives in regional_factions.api.store.
"""

import logging
from pathlib import Path

from regional_factions.engine.serialization import export_ledger, import_ledger
from regional_factions.engine.state import Ledger

logger = logging.getLogger(__name__)


class LedgerStore:
    """Interface: load() -> Ledger, save(Ledger)."""

    def load(self) -> Ledger:
        raise NotImplementedError

    def save(self, ledger: Ledger) -> None:
        raise NotImplementedError


class JsonFileLedgerStore(LedgerStore):
    """Ledger kept in a single JSON file. A missing file loads as an empty ledger."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> Ledger:
        if not self.path.exists():
            return Ledger()
        result = import_ledger(self.path.read_text(encoding="utf-8"))
        if not result.ok:
            raise ValueError(f"Cannot load ledger from {self.path}: {result.error}")
        return result.ledger

    def save(self, ledger: Ledger) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(export_ledger(ledger), encoding="utf-8")
        logger.debug("Saved ledger to %s", self.path)
