"""
Database-backed ledger store and per-campaign exclusive access.
A mutation is load -> apply_action -> save under the campaign's lock, so no two
operations on the same ledger interleave mid-turn.
"""

import json
import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from fastapi import HTTPException
from sqlalchemy.orm import Session

from regional_factions.engine.events import EventLog
from regional_factions.engine.state import Ledger
from regional_factions.storage import LedgerStore

from .models import Campaign

_locks: dict[str, threading.Lock] = defaultdict(threading.Lock)
_locks_guard = threading.Lock()

# In-memory simulation logs, one per campaign; not persisted
_event_logs: dict[str, EventLog] = {}


@contextmanager
def campaign_lock(campaign_id: str) -> Iterator[None]:
    """Hold the exclusive-access token for one campaign's ledger."""
    with _locks_guard:
        lock = _locks[campaign_id]
    with lock:
        yield


def event_log_for(campaign_id: str) -> EventLog:
    if campaign_id not in _event_logs:
        _event_logs[campaign_id] = EventLog()
    return _event_logs[campaign_id]


def forget_campaign(campaign_id: str) -> None:
    """Drop in-memory state for a deleted campaign."""
    _event_logs.pop(campaign_id, None)
    with _locks_guard:
        _locks.pop(campaign_id, None)


def get_campaign_row(db: Session, campaign_id: str) -> Campaign:
    row = db.query(Campaign).filter(Campaign.id == campaign_id).first()
    if not row:
        raise HTTPException(status_code=404, detail=f"Campaign {campaign_id} not found")
    return row


class CampaignLedgerStore(LedgerStore):
    """Ledger persisted as JSON text on a Campaign row."""

    def __init__(self, db: Session, campaign_id: str):
        self.db = db
        self.campaign_id = campaign_id

    def load(self) -> Ledger:
        row = get_campaign_row(self.db, self.campaign_id)
        try:
            raw = json.loads(row.ledger) if isinstance(row.ledger, str) else row.ledger
        except (TypeError, json.JSONDecodeError):
            raw = {}
        return Ledger.from_dict(raw if isinstance(raw, dict) else {})

    def save(self, ledger: Ledger) -> None:
        row = get_campaign_row(self.db, self.campaign_id)
        row.ledger = json.dumps(ledger.to_dict())
        row.updated_at = datetime.utcnow()
        self.db.commit()
