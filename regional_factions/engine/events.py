"""
Ledger events for UI hooks and logging, plus the simulation event log.
Events describe what happened during action processing; log entries are the
human-readable lines a simulated turn produces.
"""

from dataclasses import dataclass, field
from typing import Any

from regional_factions.engine.results import Outcome


@dataclass
class LedgerEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerEvent":
        return cls(type=data["type"], payload=data["payload"])


@dataclass
class LogEntry:
    """One line of simulation output, tagged with the region it happened in."""
    region: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"region": self.region, "message": self.message}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEntry":
        return cls(region=str(data.get("region") or ""), message=str(data.get("message") or ""))


@dataclass
class EventLog:
    """Append-only log of simulation entries. Never trimmed automatically."""
    entries: list[LogEntry] = field(default_factory=list)

    def extend(self, entries: list[LogEntry]) -> None:
        self.entries.extend(entries)

    def all(self) -> list[LogEntry]:
        return list(self.entries)

    def clear(self) -> None:
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)


# Process-wide log used when a caller does not supply its own
default_event_log = EventLog()


def get_event_log() -> list[LogEntry]:
    return default_event_log.all()


def clear_event_log() -> None:
    default_event_log.clear()


# ===== Event Type Constants =====

# Region events
REGION_SET = "region_set"
REGION_REMOVED = "region_removed"
REGION_NORMALIZED = "region_normalized"

# Faction events
FACTION_ADDED = "faction_added"
FACTION_REMOVED = "faction_removed"

# Interaction events
INTERACTION_SET = "interaction_set"
INTERACTION_REMOVED = "interaction_removed"

# Simulation events
TURN_SIMULATED = "turn_simulated"


# ===== Event Factory Functions =====

def region_set(region: str, authority: float) -> LedgerEvent:
    return LedgerEvent(REGION_SET, {"region": region, "authority": authority})


def region_removed(region: str) -> LedgerEvent:
    return LedgerEvent(REGION_REMOVED, {"region": region})


def region_normalized(region: str, powers: dict[str, float]) -> LedgerEvent:
    return LedgerEvent(REGION_NORMALIZED, {
        "region": region,
        "powers": powers,  # faction name -> power after balancing
    })


def faction_added(region: str, faction: str, powers: dict[str, float]) -> LedgerEvent:
    return LedgerEvent(FACTION_ADDED, {
        "region": region,
        "faction": faction,
        "powers": powers,
    })


def faction_removed(region: str, faction: str, powers: dict[str, float]) -> LedgerEvent:
    return LedgerEvent(FACTION_REMOVED, {
        "region": region,
        "faction": faction,
        "powers": powers,
    })


def interaction_set(
    region_a: str,
    faction_a: str,
    region_b: str,
    faction_b: str,
    interaction_type: str,
) -> LedgerEvent:
    return LedgerEvent(INTERACTION_SET, {
        "region_a": region_a,
        "faction_a": faction_a,
        "region_b": region_b,
        "faction_b": faction_b,
        "interaction_type": interaction_type,
    })


def interaction_removed(region_a: str, faction_a: str, region_b: str, faction_b: str) -> LedgerEvent:
    return LedgerEvent(INTERACTION_REMOVED, {
        "region_a": region_a,
        "faction_a": faction_a,
        "region_b": region_b,
        "faction_b": faction_b,
    })


def turn_simulated(entries: list[LogEntry]) -> LedgerEvent:
    return LedgerEvent(TURN_SIMULATED, {"entries": [e.to_dict() for e in entries]})


def operation_skipped(action_type: str, outcome: Outcome) -> LedgerEvent:
    """Emitted instead of a change event when an operation left the ledger untouched."""
    return LedgerEvent(outcome.kind, {
        "action": action_type,
        "detail": outcome.detail,
    })
