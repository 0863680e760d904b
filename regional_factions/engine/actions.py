"""
Action definitions for the ledger.
Actions are plain, serializable instructions; the reducer applies them.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class Action:
    """Base action class. All actions have a type and payload."""
    type: str  # e.g., "set_region", "add_faction", "set_interaction", "roll_dice"
    payload: dict  # Action-specific data

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}


def set_region(region: str, authority: float = 0) -> Action:
    """
    Create a region or update its authority.
    Example: set_region("Coast", 40) leaves 60 power for the Coast's factions.
    """
    return Action(type="set_region", payload={"region": region, "authority": authority})


def remove_region(region: str) -> Action:
    return Action(type="remove_region", payload={"region": region})


def add_faction(
    region: str,
    faction: str,
    leader: str | None = None,
    description: str | None = None,
    goals: str | None = None,
) -> Action:
    """Add a faction to a region. Missing details fall back to the ledger defaults."""
    return Action(
        type="add_faction",
        payload={
            "region": region,
            "faction": faction,
            "leader": leader,
            "description": description,
            "goals": goals,
        },
    )


def remove_faction(region: str, faction: str) -> Action:
    return Action(type="remove_faction", payload={"region": region, "faction": faction})


def set_interaction(
    region_a: str,
    faction_a: str,
    region_b: str,
    faction_b: str,
    interaction_type: str,  # "war", "alliance" or "trade"
) -> Action:
    """
    Set the relationship between two factions, which may live in different regions.
    Example: set_interaction("Coast", "Smugglers", "Hills", "Wardens", "war")
    """
    return Action(
        type="set_interaction",
        payload={
            "region_a": region_a,
            "faction_a": faction_a,
            "region_b": region_b,
            "faction_b": faction_b,
            "interaction_type": interaction_type,
        },
    )


def remove_interaction(region_a: str, faction_a: str, region_b: str, faction_b: str) -> Action:
    return Action(
        type="remove_interaction",
        payload={
            "region_a": region_a,
            "faction_a": faction_a,
            "region_b": region_b,
            "faction_b": faction_b,
        },
    )


def normalize_region(region: str) -> Action:
    return Action(type="normalize_region", payload={"region": region})


def roll_dice(seed: int | None = None) -> Action:
    """
    Simulate one turn across all regions.
    seed makes the turn reproducible; the reducer's rng argument takes precedence when given.
    """
    return Action(type="roll_dice", payload={"seed": seed})
