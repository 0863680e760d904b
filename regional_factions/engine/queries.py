"""
Query functions for UI integration.
These functions read the ledger without mutating it.
"""

from dataclasses import dataclass
from typing import Any

from regional_factions.engine.state import Faction, Interaction, Ledger


@dataclass
class RegionStats:
    """Summary of one region's power picture."""
    region_name: str
    authority: float
    faction_count: int
    total_faction_power: float
    most_powerful_faction: str  # "None" when no faction has positive power
    most_powerful_faction_power: float
    interaction_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "region_name": self.region_name,
            "authority": self.authority,
            "faction_count": self.faction_count,
            "total_faction_power": self.total_faction_power,
            "most_powerful_faction": self.most_powerful_faction,
            "most_powerful_faction_power": self.most_powerful_faction_power,
            "interaction_count": self.interaction_count,
        }


def get_faction(ledger: Ledger, region_name: str, faction_name: str) -> Faction | None:
    return ledger.find_faction(region_name, faction_name)


def get_interactions(ledger: Ledger, region_name: str, faction_name: str) -> list[Interaction]:
    """Interaction list of one faction; empty when the faction does not exist."""
    if ledger.find_faction(region_name, faction_name) is None:
        return []
    return ledger.interactions_for(region_name, faction_name)


def get_faction_view(ledger: Ledger, region_name: str, faction_name: str) -> dict[str, Any] | None:
    """Faction as it appears in the persisted document, interactions included."""
    faction = ledger.find_faction(region_name, faction_name)
    if faction is None:
        return None
    out = faction.to_dict()
    out["region"] = region_name
    out["interactions"] = [i.to_dict() for i in ledger.interactions_for(region_name, faction_name)]
    return out


def get_region_stats(ledger: Ledger, region_name: str) -> RegionStats | None:
    """Faction count, total power, strongest faction and interaction count for a region."""
    region = ledger.regions.get(region_name)
    if region is None:
        return None

    # Strictly greater than the running max, starting from nobody at 0
    strongest_name, strongest_power = "None", 0.0
    for faction in region.factions:
        if faction.power > strongest_power:
            strongest_name, strongest_power = faction.name, faction.power

    return RegionStats(
        region_name=region_name,
        authority=region.authority,
        faction_count=len(region.factions),
        total_faction_power=region.total_power,
        most_powerful_faction=strongest_name,
        most_powerful_faction_power=strongest_power,
        interaction_count=sum(
            len(ledger.interactions_for(region_name, f.name)) for f in region.factions
        ),
    )


def get_ledger_stats(ledger: Ledger) -> dict[str, RegionStats]:
    out: dict[str, RegionStats] = {}
    for name in ledger.regions:
        stats = get_region_stats(ledger, name)
        if stats is not None:
            out[name] = stats
    return out
