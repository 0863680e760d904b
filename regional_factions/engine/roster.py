"""
Region and faction roster operations.
All operations mutate the ledger in place and rebalance whatever region they touched.
"""

from regional_factions.engine import STARTING_POWER
from regional_factions.engine.balance import normalize
from regional_factions.engine.interactions import drop_relations
from regional_factions.engine.results import Outcome, already_exists, done, not_found
from regional_factions.engine.state import (
    DEFAULT_DESCRIPTION,
    DEFAULT_GOALS,
    DEFAULT_LEADER,
    Endpoint,
    Faction,
    Ledger,
    Region,
)


def set_region(ledger: Ledger, region_name: str, authority: float = 0) -> Outcome:
    """Create a region, or update the authority of an existing one."""
    region = ledger.regions.get(region_name)
    if region is None:
        region = Region(name=region_name, authority=authority)
        ledger.regions[region_name] = region
    else:
        region.authority = authority
    normalize(region)
    return done()


def remove_region(ledger: Ledger, region_name: str) -> Outcome:
    """
    Remove a region and its roster.
    Relations other factions hold toward this region's factions are kept.
    """
    region = ledger.regions.pop(region_name, None)
    if region is None:
        return not_found(f"Region {region_name} not found")
    for faction in region.factions:
        _unindex(ledger, faction.name, region_name)
    return done()


def add_faction(
    ledger: Ledger,
    region_name: str,
    faction_name: str,
    leader: str | None = None,
    description: str | None = None,
    goals: str | None = None,
) -> Outcome:
    """
    Add a faction to a region at starting power, then rebalance the region.
    An unknown region is created with authority 0.
    """
    if region_name not in ledger.regions:
        set_region(ledger, region_name, 0)
    region = ledger.regions[region_name]
    if region.get_faction(faction_name) is not None:
        return already_exists(f"Faction {faction_name} already exists in {region_name}")

    region.factions.append(Faction(
        name=faction_name,
        power=STARTING_POWER,
        leader=leader or DEFAULT_LEADER,
        description=description or DEFAULT_DESCRIPTION,
        goals=goals or DEFAULT_GOALS,
    ))
    ledger.faction_regions.setdefault(faction_name, []).append(region_name)
    normalize(region)
    return done()


def remove_faction(ledger: Ledger, region_name: str, faction_name: str) -> Outcome:
    """Remove a faction from a region, drop its relations and rebalance what remains."""
    region = ledger.regions.get(region_name)
    if region is None:
        return not_found(f"Region {region_name} not found")
    faction = region.get_faction(faction_name)
    if faction is None:
        return not_found(f"Faction {faction_name} not found in {region_name}")

    region.factions.remove(faction)
    drop_relations(ledger, Endpoint(region_name, faction_name))
    _unindex(ledger, faction_name, region_name)
    normalize(region)
    return done()


def _unindex(ledger: Ledger, faction_name: str, region_name: str) -> None:
    """Drop region_name from the faction's reverse index; delete the entry once empty."""
    region_names = ledger.faction_regions.get(faction_name)
    if region_names is None:
        return
    if region_name in region_names:
        region_names.remove(region_name)
    if not region_names:
        del ledger.faction_regions[faction_name]
