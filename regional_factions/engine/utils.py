"""
Utility functions for the ledger engine: console rendering for demos and scripts.
"""

from regional_factions.engine.events import LogEntry
from regional_factions.engine.queries import get_region_stats
from regional_factions.engine.state import Ledger


def format_power(power: float) -> str:
    return f"{power:.1f}"


def print_ledger(ledger: Ledger) -> None:
    """Print every region with its authority, faction powers and interactions."""
    if not ledger.regions:
        print("  (no regions)")
        return
    for name, region in ledger.regions.items():
        print(f"\n  {name} (authority {region.authority}, available {region.available_power})")
        for faction in region.factions:
            print(f"    {faction.name:<20} power={format_power(faction.power):>6}  leader={faction.leader}")
            for interaction in ledger.interactions_for(name, faction.name):
                print(f"      - {interaction.type} with {interaction.target} ({interaction.region})")


def print_region_stats(ledger: Ledger) -> None:
    for name in ledger.regions:
        stats = get_region_stats(ledger, name)
        if stats is None:
            continue
        print(
            f"  {name}: {stats.faction_count} factions, total {format_power(stats.total_faction_power)}, "
            f"strongest {stats.most_powerful_faction} ({format_power(stats.most_powerful_faction_power)}), "
            f"{stats.interaction_count} interactions"
        )


def print_event_log(entries: list[LogEntry]) -> None:
    if not entries:
        print("  No significant changes occurred.")
        return
    for entry in entries:
        print(f"  [{entry.region}] {entry.message}")
