"""
Main entry point for the Regional Factions power engine.
Demonstrates core functionality with a simple simulated scenario.

Usage: python main.py [--turns N] [--seed S] [--save ledger.json] [--load ledger.json]
"""

import argparse
import logging
import random

from regional_factions.engine.actions import (
    add_faction,
    remove_faction,
    set_interaction,
    set_region,
)
from regional_factions.engine.events import EventLog
from regional_factions.engine.reducer import apply_action, replay_from_actions
from regional_factions.engine.simulator import roll_dice
from regional_factions.engine.state import Ledger
from regional_factions.engine.utils import print_event_log, print_ledger, print_region_stats
from regional_factions.storage import JsonFileLedgerStore


def build_demo_ledger() -> Ledger:
    """Two regions, four factions, one cross-border war and one alliance."""
    actions = [
        set_region("Coast", 40),
        set_region("Hills", 20),
        add_faction("Coast", "Harbor Guild", leader="Mara Vell", goals="Control the docks"),
        add_faction("Coast", "Smugglers", description="Night runners along the cliffs"),
        add_faction("Hills", "Hill Clans", leader="Old Brannoc"),
        add_faction("Hills", "Wardens", leader="Captain Ilse"),
        set_interaction("Coast", "Smugglers", "Hills", "Wardens", "war"),
        set_interaction("Coast", "Harbor Guild", "Hills", "Hill Clans", "alliance"),
    ]
    ledger, _ = replay_from_actions(Ledger(), actions)
    return ledger


def main():
    parser = argparse.ArgumentParser(description="Regional Factions power dynamics demo")
    parser.add_argument("--turns", type=int, default=3, help="Turns to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible turns")
    parser.add_argument("--load", default=None, help="Start from a ledger JSON file instead of the demo map")
    parser.add_argument("--save", default=None, help="Write the final ledger to this JSON file")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("Regional Factions - Power Dynamics Engine")
    print("=" * 60)

    if args.load:
        ledger = JsonFileLedgerStore(args.load).load()
    else:
        ledger = build_demo_ledger()

    print("\n[INITIAL LEDGER]")
    print_ledger(ledger)

    # ===== Roster churn: add and remove a faction =====
    if "Coast" in ledger.regions:
        print("\n[ROSTER CHURN: Pirates arrive on the Coast and are driven off]")
        ledger, events = apply_action(ledger, add_faction("Coast", "Pirates"))
        print(f"  Events: {[e.type for e in events]}")
        print_ledger(ledger)
        ledger, events = apply_action(ledger, remove_faction("Coast", "Pirates"))
        print(f"  Events: {[e.type for e in events]}")

    # ===== Simulated turns =====
    rng = random.Random(args.seed)
    event_log = EventLog()
    for turn in range(1, args.turns + 1):
        print(f"\n[TURN {turn}]")
        entries = roll_dice(ledger, rng=rng, event_log=event_log)
        print_event_log(entries)

    print("\n[FINAL LEDGER]")
    print_ledger(ledger)
    print("\n[REGION STATS]")
    print_region_stats(ledger)
    print(f"\nEvent log holds {len(event_log)} entries")

    if args.save:
        JsonFileLedgerStore(args.save).save(ledger)
        print(f"Saved ledger to {args.save}")


if __name__ == "__main__":
    main()
