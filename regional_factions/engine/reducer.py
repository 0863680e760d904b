"""
Main ledger reducer.
Applies actions to a copy of the ledger, returning (new_ledger, events).
The input ledger is never mutated, so a caller can treat one apply_action call as a transaction.
"""

import random

from regional_factions.engine import balance, interactions, roster, simulator
from regional_factions.engine.actions import Action
from regional_factions.engine.events import (
    EventLog,
    LedgerEvent,
    faction_added,
    faction_removed,
    interaction_removed,
    interaction_set,
    operation_skipped,
    region_normalized,
    region_removed,
    region_set,
    turn_simulated,
)
from regional_factions.engine.results import Outcome, done, not_found
from regional_factions.engine.state import Ledger


def _powers(ledger: Ledger, region_name: str) -> dict[str, float]:
    region = ledger.regions.get(region_name)
    if region is None:
        return {}
    return {f.name: f.power for f in region.factions}


def apply_action(
    ledger: Ledger,
    action: Action,
    rng: random.Random | None = None,
    event_log: EventLog | None = None,
) -> tuple[Ledger, list[LedgerEvent]]:
    """
    Apply a single action to the ledger, returning the new ledger and events.

    Operations on missing regions or factions do not raise: the ledger comes back unchanged
    with a single not_found / already_exists / invalid event.

    Args:
        ledger: Current ledger
        action: Action to apply
        rng: Random source for roll_dice (overrides the action's seed)
        event_log: Log roll_dice appends to (process-wide log when omitted)

    Returns:
        Tuple of (new_ledger, events) where events describe what happened
    """
    new_ledger = ledger.copy()
    p = action.payload

    if action.type == "set_region":
        outcome = roster.set_region(new_ledger, p["region"], p.get("authority", 0))
        evts = [region_set(p["region"], new_ledger.regions[p["region"]].authority)]

    elif action.type == "remove_region":
        outcome = roster.remove_region(new_ledger, p["region"])
        evts = [region_removed(p["region"])]

    elif action.type == "add_faction":
        outcome = roster.add_faction(
            new_ledger,
            p["region"],
            p["faction"],
            leader=p.get("leader"),
            description=p.get("description"),
            goals=p.get("goals"),
        )
        evts = [faction_added(p["region"], p["faction"], _powers(new_ledger, p["region"]))]

    elif action.type == "remove_faction":
        outcome = roster.remove_faction(new_ledger, p["region"], p["faction"])
        evts = [faction_removed(p["region"], p["faction"], _powers(new_ledger, p["region"]))]

    elif action.type == "set_interaction":
        outcome = interactions.set_interaction(
            new_ledger,
            p["region_a"],
            p["faction_a"],
            p["region_b"],
            p["faction_b"],
            p["interaction_type"],
        )
        evts = [interaction_set(
            p["region_a"], p["faction_a"], p["region_b"], p["faction_b"], p["interaction_type"],
        )]

    elif action.type == "remove_interaction":
        outcome = interactions.remove_interaction(
            new_ledger, p["region_a"], p["faction_a"], p["region_b"], p["faction_b"],
        )
        evts = [interaction_removed(p["region_a"], p["faction_a"], p["region_b"], p["faction_b"])]

    elif action.type == "normalize_region":
        outcome = _handle_normalize_region(new_ledger, p["region"])
        evts = [region_normalized(p["region"], _powers(new_ledger, p["region"]))]

    elif action.type == "roll_dice":
        if rng is None:
            rng = random.Random(p.get("seed"))
        entries = simulator.roll_dice(new_ledger, rng=rng, event_log=event_log)
        return new_ledger, [turn_simulated(entries)]

    else:
        raise ValueError(f"Unknown action type: {action.type}")

    if not outcome.ok:
        # Untouched: hand back the caller's ledger state rather than a partially edited copy
        return ledger.copy(), [operation_skipped(action.type, outcome)]
    return new_ledger, evts


def _handle_normalize_region(ledger: Ledger, region_name: str) -> Outcome:
    region = ledger.regions.get(region_name)
    if region is None:
        return not_found(f"Region {region_name} not found")
    balance.normalize(region)
    return done()


def replay_from_actions(
    initial_ledger: Ledger,
    actions: list[Action],
    rng: random.Random | None = None,
    event_log: EventLog | None = None,
) -> tuple[Ledger, list[LedgerEvent]]:
    """
    Replay a series of actions from an initial ledger.
    With a seeded rng (or seeded roll_dice actions) the result is reproducible.

    Returns:
        Tuple of (final_ledger, all_events) after all actions applied
    """
    current = initial_ledger.copy()
    all_events: list[LedgerEvent] = []
    for action in actions:
        current, events = apply_action(current, action, rng=rng, event_log=event_log)
        all_events.extend(events)
    return current, all_events
