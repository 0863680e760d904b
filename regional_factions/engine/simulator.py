"""
Turn simulation.
One turn perturbs every contested region: random fluctuation, interaction effects,
a bounded convergence pass toward the region's power budget, then a final normalize.
"""

import logging
import random

from regional_factions.engine import (
    CONVERGENCE_TOLERANCE,
    FLUCTUATION_RANGE,
    MAX_CONVERGENCE_ITERATIONS,
)
from regional_factions.engine.balance import normalize
from regional_factions.engine.events import EventLog, LogEntry, default_event_log
from regional_factions.engine.interactions import effect_for
from regional_factions.engine.state import Endpoint, Ledger, Region

logger = logging.getLogger(__name__)


def _format_change(delta: int) -> str:
    return f"+{delta}" if delta > 0 else str(delta)


def _converge(region: Region, rng: random.Random) -> int:
    """
    Nudge randomly chosen factions until the region total is within tolerance of its budget.
    Bounded by MAX_CONVERGENCE_ITERATIONS; may stop short when clamping at 0 stalls progress.
    Returns the number of iterations used.
    """
    target = region.available_power
    count = len(region.factions)
    current = region.total_power
    iterations = 0
    while abs(current - target) > CONVERGENCE_TOLERANCE and iterations < MAX_CONVERGENCE_ITERATIONS:
        difference = current - target
        faction = rng.choice(region.factions)
        faction.power -= difference / count
        if faction.power < 0:
            faction.power = 0
        current = region.total_power
        iterations += 1
    return iterations


def simulate_region(ledger: Ledger, region: Region, rng: random.Random) -> list[LogEntry]:
    """Run one turn for a single region. Regions with fewer than two factions are skipped."""
    entries: list[LogEntry] = []
    if len(region.factions) < 2:
        return entries

    for faction in region.factions:
        delta = rng.randint(-FLUCTUATION_RANGE, FLUCTUATION_RANGE)
        faction.power += delta
        if faction.power < 0:
            faction.power = 0
        entries.append(LogEntry(region.name, f"{faction.name} power changed by {_format_change(delta)}"))

        # Effects apply to the acting faction only; its counterpart gets its own when processed
        for other, kind in list(ledger.relations_of(Endpoint(region.name, faction.name))):
            effect = effect_for(kind)
            target = ledger.find_faction(other.region, other.faction)
            if target is None or effect is None:
                continue
            faction.power += effect.power_effect
            entries.append(LogEntry(region.name, f"{faction.name} {effect.description} {target.name}"))

    iterations = _converge(region, rng)
    normalize(region)
    logger.debug("Simulated %s: %d entries, %d convergence iterations", region.name, len(entries), iterations)
    return entries


def roll_dice(
    ledger: Ledger,
    rng: random.Random | None = None,
    event_log: EventLog | None = None,
) -> list[LogEntry]:
    """
    Simulate one turn across every region of the ledger, in place.

    Args:
        ledger: Ledger to mutate
        rng: Random source (randint/choice); a fresh unseeded one when omitted
        event_log: Log to append entries to; the process-wide log when omitted

    Returns:
        Log entries produced this turn, in region then faction order
    """
    if rng is None:
        rng = random.Random()
    if event_log is None:
        event_log = default_event_log

    entries: list[LogEntry] = []
    for region in ledger.regions.values():
        entries.extend(simulate_region(ledger, region, rng))

    event_log.extend(entries)
    return entries
