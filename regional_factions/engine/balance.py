"""
Power balancing.
Keeps each region's faction powers summing to its available power (100 - authority).
"""

import math

from regional_factions.engine.state import Ledger, Region

# Totals this close to the target count as balanced, so a second pass is an exact no-op
BALANCE_TOLERANCE = 1e-9


def normalize(region: Region) -> Region:
    """
    Rebalance a region in place so total faction power equals available power.

    - Too much power: every faction is scaled down proportionally.
    - Too little power: every faction is reset to an equal share (prior distribution is discarded).
    - Empty regions and regions with authority above 100 are left untouched.
    """
    available = region.available_power
    count = len(region.factions)
    if count == 0 or available < 0:
        return region

    total = region.total_power
    if math.isclose(total, available, rel_tol=BALANCE_TOLERANCE, abs_tol=BALANCE_TOLERANCE):
        return region
    if total > available:
        for faction in region.factions:
            faction.power = (faction.power / total) * available
    elif total < available:
        share = available / count
        for faction in region.factions:
            faction.power = share
    return region


def normalize_all(ledger: Ledger) -> Ledger:
    """Normalize every region of the ledger in place."""
    for region in ledger.regions.values():
        normalize(region)
    return ledger
