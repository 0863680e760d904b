"""
Regional Factions Power Engine
Core ledger model, power balancing and turn simulation. No web framework, database, or UI.
"""

MAX_AUTHORITY = 100
STARTING_POWER = 50.0

# Per-turn fluctuation is a uniform integer in [-FLUCTUATION_RANGE, FLUCTUATION_RANGE]
FLUCTUATION_RANGE = 10

CONVERGENCE_TOLERANCE = 0.1
MAX_CONVERGENCE_ITERATIONS = 100
