"""
Interaction registry: faction relationships and their per-turn power effects.
"""

from dataclasses import dataclass

from regional_factions.engine.results import Outcome, done, invalid, not_found
from regional_factions.engine.state import Endpoint, Ledger, relation_key

WAR = "war"
ALLIANCE = "alliance"
TRADE = "trade"


@dataclass(frozen=True)
class InteractionEffect:
    """Power change applied to the acting faction each turn, plus the log phrase."""
    power_effect: int
    description: str


INTERACTION_EFFECTS: dict[str, InteractionEffect] = {
    WAR: InteractionEffect(power_effect=-10, description="is at war with"),
    ALLIANCE: InteractionEffect(power_effect=5, description="is allied with"),
    TRADE: InteractionEffect(power_effect=3, description="has a trade agreement with"),
}


def effect_for(interaction_type: str) -> InteractionEffect | None:
    return INTERACTION_EFFECTS.get(interaction_type)


def set_interaction(
    ledger: Ledger,
    region_a: str,
    faction_a: str,
    region_b: str,
    faction_b: str,
    interaction_type: str,
) -> Outcome:
    """
    Create or retype the relation between two factions.
    Both factions see it in their interaction lists. Re-setting an existing pair replaces
    the type in place rather than adding a second entry.
    """
    if interaction_type not in INTERACTION_EFFECTS:
        return invalid(f"Unknown interaction type: {interaction_type}")
    if ledger.find_faction(region_a, faction_a) is None:
        return not_found(f"Faction {faction_a} not found in {region_a}")
    if ledger.find_faction(region_b, faction_b) is None:
        return not_found(f"Faction {faction_b} not found in {region_b}")

    a = Endpoint(region_a, faction_a)
    b = Endpoint(region_b, faction_b)
    if a == b:
        return invalid("Cannot create interaction with the same faction")
    ledger.relations[relation_key(a, b)] = interaction_type
    return done()


def remove_interaction(
    ledger: Ledger,
    region_a: str,
    faction_a: str,
    region_b: str,
    faction_b: str,
) -> Outcome:
    """Remove the relation between two factions, from both sides."""
    key = relation_key(Endpoint(region_a, faction_a), Endpoint(region_b, faction_b))
    if key not in ledger.relations:
        return not_found(f"No interaction between {faction_a} ({region_a}) and {faction_b} ({region_b})")
    del ledger.relations[key]
    return done()


def drop_relations(ledger: Ledger, endpoint: Endpoint) -> int:
    """Remove every relation touching endpoint. Returns how many were removed."""
    doomed = [key for key in ledger.relations if endpoint in key]
    for key in doomed:
        del ledger.relations[key]
    return len(doomed)
