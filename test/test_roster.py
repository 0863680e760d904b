"""
Region and faction roster operations: creation, churn, reverse index upkeep and tolerant no-ops.
"""

import pytest

from regional_factions.engine.interactions import set_interaction
from regional_factions.engine.results import ALREADY_EXISTS, NOT_FOUND
from regional_factions.engine.roster import add_faction, remove_faction, remove_region, set_region
from regional_factions.engine.state import Ledger


def faction_names(ledger: Ledger, region: str) -> list[str]:
    return [f.name for f in ledger.regions[region].factions]


def test_set_region_is_idempotent_and_updates_authority():
    ledger = Ledger()
    set_region(ledger, "Coast", 40)
    set_region(ledger, "Coast", 40)
    assert list(ledger.regions) == ["Coast"]
    assert ledger.regions["Coast"].authority == 40

    add_faction(ledger, "Coast", "A")
    set_region(ledger, "Coast", 70)
    assert ledger.regions["Coast"].authority == 70
    assert ledger.regions["Coast"].total_power == pytest.approx(30)


def test_first_faction_takes_whole_budget():
    ledger = Ledger()
    set_region(ledger, "Coast", 40)
    add_faction(ledger, "Coast", "A", leader="Mara")
    faction = ledger.find_faction("Coast", "A")
    assert faction.power == pytest.approx(60)
    assert faction.leader == "Mara"
    assert faction.description == "No description"
    assert faction.goals == "No goals"


def test_second_faction_shrinks_roster_proportionally():
    ledger = Ledger()
    set_region(ledger, "Coast", 40)
    add_faction(ledger, "Coast", "A")
    add_faction(ledger, "Coast", "B")
    # A held 60, B arrives at 50: 110 scaled down to 60
    assert ledger.find_faction("Coast", "A").power == pytest.approx(60 * 60 / 110)
    assert ledger.find_faction("Coast", "B").power == pytest.approx(50 * 60 / 110)
    assert ledger.regions["Coast"].total_power == pytest.approx(60)


def test_add_faction_creates_missing_region_at_zero_authority():
    ledger = Ledger()
    outcome = add_faction(ledger, "Frontier", "Rangers")
    assert outcome.ok
    assert ledger.regions["Frontier"].authority == 0
    assert ledger.find_faction("Frontier", "Rangers").power == pytest.approx(100)


def test_duplicate_faction_is_rejected_without_change():
    ledger = Ledger()
    add_faction(ledger, "Coast", "A")
    outcome = add_faction(ledger, "Coast", "A")
    assert not outcome.ok
    assert outcome.kind == ALREADY_EXISTS
    assert faction_names(ledger, "Coast") == ["A"]
    assert ledger.faction_regions["A"] == ["Coast"]


def test_roster_churn_restores_prior_set():
    ledger = Ledger()
    set_region(ledger, "Coast", 25)
    for name in ("A", "B", "C"):
        add_faction(ledger, "Coast", name)
    before = faction_names(ledger, "Coast")

    add_faction(ledger, "Coast", "F")
    assert faction_names(ledger, "Coast") == before + ["F"]
    remove_faction(ledger, "Coast", "F")

    assert faction_names(ledger, "Coast") == before
    assert ledger.regions["Coast"].total_power == pytest.approx(75, abs=1e-6)
    assert "F" not in ledger.faction_regions


def test_reverse_index_tracks_membership():
    ledger = Ledger()
    add_faction(ledger, "Coast", "Guild")
    add_faction(ledger, "Hills", "Guild")
    assert ledger.faction_regions["Guild"] == ["Coast", "Hills"]

    remove_faction(ledger, "Coast", "Guild")
    assert ledger.faction_regions["Guild"] == ["Hills"]
    remove_faction(ledger, "Hills", "Guild")
    assert "Guild" not in ledger.faction_regions


def test_remove_missing_faction_or_region_is_noop():
    ledger = Ledger()
    add_faction(ledger, "Coast", "A")
    snapshot = ledger.to_dict()

    assert remove_faction(ledger, "Coast", "Nobody").kind == NOT_FOUND
    assert remove_faction(ledger, "Nowhere", "A").kind == NOT_FOUND
    assert remove_region(ledger, "Nowhere").kind == NOT_FOUND
    assert ledger.to_dict() == snapshot


def test_remove_faction_drops_its_relations():
    ledger = Ledger()
    add_faction(ledger, "Coast", "A")
    add_faction(ledger, "Coast", "B")
    set_interaction(ledger, "Coast", "A", "Coast", "B", "war")

    remove_faction(ledger, "Coast", "A")
    assert ledger.interactions_for("Coast", "B") == []


def test_remove_region_keeps_relations_pointing_into_it():
    ledger = Ledger()
    add_faction(ledger, "Coast", "A")
    add_faction(ledger, "Hills", "B")
    set_interaction(ledger, "Coast", "A", "Hills", "B", "trade")

    assert remove_region(ledger, "Hills").ok
    assert "Hills" not in ledger.regions
    assert "B" not in ledger.faction_regions
    # Surviving side still lists the dangling relation
    views = ledger.interactions_for("Coast", "A")
    assert [(i.type, i.target, i.region) for i in views] == [("trade", "B", "Hills")]
