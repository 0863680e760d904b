"""
Ledger state representation.
Regions own their faction rosters; interactions are held once per faction pair in a relation set
and exposed per faction as derived views.
Includes JSON (de)serialization in the document shape the campaign tool persists.
"""

import json
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Iterator

from regional_factions.engine import MAX_AUTHORITY, STARTING_POWER

DEFAULT_LEADER = "Unknown"
DEFAULT_DESCRIPTION = "No description"
DEFAULT_GOALS = "No goals"


def _number(value: Any, default: float) -> float:
    """Numeric field from a decoded document; bools and junk fall back to default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _ensure_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(x) for x in value]


@dataclass(frozen=True)
class Endpoint:
    """One side of a relation: a faction as it appears in a specific region."""
    region: str
    faction: str


def relation_key(a: Endpoint, b: Endpoint) -> frozenset[Endpoint]:
    """Unordered key for the relation between two endpoints."""
    return frozenset((a, b))


@dataclass
class Interaction:
    """A faction's view of one relation: who it points at and how they relate."""
    type: str  # "war", "alliance" or "trade"
    target: str  # target faction name
    region: str  # region the target faction belongs to

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "target": self.target, "region": self.region}


@dataclass
class Faction:
    """A faction's presence in one region."""
    name: str
    power: float = STARTING_POWER
    leader: str = DEFAULT_LEADER
    description: str = DEFAULT_DESCRIPTION
    goals: str = DEFAULT_GOALS

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "power": self.power,
            "leader": self.leader,
            "description": self.description,
            "goals": self.goals,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Faction":
        if not isinstance(data, dict):
            data = {}
        return cls(
            name=str(data.get("name") or ""),
            power=_number(data.get("power"), STARTING_POWER),
            leader=str(data.get("leader") or DEFAULT_LEADER),
            description=str(data.get("description") or DEFAULT_DESCRIPTION),
            goals=str(data.get("goals") or DEFAULT_GOALS),
        )


@dataclass
class Region:
    """A named area with an authority level and an ordered faction roster."""
    name: str
    authority: float = 0
    factions: list[Faction] = field(default_factory=list)

    @property
    def available_power(self) -> float:
        return MAX_AUTHORITY - self.authority

    @property
    def total_power(self) -> float:
        return sum(f.power for f in self.factions)

    def get_faction(self, name: str) -> Faction | None:
        for faction in self.factions:
            if faction.name == name:
                return faction
        return None


@dataclass
class Ledger:
    """Complete regional power document."""
    regions: dict[str, Region] = field(default_factory=dict)
    # faction name -> names of regions it appears in (reverse index)
    faction_regions: dict[str, list[str]] = field(default_factory=dict)
    # unordered endpoint pair -> interaction type; insertion order drives per-faction views
    relations: dict[frozenset[Endpoint], str] = field(default_factory=dict)

    def copy(self) -> "Ledger":
        """Return a deep copy of this ledger."""
        return deepcopy(self)

    def find_faction(self, region_name: str, faction_name: str) -> Faction | None:
        region = self.regions.get(region_name)
        if region is None:
            return None
        return region.get_faction(faction_name)

    def relations_of(self, endpoint: Endpoint) -> Iterator[tuple[Endpoint, str]]:
        """Yield (other endpoint, type) for every relation touching endpoint, in insertion order."""
        for key, kind in self.relations.items():
            if endpoint not in key:
                continue
            others = [e for e in key if e != endpoint]
            if others:
                yield others[0], kind

    def interactions_for(self, region_name: str, faction_name: str) -> list[Interaction]:
        """Derived interaction list for one faction."""
        endpoint = Endpoint(region_name, faction_name)
        return [
            Interaction(type=kind, target=other.faction, region=other.region)
            for other, kind in self.relations_of(endpoint)
        ]

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Convert Ledger to the persisted document shape."""
        regions: dict[str, Any] = {}
        for name, region in self.regions.items():
            factions = []
            for faction in region.factions:
                entry = faction.to_dict()
                entry["interactions"] = [
                    i.to_dict() for i in self.interactions_for(name, faction.name)
                ]
                factions.append(entry)
            regions[name] = {"authority": region.authority, "factions": factions}
        return {
            "regions": regions,
            "factionDetails": {
                fname: {"regions": list(region_names)}
                for fname, region_names in self.faction_regions.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ledger":
        """Create Ledger from a document. Per-faction interaction lists are folded into the relation set."""
        if not isinstance(data, dict):
            data = {}
        regions_data = data.get("regions") or {}
        if not isinstance(regions_data, dict):
            regions_data = {}
        ledger = cls()
        for region_name, region_data in regions_data.items():
            if not isinstance(region_data, dict):
                continue
            region_name = str(region_name)
            factions_raw = region_data.get("factions") or []
            if not isinstance(factions_raw, list):
                factions_raw = []
            region = Region(
                name=region_name,
                authority=_number(region_data.get("authority"), 0),
                factions=[Faction.from_dict(f) for f in factions_raw if isinstance(f, dict)],
            )
            ledger.regions[region_name] = region
            for faction_data in factions_raw:
                if not isinstance(faction_data, dict):
                    continue
                source = Endpoint(region_name, str(faction_data.get("name") or ""))
                interactions = faction_data.get("interactions") or []
                if not isinstance(interactions, list):
                    continue
                for entry in interactions:
                    if not isinstance(entry, dict) or entry.get("target") is None:
                        continue
                    target = Endpoint(str(entry.get("region") or ""), str(entry["target"]))
                    if target == source:
                        continue
                    ledger.relations[relation_key(source, target)] = str(entry.get("type") or "")

        # Legacy: snake_case reverse index
        details = data.get("factionDetails")
        if details is None:
            details = data.get("faction_details")
        if isinstance(details, dict):
            for fname, detail in details.items():
                region_names = _ensure_str_list(detail.get("regions") if isinstance(detail, dict) else None)
                if region_names:
                    ledger.faction_regions[str(fname)] = region_names
        return ledger

    def to_json(self, indent: int = 2) -> str:
        """Serialize Ledger to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "Ledger":
        """Deserialize Ledger from a JSON string. Raises on malformed input; see serialization.import_ledger."""
        return cls.from_dict(json.loads(json_str))
