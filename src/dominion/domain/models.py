"""Dataclasses describing every Nexus Dominion game entity.

The rules layer operates purely on these in-memory types. Persistence
adapters (see ``dominion.repository``) translate whole ``GameState``
snapshots to and from storage; nothing in the domain performs I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import NewType

from .enums import (
    COMBAT_UNITS,
    Archetype,
    AttackType,
    CivilStatus,
    CombatSide,
    ConnectionType,
    DefeatType,
    EmotionalState,
    EmpireKind,
    EventType,
    GameStatus,
    Material,
    RegionType,
    ResourceType,
    Ruleset,
    SectorType,
    Stance,
    TreatyType,
    TurnPhase,
    UnitType,
    VictoryType,
    WormholeStatus,
)

# --- Strongly typed identifiers -------------------------------------------------

GameID = NewType("GameID", int)
EmpireID = NewType("EmpireID", int)
SectorID = NewType("SectorID", int)
RegionID = NewType("RegionID", int)
ConnectionID = NewType("ConnectionID", int)
AttackID = NewType("AttackID", int)
BuildOrderID = NewType("BuildOrderID", int)
CraftOrderID = NewType("CraftOrderID", int)
TreatyID = NewType("TreatyID", int)
CoalitionID = NewType("CoalitionID", int)
MessageID = NewType("MessageID", int)
EventID = NewType("EventID", int)


# --- Value records --------------------------------------------------------------


@dataclass(slots=True)
class Forces:
    """Unit-type counts; every field is a non-negative integer."""

    soldiers: int = 0
    fighters: int = 0
    stations: int = 0
    light_cruisers: int = 0
    heavy_cruisers: int = 0
    carriers: int = 0
    covert_agents: int = 0

    def get(self, unit: UnitType) -> int:
        return getattr(self, unit.value)

    def set(self, unit: UnitType, count: int) -> None:
        if count < 0:
            raise ValueError(f"{unit} count cannot be negative, got {count}")
        setattr(self, unit.value, count)

    def add(self, unit: UnitType, amount: int) -> None:
        self.set(unit, self.get(unit) + amount)

    def as_dict(self) -> dict[UnitType, int]:
        return {unit: self.get(unit) for unit in UnitType}

    def combat_units(self) -> Forces:
        """Return a copy without covert agents."""

        return Forces(**{unit.value: self.get(unit) for unit in COMBAT_UNITS})

    def total(self) -> int:
        return sum(getattr(self, f.name) for f in fields(self))

    def distinct_types(self) -> int:
        return sum(1 for unit in COMBAT_UNITS if self.get(unit) > 0)

    def covers(self, other: Forces) -> bool:
        """True when every count in ``other`` is available here."""

        return all(self.get(unit) >= other.get(unit) for unit in UnitType)

    def minus(self, other: Forces) -> Forces:
        return Forces(**{unit.value: self.get(unit) - other.get(unit) for unit in UnitType})

    def plus(self, other: Forces) -> Forces:
        return Forces(**{unit.value: self.get(unit) + other.get(unit) for unit in UnitType})

    def copy(self) -> Forces:
        return Forces(**{unit.value: self.get(unit) for unit in UnitType})


@dataclass(slots=True)
class Resources:
    """Resource balances."""

    credits: int = 0
    food: int = 0
    ore: int = 0
    fuel: int = 0
    research_points: int = 0

    def get(self, resource: ResourceType) -> int:
        return getattr(self, resource.value)

    def set(self, resource: ResourceType, amount: int) -> None:
        setattr(self, resource.value, amount)

    def add(self, resource: ResourceType, amount: int) -> None:
        self.set(resource, self.get(resource) + amount)


@dataclass(slots=True)
class Sector:
    """A unit of territory owned by exactly one empire."""

    id: SectorID
    type: SectorType
    acquired_turn: int = 0


@dataclass(slots=True)
class BuildQueueEntry:
    """Pending unit construction order."""

    id: BuildOrderID
    unit_type: UnitType
    quantity: int
    turns_remaining: int
    total_cost: int
    ordered_turn: int = 0


@dataclass(slots=True)
class CraftingQueueEntry:
    """Pending crafting order converting tier-1 materials into components."""

    id: CraftOrderID
    material: Material
    quantity: int
    turns_remaining: int


@dataclass(slots=True)
class EmotionProfile:
    """Current emotional state of an autonomous empire."""

    state: EmotionalState = EmotionalState.CONFIDENT
    intensity: float = 0.5
    turns_since_change: int = 0


@dataclass(slots=True)
class Empire:
    """A player or autonomous empire."""

    id: EmpireID
    name: str
    kind: EmpireKind
    archetype: Archetype | None = None
    resources: Resources = field(default_factory=Resources)
    forces: Forces = field(default_factory=Forces)
    sectors: list[Sector] = field(default_factory=list)
    population: int = 0
    civil_status: CivilStatus = CivilStatus.CONTENT
    research_level: int = 0
    unlocked_units: list[UnitType] = field(default_factory=list)
    covert_points: int = 0
    networth: float = 0.0
    materials: dict[Material, int] = field(default_factory=dict)
    build_queue: list[BuildQueueEntry] = field(default_factory=list)
    crafting_queue: list[CraftingQueueEntry] = field(default_factory=list)
    emotion: EmotionProfile = field(default_factory=EmotionProfile)
    grudges: dict[EmpireID, int] = field(default_factory=dict)
    home_region_id: RegionID | None = None
    last_income: int = 0
    last_upkeep: int = 0
    last_food_balance: int = 0
    bankrupt_turns: int = 0
    starving_turns: int = 0
    revolting_turns: int = 0
    is_eliminated: bool = False
    eliminated_turn: int | None = None
    defeat_reason: DefeatType | None = None

    @property
    def sector_count(self) -> int:
        return len(self.sectors)

    @property
    def is_bot(self) -> bool:
        return self.kind == EmpireKind.BOT

    def sectors_of_type(self, sector_type: SectorType) -> int:
        return sum(1 for sector in self.sectors if sector.type == sector_type)


@dataclass(frozen=True, slots=True)
class AttackRecord:
    """Immutable historical record of a resolved attack."""

    id: AttackID
    turn: int
    attacker_id: EmpireID
    defender_id: EmpireID
    attack_type: AttackType
    stance: Stance
    committed: Forces
    attacker_power: float
    defender_power: float
    winner: CombatSide
    attacker_casualties: Forces
    defender_casualties: Forces
    sectors_transferred: int


# --- Galaxy ---------------------------------------------------------------------


@dataclass(slots=True)
class Region:
    """Node of the galaxy graph."""

    id: RegionID
    name: str
    type: RegionType
    x: float
    y: float
    wealth_modifier: float
    danger_level: int
    max_empires: int
    empire_ids: list[EmpireID] = field(default_factory=list)


@dataclass(slots=True)
class Connection:
    """Edge of the galaxy graph."""

    id: ConnectionID
    from_region_id: RegionID
    to_region_id: RegionID
    type: ConnectionType
    distance: float
    force_multiplier: float = 1.0
    travel_cost: int = 0
    trade_bonus: float = 0.0
    wormhole_status: WormholeStatus | None = None
    collapse_chance: float = 0.0

    def touches(self, region_id: RegionID) -> bool:
        return region_id in (self.from_region_id, self.to_region_id)


@dataclass(slots=True)
class EmpireInfluence:
    """Spatial footprint of an empire."""

    empire_id: EmpireID
    home_region_id: RegionID
    primary_region_id: RegionID
    controlled_region_ids: list[RegionID] = field(default_factory=list)
    influence_radius: int = 3


@dataclass(slots=True)
class Galaxy:
    """Output of galaxy generation, stored on the game."""

    regions: dict[RegionID, Region] = field(default_factory=dict)
    connections: list[Connection] = field(default_factory=list)
    assignments: dict[EmpireID, RegionID] = field(default_factory=dict)
    influence: dict[EmpireID, EmpireInfluence] = field(default_factory=dict)

    @property
    def wormholes(self) -> list[Connection]:
        return [c for c in self.connections if c.type == ConnectionType.WORMHOLE]


# --- Diplomacy, messaging, events ----------------------------------------------


@dataclass(slots=True)
class Treaty:
    id: TreatyID
    type: TreatyType
    empire_a: EmpireID
    empire_b: EmpireID
    signed_turn: int

    def involves(self, empire_id: EmpireID) -> bool:
        return empire_id in (self.empire_a, self.empire_b)


@dataclass(slots=True)
class Coalition:
    id: CoalitionID
    member_ids: list[EmpireID]
    formed_turn: int


@dataclass(slots=True)
class Message:
    id: MessageID
    turn: int
    sender_id: EmpireID
    recipient_id: EmpireID | None
    kind: str
    text: str


@dataclass(slots=True)
class GalacticEvent:
    id: EventID
    turn: int
    type: EventType
    description: str
    target_empire_id: EmpireID | None = None
    magnitude: float = 0.0


@dataclass(slots=True)
class MarketState:
    """Global resource market."""

    prices: dict[ResourceType, float] = field(default_factory=dict)
    supply: dict[ResourceType, int] = field(default_factory=dict)
    demand: dict[ResourceType, int] = field(default_factory=dict)


# --- Turn bookkeeping -----------------------------------------------------------


@dataclass(slots=True)
class GameTurnState:
    """Turn counter plus the phases already run for the current turn."""

    turn: int = 1
    completed_phases: list[TurnPhase] = field(default_factory=list)
    checkpoint_due: bool = False
    last_checkpoint_turn: int = 0


@dataclass(slots=True)
class VictoryResult:
    type: VictoryType
    winner_id: EmpireID
    turn: int
    coalition_member_ids: list[EmpireID] = field(default_factory=list)


@dataclass(slots=True)
class GameState:
    """Root aggregate representing an entire game."""

    id: GameID
    name: str
    seed: str
    ruleset: Ruleset = Ruleset.UNIFIED
    status: GameStatus = GameStatus.ACTIVE
    turn_limit: int = 200
    protection_turns: int = 20
    turn_state: GameTurnState = field(default_factory=GameTurnState)
    empires: dict[EmpireID, Empire] = field(default_factory=dict)
    galaxy: Galaxy = field(default_factory=Galaxy)
    market: MarketState = field(default_factory=MarketState)
    attacks: list[AttackRecord] = field(default_factory=list)
    treaties: list[Treaty] = field(default_factory=list)
    coalitions: list[Coalition] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    events: list[GalacticEvent] = field(default_factory=list)
    victory: VictoryResult | None = None
    counters: dict[str, int] = field(default_factory=dict)
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def turn(self) -> int:
        return self.turn_state.turn

    def next_id(self, kind: str) -> int:
        """Return the next identifier for ``kind`` (monotonic per game)."""

        value = self.counters.get(kind, 0) + 1
        self.counters[kind] = value
        return value

    def record(self, stat: str, amount: int = 1) -> None:
        """Increment a cumulative activity counter."""

        self.stats[stat] = self.stats.get(stat, 0) + amount

    def alive_empires(self) -> list[Empire]:
        """Non-eliminated empires ordered by id."""

        return [
            self.empires[empire_id]
            for empire_id in sorted(self.empires)
            if not self.empires[empire_id].is_eliminated
        ]

    def empire(self, empire_id: EmpireID) -> Empire:
        try:
            return self.empires[empire_id]
        except KeyError:
            raise KeyError(f"empire {int(empire_id)} not found") from None
