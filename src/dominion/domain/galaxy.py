"""Procedural galaxy generation.

The galaxy is generated once at game creation and is a pure function of the
game id, the empire list, and the seed. Generation consumes one dedicated
stream in a fixed order: region layout, connections, wormholes, placement.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from dominion.domain.enums import ConnectionType, RegionType, WormholeStatus
from dominion.domain.models import (
    Connection,
    ConnectionID,
    EmpireID,
    EmpireInfluence,
    Galaxy,
    Region,
    RegionID,
)
from dominion.domain.rules_config import DEFAULT_RULES, GalaxyRules, RulesConfig
from dominion.utils.rng import RngStream, generate_seed

CENTER = 50.0


@dataclass(frozen=True, slots=True)
class RegionTemplate:
    wealth_modifier: float
    danger_level: int
    name_prefixes: tuple[str, ...]


REGION_TEMPLATES: dict[RegionType, RegionTemplate] = {
    RegionType.CORE: RegionTemplate(1.5, 70, ("Central", "Imperial", "Capital", "Prime", "Nexus")),
    RegionType.INNER: RegionTemplate(1.2, 50, ("Inner", "Proxima", "Near", "Orion", "Lyra")),
    RegionType.OUTER: RegionTemplate(1.0, 40, ("Outer", "Frontier", "Border", "Cygnus", "Draco")),
    RegionType.RIM: RegionTemplate(0.8, 30, ("Rim", "Edge", "Far", "Distant", "Remote")),
}

REGION_SUFFIXES: tuple[str, ...] = (
    "Sector",
    "Quadrant",
    "Expanse",
    "Territories",
    "Reaches",
    "Domain",
    "Cluster",
    "Nebula",
    "Zone",
    "Systems",
)

# (type, maximum count, minimum radius) for each concentric ring.
_RINGS: tuple[tuple[RegionType, int, float], ...] = (
    (RegionType.INNER, 4, 15.0),
    (RegionType.OUTER, 6, 30.0),
    (RegionType.RIM, 4, 45.0),
)
_RING_WIDTH = 5.0

_TRADE_SOURCES = frozenset({RegionType.CORE, RegionType.INNER})
_TRADE_TARGETS = frozenset({RegionType.CORE, RegionType.INNER, RegionType.OUTER})


@dataclass(frozen=True, slots=True)
class EmpireSeat:
    """Minimal empire description the generator needs for placement."""

    empire_id: EmpireID
    is_player: bool = False


@dataclass(slots=True)
class GalaxyLayout:
    """Generator output before it is attached to a game."""

    regions: list[Region] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)
    wormholes: list[Connection] = field(default_factory=list)
    assignments: dict[EmpireID, RegionID] = field(default_factory=dict)
    influence: dict[EmpireID, EmpireInfluence] = field(default_factory=dict)

    def to_galaxy(self) -> Galaxy:
        return Galaxy(
            regions={region.id: region for region in self.regions},
            connections=[*self.connections, *self.wormholes],
            assignments=dict(self.assignments),
            influence=dict(self.influence),
        )


def region_count_for(empire_count: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    galaxy = rules.galaxy
    wanted = math.ceil(empire_count / max(1, galaxy.empires_per_region))
    return max(galaxy.min_regions, min(galaxy.max_regions, wanted))


def distance_between(a: Region, b: Region) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def _clamp_coordinate(value: float, galaxy: GalaxyRules) -> float:
    return round(min(galaxy.coordinate_max, max(0.0, value)), 2)


def _positions(
    count: int, stream: RngStream, galaxy: GalaxyRules
) -> list[tuple[RegionType, float, float]]:
    positions: list[tuple[RegionType, float, float]] = [(RegionType.CORE, CENTER, CENTER)]
    remaining = count - 1
    for index, (region_type, limit, radius_min) in enumerate(_RINGS):
        ring_count = min(limit, remaining)
        offset = 0.0 if index == 0 else math.pi / max(1, ring_count) * index
        for slot in range(ring_count):
            angle = slot / ring_count * math.tau + offset
            radius = radius_min + stream.random() * _RING_WIDTH
            positions.append(
                (
                    region_type,
                    _clamp_coordinate(CENTER + math.cos(angle) * radius, galaxy),
                    _clamp_coordinate(CENTER + math.sin(angle) * radius, galaxy),
                )
            )
        remaining -= ring_count
        if remaining <= 0:
            return positions

    while remaining > 0:
        angle = stream.random() * math.tau
        radius = 20.0 + stream.random() * 30.0
        region_type = RegionType.OUTER if radius < 40.0 else RegionType.RIM
        positions.append(
            (
                region_type,
                _clamp_coordinate(CENTER + math.cos(angle) * radius, galaxy),
                _clamp_coordinate(CENTER + math.sin(angle) * radius, galaxy),
            )
        )
        remaining -= 1
    return positions


def generate_regions(
    count: int, stream: RngStream, *, rules: RulesConfig = DEFAULT_RULES
) -> list[Region]:
    """Lay out ``count`` typed regions with unique names."""

    galaxy = rules.galaxy
    regions: list[Region] = []
    used_names: set[str] = set()
    for index, (region_type, x, y) in enumerate(_positions(count, stream, galaxy)):
        template = REGION_TEMPLATES[region_type]
        name = ""
        for _ in range(10):
            name = f"{stream.choice(template.name_prefixes)} {stream.choice(REGION_SUFFIXES)}"
            if name not in used_names:
                break
        if name in used_names:
            name = f"{name} {index + 1}"
        used_names.add(name)

        jitter = galaxy.danger_jitter
        regions.append(
            Region(
                id=RegionID(index + 1),
                name=name,
                type=region_type,
                x=x,
                y=y,
                wealth_modifier=template.wealth_modifier,
                danger_level=template.danger_level + stream.randint(-jitter, jitter),
                max_empires=max(
                    1,
                    galaxy.empires_per_region
                    + stream.randint(-galaxy.capacity_jitter, galaxy.capacity_jitter),
                ),
            )
        )
    return regions


def _pair_key(a: RegionID, b: RegionID) -> tuple[RegionID, RegionID]:
    return (a, b) if a <= b else (b, a)


def generate_connections(
    regions: Sequence[Region], stream: RngStream, *, rules: RulesConfig = DEFAULT_RULES
) -> list[Connection]:
    """Connect nearby regions; every region ends up with at least one edge."""

    galaxy = rules.galaxy
    connections: list[Connection] = []
    linked: set[tuple[RegionID, RegionID]] = set()

    def connect(a: Region, b: Region, kind: ConnectionType, **modifiers: float) -> None:
        linked.add(_pair_key(a.id, b.id))
        connections.append(
            Connection(
                id=ConnectionID(len(connections) + 1),
                from_region_id=a.id,
                to_region_id=b.id,
                type=kind,
                distance=round(distance_between(a, b), 2),
                **modifiers,
            )
        )

    for i, first in enumerate(regions):
        for second in regions[i + 1 :]:
            distance = distance_between(first, second)
            if distance <= galaxy.adjacent_distance:
                roll = stream.random()
                if roll < galaxy.hazardous_chance:
                    connect(
                        first,
                        second,
                        ConnectionType.HAZARDOUS,
                        force_multiplier=galaxy.hazardous_force_multiplier,
                        travel_cost=galaxy.hazardous_travel_cost,
                    )
                elif roll < galaxy.hazardous_chance + galaxy.contested_chance:
                    connect(
                        first,
                        second,
                        ConnectionType.CONTESTED,
                        force_multiplier=galaxy.contested_force_multiplier,
                    )
                else:
                    connect(first, second, ConnectionType.ADJACENT)
            elif distance <= galaxy.trade_distance:
                viable = (first.type in _TRADE_SOURCES and second.type in _TRADE_TARGETS) or (
                    second.type in _TRADE_SOURCES and first.type in _TRADE_TARGETS
                )
                if viable and stream.chance(galaxy.trade_route_chance):
                    connect(
                        first,
                        second,
                        ConnectionType.TRADE_ROUTE,
                        trade_bonus=galaxy.trade_bonus,
                    )

    if len(regions) < 2:
        return connections
    for region in regions:
        if any(connection.touches(region.id) for connection in connections):
            continue
        nearest = min(
            (other for other in regions if other.id != region.id),
            key=lambda other: (distance_between(region, other), other.id),
        )
        if _pair_key(region.id, nearest.id) not in linked:
            connect(region, nearest, ConnectionType.ADJACENT)

    # Bridge each remaining component to the one holding the core region.
    while True:
        reached = reachable_regions(regions[0].id, connections)
        inside = [region for region in regions if region.id in reached]
        outside = [region for region in regions if region.id not in reached]
        if not outside:
            break
        first, second = min(
            ((a, b) for a in inside for b in outside),
            key=lambda pair: (distance_between(*pair), pair[0].id, pair[1].id),
        )
        connect(first, second, ConnectionType.ADJACENT)
    return connections


def reachable_regions(start: RegionID, connections: Sequence[Connection]) -> set[RegionID]:
    """Regions reachable from ``start`` over the given connections."""

    adjacency: dict[RegionID, list[RegionID]] = {}
    for connection in connections:
        adjacency.setdefault(connection.from_region_id, []).append(connection.to_region_id)
        adjacency.setdefault(connection.to_region_id, []).append(connection.from_region_id)

    seen = {start}
    frontier = [start]
    while frontier:
        current = frontier.pop()
        for other in adjacency.get(current, ()):
            if other not in seen:
                seen.add(other)
                frontier.append(other)
    return seen


def generate_wormholes(
    regions: Sequence[Region],
    connections: Sequence[Connection],
    empire_count: int,
    stream: RngStream,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> list[Connection]:
    """Sparse overlay of undiscovered shortcuts between distant, unlinked regions."""

    galaxy = rules.galaxy
    wanted = math.ceil(empire_count / 10) * galaxy.wormholes_per_ten_empires
    linked = {_pair_key(c.from_region_id, c.to_region_id) for c in connections}

    candidates: list[tuple[float, Region, Region]] = []
    for i, first in enumerate(regions):
        for second in regions[i + 1 :]:
            distance = distance_between(first, second)
            key = _pair_key(first.id, second.id)
            if distance > galaxy.wormhole_min_distance and key not in linked:
                candidates.append((distance, first, second))
    # Farthest pairs first; each pick is drawn from the upper half of what is left.
    candidates.sort(key=lambda item: (-item[0], item[1].id, item[2].id))

    wormholes: list[Connection] = []
    next_id = len(connections) + 1
    while candidates and len(wormholes) < wanted:
        upper = min(len(candidates) - 1, len(candidates) // 2)
        distance, first, second = candidates.pop(stream.randint(0, upper))
        wormholes.append(
            Connection(
                id=ConnectionID(next_id),
                from_region_id=first.id,
                to_region_id=second.id,
                type=ConnectionType.WORMHOLE,
                distance=round(distance, 2),
                wormhole_status=WormholeStatus.UNDISCOVERED,
                collapse_chance=galaxy.wormhole_collapse_chance,
            )
        )
        next_id += 1
    return wormholes


def _least_populated(regions: Sequence[Region], load: dict[RegionID, int]) -> Region:
    return min(regions, key=lambda region: (load[region.id], region.id))


def assign_empires(
    empires: Sequence[EmpireSeat], regions: Sequence[Region], stream: RngStream
) -> dict[EmpireID, RegionID]:
    """Place empires respecting capacity; the player never starts in a core region."""

    load = {region.id: 0 for region in regions}
    assignments: dict[EmpireID, RegionID] = {}

    def has_room(region: Region) -> bool:
        return load[region.id] < region.max_empires

    def place(seat: EmpireSeat, region: Region) -> None:
        assignments[seat.empire_id] = region.id
        load[region.id] += 1

    non_core = [region for region in regions if region.type != RegionType.CORE]
    for seat in empires:
        if not seat.is_player:
            continue
        preferred = [
            r for r in non_core if r.type in (RegionType.INNER, RegionType.OUTER) and has_room(r)
        ]
        if preferred:
            place(seat, stream.choice(preferred))
        else:
            open_regions = [r for r in non_core if has_room(r)]
            place(seat, _least_populated(open_regions or non_core or list(regions), load))

    bots = stream.shuffled([seat for seat in empires if not seat.is_player])
    cursor = 0
    for seat in bots:
        target = regions[cursor % len(regions)]
        cursor += 1
        if not has_room(target):
            open_regions = [r for r in regions if has_room(r)]
            target = _least_populated(open_regions or list(regions), load)
        place(seat, target)
    return assignments


def generate_galaxy(
    game_id: int,
    empires: Sequence[EmpireSeat],
    seed: str,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> GalaxyLayout:
    """Build regions, connections, wormholes, placement, and influence."""

    stream = RngStream(generate_seed(game_id, 0, "galaxy", seed))
    regions = generate_regions(region_count_for(len(empires), rules=rules), stream, rules=rules)
    connections = generate_connections(regions, stream, rules=rules)
    wormholes = generate_wormholes(regions, connections, len(empires), stream, rules=rules)
    assignments = assign_empires(empires, regions, stream)

    by_id = {region.id: region for region in regions}
    influence: dict[EmpireID, EmpireInfluence] = {}
    for seat in empires:
        region_id = assignments[seat.empire_id]
        by_id[region_id].empire_ids.append(seat.empire_id)
        influence[seat.empire_id] = EmpireInfluence(
            empire_id=seat.empire_id,
            home_region_id=region_id,
            primary_region_id=region_id,
            controlled_region_ids=[region_id],
            influence_radius=rules.galaxy.influence_radius,
        )

    return GalaxyLayout(
        regions=regions,
        connections=connections,
        wormholes=wormholes,
        assignments=assignments,
        influence=influence,
    )


def neighbours(galaxy: Galaxy, region_id: RegionID) -> list[RegionID]:
    """Regions reachable over one known (non-hidden, non-collapsed) connection."""

    found: set[RegionID] = set()
    for connection in galaxy.connections:
        if connection.type == ConnectionType.WORMHOLE and (
            connection.wormhole_status != WormholeStatus.DISCOVERED
        ):
            continue
        if connection.from_region_id == region_id:
            found.add(connection.to_region_id)
        elif connection.to_region_id == region_id:
            found.add(connection.from_region_id)
    return sorted(found)


def discover_wormhole(galaxy: Galaxy, stream: RngStream) -> Connection | None:
    """Reveal one undiscovered wormhole, if any remain."""

    hidden = [
        wormhole
        for wormhole in galaxy.wormholes
        if wormhole.wormhole_status == WormholeStatus.UNDISCOVERED
    ]
    if not hidden:
        return None
    wormhole = stream.choice(hidden)
    wormhole.wormhole_status = WormholeStatus.DISCOVERED
    return wormhole
