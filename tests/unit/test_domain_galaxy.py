"""Unit tests for procedural galaxy generation."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from dominion.domain import galaxy
from dominion.domain import models as dm
from dominion.domain.enums import ConnectionType, RegionType, WormholeStatus
from dominion.domain.rules_config import rules_from_mapping
from dominion.utils.rng import RngStream


def _seats(count: int, *, with_player: bool = True) -> list[galaxy.EmpireSeat]:
    seats = []
    for index in range(count):
        seats.append(
            galaxy.EmpireSeat(
                empire_id=dm.EmpireID(index + 1), is_player=with_player and index == 0
            )
        )
    return seats


def test_generation_is_deterministic():
    first = galaxy.generate_galaxy(1, _seats(25), "seed-a")
    second = galaxy.generate_galaxy(1, _seats(25), "seed-a")
    assert first == second


def test_different_seeds_change_the_layout():
    first = galaxy.generate_galaxy(1, _seats(25), "seed-a")
    second = galaxy.generate_galaxy(1, _seats(25), "seed-b")
    assert first.regions != second.regions


def test_region_count_scales_within_bounds():
    assert galaxy.region_count_for(2) == 4
    assert galaxy.region_count_for(60) == 6
    assert galaxy.region_count_for(500) == 15


def test_region_names_are_unique():
    layout = galaxy.generate_galaxy(3, _seats(150), "names")
    names = [region.name for region in layout.regions]
    assert len(names) == len(set(names))


def test_first_region_is_the_core():
    layout = galaxy.generate_galaxy(1, _seats(40), "core")
    assert layout.regions[0].type == RegionType.CORE
    assert layout.regions[0].x == 50.0 and layout.regions[0].y == 50.0


@settings(max_examples=40, deadline=None)
@given(
    empire_count=st.integers(min_value=2, max_value=200),
    seed=st.text(alphabet="abcdefghij0123456789", min_size=1, max_size=12),
)
def test_every_region_has_a_connection(empire_count, seed):
    layout = galaxy.generate_galaxy(1, _seats(empire_count), seed)
    for region in layout.regions:
        assert any(c.touches(region.id) for c in layout.connections), region.name


@settings(max_examples=40, deadline=None)
@given(
    empire_count=st.integers(min_value=2, max_value=200),
    seed=st.text(alphabet="abcdefghij0123456789", min_size=1, max_size=12),
)
def test_player_never_starts_in_core(empire_count, seed):
    layout = galaxy.generate_galaxy(1, _seats(empire_count), seed)
    by_id = {region.id: region for region in layout.regions}
    player_region = by_id[layout.assignments[dm.EmpireID(1)]]
    assert player_region.type != RegionType.CORE
    assert len(layout.assignments) == empire_count


def test_capacity_respected_when_room_exists():
    layout = galaxy.generate_galaxy(2, _seats(30), "capacity")
    for region in layout.regions:
        assert len(region.empire_ids) <= region.max_empires


def test_influence_seeds_home_region():
    layout = galaxy.generate_galaxy(2, _seats(12), "influence")
    for empire_id, region_id in layout.assignments.items():
        record = layout.influence[empire_id]
        assert record.home_region_id == region_id
        assert record.primary_region_id == region_id
        assert record.controlled_region_ids == [region_id]
        assert record.influence_radius == 3


def test_wormholes_link_distant_unlinked_regions():
    layout = galaxy.generate_galaxy(4, _seats(100), "wormholes")
    regions = {region.id: region for region in layout.regions}
    linked = {
        tuple(sorted((int(c.from_region_id), int(c.to_region_id)))) for c in layout.connections
    }

    assert len(layout.wormholes) <= 20
    for wormhole in layout.wormholes:
        assert wormhole.type == ConnectionType.WORMHOLE
        assert wormhole.wormhole_status == WormholeStatus.UNDISCOVERED
        a, b = regions[wormhole.from_region_id], regions[wormhole.to_region_id]
        assert galaxy.distance_between(a, b) > 50.0
        assert tuple(sorted((int(a.id), int(b.id)))) not in linked


def test_trade_routes_carry_bonus():
    layout = galaxy.generate_galaxy(1, _seats(150), "trade")
    for connection in layout.connections:
        if connection.type == ConnectionType.TRADE_ROUTE:
            assert connection.trade_bonus > 0
            assert 30.0 <= connection.distance <= 50.0


def test_discover_wormhole_reveals_and_updates_neighbours():
    layout = galaxy.generate_galaxy(4, _seats(100), "discover")
    state_galaxy = layout.to_galaxy()
    hidden = len(state_galaxy.wormholes)
    if hidden == 0:
        assert galaxy.discover_wormhole(state_galaxy, RngStream("x")) is None
        return

    revealed = galaxy.discover_wormhole(state_galaxy, RngStream("x"))
    assert revealed is not None
    assert revealed.wormhole_status == WormholeStatus.DISCOVERED
    assert revealed.to_region_id in galaxy.neighbours(state_galaxy, revealed.from_region_id)


@settings(max_examples=40, deadline=None)
@given(
    count=st.integers(min_value=2, max_value=15),
    seed=st.text(alphabet="abcdefghij0123456789", min_size=1, max_size=12),
)
def test_lanes_join_every_region_into_one_graph(count, seed):
    regions = galaxy.generate_regions(count, RngStream(f"regions-{seed}"))
    connections = galaxy.generate_connections(regions, RngStream(f"lanes-{seed}"))
    reached = galaxy.reachable_regions(regions[0].id, connections)
    assert reached == {region.id for region in regions}


def test_sparse_layout_is_bridged():
    rules = rules_from_mapping({"galaxy": {"adjacent_distance": 1.0, "trade_distance": 1.0}})
    regions = galaxy.generate_regions(8, RngStream("sparse"), rules=rules)
    connections = galaxy.generate_connections(regions, RngStream("sparse"), rules=rules)
    assert len(connections) >= len(regions) - 1
    assert galaxy.reachable_regions(regions[0].id, connections) == {r.id for r in regions}
