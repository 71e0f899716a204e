import random

import pytest

from scaffold_planner.planner import (
    ComponentKind,
    DependencyGraphScaffoldingOverlay,
    InternalInconsistency,
    PlaceOrderDependencyGraph,
    check_collapsed_graph,
)
from scaffold_planner.planner.collapsed import strongly_connected_partition
from scaffold_planner.positions import Bounds, Face, pack
from scaffold_planner.schematic import ATTACHMENT, FALLING, SOLID, Schematic


def _overlay(size, blocks):
    sch = Schematic(Bounds(*size))
    for (x, y, z), kind in blocks.items():
        sch.add(x, y, z, kind)
    return DependencyGraphScaffoldingOverlay(PlaceOrderDependencyGraph(sch))


def test_support_cycle_collapses_into_one_component():
    overlay = _overlay((3, 1, 1), {(0, 0, 0): SOLID, (1, 0, 0): SOLID, (2, 0, 0): SOLID})
    graph = overlay.collapsed_graph

    assert len(graph.components()) == 1
    component = graph.component_of(pack(1, 0, 0))
    assert component.positions == {pack(0, 0, 0), pack(1, 0, 0), pack(2, 0, 0)}
    assert component.kind is ComponentKind.MERGED
    assert component.incoming == set()
    assert graph.root_components() == [component]


def test_falling_column_is_a_chain_of_trivial_components():
    overlay = _overlay((1, 3, 1), {(0, 0, 0): FALLING, (0, 1, 0): FALLING, (0, 2, 0): FALLING})
    graph = overlay.collapsed_graph
    bottom, middle, top = (graph.component_of(pack(0, y, 0)) for y in range(3))

    assert [bottom.id, middle.id, top.id] == [0, 1, 2]
    assert all(c.kind is ComponentKind.TRIVIAL for c in (bottom, middle, top))
    assert bottom.outgoing == {middle}
    assert middle.incoming == {bottom}
    assert middle.outgoing == {top}
    assert top.outgoing == set()
    assert graph.root_components() == [bottom]
    assert graph.descendants(bottom) == {bottom, middle, top}
    assert graph.is_descendant(bottom, top)
    assert not graph.is_descendant(top, bottom)
    assert graph.last_component_id() == 2


def test_enable_closing_a_cycle_merges_and_redirects():
    overlay = _overlay((1, 3, 1), {(0, 0, 0): SOLID, (0, 2, 0): SOLID})
    graph = overlay.collapsed_graph
    ground = graph.component_of(pack(0, 0, 0))
    floating = graph.component_of(pack(0, 2, 0))

    overlay.enable(pack(0, 1, 0))

    assert graph.last_component_id() == 2
    assert list(graph.components()) == [ground.id]
    assert ground.positions == {pack(0, 0, 0), pack(0, 1, 0), pack(0, 2, 0)}
    assert floating.deleted()
    assert graph.resolve_live(floating) is ground
    scaffold = graph.component_by_id(2)
    assert scaffold.deleted()
    assert graph.resolve_live(scaffold) is ground
    assert graph.resolve_live(ground) is ground
    for y in range(3):
        assert graph.component_of(pack(0, y, 0)) is ground
    assert check_collapsed_graph(overlay) == []


def test_enable_without_cycle_adds_component_edge():
    overlay = _overlay(
        (3, 3, 1),
        {(0, 0, 0): SOLID, (2, 0, 0): FALLING, (2, 1, 0): FALLING},
    )
    graph = overlay.collapsed_graph
    ground = graph.component_of(pack(0, 0, 0))
    low = graph.component_of(pack(2, 0, 0))
    high = graph.component_of(pack(2, 1, 0))
    assert graph.root_components() == [ground, low]

    overlay.enable(pack(1, 0, 0))

    assert graph.component_of(pack(1, 0, 0)) is ground
    assert ground.incoming == {low}
    assert low.outgoing == {ground, high}
    assert graph.root_components() == [low]
    assert check_collapsed_graph(overlay) == []


def test_merge_keeps_the_largest_component():
    overlay = _overlay(
        (4, 3, 1),
        {(0, 0, 0): SOLID, (0, 2, 0): SOLID, (1, 2, 0): SOLID, (2, 2, 0): SOLID},
    )
    graph = overlay.collapsed_graph
    small = graph.component_of(pack(0, 0, 0))
    large = graph.component_of(pack(1, 2, 0))
    assert small.id < large.id

    overlay.enable(pack(0, 1, 0))

    assert small.deleted()
    assert graph.resolve_live(small) is large
    assert len(large.positions) == 5


def test_resolve_live_compresses_redirect_chains():
    top_row = {(x, 4, 0): SOLID for x in range(3)}
    top_row.update({(1, 3, 0): SOLID, (2, 3, 0): SOLID})
    overlay = _overlay((3, 5, 1), {(0, 0, 0): SOLID, (0, 2, 0): SOLID, **top_row})
    graph = overlay.collapsed_graph
    first, second, third = (graph.component_of(pack(0, y, 0)) for y in (0, 2, 4))
    assert [first.id, second.id, third.id] == [0, 1, 2]

    overlay.enable(pack(0, 1, 0))
    assert second.deleted_into is first

    overlay.enable(pack(0, 3, 0))
    assert first.deleted_into is third
    assert second.deleted_into is first

    assert graph.resolve_live(second) is third
    assert second.deleted_into is third
    assert len(third.positions) == 9


def test_resolve_live_detects_redirect_cycles():
    overlay = _overlay((1, 3, 1), {(0, 0, 0): SOLID, (0, 2, 0): SOLID})
    graph = overlay.collapsed_graph
    overlay.enable(pack(0, 1, 0))
    dead_a = graph.component_by_id(1)
    dead_b = graph.component_by_id(2)
    dead_a.deleted_into = dead_b
    dead_b.deleted_into = dead_a

    with pytest.raises(InternalInconsistency):
        graph.resolve_live(dead_a)


def test_incremental_update_rejects_known_positions():
    overlay = _overlay((1, 1, 1), {(0, 0, 0): SOLID})

    with pytest.raises(InternalInconsistency):
        overlay.collapsed_graph.incremental_update(pack(0, 0, 0))


def test_strongly_connected_partition_orders_groups_by_first_member():
    groups = strongly_connected_partition([1, 2, 3, 4], [(1, 2), (2, 1), (3, 4)])

    assert groups == [[1, 2], [3], [4]]
    assert strongly_connected_partition([], []) == []


def _random_overlay(rng, size=(4, 4, 4), count=10):
    bounds = Bounds(*size)
    sch = Schematic(bounds)
    kinds = [SOLID, SOLID, FALLING, ATTACHMENT]
    for pos in rng.sample(list(bounds.positions()), count):
        sch.blocks[pos] = rng.choice(kinds)
    return DependencyGraphScaffoldingOverlay(PlaceOrderDependencyGraph(sch))


@pytest.mark.parametrize('seed', range(8))
def test_incremental_state_matches_full_rescan(seed):
    rng = random.Random(seed)
    overlay = _random_overlay(rng)
    graph = overlay.collapsed_graph
    assert check_collapsed_graph(overlay) == []

    for _ in range(20):
        candidates = []
        for pos in overlay.bounds.positions():
            if not overlay.air(pos):
                continue
            for face in Face:
                neighbor = overlay.bounds.neighbor(pos, face)
                if neighbor is not None and not overlay.air(neighbor) and overlay.hypothetical_incoming_edge(pos, face):
                    candidates.append(pos)
                    break
        if not candidates:
            break
        before = graph.last_component_id()
        overlay.enable(rng.choice(candidates))

        assert graph.last_component_id() == before + 1
        assert check_collapsed_graph(overlay) == []
        rescan = {c for c in graph.components().values() if not c.incoming}
        assert set(graph.root_components()) == rescan
