import random

import pytest

from scaffold_planner.planner import (
    Classification,
    DependencyGraphScaffoldingOverlay,
    InternalInconsistency,
    PlaceOrderDependencyGraph,
)
from scaffold_planner.positions import Bounds, Face, pack
from scaffold_planner.schematic import ATTACHMENT, SOLID, Schematic


def _overlay(size, coords, kind=SOLID):
    return DependencyGraphScaffoldingOverlay(
        PlaceOrderDependencyGraph(Schematic.from_coords(size, coords, kind))
    )


def test_classification():
    overlay = _overlay((1, 3, 1), [(0, 0, 0)])
    overlay.enable(pack(0, 1, 0))

    assert overlay.classify(pack(0, 0, 0)) is Classification.REAL
    assert overlay.classify(pack(0, 1, 0)) is Classification.SCAFFOLDING
    assert overlay.classify(pack(0, 2, 0)) is Classification.AIR
    assert overlay.classify(pack(7, 7, 7)) is Classification.AIR
    assert overlay.real(pack(0, 0, 0)) and not overlay.air(pack(0, 0, 0))
    assert overlay.is_scaffolding(pack(0, 1, 0))
    assert overlay.scaffolding() == frozenset({pack(0, 1, 0)})


def test_edges_require_both_endpoints_in_the_overlay():
    overlay = _overlay((1, 3, 1), [(0, 0, 0)])
    ground = pack(0, 0, 0)

    assert not overlay.outgoing_edge(ground, Face.UP)
    assert not overlay.incoming_edge(ground, Face.UP)
    assert overlay.hypothetical_incoming_edge(ground, Face.UP)

    overlay.enable(pack(0, 1, 0))

    assert overlay.outgoing_edge(ground, Face.UP)
    assert overlay.incoming_edge(ground, Face.UP)


def test_hypothetical_edge_between_air_cells_does_not_mutate():
    overlay = _overlay((1, 3, 1), [(0, 0, 0)])

    assert overlay.hypothetical_incoming_edge(pack(0, 2, 0), Face.DOWN)
    assert not overlay.hypothetical_incoming_edge(pack(0, 2, 0), Face.UP)
    assert not overlay.hypothetical_incoming_edge(pack(9, 9, 9), Face.UP)
    assert overlay.scaffolding() == frozenset()


def test_hypothetical_edge_respects_block_rules():
    overlay = _overlay((2, 1, 1), [(0, 0, 0)], ATTACHMENT)

    assert not overlay.hypothetical_incoming_edge(pack(1, 0, 0), Face.WEST)
    with pytest.raises(InternalInconsistency) as exc:
        overlay.enable(pack(1, 0, 0))
    assert 'no neighbour supports it' in str(exc.value)


@pytest.mark.parametrize('coord, message_part', [((0, 0, 0), 'already real'), ((0, 5, 0), 'outside bounds')])
def test_enable_rejects_non_air_or_out_of_bounds(coord, message_part):
    overlay = _overlay((1, 3, 1), [(0, 0, 0)])

    with pytest.raises(InternalInconsistency) as exc:
        overlay.enable(pack(*coord))

    assert message_part in str(exc.value)


def test_enable_twice_fails():
    overlay = _overlay((1, 3, 1), [(0, 0, 0)])
    overlay.enable(pack(0, 1, 0))

    with pytest.raises(InternalInconsistency) as exc:
        overlay.enable(pack(0, 1, 0))

    assert 'already scaffolding' in str(exc.value)


def test_enable_requires_an_existing_supporting_neighbour():
    overlay = _overlay((1, 3, 1), [(0, 0, 0)])

    with pytest.raises(InternalInconsistency):
        overlay.enable(pack(0, 2, 0))
    assert overlay.air(pack(0, 2, 0))


@pytest.mark.parametrize('seed', range(4))
def test_enable_is_monotonic(seed):
    rng = random.Random(seed)
    overlay = _overlay((4, 4, 4), [(1, 1, 1), (3, 0, 2)])
    real_before = list(overlay.real_positions())
    enabled = []

    for _ in range(15):
        candidates = [
            pos
            for pos in overlay.bounds.positions()
            if overlay.air(pos)
            and any(
                overlay.bounds.neighbor(pos, face) is not None
                and not overlay.air(overlay.bounds.neighbor(pos, face))
                and overlay.hypothetical_incoming_edge(pos, face)
                for face in Face
            )
        ]
        pos = rng.choice(candidates)
        overlay.enable(pos)
        enabled.append(pos)

        assert list(overlay.real_positions()) == real_before
        assert overlay.scaffolding() == frozenset(enabled)
        for previous in enabled:
            assert overlay.classify(previous) is Classification.SCAFFOLDING
