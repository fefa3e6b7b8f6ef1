"""Shared payload fixtures."""

from __future__ import annotations

import pytest

from track_lrs import Anchor, LrsBuilder, load


def build_scenario(**metadata: str) -> bytes:
    """Straight 20-unit line with anchors A (scale 0) and B (scale 2000)."""
    builder = LrsBuilder()
    curve = builder.add_curve([(0, 0), (0, 10), (0, 20)])
    builder.add_lrm(
        "line-1",
        curve,
        [
            Anchor("A", 0.0, 0.0, {"kind": "origin"}),
            Anchor("B", 20.0, 2000.0),
        ],
        {"name": "Main line"},
    )
    for key, value in metadata.items():
        builder.set_metadata(key, value)
    return builder.to_bytes()


def build_network() -> bytes:
    """Two LRMs sharing an L-shaped curve plus one on a separate curve.

    ``up`` runs with the curve, ``down`` counts backwards along it and
    ``spur`` sits on a short horizontal curve further east.
    """
    builder = LrsBuilder()
    main = builder.add_curve([(0, 0), (100, 0), (100, 100)])
    spur = builder.add_curve([(300, 0), (350, 0)])
    builder.add_lrm(
        "up",
        main,
        [Anchor("0", 0.0, 0.0), Anchor("1", 100.0, 1000.0), Anchor("2", 200.0, 2000.0)],
    )
    builder.add_lrm(
        "down",
        main,
        [Anchor("K9", 0.0, 900.0), Anchor("K8", 100.0, 800.0)],
    )
    builder.add_lrm("spur", spur, [Anchor("S", 10.0, 10.0)])
    builder.set_metadata("source", "unit-test")
    return builder.to_bytes()


@pytest.fixture
def scenario_bytes() -> bytes:
    return build_scenario(source="fixture")


@pytest.fixture
def scenario(scenario_bytes):
    return load(scenario_bytes)


@pytest.fixture
def network(network_bytes):
    return load(network_bytes)


@pytest.fixture
def network_bytes() -> bytes:
    return build_network()
