"""
Shared pytest fixtures for OpenKEP tests.
"""

import pytest

from openkep.core.instance import Instance


def pytest_configure(config):
    """Add custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")


@pytest.fixture
def triangle():
    """0 -> 1 -> 2 -> 0 with unit weights."""
    return Instance.from_arcs(3, [(0, 1), (1, 2), (2, 0)], name="triangle")


@pytest.fixture
def square_with_chord():
    """The 4-cycle 0 -> 1 -> 2 -> 3 -> 0 plus the chord 2 -> 0."""
    return Instance.from_arcs(
        4, [(0, 1), (1, 2), (2, 3), (3, 0), (2, 0)], name="square_with_chord"
    )


@pytest.fixture
def competing_pairs():
    """Two 2-cycles sharing node 1; the heavier one is 1 <-> 2."""
    return Instance.from_arcs(
        3,
        [(0, 1), (1, 0), (1, 2), (2, 1)],
        weights={(0, 1): 1.0, (1, 0): 1.0, (1, 2): 2.5, (2, 1): 2.5},
        name="competing_pairs",
    )


@pytest.fixture
def single_node():
    """One pair, no arcs."""
    return Instance.from_arcs(1, [], name="single_node")
