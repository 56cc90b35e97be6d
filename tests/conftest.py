"""
Shared test fixtures: default configuration, sample pieces and an optimized result.
"""

import pytest

from data_models import FinishedEdges, OptimizationInput, Piece
from optimization_core import optimize_slabs
from optimizer_config import OptimizerConfig


@pytest.fixture
def config():
    return OptimizerConfig()


@pytest.fixture
def laminated_piece():
    """Example 40mm benchtop with finished top and left edges."""
    return Piece(
        id="P1",
        width=1200,
        height=600,
        label="Kitchen: Benchtop",
        thickness=40,
        finished_edges=FinishedEdges(top=True, bottom=False, left=True, right=False),
    )


@pytest.fixture
def kitchen_pieces(laminated_piece):
    return [
        laminated_piece,
        Piece(id="P2", width=2400, height=650, label="Kitchen: Back Bench"),
        Piece(id="P3", width=1800, height=900, label="Kitchen: Island", thickness=20,
              finished_edges=FinishedEdges(top=True, bottom=True, left=True, right=True)),
        Piece(id="P4", width=600, height=450, label="Laundry: Splashback", can_rotate=False),
    ]


@pytest.fixture
def kitchen_result(kitchen_pieces, config):
    optimization_input = OptimizationInput(
        pieces=kitchen_pieces, slab_width=3000, slab_height=1400, kerf_width=3, allow_rotation=True,
    )
    return optimize_slabs(optimization_input, config)


def make_input(pieces, slab_width=3000, slab_height=1400, kerf_width=3, allow_rotation=True):
    return OptimizationInput(
        pieces=pieces,
        slab_width=slab_width,
        slab_height=slab_height,
        kerf_width=kerf_width,
        allow_rotation=allow_rotation,
    )
