"""
Lamination strip generation for thick benchtop pieces.
A 40mm+ profile is built up by bonding a strip under every finished edge, so those strips
have to be cut from the same slabs as the pieces themselves.
"""

import logging
from typing import List, Sequence, Set

from data_models import LaminationStrip, PackItem, Piece, StripPosition
from optimizer_config import OptimizerConfig

logger = logging.getLogger(__name__)


def needs_lamination(piece: Piece, config: OptimizerConfig) -> bool:
    """
    Check whether a piece gets lamination strips.

    Args:
        piece: Piece to check
        config: Optimizer configuration holding the thickness threshold

    Returns:
        True if the piece is at or above the threshold and has a finished edge
    """
    return piece.thickness >= config.lamination_threshold_mm and bool(piece.finished_edges.finished_positions())


def strip_length_for(piece: Piece, position: StripPosition) -> int:
    """Top and bottom edges run along the piece width, left and right along its height."""
    if position in (StripPosition.TOP, StripPosition.BOTTOM):
        return piece.width
    return piece.height


def _unique_strip_id(base_id: str, used_ids: Set[str]) -> str:
    """Return base_id, or base_id with a numeric suffix when a piece already uses it."""
    strip_id = base_id
    suffix = 2
    while strip_id in used_ids:
        strip_id = f"{base_id}-{suffix}"
        suffix += 1
    used_ids.add(strip_id)
    return strip_id


def generate_lamination_strips(pieces: Sequence[Piece], config: OptimizerConfig) -> List[LaminationStrip]:
    """
    Generate one strip per finished edge of every piece that needs lamination.

    Args:
        pieces: Validated input pieces
        config: Optimizer configuration (threshold, strip width, strip rotation)

    Returns:
        Strips in piece order, edges ordered top, bottom, left, right
    """
    strips = []
    used_ids = {piece.id for piece in pieces}

    for piece in pieces:
        if not needs_lamination(piece, config):
            continue

        for position in piece.finished_edges.finished_positions():
            strips.append(LaminationStrip(
                id=_unique_strip_id(f"{piece.id}-lam-{position.value}", used_ids),
                width=strip_length_for(piece, position),
                height=config.lamination_strip_width_mm,
                label=f"{piece.label or piece.id} (Lamination {position.value})",
                parent_piece_id=piece.id,
                strip_position=position,
                can_rotate=config.allow_strip_rotation,
            ))

    if strips:
        parents = len({strip.parent_piece_id for strip in strips})
        logger.info(f"Generated {len(strips)} lamination strips for {parents} pieces")

    return strips


def expand_pieces_with_lamination(pieces: Sequence[Piece], config: OptimizerConfig) -> List[PackItem]:
    """Return the input pieces followed by their generated lamination strips."""
    return list(pieces) + generate_lamination_strips(pieces, config)
