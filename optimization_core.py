"""
Slab optimization entry point.
Validates the request, expands lamination strips, packs slabs, computes waste and
assembles the OptimizationResult.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Mapping, Optional, Sequence

from data_models import (LaminationStrip, LaminationSummary, OptimizationInput, OptimizationResult,
                         Placement, StripPlacement, StripSummaryEntry)
from lamination import expand_pieces_with_lamination
from optimizer_config import OptimizerConfig
from slab_packer import Slab, SlabPacker
from waste_metrics import calculate_slab_metrics, calculate_totals

logger = logging.getLogger(__name__)

REQUIRED_PIECE_KEYS = ('id', 'width', 'height')


class ValidationError(ValueError):
    """Raised when optimization input is rejected before any packing."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class OptimizationError(RuntimeError):
    """Raised when a computed layout breaks a placement invariant."""


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_input(optimization_input: OptimizationInput) -> None:
    """
    Validate slab parameters and pieces.

    Args:
        optimization_input: Request to validate

    Raises:
        ValidationError: On the first invalid value found
    """
    if not _is_int(optimization_input.slab_width) or optimization_input.slab_width <= 0:
        raise ValidationError('slabWidth', f"must be a positive integer, got {optimization_input.slab_width!r}")
    if not _is_int(optimization_input.slab_height) or optimization_input.slab_height <= 0:
        raise ValidationError('slabHeight', f"must be a positive integer, got {optimization_input.slab_height!r}")
    if not _is_int(optimization_input.kerf_width) or optimization_input.kerf_width < 0:
        raise ValidationError('kerfWidth', f"must be a non-negative integer, got {optimization_input.kerf_width!r}")

    seen_ids = set()
    for index, piece in enumerate(optimization_input.pieces):
        if not piece.id:
            raise ValidationError(f"pieces[{index}].id", "must not be empty")
        if piece.id in seen_ids:
            raise ValidationError(f"pieces[{index}].id", f"duplicate piece id {piece.id!r}")
        seen_ids.add(piece.id)

        if not _is_int(piece.width) or piece.width <= 0:
            raise ValidationError(f"pieces[{index}].width",
                                  f"piece {piece.id!r} width must be a positive integer, got {piece.width!r}")
        if not _is_int(piece.height) or piece.height <= 0:
            raise ValidationError(f"pieces[{index}].height",
                                  f"piece {piece.id!r} height must be a positive integer, got {piece.height!r}")
        if not _is_int(piece.thickness) or piece.thickness < 0:
            raise ValidationError(f"pieces[{index}].thickness",
                                  f"piece {piece.id!r} thickness must be a non-negative integer, "
                                  f"got {piece.thickness!r}")


def _overlaps_with_kerf(a: Placement, b: Placement, kerf: int) -> bool:
    """True when two placements overlap or sit closer than one kerf apart."""
    return (a.x < b.x + b.width + kerf and b.x < a.x + a.width + kerf and
            a.y < b.y + b.height + kerf and b.y < a.y + a.height + kerf)


def verify_layout(slabs: Sequence[Slab], kerf: int) -> None:
    """
    Check bounds, uniqueness and kerf separation of all placements.

    Raises:
        OptimizationError: If any placement invariant is broken
    """
    seen_ids = set()

    for slab in slabs:
        if not slab.placements:
            raise OptimizationError(f"Slab {slab.slab_index} was opened without placements")

        for placement in slab.placements:
            if placement.piece_id in seen_ids:
                raise OptimizationError(f"{placement.piece_id} was placed more than once")
            seen_ids.add(placement.piece_id)

            if (placement.x < 0 or placement.y < 0 or
                    placement.x + placement.width > slab.width or
                    placement.y + placement.height > slab.height):
                raise OptimizationError(f"{placement.piece_id} lies outside slab {slab.slab_index}")

        for i, first in enumerate(slab.placements):
            for second in slab.placements[i + 1:]:
                if _overlaps_with_kerf(first, second, kerf):
                    raise OptimizationError(f"{first.piece_id} and {second.piece_id} overlap "
                                            f"on slab {slab.slab_index}")


def build_lamination_summary(strips: Sequence[LaminationStrip],
                             placements: Sequence[Placement]) -> Optional[LaminationSummary]:
    """
    Group placed lamination strips by their parent piece.

    Args:
        strips: Strips generated for this run, in generation order
        placements: All placements of the run

    Returns:
        LaminationSummary, or None when no strips were generated
    """
    if not strips:
        return None

    placed_strip_ids = {placement.piece_id for placement in placements if isinstance(placement, StripPlacement)}

    strips_by_parent: Dict[str, List[StripSummaryEntry]] = OrderedDict()
    total_strips = 0
    total_strip_area = 0

    for strip in strips:
        if strip.id not in placed_strip_ids:
            continue
        strips_by_parent.setdefault(strip.parent_piece_id, []).append(
            StripSummaryEntry(position=strip.strip_position, length_mm=strip.length_mm, width_mm=strip.width_mm)
        )
        total_strips += 1
        total_strip_area += strip.area

    return LaminationSummary(
        total_strips=total_strips,
        total_strip_area=total_strip_area,
        strips_by_parent=dict(strips_by_parent),
    )


def optimize_slabs(optimization_input: OptimizationInput,
                   config: Optional[OptimizerConfig] = None) -> OptimizationResult:
    """
    Run the slab layout optimization.

    Args:
        optimization_input: Pieces and slab parameters
        config: Lamination settings; a default OptimizerConfig when omitted

    Returns:
        OptimizationResult with placements, per-slab metrics, unplaced ids and lamination summary

    Raises:
        ValidationError: If the input is invalid
        OptimizationError: If the computed layout breaks a placement invariant
    """
    config = config or OptimizerConfig()
    validate_input(optimization_input)

    pieces = optimization_input.pieces
    logger.info(f"Starting slab optimization for {len(pieces)} pieces")

    items = expand_pieces_with_lamination(pieces, config)
    strips = [item for item in items if isinstance(item, LaminationStrip)]

    packer = SlabPacker(
        slab_width=optimization_input.slab_width,
        slab_height=optimization_input.slab_height,
        kerf_width=optimization_input.kerf_width,
        allow_rotation=optimization_input.allow_rotation,
    )
    slabs, unplaced = packer.pack(items)

    verify_layout(slabs, optimization_input.kerf_width)

    slab_results = [
        calculate_slab_metrics(slab.slab_index, slab.width, slab.height, slab.placements)
        for slab in slabs
    ]
    total_used, total_waste, waste_percent = calculate_totals(slab_results)
    placements = [placement for slab in slabs for placement in slab.placements]

    result = OptimizationResult(
        placements=placements,
        slabs=slab_results,
        total_slabs=len(slab_results),
        total_used_area=total_used,
        total_waste_area=total_waste,
        waste_percent=waste_percent,
        unplaced_pieces=unplaced,
        lamination_summary=build_lamination_summary(strips, placements),
    )

    if unplaced:
        logger.warning(f"{len(unplaced)} pieces could not be placed: {', '.join(unplaced)}")
    logger.info(f"Slab optimization complete: {result.total_slabs} slabs, "
                f"{len(placements)} placements, {result.waste_percent:.2f}% waste")

    return result


def input_from_request(data: Dict, config: Optional[OptimizerConfig] = None) -> OptimizationInput:
    """
    Convert a camelCase request body into an OptimizationInput.

    Args:
        data: Request body with ``pieces`` and optional slab parameters
        config: Defaults for omitted slab parameters

    Returns:
        OptimizationInput (values are checked later by ``validate_input``)

    Raises:
        ValidationError: If the body or a piece entry is malformed or missing a required key
    """
    if not isinstance(data, Mapping):
        raise ValidationError('request', f"must be a mapping, got {type(data).__name__}")

    pieces = data.get('pieces', [])
    if not isinstance(pieces, list):
        raise ValidationError('pieces', f"must be a list, got {type(pieces).__name__}")

    for index, item in enumerate(pieces):
        if not isinstance(item, Mapping):
            raise ValidationError(f"pieces[{index}]", f"must be a mapping, got {type(item).__name__}")
        for key in REQUIRED_PIECE_KEYS:
            if item.get(key) is None:
                raise ValidationError(f"pieces[{index}].{key}", "is required")

    return OptimizationInput.from_dict(data, config)


def optimize_from_dict(data: Dict, config: Optional[OptimizerConfig] = None) -> OptimizationResult:
    """Run optimization for a camelCase request body, filling omitted slab settings from ``config``."""
    config = config or OptimizerConfig()
    return optimize_slabs(input_from_request(data, config), config)
