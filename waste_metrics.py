"""
Used/waste area accounting for packed slabs.
All areas are integer mm²; percentages are computed as integer hundredths and only
turned into floats for the result object.
"""

from typing import List, Sequence, Tuple

from data_models import Placement, SlabResult

# Upper clamp for waste, in hundredths of a percent (99.99%)
MAX_WASTE_HUNDREDTHS = 9999


def percent_hundredths(part: int, whole: int) -> int:
    """
    Compute ``part / whole * 100`` in hundredths of a percent, rounding half up.

    Args:
        part: Numerator area (mm²)
        whole: Denominator area (mm²)

    Returns:
        Integer hundredths of a percent, 0 when ``whole`` is 0
    """
    if whole <= 0:
        return 0
    return (part * 20000 + whole) // (2 * whole)


def clamp_waste_hundredths(value: int) -> int:
    return min(max(value, 0), MAX_WASTE_HUNDREDTHS)


def used_area_of(placements: Sequence[Placement]) -> int:
    """Sum of placed rectangle areas. Kerf is spacing and is not counted."""
    return sum(placement.width * placement.height for placement in placements)


def calculate_slab_metrics(slab_index: int, slab_width: int, slab_height: int,
                           placements: List[Placement]) -> SlabResult:
    """
    Build the SlabResult for one opened slab.

    Args:
        slab_index: 0-based slab index
        slab_width, slab_height: Slab dimensions in mm
        placements: Placements on this slab

    Returns:
        SlabResult with used area, waste area and waste percentage
    """
    slab_area = slab_width * slab_height
    used_area = used_area_of(placements)
    waste_area = slab_area - used_area
    waste_hundredths = clamp_waste_hundredths(percent_hundredths(waste_area, slab_area))

    return SlabResult(
        slab_index=slab_index,
        width=slab_width,
        height=slab_height,
        placements=list(placements),
        used_area=used_area,
        waste_area=waste_area,
        waste_percent=waste_hundredths / 100,
    )


def calculate_totals(slabs: Sequence[SlabResult]) -> Tuple[int, int, float]:
    """
    Aggregate metrics across opened slabs.

    Returns:
        Tuple of (total used area, total waste area, overall waste percent)
    """
    total_used = sum(slab.used_area for slab in slabs)
    total_waste = sum(slab.waste_area for slab in slabs)
    total_area = sum(slab.area for slab in slabs)
    waste_hundredths = clamp_waste_hundredths(percent_hundredths(total_waste, total_area))
    return total_used, total_waste, waste_hundredths / 100
