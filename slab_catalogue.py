"""
Standard slab sizes by stone family.
Materials are classified from their name and collection using supplier keywords.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlabSize:
    key: str
    label: str
    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.label} ({self.width} x {self.height} mm)"


SLAB_SIZES: Dict[str, SlabSize] = {
    'engineered_jumbo': SlabSize('engineered_jumbo', 'Engineered Quartz (Jumbo)', 3200, 1600),
    'engineered_standard': SlabSize('engineered_standard', 'Engineered Quartz (Standard)', 3050, 1440),
    'natural_stone': SlabSize('natural_stone', 'Natural Stone', 2800, 1600),
    'sintered': SlabSize('sintered', 'Porcelain / Sintered', 3200, 1600),
}

SINTERED_KEYWORDS = ['dekton', 'neolith', 'lapitec', 'laminam', 'sinterstone', 'porcelain', 'sintered']
NATURAL_KEYWORDS = ['granite', 'marble', 'quartzite', 'travertine', 'limestone', 'onyx', 'sandstone', 'slate']
STANDARD_KEYWORDS = ['essastone', 'compac', 'silestone standard']


def classify_material(name: str, collection: Optional[str] = None) -> SlabSize:
    """
    Pick the standard slab size for a material.

    Args:
        name: Material name (e.g. 'Dekton Aura')
        collection: Optional supplier collection name

    Returns:
        Matching SlabSize; engineered quartz (jumbo) when no keyword matches
    """
    combined = f"{name} {collection or ''}".lower()

    if any(keyword in combined for keyword in SINTERED_KEYWORDS):
        return SLAB_SIZES['sintered']
    if any(keyword in combined for keyword in NATURAL_KEYWORDS):
        return SLAB_SIZES['natural_stone']
    if any(keyword in combined for keyword in STANDARD_KEYWORDS):
        return SLAB_SIZES['engineered_standard']

    logger.debug(f"No slab keyword matched '{combined.strip()}', using engineered quartz (jumbo)")
    return SLAB_SIZES['engineered_jumbo']


def get_slab_options() -> List[SlabSize]:
    """Slab sizes in display order."""
    return list(SLAB_SIZES.values())
