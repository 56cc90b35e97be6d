"""
Configuration for the SlabWise optimizer.
The caller builds one OptimizerConfig and passes it into the optimizer; the core keeps no global defaults.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping

# Pieces at or above this thickness (mm) need a built-up laminated edge
LAMINATION_THRESHOLD_MM = 40
# Width (mm) of each lamination strip, independent of the parent thickness
LAMINATION_STRIP_WIDTH_MM = 40


@dataclass(frozen=True)
class OptimizerConfig:
    """
    Slab, saw and lamination settings for an optimization run.

    Attributes:
        slab_width: Default slab width in mm when the request omits it
        slab_height: Default slab height in mm when the request omits it
        kerf_width: Default saw kerf in mm when the request omits it
        allow_rotation: Default global rotation flag when the request omits it
        lamination_threshold_mm: Minimum piece thickness that gets lamination strips
        lamination_strip_width_mm: Build-up allowance cut for each strip
        allow_strip_rotation: Whether generated strips may be rotated 90°
    """
    slab_width: int = 3000
    slab_height: int = 1400
    kerf_width: int = 3
    allow_rotation: bool = True
    lamination_threshold_mm: int = LAMINATION_THRESHOLD_MM
    lamination_strip_width_mm: int = LAMINATION_STRIP_WIDTH_MM
    allow_strip_rotation: bool = True

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> 'OptimizerConfig':
        """
        Create a config from a mapping, ignoring unknown keys.

        Args:
            values: Mapping of field names (snake_case) to values

        Returns:
            OptimizerConfig with defaults for any missing field
        """
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
