"""
Core data models for the SlabWise slab layout optimizer.
Defines pieces, lamination strips, placements, slab results and the optimization result.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from optimizer_config import OptimizerConfig


TRUE_STRINGS = {'true', 'yes', 'y', '1'}


def parse_request_flag(value: Any, default: bool = False) -> bool:
    """
    Interpret a request flag.

    JSON booleans pass through; strings such as "false" or "no" are read by value
    rather than by truthiness.
    """
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        return default if not text else text in TRUE_STRINGS
    return bool(value)


class StripPosition(str, Enum):
    """Edge of a parent piece that a lamination strip is bonded to."""
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class FinishedEdges:
    """Finished (polished/profiled) edges of a benchtop piece."""
    top: bool = False
    bottom: bool = False
    left: bool = False
    right: bool = False

    def finished_positions(self) -> List[StripPosition]:
        """
        List the finished edges in a fixed order.

        Returns:
            Finished positions ordered top, bottom, left, right
        """
        flags = [
            (StripPosition.TOP, self.top),
            (StripPosition.BOTTOM, self.bottom),
            (StripPosition.LEFT, self.left),
            (StripPosition.RIGHT, self.right),
        ]
        return [position for position, finished in flags if finished]

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'FinishedEdges':
        if not data:
            return cls()
        return cls(
            top=parse_request_flag(data.get('top')),
            bottom=parse_request_flag(data.get('bottom')),
            left=parse_request_flag(data.get('left')),
            right=parse_request_flag(data.get('right')),
        )

    def to_dict(self) -> Dict[str, bool]:
        return {'top': self.top, 'bottom': self.bottom, 'left': self.left, 'right': self.right}


@dataclass(frozen=True)
class Piece:
    """
    A fabricated stone piece to be cut from a slab.

    Dimensions are whole millimetres. ``width`` runs along the slab width (x axis)
    and ``height`` along the slab height (y axis) when the piece is not rotated.
    """
    id: str
    width: int
    height: int
    label: str = ""
    can_rotate: bool = True
    thickness: int = 20
    finished_edges: FinishedEdges = field(default_factory=FinishedEdges)

    @property
    def area(self) -> int:
        return self.width * self.height

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Piece':
        """
        Build a Piece from a request record.

        Args:
            data: Mapping with ``id``, ``width``, ``height``, ``label`` and the optional
                ``canRotate``, ``thickness`` and ``finishedEdges`` keys

        Returns:
            Piece instance (values are not validated here)
        """
        thickness = data.get('thickness')
        return cls(
            id=str(data['id']),
            width=data['width'],
            height=data['height'],
            label=str(data.get('label') or ''),
            can_rotate=parse_request_flag(data.get('canRotate'), default=True),
            thickness=20 if thickness is None else thickness,
            finished_edges=FinishedEdges.from_dict(data.get('finishedEdges')),
        )

    def __str__(self) -> str:
        return f"Piece({self.id}, {self.width}x{self.height}, {self.thickness}mm)"


@dataclass(frozen=True)
class LaminationStrip:
    """
    Synthetic strip cut to build up a finished edge of a thick piece.

    ``width`` is the strip length along the parent edge and ``height`` the
    lamination allowance, so a strip packs like any other piece.
    """
    id: str
    width: int
    height: int
    label: str
    parent_piece_id: str
    strip_position: StripPosition
    can_rotate: bool = True

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def length_mm(self) -> int:
        return self.width

    @property
    def width_mm(self) -> int:
        return self.height


PackItem = Union[Piece, LaminationStrip]


@dataclass(frozen=True)
class PlacementBase:
    """Fields shared by both placement kinds. Coordinates use a top-left origin."""
    piece_id: str
    slab_index: int
    x: int
    y: int
    width: int
    height: int
    rotated: bool
    label: str

    is_lamination_strip = False

    @property
    def area(self) -> int:
        return self.width * self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pieceId': self.piece_id,
            'slabIndex': self.slab_index,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'rotated': self.rotated,
            'label': self.label,
            'isLaminationStrip': self.is_lamination_strip,
        }


@dataclass(frozen=True)
class PiecePlacement(PlacementBase):
    """A fabricated piece placed on a slab."""


@dataclass(frozen=True)
class StripPlacement(PlacementBase):
    """A lamination strip placed on a slab, traceable to its parent piece."""
    parent_piece_id: str
    strip_position: StripPosition

    is_lamination_strip = True

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['parentPieceId'] = self.parent_piece_id
        data['stripPosition'] = self.strip_position.value
        return data


Placement = Union[PiecePlacement, StripPlacement]


@dataclass
class SlabResult:
    """Placements and waste figures for one opened slab. Areas are mm²."""
    slab_index: int
    width: int
    height: int
    placements: List[Placement]
    used_area: int
    waste_area: int
    waste_percent: float

    @property
    def area(self) -> int:
        return self.width * self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slabIndex': self.slab_index,
            'width': self.width,
            'height': self.height,
            'placements': [placement.to_dict() for placement in self.placements],
            'usedArea': self.used_area,
            'wasteArea': self.waste_area,
            'wastePercent': self.waste_percent,
        }


@dataclass(frozen=True)
class StripSummaryEntry:
    position: StripPosition
    length_mm: int
    width_mm: int

    def to_dict(self) -> Dict[str, Any]:
        return {'position': self.position.value, 'lengthMm': self.length_mm, 'widthMm': self.width_mm}


@dataclass
class LaminationSummary:
    """Lamination strips grouped by the piece they build up."""
    total_strips: int
    total_strip_area: int
    strips_by_parent: Dict[str, List[StripSummaryEntry]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalStrips': self.total_strips,
            'totalStripArea': self.total_strip_area,
            'stripsByParent': {
                parent_id: [entry.to_dict() for entry in entries]
                for parent_id, entries in self.strips_by_parent.items()
            },
        }


@dataclass
class OptimizationResult:
    """Complete outcome of one optimization call."""
    placements: List[Placement]
    slabs: List[SlabResult]
    total_slabs: int
    total_used_area: int
    total_waste_area: int
    waste_percent: float
    unplaced_pieces: List[str]
    lamination_summary: Optional[LaminationSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'placements': [placement.to_dict() for placement in self.placements],
            'slabs': [slab.to_dict() for slab in self.slabs],
            'totalSlabs': self.total_slabs,
            'totalUsedArea': self.total_used_area,
            'totalWasteArea': self.total_waste_area,
            'wastePercent': self.waste_percent,
            'unplacedPieces': list(self.unplaced_pieces),
        }
        if self.lamination_summary is not None:
            data['laminationSummary'] = self.lamination_summary.to_dict()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'))


@dataclass
class OptimizationInput:
    """Pieces plus slab parameters for one optimization call."""
    pieces: List[Piece]
    slab_width: int
    slab_height: int
    kerf_width: int
    allow_rotation: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[OptimizerConfig] = None) -> 'OptimizationInput':
        """
        Build an input from a camelCase request body.

        Slab parameters missing from ``data`` are taken from ``config``.

        Args:
            data: Request body with ``pieces`` and optional slab parameters
            config: Caller defaults; a default OptimizerConfig when omitted

        Returns:
            OptimizationInput instance
        """
        config = config or OptimizerConfig()
        return cls(
            pieces=[Piece.from_dict(item) for item in data.get('pieces', [])],
            slab_width=data.get('slabWidth', config.slab_width),
            slab_height=data.get('slabHeight', config.slab_height),
            kerf_width=data.get('kerfWidth', config.kerf_width),
            allow_rotation=parse_request_flag(data.get('allowRotation'), default=config.allow_rotation),
        )

    @classmethod
    def from_config(cls, pieces: List[Piece], config: OptimizerConfig) -> 'OptimizationInput':
        return cls(
            pieces=list(pieces),
            slab_width=config.slab_width,
            slab_height=config.slab_height,
            kerf_width=config.kerf_width,
            allow_rotation=config.allow_rotation,
        )
