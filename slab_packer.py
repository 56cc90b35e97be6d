"""
Guillotine best-fit slab packer.
Places pieces and lamination strips onto as few slabs as possible, keeping a kerf between neighbours.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from data_models import LaminationStrip, PackItem, PiecePlacement, Placement, StripPlacement

logger = logging.getLogger(__name__)


class FreeRectangle:
    """
    An unused region of a slab available for placement.

    Every free rectangle is kept at least one kerf away from placed pieces and
    from the other free rectangles of its slab, so anything placed inside it is
    already kerf-separated from its neighbours.
    """

    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    def get_area(self) -> int:
        return self.width * self.height

    def can_fit(self, width: int, height: int) -> bool:
        """
        Check if a rectangle of the given size fits inside this region.

        Args:
            width, height: Effective (post-rotation) dimensions in mm

        Returns:
            True if both dimensions fit
        """
        return width <= self.width and height <= self.height

    def __str__(self) -> str:
        return f"FreeRectangle(({self.x},{self.y}), {self.width}x{self.height})"

    def __repr__(self) -> str:
        return self.__str__()


class Slab:
    """
    An opened slab with its placements and free rectangles.
    """

    def __init__(self, slab_index: int, width: int, height: int, kerf: int):
        """
        Initialize a Slab with one free rectangle covering the whole slab.

        Args:
            slab_index: 0-based position of this slab in the cutting sequence
            width, height: Slab dimensions in mm
            kerf: Saw kerf in mm
        """
        self.slab_index = slab_index
        self.width = width
        self.height = height
        self.kerf = kerf
        self.placements: List[Placement] = []
        self.free_rectangles: List[FreeRectangle] = [FreeRectangle(0, 0, width, height)]

    def place(self, item: PackItem, rect: FreeRectangle, rotated: bool) -> Placement:
        """
        Place an item at the origin of a free rectangle and split the rectangle.

        Args:
            item: Piece or lamination strip to place
            rect: Free rectangle of this slab that fits the item
            rotated: Whether the item is turned 90°

        Returns:
            The recorded placement
        """
        width, height = effective_dimensions(item, rotated)

        if isinstance(item, LaminationStrip):
            placement = StripPlacement(
                piece_id=item.id, slab_index=self.slab_index,
                x=rect.x, y=rect.y, width=width, height=height,
                rotated=rotated, label=item.label,
                parent_piece_id=item.parent_piece_id,
                strip_position=item.strip_position,
            )
        else:
            placement = PiecePlacement(
                piece_id=item.id, slab_index=self.slab_index,
                x=rect.x, y=rect.y, width=width, height=height,
                rotated=rotated, label=item.label,
            )

        self.placements.append(placement)
        self._split_rectangle(rect, width, height)

        logger.debug(f"Placed {item.id} on slab {self.slab_index} at ({rect.x},{rect.y}) "
                     f"as {width}x{height}{' rotated' if rotated else ''}")
        return placement

    def _split_rectangle(self, rect: FreeRectangle, width: int, height: int):
        """
        Guillotine split of a used rectangle.

        The right remainder keeps the full rectangle height; the bottom remainder
        spans the placed width. Both start one kerf past the placed item.
        Zero-area remainders are dropped.
        """
        self.free_rectangles.remove(rect)

        new_rectangles = []

        right = FreeRectangle(
            x=rect.x + width + self.kerf,
            y=rect.y,
            width=rect.width - width - self.kerf,
            height=rect.height,
        )
        if right.width > 0 and right.height > 0:
            new_rectangles.append(right)

        bottom = FreeRectangle(
            x=rect.x,
            y=rect.y + height + self.kerf,
            width=width,
            height=rect.height - height - self.kerf,
        )
        if bottom.width > 0 and bottom.height > 0:
            new_rectangles.append(bottom)

        self.free_rectangles.extend(new_rectangles)

    def __str__(self) -> str:
        return f"Slab({self.slab_index}, {self.width}x{self.height}, {len(self.placements)} placements)"

    def __repr__(self) -> str:
        return self.__str__()


def effective_dimensions(item: PackItem, rotated: bool) -> Tuple[int, int]:
    """Dimensions of an item as placed."""
    if rotated:
        return item.height, item.width
    return item.width, item.height


def sort_pieces_for_packing(items: Sequence[PackItem]) -> List[PackItem]:
    """
    Order items for packing: height descending, then width descending, then id.

    Args:
        items: Pieces and strips to pack

    Returns:
        New list in packing order
    """
    return sorted(items, key=lambda item: (-item.height, -item.width, item.id))


class SlabPacker:
    """
    Best-fit guillotine packer over a growing sequence of identical slabs.
    """

    def __init__(self, slab_width: int, slab_height: int, kerf_width: int, allow_rotation: bool = True):
        self.slab_width = slab_width
        self.slab_height = slab_height
        self.kerf_width = kerf_width
        self.allow_rotation = allow_rotation

    def orientations_for(self, item: PackItem) -> List[bool]:
        """Permitted orientations, unrotated first."""
        orientations = [False]
        if self.allow_rotation and item.can_rotate and item.width != item.height:
            orientations.append(True)
        return orientations

    def fits_empty_slab(self, item: PackItem) -> bool:
        for rotated in self.orientations_for(item):
            width, height = effective_dimensions(item, rotated)
            if width <= self.slab_width and height <= self.slab_height:
                return True
        return False

    def find_best_fit(self, item: PackItem, slabs: List[Slab]) -> Tuple[Optional[Slab], Optional[FreeRectangle], bool]:
        """
        Find the free rectangle leaving the least leftover area.

        Ties keep the earliest slab, then the earliest rectangle, then the
        unrotated orientation.

        Args:
            item: Piece or strip to place
            slabs: Open slabs in index order

        Returns:
            Tuple of (slab, rectangle, rotated); slab and rectangle are None when nothing fits
        """
        best_slab = None
        best_rect = None
        best_rotation = False
        best_leftover = None

        for slab in slabs:
            for rect in slab.free_rectangles:
                for rotated in self.orientations_for(item):
                    width, height = effective_dimensions(item, rotated)
                    if not rect.can_fit(width, height):
                        continue

                    leftover = rect.get_area() - item.area
                    if best_leftover is None or leftover < best_leftover:
                        best_leftover = leftover
                        best_slab = slab
                        best_rect = rect
                        best_rotation = rotated

        return best_slab, best_rect, best_rotation

    def open_slab(self, slabs: List[Slab]) -> Slab:
        slab = Slab(len(slabs), self.slab_width, self.slab_height, self.kerf_width)
        slabs.append(slab)
        logger.debug(f"Opened slab {slab.slab_index}")
        return slab

    def pack(self, items: Sequence[PackItem]) -> Tuple[List[Slab], List[str]]:
        """
        Pack pieces and strips onto slabs.

        Args:
            items: Pieces and lamination strips in any order

        Returns:
            Tuple of (opened slabs in index order, ids of unplaceable items in packing order)
        """
        logger.info(f"Packing {len(items)} items onto {self.slab_width}x{self.slab_height}mm slabs "
                    f"(kerf {self.kerf_width}mm, rotation {'on' if self.allow_rotation else 'off'})")

        slabs: List[Slab] = []
        unplaced: List[str] = []

        for item in sort_pieces_for_packing(items):
            if not self.fits_empty_slab(item):
                unplaced.append(item.id)
                logger.warning(f"Could not place {item.id} ({item.width}x{item.height}mm): "
                               f"larger than the {self.slab_width}x{self.slab_height}mm slab")
                continue

            slab, rect, rotated = self.find_best_fit(item, slabs)

            if slab is None:
                slab = self.open_slab(slabs)
                slab, rect, rotated = self.find_best_fit(item, [slab])

            slab.place(item, rect, rotated)

        logger.info(f"Packing complete: {len(slabs)} slabs, {len(unplaced)} unplaced")
        return slabs, unplaced
