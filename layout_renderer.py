"""
Slab layout diagrams for SlabWise.
Draws each slab with its placed pieces and lamination strips as a matplotlib figure.
"""

import io
import logging
from typing import Dict, List

import matplotlib.patches as patches
from matplotlib.figure import Figure

from data_models import Placement, SlabResult

logger = logging.getLogger(__name__)


class SlabLayoutRenderer:
    """Render slab layouts with piece labels, rotation markers and hatched strips."""

    def __init__(self):
        self.colors = [
            '#B2DFDB',  # Light teal
            '#FFF9C4',  # Light yellow
            '#F8BBD9',  # Light pink
            '#C8E6C9',  # Light green
            '#E1BEE7',  # Light purple
            '#FFCCBC',  # Light orange
            '#DCEDC8',  # Light lime
            '#FFCDD2',  # Light red
            '#D1C4E9',  # Light deep purple
            '#B3E5FC',  # Light cyan
        ]
        self.strip_color = '#E0E0E0'

    def _color_map(self, placements: List[Placement]) -> Dict[str, str]:
        """Each piece gets a palette colour; strips reuse their parent's colour when present."""
        colors = {}
        index = 0
        for placement in placements:
            if placement.is_lamination_strip:
                continue
            colors[placement.piece_id] = self.colors[index % len(self.colors)]
            index += 1
        return colors

    def render_slab(self, slab: SlabResult, title: str = "") -> Figure:
        """
        Draw one slab.

        The y axis is inverted so the drawing matches the top-left origin of placements.

        Args:
            slab: Slab result to draw
            title: Optional title; defaults to the slab number and waste

        Returns:
            matplotlib Figure (not attached to pyplot)
        """
        fig = Figure(figsize=(10, 10 * slab.height / slab.width + 1))
        ax = fig.add_subplot(1, 1, 1)

        ax.set_xlim(0, slab.width)
        ax.set_ylim(slab.height, 0)
        ax.set_aspect('equal')

        ax.add_patch(patches.Rectangle(
            (0, 0), slab.width, slab.height,
            linewidth=2, edgecolor='black', facecolor='white'
        ))

        colors = self._color_map(slab.placements)

        for placement in slab.placements:
            self._draw_placement(ax, placement, colors)

        ax.set_title(title or f"Slab {slab.slab_index + 1} - {slab.width} x {slab.height} mm - "
                              f"{slab.waste_percent:.1f}% waste", fontsize=11, fontweight='bold')
        ax.set_xlabel('Width (mm)', fontsize=9)
        ax.set_ylabel('Height (mm)', fontsize=9)
        ax.grid(False)

        return fig

    def _draw_placement(self, ax, placement: Placement, colors: Dict[str, str]):
        if placement.is_lamination_strip:
            face_color = colors.get(placement.parent_piece_id, self.strip_color)
            hatch = '///'
        else:
            face_color = colors.get(placement.piece_id, self.colors[0])
            hatch = None

        ax.add_patch(patches.Rectangle(
            (placement.x, placement.y), placement.width, placement.height,
            linewidth=1, edgecolor='black', facecolor=face_color, hatch=hatch
        ))

        symbols = " ↻" if placement.rotated else ""
        if placement.is_lamination_strip:
            label = f"{placement.parent_piece_id} {placement.strip_position.value}{symbols}"
        else:
            label = f"{placement.label}{symbols}\n{placement.width}×{placement.height}"

        # Thin strips get a single small line of text
        if placement.width > 500 and placement.height > 300:
            font_size = 8
        elif placement.width > 250 and placement.height > 150:
            font_size = 6
        else:
            font_size = 5
            label = label.split("\n")[0]

        ax.text(placement.x + placement.width / 2, placement.y + placement.height / 2, label,
                ha='center', va='center', fontsize=font_size,
                rotation=90 if placement.height > placement.width * 3 else 0)

    def render_slab_png(self, slab: SlabResult, dpi: int = 100) -> bytes:
        """Render one slab to PNG bytes."""
        fig = self.render_slab(slab)
        buffer = io.BytesIO()
        fig.savefig(buffer, format='png', dpi=dpi, facecolor='white', bbox_inches='tight')
        logger.debug(f"Rendered slab {slab.slab_index} to PNG ({buffer.tell()} bytes)")
        return buffer.getvalue()


def render_layout_pngs(slabs: List[SlabResult], dpi: int = 100) -> List[bytes]:
    """Render every slab of a result to PNG bytes, in slab order."""
    renderer = SlabLayoutRenderer()
    return [renderer.render_slab_png(slab, dpi=dpi) for slab in slabs]
