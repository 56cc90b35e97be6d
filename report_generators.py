"""
Excel cut-list report generator for SlabWise.
Builds an .xlsx workbook with the cut list, per-slab summary and lamination strips.
"""

import io
import logging
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from data_models import OptimizationResult

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="CCCCCC", end_color="CCCCCC", fill_type="solid")
STRIP_FILL = PatternFill(start_color="FFF9C4", end_color="FFF9C4", fill_type="solid")
UNPLACED_FILL = PatternFill(start_color="FFCDD2", end_color="FFCDD2", fill_type="solid")


def _write_headers(ws, headers: List[str], width: int = 15):
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = Font(bold=True)
        cell.fill = HEADER_FILL
        ws.column_dimensions[cell.column_letter].width = width


def create_cut_list_tab(ws, result: OptimizationResult):
    """Cut list: one row per placement, lamination strips highlighted."""
    headers = ['Slab #', 'Piece ID', 'Piece Label', 'Width (mm)', 'Height (mm)',
               'X Position', 'Y Position', 'Rotated', 'Lamination Strip', 'Parent Piece', 'Strip Position']
    _write_headers(ws, headers)
    ws.column_dimensions['C'].width = 35

    row = 2
    for placement in result.placements:
        values = [
            placement.slab_index + 1,
            placement.piece_id,
            placement.label,
            placement.width,
            placement.height,
            placement.x,
            placement.y,
            'Yes' if placement.rotated else 'No',
            'Yes' if placement.is_lamination_strip else 'No',
            placement.parent_piece_id if placement.is_lamination_strip else '',
            placement.strip_position.value if placement.is_lamination_strip else '',
        ]
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row, column=col, value=value)
            if placement.is_lamination_strip:
                cell.fill = STRIP_FILL
        row += 1

    for piece_id in result.unplaced_pieces:
        ws.cell(row=row, column=2, value=piece_id).fill = UNPLACED_FILL
        ws.cell(row=row, column=3, value='UNPLACED - larger than slab').fill = UNPLACED_FILL
        row += 1


def create_slab_summary_tab(ws, result: OptimizationResult):
    """Per-slab used and waste areas followed by the run totals."""
    headers = ['Slab #', 'Width (mm)', 'Height (mm)', 'Pieces', 'Used Area (m²)', 'Waste Area (m²)', 'Waste %']
    _write_headers(ws, headers)

    row = 2
    for slab in result.slabs:
        values = [
            slab.slab_index + 1,
            slab.width,
            slab.height,
            len(slab.placements),
            round(slab.used_area / 1_000_000, 3),
            round(slab.waste_area / 1_000_000, 3),
            slab.waste_percent,
        ]
        for col, value in enumerate(values, 1):
            ws.cell(row=row, column=col, value=value)
        row += 1

    row += 1
    totals = [
        ('Total Slabs', result.total_slabs),
        ('Total Used Area (m²)', round(result.total_used_area / 1_000_000, 3)),
        ('Total Waste Area (m²)', round(result.total_waste_area / 1_000_000, 3)),
        ('Waste %', result.waste_percent),
        ('Unplaced Pieces', len(result.unplaced_pieces)),
    ]
    for label, value in totals:
        ws.cell(row=row, column=1, value=label).font = Font(bold=True)
        ws.cell(row=row, column=2, value=value)
        row += 1


def create_lamination_tab(ws, result: OptimizationResult):
    """Lamination strips grouped by parent piece."""
    headers = ['Parent Piece', 'Position', 'Length (mm)', 'Width (mm)']
    _write_headers(ws, headers)

    summary = result.lamination_summary
    row = 2
    for parent_id, entries in summary.strips_by_parent.items():
        for entry in entries:
            ws.cell(row=row, column=1, value=parent_id)
            ws.cell(row=row, column=2, value=entry.position.value)
            ws.cell(row=row, column=3, value=entry.length_mm)
            ws.cell(row=row, column=4, value=entry.width_mm)
            row += 1

    row += 1
    ws.cell(row=row, column=1, value='Total Strips').font = Font(bold=True)
    ws.cell(row=row, column=2, value=summary.total_strips)
    ws.cell(row=row + 1, column=1, value='Total Strip Area (m²)').font = Font(bold=True)
    ws.cell(row=row + 1, column=2, value=round(summary.total_strip_area / 1_000_000, 3))


def create_cut_list_workbook(result: OptimizationResult) -> bytes:
    """
    Create the Excel cut-list workbook.

    Args:
        result: Optimization result

    Returns:
        Workbook content as .xlsx bytes
    """
    wb = Workbook()

    ws = wb.active
    ws.title = "Cut List"
    create_cut_list_tab(ws, result)

    create_slab_summary_tab(wb.create_sheet("Slab Summary"), result)

    if result.lamination_summary is not None:
        create_lamination_tab(wb.create_sheet("Lamination"), result)

    buffer = io.BytesIO()
    wb.save(buffer)
    logger.info(f"Created cut list workbook with {len(wb.sheetnames)} sheets")
    return buffer.getvalue()
