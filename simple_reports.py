"""
Simple report generation for SlabWise.
Creates CSV cut lists, structured cut-list data and text layout reports from an OptimizationResult.
"""

import csv
import io
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from data_models import OptimizationResult


def _timestamp(generated_at: Optional[datetime]) -> datetime:
    return generated_at or datetime.now(timezone.utc)


def generate_cut_list_csv(result: OptimizationResult, slab_width: int, slab_height: int,
                          generated_at: Optional[datetime] = None) -> str:
    """
    Generate the shop cut list as CSV.

    Args:
        result: Optimization result
        slab_width, slab_height: Slab dimensions used for the run (mm)
        generated_at: Timestamp for the summary; current UTC time when omitted

    Returns:
        CSV content as string: one row per placement followed by summary rows
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')

    writer.writerow(['Slab #', 'Piece Label', 'Width (mm)', 'Height (mm)', 'X Position', 'Y Position', 'Rotated'])

    for placement in result.placements:
        writer.writerow([
            placement.slab_index + 1,
            placement.label,
            placement.width,
            placement.height,
            placement.x,
            placement.y,
            'Yes' if placement.rotated else 'No',
        ])

    writer.writerow([])
    writer.writerow(['Summary'])
    writer.writerow(['Total Slabs', result.total_slabs])
    writer.writerow(['Total Pieces', len(result.placements)])
    writer.writerow(['Slab Size', f"{slab_width} x {slab_height} mm"])
    writer.writerow(['Waste %', f"{result.waste_percent:.1f}%"])
    if result.unplaced_pieces:
        writer.writerow(['Unplaced Pieces', ' '.join(result.unplaced_pieces)])
    writer.writerow(['Generated', _timestamp(generated_at).isoformat()])

    return output.getvalue()


def generate_cut_list_data(result: OptimizationResult, slab_width: int, slab_height: int,
                           generated_at: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Generate structured cut-list data for on-screen or printable display.

    Returns:
        Dictionary with a ``summary`` block and one ``slabs`` entry per opened slab
    """
    return {
        'summary': {
            'totalSlabs': result.total_slabs,
            'totalPieces': len(result.placements),
            'totalArea': result.total_used_area,
            'wastePercent': result.waste_percent,
            'generatedAt': _timestamp(generated_at),
        },
        'slabs': [
            {
                'slabNumber': slab.slab_index + 1,
                'dimensions': f"{slab_width} × {slab_height} mm",
                'pieceCount': len(slab.placements),
                'wastePercent': slab.waste_percent,
                'pieces': [
                    {
                        'label': placement.label,
                        'width': placement.width,
                        'height': placement.height,
                        'x': placement.x,
                        'y': placement.y,
                        'rotated': placement.rotated,
                    }
                    for placement in slab.placements
                ],
            }
            for slab in result.slabs
        ],
    }


def generate_lamination_csv(result: OptimizationResult) -> str:
    """
    Generate the lamination strip list as CSV.

    Returns:
        CSV content, or an empty string when the run produced no strips
    """
    summary = result.lamination_summary
    if summary is None:
        return ""

    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(['Parent Piece', 'Position', 'Length (mm)', 'Width (mm)'])

    for parent_id, entries in summary.strips_by_parent.items():
        for entry in entries:
            writer.writerow([parent_id, entry.position.value, entry.length_mm, entry.width_mm])

    writer.writerow([])
    writer.writerow(['Total Strips', summary.total_strips])
    writer.writerow(['Total Strip Area (m²)', f"{summary.total_strip_area / 1_000_000:.2f}"])

    return output.getvalue()


def generate_cutting_layout_text(result: OptimizationResult, order_name: str = "") -> str:
    """
    Generate text-based cutting layout report.

    Args:
        result: Optimization result
        order_name: Order or quote name to include in the header

    Returns:
        Formatted text report
    """
    report_lines = []

    if order_name:
        report_lines.append(f"SLAB CUTTING LAYOUT - {order_name}")
    else:
        report_lines.append("SLAB CUTTING LAYOUT")
    report_lines.append("=" * 60)
    report_lines.append("")

    report_lines.append("SUMMARY:")
    report_lines.append(f"Total Slabs: {result.total_slabs}")
    report_lines.append(f"Total Pieces: {len(result.placements)}")
    report_lines.append(f"Material Used: {result.total_used_area / 1_000_000:.2f} m²")
    report_lines.append(f"Waste: {result.waste_percent:.1f}%")
    if result.unplaced_pieces:
        report_lines.append(f"Unplaced Pieces: {', '.join(result.unplaced_pieces)}")
    report_lines.append("")

    for slab in result.slabs:
        report_lines.append(f"SLAB {slab.slab_index + 1}")
        report_lines.append(f"Size: {slab.width}mm x {slab.height}mm")
        report_lines.append(f"Waste: {slab.waste_percent:.1f}%")
        report_lines.append("")
        report_lines.append("Piece".ljust(30) + "Size".ljust(15) + "Position".ljust(15) + "Notes")
        report_lines.append("-" * 70)

        for placement in slab.placements:
            notes = []
            if placement.rotated:
                notes.append("Rotated")
            if placement.is_lamination_strip:
                notes.append(f"Lamination strip for {placement.parent_piece_id}")

            report_lines.append(
                placement.label[:29].ljust(30) +
                f"{placement.width}x{placement.height}".ljust(15) +
                f"({placement.x},{placement.y})".ljust(15) +
                ", ".join(notes)
            )

        report_lines.append("")
        report_lines.append("-" * 60)
        report_lines.append("")

    return "\n".join(report_lines)


def create_report_package(result: OptimizationResult, slab_width: int, slab_height: int,
                          order_name: str = "") -> Dict[str, str]:
    """
    Create the set of text reports for download.

    Returns:
        Dictionary with file names as keys and content as values
    """
    reports = {
        'cut_list.csv': generate_cut_list_csv(result, slab_width, slab_height),
        'cutting_layout.txt': generate_cutting_layout_text(result, order_name),
    }

    lamination_csv = generate_lamination_csv(result)
    if lamination_csv:
        reports['lamination_strips.csv'] = lamination_csv

    return reports
