"""
Utility functions for the SlabWise layout tool.
Logging setup, display formatting and Streamlit result widgets.
"""

import logging
from typing import List

import streamlit as st

from data_models import OptimizationResult


def setup_logging(log_level: str = "INFO") -> None:
    """
    Set up logging configuration for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=log_format,
        handlers=[
            logging.StreamHandler(),
        ]
    )

    logging.getLogger('matplotlib').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)


def mm2_to_m2(area_mm2: int) -> float:
    """Convert square millimetres to square metres for display."""
    return area_mm2 / 1_000_000


def format_area(area_mm2: int) -> str:
    """
    Format area for display with appropriate units.

    Args:
        area_mm2: Area in square millimetres

    Returns:
        Formatted area string
    """
    if area_mm2 >= 1_000_000:
        return f"{mm2_to_m2(area_mm2):.2f} m²"
    elif area_mm2 >= 100:
        return f"{area_mm2 / 100:.1f} cm²"
    else:
        return f"{area_mm2:.0f} mm²"


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def waste_rating(waste_percent: float) -> str:
    """Traffic-light rating used to colour waste figures."""
    if waste_percent < 15:
        return "good"
    if waste_percent < 25:
        return "fair"
    return "poor"


def display_optimization_metrics(result: OptimizationResult):
    """
    Display optimization metrics in Streamlit columns.

    Args:
        result: Optimization result to summarize
    """
    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("Total Slabs", result.total_slabs)

    with col2:
        st.metric("Material Used", f"{mm2_to_m2(result.total_used_area):.2f} m²")

    with col3:
        st.metric("Waste", format_percentage(result.waste_percent),
                  help=f"Rated {waste_rating(result.waste_percent)}")

    with col4:
        st.metric("Unplaced Pieces", len(result.unplaced_pieces))


def display_unplaced_warning(result: OptimizationResult):
    if not result.unplaced_pieces:
        return
    st.warning(f"⚠️ {len(result.unplaced_pieces)} piece(s) could not be placed: "
               f"{', '.join(result.unplaced_pieces)}. These pieces are too large for the slab dimensions; "
               f"choose a larger slab or split the piece.")


def display_slab_summary(result: OptimizationResult):
    """
    Display the per-slab summary table in Streamlit.

    Args:
        result: Optimization result
    """
    if not result.slabs:
        st.info("No pieces to display.")
        return

    slab_data = []
    for slab in result.slabs:
        slab_data.append({
            'Slab': slab.slab_index + 1,
            'Dimensions': f"{slab.width}×{slab.height}mm",
            'Pieces': len(slab.placements),
            'Used Area': format_area(slab.used_area),
            'Waste Area': format_area(slab.waste_area),
            'Waste': format_percentage(slab.waste_percent),
        })

    st.dataframe(slab_data, use_container_width=True)


def display_lamination_summary(result: OptimizationResult):
    """Display lamination strips grouped by parent piece."""
    summary = result.lamination_summary
    if summary is None:
        return

    st.subheader("Lamination Strips")
    st.caption(f"{summary.total_strips} strips, {format_area(summary.total_strip_area)} of strip material")

    rows = []
    for parent_id, entries in summary.strips_by_parent.items():
        for entry in entries:
            rows.append({
                'Parent Piece': parent_id,
                'Position': entry.position.value,
                'Length (mm)': entry.length_mm,
                'Width (mm)': entry.width_mm,
            })
    st.dataframe(rows, use_container_width=True)


def display_error_summary(errors: List[str]):
    """
    Display piece input problems.

    Args:
        errors: Error messages from the piece parser
    """
    if not errors:
        return
    st.warning(f"Found {len(errors)} invalid rows that will be skipped:")
    for message in errors[:10]:
        st.text(f"  • {message}")
    if len(errors) > 10:
        st.text(f"  • ... and {len(errors) - 10} more")
