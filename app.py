"""
SlabWise - Stone Slab Layout Optimizer
Streamlit layout tool for packing benchtop pieces and lamination strips onto slabs.
"""

import io
import logging
import zipfile
from datetime import date

import pandas as pd
import streamlit as st

from data_models import OptimizationInput
from layout_renderer import SlabLayoutRenderer, render_layout_pngs
from optimization_core import OptimizationError, ValidationError, optimize_slabs
from optimizer_config import OptimizerConfig
from parsers_csv import PIECE_COLUMNS, load_pieces_from_csv, pieces_from_dataframe, sample_piece_table
from report_generators import create_cut_list_workbook
from simple_reports import create_report_package, generate_cut_list_csv, generate_cut_list_data
from slab_catalogue import classify_material, get_slab_options
from utils import (display_error_summary, display_lamination_summary, display_optimization_metrics,
                   display_slab_summary, display_unplaced_warning, setup_logging)

logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="SlabWise - Slab Layout Optimizer",
    page_icon="🪨",
    layout="wide",
    initial_sidebar_state="expanded"
)

CUSTOM_SIZE = "Custom size"


def main():
    """Main application function."""
    setup_logging()

    st.title("🪨 SlabWise - Slab Layout Optimizer")
    st.markdown("**Pack benchtop pieces and lamination strips onto stone slabs**")

    st.sidebar.title("Navigation")
    page = st.sidebar.selectbox(
        "Choose a page:",
        ["⚙️ Optimizer", "📋 Results", "📁 Download Files", "❓ Help"]
    )

    if 'pieces_table' not in st.session_state:
        st.session_state.pieces_table = sample_piece_table()
    if 'optimization_complete' not in st.session_state:
        st.session_state.optimization_complete = False

    if page == "⚙️ Optimizer":
        show_optimizer_page()
    elif page == "📋 Results":
        show_results_page()
    elif page == "📁 Download Files":
        show_download_page()
    elif page == "❓ Help":
        show_help_page()


def show_slab_settings() -> OptimizerConfig:
    """Slab, kerf and lamination widgets; returns the resulting configuration."""
    defaults = OptimizerConfig()

    st.subheader("Slab Settings")

    options = [CUSTOM_SIZE] + [str(size) for size in get_slab_options()]

    material_name = st.text_input("Material name (optional)",
                                  help="e.g. 'Dekton Aura' or 'Calacatta Marble'; selects the matching preset")
    preset_index = 0
    if material_name.strip():
        suggested = classify_material(material_name)
        preset_index = options.index(str(suggested))
        st.caption(f"Suggested slab: {suggested}")

    preset = st.selectbox("Material preset", options, index=preset_index,
                          help="Standard slab sizes by stone family")

    preset_size = next((size for size in get_slab_options() if str(size) == preset), None)
    default_width = preset_size.width if preset_size else defaults.slab_width
    default_height = preset_size.height if preset_size else defaults.slab_height

    col1, col2, col3 = st.columns(3)
    with col1:
        slab_width = st.number_input("Slab width (mm)", min_value=1, value=default_width, step=10)
    with col2:
        slab_height = st.number_input("Slab height (mm)", min_value=1, value=default_height, step=10)
    with col3:
        kerf_width = st.number_input("Kerf (mm)", min_value=0, value=defaults.kerf_width, step=1)

    allow_rotation = st.checkbox("Allow rotation", value=defaults.allow_rotation)

    with st.expander("Lamination settings"):
        threshold = st.number_input("Laminate pieces at or above thickness (mm)", min_value=1,
                                    value=defaults.lamination_threshold_mm, step=5)
        strip_width = st.number_input("Lamination strip width (mm)", min_value=1,
                                      value=defaults.lamination_strip_width_mm, step=5)
        strip_rotation = st.checkbox("Allow strip rotation", value=defaults.allow_strip_rotation)

    return OptimizerConfig(
        slab_width=int(slab_width),
        slab_height=int(slab_height),
        kerf_width=int(kerf_width),
        allow_rotation=allow_rotation,
        lamination_threshold_mm=int(threshold),
        lamination_strip_width_mm=int(strip_width),
        allow_strip_rotation=strip_rotation,
    )


def show_piece_input():
    """Editable piece table plus CSV paste/upload; returns (pieces, errors)."""
    st.subheader("Pieces")

    tab1, tab2 = st.tabs(["📋 Piece Table", "📎 CSV Import"])

    with tab1:
        edited = st.data_editor(
            st.session_state.pieces_table,
            num_rows="dynamic",
            use_container_width=True,
            column_config={
                'Width': st.column_config.NumberColumn("Width (mm)", min_value=1, step=1),
                'Height': st.column_config.NumberColumn("Height (mm)", min_value=1, step=1),
                'Qty': st.column_config.NumberColumn("Qty", min_value=1, step=1),
                'Thickness': st.column_config.NumberColumn("Thickness (mm)", min_value=0, step=1),
            },
            key="pieces_editor",
        )

    with tab2:
        st.markdown("Columns: " + ", ".join(PIECE_COLUMNS) + ". Only Width and Height are required.")
        uploaded_file = st.file_uploader("Upload piece CSV", type=['csv', 'txt'])
        pasted_text = st.text_area("...or paste CSV / tab-separated rows", height=200)

        if st.button("Load into piece table"):
            source = uploaded_file.getvalue().decode('utf-8', errors='replace') if uploaded_file else pasted_text
            pieces, errors = load_pieces_from_csv(source)
            display_error_summary(errors)
            if pieces:
                st.session_state.pieces_table = pd.DataFrame([
                    {'ID': piece.id, 'Label': piece.label, 'Width': piece.width, 'Height': piece.height,
                     'Qty': 1, 'Thickness': piece.thickness, 'Can Rotate': piece.can_rotate,
                     'Edge Top': piece.finished_edges.top, 'Edge Bottom': piece.finished_edges.bottom,
                     'Edge Left': piece.finished_edges.left, 'Edge Right': piece.finished_edges.right}
                    for piece in pieces
                ], columns=PIECE_COLUMNS)
                st.success(f"Loaded {len(pieces)} pieces")
                st.rerun()

    return pieces_from_dataframe(edited)


def show_optimizer_page():
    """Display settings, piece input and run the optimizer."""
    st.header("⚙️ Slab Optimizer")

    col1, col2 = st.columns([1, 2])

    with col1:
        config = show_slab_settings()

    with col2:
        pieces, errors = show_piece_input()
        display_error_summary(errors)

    st.markdown("---")

    if st.button("🚀 Optimize", type="primary"):
        if not pieces:
            st.error("Add at least one piece to optimize.")
            return

        try:
            with st.spinner("Optimizing slab layout..."):
                result = optimize_slabs(OptimizationInput.from_config(pieces, config), config)
        except ValidationError as e:
            st.error(f"Invalid input - {e}")
            return
        except OptimizationError as e:
            logger.error(f"Optimization failed: {e}")
            st.error(f"Optimization failed: {e}")
            return

        st.session_state.result = result
        st.session_state.config = config
        st.session_state.optimization_complete = True

        st.success(f"Optimization complete: {result.total_slabs} slab(s)")
        display_optimization_metrics(result)
        display_unplaced_warning(result)


def show_results_page():
    """Display metrics, slab diagrams and the lamination summary."""
    st.header("📋 Results")

    if not st.session_state.optimization_complete:
        st.info("Run the optimizer first.")
        return

    result = st.session_state.result

    display_optimization_metrics(result)
    display_unplaced_warning(result)
    display_slab_summary(result)
    display_lamination_summary(result)

    config = st.session_state.config
    cut_list = generate_cut_list_data(result, config.slab_width, config.slab_height)

    renderer = SlabLayoutRenderer()
    for slab, slab_data in zip(result.slabs, cut_list['slabs']):
        st.subheader(f"Slab {slab_data['slabNumber']}")
        st.caption(f"{slab_data['dimensions']} · {slab_data['pieceCount']} pieces · "
                   f"{slab_data['wastePercent']:.1f}% waste")
        st.pyplot(renderer.render_slab(slab))
        with st.expander("Cut list"):
            st.dataframe(slab_data['pieces'], use_container_width=True)


def create_download_zip(result, config: OptimizerConfig) -> bytes:
    """Bundle the text reports, the workbook and slab diagrams into one zip."""
    buffer = io.BytesIO()

    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
        for filename, content in create_report_package(result, config.slab_width, config.slab_height).items():
            archive.writestr(filename, content)
        archive.writestr('cut_list.xlsx', create_cut_list_workbook(result))
        for slab, image in zip(result.slabs, render_layout_pngs(result.slabs)):
            archive.writestr(f"slab_{slab.slab_index + 1}.png", image)

    return buffer.getvalue()


def show_download_page():
    """Display download buttons for the cut list exports."""
    st.header("📁 Download Files")

    if not st.session_state.optimization_complete:
        st.info("Run the optimizer first.")
        return

    result = st.session_state.result
    config = st.session_state.config
    today = date.today().isoformat()

    st.download_button(
        "Download Cut List (CSV)",
        generate_cut_list_csv(result, config.slab_width, config.slab_height),
        f"cut-list-standalone-{today}.csv",
        "text/csv"
    )

    st.download_button(
        "Download Cut List (Excel)",
        create_cut_list_workbook(result),
        f"cut-list-standalone-{today}.xlsx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

    st.download_button(
        "Download All (ZIP)",
        create_download_zip(result, config),
        f"slab-layout-{today}.zip",
        "application/zip"
    )


def show_help_page():
    st.header("❓ Help")
    st.markdown("""
    ### How it works

    1. Choose a slab size (or a material preset), the saw kerf and whether pieces may rotate.
    2. Enter pieces in the table or import a CSV. Dimensions are whole millimetres.
    3. Pieces **40mm or thicker** with finished edges get one lamination strip per finished edge.
       Strips are cut from the same slabs and shown hatched in the diagrams.
    4. Pieces are placed largest first using a best-fit guillotine heuristic. Results are
       deterministic but not guaranteed to be the minimum possible waste.

    ### Unplaced pieces

    A piece larger than the slab in every permitted orientation is listed as unplaced.
    Reduce the piece, pick a larger slab, or split the piece manually.
    """)


if __name__ == "__main__":
    main()
