import pytest
from matplotlib.figure import Figure

from conftest import make_input
from layout_renderer import SlabLayoutRenderer, render_layout_pngs
from optimization_core import optimize_slabs

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def laminated_slab(laminated_piece):
    return optimize_slabs(make_input([laminated_piece])).slabs[0]


def test_render_slab_returns_figure(laminated_slab):
    fig = SlabLayoutRenderer().render_slab(laminated_slab)

    assert isinstance(fig, Figure)
    ax = fig.axes[0]
    assert ax.get_ylim() == (1400, 0)
    # slab outline plus one patch per placement
    assert len(ax.patches) == 1 + len(laminated_slab.placements)
    assert "Slab 1" in ax.get_title()


def test_strips_are_hatched(laminated_slab):
    ax = SlabLayoutRenderer().render_slab(laminated_slab).axes[0]
    hatches = [patch.get_hatch() for patch in ax.patches[1:]]
    assert hatches == [None, "///", "///"]


def test_custom_title(laminated_slab):
    ax = SlabLayoutRenderer().render_slab(laminated_slab, title="Order 42").axes[0]
    assert ax.get_title() == "Order 42"


def test_png_output(kitchen_result):
    images = render_layout_pngs(kitchen_result.slabs, dpi=50)
    assert len(images) == kitchen_result.total_slabs
    assert all(image.startswith(PNG_SIGNATURE) for image in images)
