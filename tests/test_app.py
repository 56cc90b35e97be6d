"""
Smoke tests for the Streamlit tool's non-widget helpers.
"""
import io
import zipfile

import app
from conftest import make_input
from optimization_core import optimize_slabs
from optimizer_config import OptimizerConfig


def test_app_module_has_main():
    assert callable(app.main)


def test_download_zip_contents(laminated_piece):
    config = OptimizerConfig()
    result = optimize_slabs(make_input([laminated_piece]), config)

    archive = zipfile.ZipFile(io.BytesIO(app.create_download_zip(result, config)))

    assert sorted(archive.namelist()) == [
        'cut_list.csv', 'cut_list.xlsx', 'cutting_layout.txt', 'lamination_strips.csv', 'slab_1.png',
    ]
    assert archive.read('slab_1.png').startswith(b"\x89PNG")
