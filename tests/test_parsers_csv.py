import pandas as pd

from data_models import FinishedEdges
from parsers_csv import PIECE_COLUMNS, load_pieces_from_csv, parse_flag, pieces_from_dataframe, sample_piece_table

PIECES_CSV = (
    "ID,Label,Width,Height,Qty,Thickness,Edge Top\n"
    "P1,Bench,2400,650,1,40,yes\n"
    "P2,Splash,600,450,2,,\n"
)


def test_load_from_text():
    pieces, errors = load_pieces_from_csv(PIECES_CSV)

    assert errors == []
    assert [piece.id for piece in pieces] == ["P1", "P2-1", "P2-2"]
    bench = pieces[0]
    assert (bench.width, bench.height, bench.thickness) == (2400, 650, 40)
    assert bench.finished_edges == FinishedEdges(top=True)
    assert pieces[1].label == "Splash (1/2)"
    assert pieces[1].thickness == 20


def test_load_from_file(tmp_path):
    path = tmp_path / "pieces.csv"
    path.write_text(PIECES_CSV, encoding="utf-8")

    from_str, _ = load_pieces_from_csv(str(path))
    from_path, _ = load_pieces_from_csv(path)
    assert len(from_str) == len(from_path) == 3


def test_tab_separated_with_defaults():
    pieces, errors = load_pieces_from_csv("Width\tHeight\n1200\t600\n")

    assert errors == []
    piece = pieces[0]
    assert (piece.id, piece.label, piece.width, piece.height) == ("P1", "P1", 1200, 600)
    assert piece.can_rotate is True


def test_header_aliases():
    pieces, errors = load_pieces_from_csv("Length (mm),Depth (mm)\n1000,500\n")
    assert errors == []
    assert (pieces[0].width, pieces[0].height) == (1000, 500)


def test_invalid_rows_reported_and_skipped():
    pieces, errors = load_pieces_from_csv("Width,Height\nabc,600\n1200.5,600\n900,0\n800,400\n")

    assert [piece.id for piece in pieces] == ["P4"]
    assert len(errors) == 3
    assert errors[0].startswith("Row 2 (P1)")
    assert "whole millimetres" in errors[1]
    assert "positive" in errors[2]


def test_missing_columns():
    pieces, errors = load_pieces_from_csv("Label\nfoo\n")
    assert pieces == []
    assert errors == ["Missing required columns: Width, Height"]


def test_empty_input():
    assert load_pieces_from_csv("   ") == ([], ["No piece data provided"])


def test_dataframe_skips_blank_rows():
    df = pd.DataFrame([{'Width': 1000, 'Height': 500}, {'Width': None, 'Height': None}])
    pieces, errors = pieces_from_dataframe(df)
    assert errors == []
    assert [(piece.width, piece.height) for piece in pieces] == [(1000, 500)]


def test_can_rotate_column():
    pieces, _ = load_pieces_from_csv("Width,Height,Can Rotate\n1000,500,No\n")
    assert pieces[0].can_rotate is False


def test_parse_flag():
    assert parse_flag("Yes") is True
    assert parse_flag("x") is True
    assert parse_flag("no") is False
    assert parse_flag(True) is True
    assert parse_flag(None, default=True) is True
    assert parse_flag("", default=False) is False


def test_sample_table_parses_cleanly():
    table = sample_piece_table()
    assert list(table.columns) == PIECE_COLUMNS

    pieces, errors = pieces_from_dataframe(table)
    assert errors == []
    assert [piece.id for piece in pieces] == ["P1", "P2", "P3"]
    assert pieces[0].thickness == 40
    assert pieces[0].finished_edges == FinishedEdges(top=True, left=True)
