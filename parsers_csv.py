"""
Input parsers for the SlabWise layout tool.
Reads piece lists from CSV files, pasted CSV text or an edited DataFrame.
"""

import io
import logging
import os
from typing import List, Tuple, Union

import pandas as pd

from data_models import FinishedEdges, Piece

logger = logging.getLogger(__name__)

# Accepted header spellings, mapped to the canonical column name
COLUMN_ALIASES = {
    'ID': ['ID', 'Piece ID', 'PIECE ID', 'id'],
    'Label': ['Label', 'LABEL', 'Name', 'Piece Name', 'label'],
    'Width': ['Width', 'Width (mm)', 'LENGTH', 'Length (mm)', 'Length', 'width'],
    'Height': ['Height', 'Height (mm)', 'DEPTH', 'Depth (mm)', 'Depth', 'height'],
    'Qty': ['Qty', 'QTY', 'Quantity'],
    'Thickness': ['Thickness', 'Thickness (mm)', 'FINISHED THICKNESS', 'thickness'],
    'Can Rotate': ['Can Rotate', 'Rotate', 'canRotate'],
    'Edge Top': ['Edge Top', 'EDGE TOP', 'edgeTop'],
    'Edge Bottom': ['Edge Bottom', 'EDGE BOTTOM', 'edgeBottom'],
    'Edge Left': ['Edge Left', 'EDGE LEFT', 'edgeLeft'],
    'Edge Right': ['Edge Right', 'EDGE RIGHT', 'edgeRight'],
}

REQUIRED_COLUMNS = ['Width', 'Height']

PIECE_COLUMNS = ['ID', 'Label', 'Width', 'Height', 'Qty', 'Thickness', 'Can Rotate',
                 'Edge Top', 'Edge Bottom', 'Edge Left', 'Edge Right']

TRUE_VALUES = {'yes', 'y', 'true', '1', 'x'}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    renames = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        if canonical in df.columns:
            continue
        for alias in aliases:
            if alias in df.columns:
                renames[alias] = canonical
                break
    return df.rename(columns=renames)


def _safe_str(value) -> str:
    if value is None or pd.isna(value):
        return ''
    return str(value).strip()


def parse_flag(value, default: bool = False) -> bool:
    """
    Interpret a spreadsheet cell as a boolean.

    Args:
        value: Cell value (bool, number, 'Yes'/'No', empty)
        default: Result for empty cells

    Returns:
        Parsed flag
    """
    if isinstance(value, bool):
        return value
    text = _safe_str(value)
    if not text:
        return default
    return text.lower() in TRUE_VALUES


def _parse_mm(value, column: str) -> int:
    text = _safe_str(value)
    if not text:
        raise ValueError(f"missing {column}")
    number = float(text)
    if not number.is_integer():
        raise ValueError(f"{column} must be whole millimetres, got {text}")
    return int(number)


def pieces_from_dataframe(df: pd.DataFrame) -> Tuple[List[Piece], List[str]]:
    """
    Create Piece objects from a piece table.

    Rows with a quantity above 1 expand into pieces with ``-1``, ``-2``... id suffixes.
    Blank rows are skipped; invalid rows are reported and skipped.

    Args:
        df: Table with at least Width and Height columns

    Returns:
        Tuple of (pieces, error messages)
    """
    df = _normalize_columns(df)

    missing_columns = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing_columns:
        return [], [f"Missing required columns: {', '.join(missing_columns)}"]

    pieces: List[Piece] = []
    errors: List[str] = []

    for position, (_, row) in enumerate(df.iterrows()):
        row_number = position + 2  # header is line 1
        width_text = _safe_str(row.get('Width'))
        height_text = _safe_str(row.get('Height'))
        piece_id = _safe_str(row.get('ID')) or f"P{position + 1}"

        if not width_text and not height_text and not _safe_str(row.get('ID')):
            continue

        try:
            width = _parse_mm(row.get('Width'), 'width')
            height = _parse_mm(row.get('Height'), 'height')
            thickness_text = _safe_str(row.get('Thickness'))
            thickness = _parse_mm(thickness_text, 'thickness') if thickness_text else 20
            quantity_text = _safe_str(row.get('Qty'))
            quantity = _parse_mm(quantity_text, 'quantity') if quantity_text else 1
        except ValueError as e:
            errors.append(f"Row {row_number} ({piece_id}): {e}")
            logger.warning(f"Skipping row {row_number}: {e}")
            continue

        if width <= 0 or height <= 0:
            errors.append(f"Row {row_number} ({piece_id}): dimensions must be positive, got {width}x{height}")
            continue
        if quantity <= 0:
            errors.append(f"Row {row_number} ({piece_id}): quantity must be positive, got {quantity}")
            continue

        label = _safe_str(row.get('Label')) or piece_id
        edges = FinishedEdges(
            top=parse_flag(row.get('Edge Top')),
            bottom=parse_flag(row.get('Edge Bottom')),
            left=parse_flag(row.get('Edge Left')),
            right=parse_flag(row.get('Edge Right')),
        )
        can_rotate = parse_flag(row.get('Can Rotate'), default=True)

        for copy_number in range(1, quantity + 1):
            pieces.append(Piece(
                id=piece_id if quantity == 1 else f"{piece_id}-{copy_number}",
                width=width,
                height=height,
                label=label if quantity == 1 else f"{label} ({copy_number}/{quantity})",
                can_rotate=can_rotate,
                thickness=thickness,
                finished_edges=edges,
            ))

    logger.info(f"Loaded {len(pieces)} pieces, {len(errors)} rows rejected")
    return pieces, errors


def load_pieces_from_csv(source: Union[str, os.PathLike]) -> Tuple[List[Piece], List[str]]:
    """
    Load pieces from a CSV file path or from CSV text.

    Tab-separated text is accepted as well.

    Args:
        source: Path to an existing CSV file, or the CSV content itself

    Returns:
        Tuple of (pieces, error messages)
    """
    try:
        if isinstance(source, os.PathLike) or (isinstance(source, str) and '\n' not in source
                                               and os.path.exists(source)):
            with open(source, 'r', encoding='utf-8') as file:
                text = file.read().strip()
        else:
            text = str(source).strip()

        if not text:
            return [], ["No piece data provided"]

        first_line = text.split('\n', 1)[0]
        separator = '\t' if '\t' in first_line else ','
        df = pd.read_csv(io.StringIO(text), sep=separator, dtype=str, skipinitialspace=True)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.error(f"Could not read piece CSV: {e}")
        return [], [f"Could not read piece CSV: {e}"]

    df.columns = [str(column).strip() for column in df.columns]
    return pieces_from_dataframe(df)


def sample_piece_table() -> pd.DataFrame:
    """Starter table for the interactive piece editor."""
    return pd.DataFrame([
        {'ID': 'P1', 'Label': 'Kitchen: Benchtop', 'Width': 2400, 'Height': 650, 'Qty': 1, 'Thickness': 40,
         'Can Rotate': True, 'Edge Top': True, 'Edge Bottom': False, 'Edge Left': True, 'Edge Right': False},
        {'ID': 'P2', 'Label': 'Kitchen: Island', 'Width': 1800, 'Height': 900, 'Qty': 1, 'Thickness': 20,
         'Can Rotate': True, 'Edge Top': True, 'Edge Bottom': True, 'Edge Left': True, 'Edge Right': True},
        {'ID': 'P3', 'Label': 'Laundry: Benchtop', 'Width': 1200, 'Height': 600, 'Qty': 1, 'Thickness': 20,
         'Can Rotate': True, 'Edge Top': True, 'Edge Bottom': False, 'Edge Left': False, 'Edge Right': False},
    ], columns=PIECE_COLUMNS)
