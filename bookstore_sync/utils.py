import csv
import io
import logging
from collections import Counter
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

CSV_SUFFIXES = {".csv", ".txt", ".tsv"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
SEPARATORS = ",;\t|"
SNIFF_LINES = 50


def today_iso() -> str:
    return date.today().isoformat()


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def _frame_to_rows(df: pd.DataFrame) -> list[list[Any]]:
    df = df.astype(object).where(pd.notna(df), None)
    return df.values.tolist()


def _read_text(file_path: Path) -> str:
    """UTF-8 (with BOM) first, then latin-1, which can read any byte."""
    try:
        return file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        logger.info(f"INFO: UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'.")
        return file_path.read_text(encoding="latin-1")


def _column_widths(lines: list[str], sep: str) -> list[int]:
    return [len(row) for row in csv.reader(lines, delimiter=sep) if any(c.strip() for c in row)]


def _guess_separator(file_path: Path, lines: list[str]) -> str:
    """
    csv.Sniffer first. When it gives up (a preamble line breaks its frequency
    check), pick the separator that splits the most lines into the same
    number of columns. Raw character counts are not enough: Brazilian
    exports use ';' with ',' inside prices and titles.
    """
    if file_path.suffix.lower() == ".tsv":
        return "\t"
    sample = lines[:SNIFF_LINES]
    try:
        return csv.Sniffer().sniff("\n".join(sample), delimiters=SEPARATORS).delimiter
    except csv.Error:
        pass

    best_sep, best_score = ",", (0, 0)
    for sep in SEPARATORS:
        widths = [w for w in _column_widths(sample, sep) if w > 1]
        if not widths:
            continue
        width, agreeing = Counter(widths).most_common(1)[0]
        if (agreeing, width) > best_score:
            best_sep, best_score = sep, (agreeing, width)
    return best_sep


def load_csv_rows(file_path: Path) -> list[list[Any]]:
    """
    Reads a CSV as raw cells, no header inference. Rows may be ragged
    (preamble lines above the header), so the frame is as wide as the
    widest line. Point-of-sale exports often use ';' as the separator.
    """
    text = _read_text(file_path)
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []
    sep = _guess_separator(file_path, lines)
    width = max(len(row) for row in csv.reader(lines, delimiter=sep))

    df = pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        sep=sep,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    return _frame_to_rows(df)


def load_excel_rows(file_path: Path) -> list[list[Any]]:
    """First sheet of a workbook as raw cells."""
    df = pd.read_excel(file_path, sheet_name=0, header=None, dtype=object)
    return _frame_to_rows(df)


def load_sheet(file_path: Path) -> list[list[Any]]:
    """Decodes a spreadsheet file into rows of raw cell values."""
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        return load_csv_rows(file_path)
    if suffix in EXCEL_SUFFIXES:
        return load_excel_rows(file_path)
    raise ValueError(f"Unsupported sheet format: {file_path.name}")
