import logging
from typing import Any, Sequence

from . import settings
from .exceptions import EmptyInput
from .normalizers import (
    clean_text,
    is_blank,
    normalize_isbn,
    parse_currency,
    parse_quantity,
    parse_stock,
)
from .schemas import CatalogCandidate, ColumnMap, SaleCandidate

logger = logging.getLogger(__name__)


def _cell(row: Sequence[Any], column_map: ColumnMap, field: str) -> Any:
    """Reads one cell through the column map. Missing column or short row -> None."""
    idx = column_map.index_of(field)
    if idx is None or idx >= len(row):
        return None
    return row[idx]


def _is_empty_row(row: Sequence[Any] | None) -> bool:
    return not row or all(is_blank(c) for c in row)


def _data_rows(rows: Sequence[Sequence[Any]], column_map: ColumnMap):
    for offset, row in enumerate(rows[column_map.header_row + 1 :]):
        if _is_empty_row(row):
            continue
        yield column_map.header_row + offset + 2, row  # 1-based sheet row number


def _valid_isbn(isbn: str) -> bool:
    return len(isbn) >= settings.MIN_ISBN_LENGTH


def _price(raw: Any) -> float | None:
    """Negative prices are treated as absent."""
    value = parse_currency(raw)
    if value is None or value < 0:
        return None
    return round(value, 2)


def extract_catalog_candidates(
    rows: Sequence[Sequence[Any]], column_map: ColumnMap
) -> tuple[list[CatalogCandidate], int]:
    """
    Turns the rows below the header into catalog candidates.
    Rows whose code is missing or too short are skipped, not reported.
    Returns (candidates, rejected_count) and raises EmptyInput when nothing is left.
    """
    candidates: list[CatalogCandidate] = []
    rejected = 0

    for sheet_row, row in _data_rows(rows, column_map):
        isbn = normalize_isbn(_cell(row, column_map, "isbn"))
        if not _valid_isbn(isbn):
            logger.debug(f"Row {sheet_row}: skipped, invalid code {isbn!r}")
            rejected += 1
            continue

        raw_price = _cell(row, column_map, "price")
        raw_stock = _cell(row, column_map, "stock")

        candidates.append(
            CatalogCandidate(
                isbn=isbn,
                title=clean_text(_cell(row, column_map, "title")),
                author=clean_text(_cell(row, column_map, "author")),
                genre=clean_text(_cell(row, column_map, "genre")),
                description=clean_text(_cell(row, column_map, "description")),
                price=_price(raw_price),
                stock_count=parse_stock(raw_stock),
            )
        )

    if not candidates:
        raise EmptyInput(
            "No valid data found below the header. Check that the ISBNs are in the right column."
        )
    logger.info(f"  > Rows accepted: {len(candidates)} | skipped: {rejected}")
    return candidates, rejected


def extract_sales_candidates(
    rows: Sequence[Sequence[Any]], column_map: ColumnMap
) -> tuple[list[SaleCandidate], int]:
    """Sales rows need a valid code and a quantity above zero."""
    candidates: list[SaleCandidate] = []
    rejected = 0

    for sheet_row, row in _data_rows(rows, column_map):
        isbn = normalize_isbn(_cell(row, column_map, "isbn"))
        quantity = parse_quantity(_cell(row, column_map, "quantity"))
        if not _valid_isbn(isbn) or quantity <= 0:
            logger.debug(f"Row {sheet_row}: skipped (code={isbn!r}, quantity={quantity})")
            rejected += 1
            continue

        candidates.append(
            SaleCandidate(
                isbn=isbn,
                quantity=quantity,
                price=_price(_cell(row, column_map, "price")),
            )
        )

    if not candidates:
        raise EmptyInput("No valid sales found below the header.")
    logger.info(f"  > Sales lines accepted: {len(candidates)} | skipped: {rejected}")
    return candidates, rejected
