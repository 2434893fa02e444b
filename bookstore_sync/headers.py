"""
Header row detection for sheets of unknown layout.

Each logical field has an ordered tuple of alias substrings. A header cell
matches a field when its canonical text (lower-case, accents and whitespace
removed) contains any of the field's aliases. Unrecognised columns are ignored.
"""

import logging
import unicodedata
from typing import Any, Sequence

from . import settings
from .exceptions import EmptyInput, SchemaNotFound
from .schemas import ColumnMap

logger = logging.getLogger(__name__)

CATALOG_MODE = "catalog"
SALES_MODE = "sales"

# Resolution order matters: a column claimed by an earlier field is not
# offered to later ones ("Qtd Vendida" is a quantity, never a price).
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "isbn": ("isbn", "ean", "gtin", "barcode", "barras", "codigo", "cod", "code"),
    "quantity": (
        "quantidade",
        "qtd",
        "qtde",
        "quant",
        "vendid",
        "quantity",
        "qty",
        "unidades",
        "units",
    ),
    "stock": (
        "estoque",
        "stock",
        "saldo",
        "quantidade",
        "qtd",
        "qtde",
        "disponivel",
        "unidades",
    ),
    "price": (
        "preco",
        "price",
        "valor",
        "vlr",
        "unitario",
        "venda",
    ),
    "description": (
        "sinopse",
        "synopsis",
        "resumo",
        "summary",
        "descricaolonga",
        "longa",
        "description",
    ),
    "title": ("titulo", "title", "nome", "name", "produto", "livro", "descricao"),
    "author": ("autor", "author", "escritor", "writer"),
    "genre": (
        "genero",
        "genre",
        "categoria",
        "category",
        "secao",
        "departamento",
    ),
}

FIELD_EXCLUSIONS: dict[str, tuple[str, ...]] = {
    "title": ("longa", "sinopse", "autor", "author"),
    "price": ("total",),
}

MODE_FIELDS = {
    CATALOG_MODE: ("isbn", "stock", "price", "description", "title", "author", "genre"),
    SALES_MODE: ("isbn", "quantity", "price", "title"),
}

MANDATORY_FIELDS = {
    CATALOG_MODE: ("isbn",),
    SALES_MODE: ("isbn", "quantity"),
}


def canonical_header(value: Any) -> str:
    """'  Preço Venda ' -> 'precovenda'."""
    if value is None:
        return ""
    text = unicodedata.normalize("NFKD", str(value))
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return "".join(text.lower().split())


def match_column(
    cells: Sequence[str], field: str, taken: set[int] | frozenset[int] = frozenset()
) -> int | None:
    """
    First column index (left to right) whose canonical header contains any
    alias of `field`, skipping columns in `taken`.
    """
    aliases = FIELD_ALIASES[field]
    exclusions = FIELD_EXCLUSIONS.get(field, ())
    for idx, cell in enumerate(cells):
        if idx in taken or not cell:
            continue
        if any(ex in cell for ex in exclusions):
            continue
        if any(alias in cell for alias in aliases):
            return idx
    return None


def map_row(cells: Sequence[Any], mode: str = CATALOG_MODE) -> dict[str, int]:
    """Maps every field of `mode` that this row has a header for."""
    canonical = [canonical_header(c) for c in cells]
    taken: set[int] = set()
    columns: dict[str, int] = {}
    for field in MODE_FIELDS[mode]:
        idx = match_column(canonical, field, taken)
        if idx is not None:
            columns[field] = idx
            taken.add(idx)
    return columns


def classify_headers(
    rows: Sequence[Sequence[Any]], mode: str = CATALOG_MODE, scan_rows: int | None = None
) -> ColumnMap:
    """
    Finds the header row within the first `scan_rows` rows (HEADER_SCAN_ROWS by
    default). The first row carrying every mandatory field for `mode` wins;
    everything above it is preamble.

    Raises SchemaNotFound naming the missing columns, or EmptyInput for a
    sheet without rows.
    """
    if mode not in MODE_FIELDS:
        raise ValueError(f"Unknown import mode: {mode!r}")
    if not rows:
        raise EmptyInput("The sheet is empty.")

    window = min(len(rows), scan_rows or settings.HEADER_SCAN_ROWS)
    mandatory = MANDATORY_FIELDS[mode]
    seen: set[str] = set()

    for row_idx in range(window):
        columns = map_row(rows[row_idx] or [], mode)
        seen.update(columns)
        if all(field in columns for field in mandatory):
            logger.info(
                f"  > Header found on row {row_idx + 1}: "
                + ", ".join(f"{f}=col {i + 1}" for f, i in columns.items())
            )
            return ColumnMap(header_row=row_idx, columns=columns)

    missing = [f for f in mandatory if f not in seen] or list(mandatory)
    raise SchemaNotFound(missing, window)
