import logging
from typing import Iterable

from . import settings
from .normalizers import normalize_isbn
from .schemas import CatalogCandidate, CatalogItem, CatalogReport

logger = logging.getLogger(__name__)


def index_by_isbn(catalog: list[CatalogItem]) -> dict[str, int]:
    index: dict[str, int] = {}
    for pos, item in enumerate(catalog):
        key = normalize_isbn(item.isbn)
        if key and key not in index:
            index[key] = pos
    return index


def _apply_update(item: CatalogItem, candidate: CatalogCandidate, isbn: str) -> None:
    """
    Field-level precedence for an ISBN already in the catalog:
    - title/author: filled only while unset
    - description: replaced only by a strictly longer text
    - genre: last import wins
    - price/stock: replaced only when the sheet supplied a value
    """
    item.isbn = isbn
    if item.title is None and candidate.title:
        item.title = candidate.title
    if item.author is None and candidate.author:
        item.author = candidate.author
    if candidate.description and len(candidate.description) > len(item.description):
        item.description = candidate.description
    if candidate.genre:
        item.genre = candidate.genre
    if candidate.price is not None:
        item.price = candidate.price
    if candidate.stock_count is not None:
        item.stock_count = max(0, candidate.stock_count)
    if item.description:
        item.enriched = True


def _new_item(candidate: CatalogCandidate, isbn: str) -> CatalogItem:
    return CatalogItem(
        isbn=isbn,
        title=candidate.title,
        author=candidate.author,
        genre=candidate.genre or settings.DEFAULT_GENRE,
        description=candidate.description or "",
        price=candidate.price if candidate.price is not None else 0.0,
        stock_count=max(0, candidate.stock_count or 0),
        enriched=bool(candidate.description),
    )


def _fold_duplicate(keeper: CatalogItem, duplicate: CatalogItem) -> None:
    """The first record wins; a later one with the same code only fills its gaps."""
    if keeper.title is None:
        keeper.title = duplicate.title
    if keeper.author is None:
        keeper.author = duplicate.author
    if len(duplicate.description) > len(keeper.description):
        keeper.description = duplicate.description
    if not keeper.genre:
        keeper.genre = duplicate.genre
    if not keeper.price:
        keeper.price = duplicate.price
    if not keeper.stock_count:
        keeper.stock_count = duplicate.stock_count
    keeper.enriched = keeper.enriched or duplicate.enriched


def _fold_duplicates(catalog: list[CatalogItem], report: CatalogReport) -> list[CatalogItem]:
    """Collapses stored items whose codes normalize to the same ISBN."""
    kept: list[CatalogItem] = []
    seen: dict[str, CatalogItem] = {}
    for item in catalog:
        key = normalize_isbn(item.isbn)
        keeper = seen.get(key) if key else None
        if keeper is None:
            if key:
                seen[key] = item
            kept.append(item)
            continue
        logger.warning(f"Duplicate ISBN {key}: item {item.id} folded into {keeper.id}")
        _fold_duplicate(keeper, item)
        keeper.isbn = key
        report.absorbed.append(item.id)
    return kept


def merge_catalog(
    existing: Iterable[CatalogItem], candidates: Iterable[CatalogCandidate]
) -> tuple[list[CatalogItem], CatalogReport]:
    """
    Merges candidate rows into a copy of the catalog, keyed by canonical ISBN.

    Matching items are updated field by field (never replaced wholesale);
    novel ISBNs are appended. Candidates are applied in input order, so a
    duplicate ISBN later in the same batch updates the item created earlier.
    Stored items that share a canonical ISBN are folded into the first one
    and their ids listed in the report. The input catalog is not modified.
    """
    report = CatalogReport()
    catalog = _fold_duplicates([item.model_copy(deep=True) for item in existing], report)
    index = index_by_isbn(catalog)

    for candidate in candidates:
        isbn = normalize_isbn(candidate.isbn)
        pos = index.get(isbn) if isbn else None

        if pos is not None:
            _apply_update(catalog[pos], candidate, isbn)
            report.updated += 1
        elif isbn or candidate.title:
            catalog.append(_new_item(candidate, isbn))
            if isbn:
                index[isbn] = len(catalog) - 1
            report.added += 1
        else:
            logger.debug("Candidate without code or title ignored.")

    logger.info(f"  > Merge: {report.added} added, {report.updated} updated")
    return catalog, report


def low_stock(
    catalog: Iterable[CatalogItem], threshold: int | None = None
) -> list[CatalogItem]:
    """Items still in stock but at or below the alert threshold."""
    limit = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    return [item for item in catalog if 0 < item.stock_count <= limit]
