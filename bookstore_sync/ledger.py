import datetime
import logging
from typing import Iterable

import pandas as pd

from .exceptions import EmptyInput
from .merge import index_by_isbn
from .normalizers import normalize_isbn
from .schemas import (
    CatalogItem,
    DailySalesEntry,
    ImportMode,
    SaleCandidate,
    SalesLedger,
    SalesReport,
)

logger = logging.getLogger(__name__)


def _day_key(target_date: str | datetime.date) -> str:
    if isinstance(target_date, datetime.datetime):
        return target_date.date().isoformat()
    if isinstance(target_date, datetime.date):
        return target_date.isoformat()
    return datetime.date.fromisoformat(str(target_date).strip()).isoformat()


def _restore_day(ledger: SalesLedger, catalog: list[CatalogItem], day: str) -> int:
    """Gives back the stock a previous import deducted for `day`."""
    index = index_by_isbn(catalog)
    restored = 0
    for isbn, qty in ledger.sold_log.pop(day, {}).items():
        pos = index.get(isbn)
        if pos is not None:
            catalog[pos].stock_count += qty
            restored += qty
    return restored


def _aggregate_lines(
    candidates: list[SaleCandidate], catalog: list[CatalogItem], index: dict[str, int]
) -> pd.DataFrame:
    """
    One row per ISBN with the units sold and their value. A line without a
    price is valued at the catalog price, or zero when the title is unknown.
    """
    lines = pd.DataFrame([c.model_dump() for c in candidates])
    lines["isbn"] = lines["isbn"].map(normalize_isbn)
    lines["price"] = pd.to_numeric(lines["price"], errors="coerce")
    catalog_price = lines["isbn"].map(
        lambda isbn: catalog[index[isbn]].price if isbn in index else float("nan")
    )
    lines["unit_price"] = lines["price"].fillna(catalog_price).fillna(0.0)
    lines["value"] = lines["quantity"] * lines["unit_price"]

    return (
        lines.groupby("isbn", sort=False)
        .agg(quantity=("quantity", "sum"), value=("value", "sum"))
        .reset_index()
    )


def apply_daily_sales(
    ledger: SalesLedger,
    catalog: Iterable[CatalogItem],
    candidates: Iterable[SaleCandidate],
    target_date: str | datetime.date,
    mode: ImportMode | str = ImportMode.ADD,
) -> tuple[SalesLedger, list[CatalogItem], SalesReport]:
    """
    Applies a day's sales sheet to the ledger and takes the units out of stock.

    - replace: the day's total becomes this upload's total, and stock deducted
      by earlier uploads for the same day is given back first
    - add: this upload's total is added to the day's total

    Stock never goes below zero. Returns new ledger and catalog snapshots;
    the inputs are not modified.
    """
    day = _day_key(target_date)
    mode = ImportMode(mode)
    candidates = list(candidates)
    if not candidates:
        raise EmptyInput("No valid sales found below the header.")

    new_ledger = ledger.model_copy(deep=True)
    new_catalog = [item.model_copy(deep=True) for item in catalog]

    if mode is ImportMode.REPLACE:
        restored = _restore_day(new_ledger, new_catalog, day)
        if restored:
            logger.info(f"  > Replace mode: {restored} unit(s) from the previous {day} upload returned to stock")

    index = index_by_isbn(new_catalog)
    per_isbn = _aggregate_lines(candidates, new_catalog, index)
    total_value = round(float(per_isbn["value"].sum()), 2)

    day_log = new_ledger.sold_log.setdefault(day, {})
    stock_subtracted = 0
    for row in per_isbn.itertuples(index=False):
        pos = index.get(row.isbn)
        if pos is None:
            logger.debug(f"ISBN {row.isbn} not in catalog; value counted, no stock change")
            continue
        item = new_catalog[pos]
        sold = int(row.quantity)
        deducted = min(item.stock_count, sold)
        item.stock_count -= deducted
        day_log[row.isbn] = day_log.get(row.isbn, 0) + deducted
        stock_subtracted += sold

    entry = new_ledger.entry_for(day)
    if entry is None:
        new_ledger.entries.append(DailySalesEntry(date=day, actual_sales=total_value))
    elif mode is ImportMode.REPLACE:
        entry.actual_sales = total_value
    else:
        entry.actual_sales = round(entry.actual_sales + total_value, 2)

    report = SalesReport(
        items_updated=len(per_isbn),
        total_value=total_value,
        stock_subtracted=stock_subtracted,
    )
    logger.info(f"  > Sales for {day} ({mode.value}): {report.items_updated} ISBN(s), total {total_value:.2f}")
    return new_ledger, new_catalog, report


def set_daily_goal(
    ledger: SalesLedger,
    target_date: str | datetime.date,
    min_goal: float,
    super_goal: float,
) -> SalesLedger:
    """Sets a day's goals without touching its sales total."""
    day = _day_key(target_date)
    new_ledger = ledger.model_copy(deep=True)
    entry = new_ledger.entry_for(day)
    if entry is None:
        entry = DailySalesEntry(date=day)
        new_ledger.entries.append(entry)
    entry.min_goal = float(min_goal)
    entry.super_goal = float(super_goal)
    return new_ledger
