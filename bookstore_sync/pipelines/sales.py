import logging
from datetime import date
from typing import Any, Optional

from bookstore_sync import data_handler, utils
from bookstore_sync.data_handler import CollectionStore
from bookstore_sync.headers import SALES_MODE, classify_headers
from bookstore_sync.ledger import apply_daily_sales
from bookstore_sync.parsers import extract_sales_candidates
from bookstore_sync.pipeline import ImportPipeline
from bookstore_sync.schemas import CatalogItem, ImportMode, SalesLedger, SalesReport

logger = logging.getLogger(__name__)


class SalesImportPipeline(ImportPipeline):
    def __init__(
        self,
        store: Optional[CollectionStore] = None,
        target_date: str | date | None = None,
        mode: ImportMode | str = ImportMode.ADD,
        test_mode: bool = False,
    ):
        super().__init__("sales", store=store, test_mode=test_mode)
        self.target_date = target_date or utils.today_iso()
        self.mode = ImportMode(mode)
        self.catalog: list[CatalogItem] | None = None
        self.ledger: SalesLedger | None = None

    def transform(self, rows: list[list[Any]]) -> SalesReport:
        logger.info("--- Detecting Columns ---")
        column_map = classify_headers(rows, SALES_MODE)
        self.metadata["headerRow"] = column_map.header_row + 1

        candidates, rejected = extract_sales_candidates(rows, column_map)

        logger.info(f"--- Applying Sales ({self.mode.value}) ---")
        catalog = data_handler.load_catalog(self.store)
        ledger = data_handler.load_ledger(self.store)
        self.ledger, self.catalog, report = apply_daily_sales(
            ledger, catalog, candidates, self.target_date, self.mode
        )
        self.metadata["date"] = str(self.target_date)
        self.metadata["mode"] = self.mode.value
        report.rejected = rejected
        return report

    def save(self) -> None:
        data_handler.save_catalog(self.store, self.catalog or [])
        if self.ledger is not None:
            data_handler.save_ledger(self.store, self.ledger)
