import logging
from typing import Any, Optional

from bookstore_sync import data_handler
from bookstore_sync.data_handler import CollectionStore
from bookstore_sync.headers import CATALOG_MODE, classify_headers
from bookstore_sync.merge import merge_catalog
from bookstore_sync.parsers import extract_catalog_candidates
from bookstore_sync.pipeline import ImportPipeline
from bookstore_sync.schemas import CatalogItem, CatalogReport

logger = logging.getLogger(__name__)


class CatalogImportPipeline(ImportPipeline):
    def __init__(self, store: Optional[CollectionStore] = None, test_mode: bool = False):
        super().__init__("catalog", store=store, test_mode=test_mode)
        self.catalog: list[CatalogItem] | None = None

    def transform(self, rows: list[list[Any]]) -> CatalogReport:
        logger.info("--- Detecting Columns ---")
        column_map = classify_headers(rows, CATALOG_MODE)
        self.metadata["headerRow"] = column_map.header_row + 1

        candidates, rejected = extract_catalog_candidates(rows, column_map)

        logger.info("--- Merging Into Catalog ---")
        existing = data_handler.load_catalog(self.store)
        self.catalog, report = merge_catalog(existing, candidates)
        report.rejected = rejected
        return report

    def save(self) -> None:
        data_handler.save_catalog(self.store, self.catalog or [])
