import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import BaseModel

from . import data_handler, utils
from .data_handler import CollectionStore, JsonFileStore
from .exceptions import EmptyInput

logger = logging.getLogger(__name__)


class ImportPipeline(ABC):
    """
    Abstract base class for sheet imports (catalog, sales).
    Follows an Extract -> Transform -> Load pattern. Nothing is written until
    transform has produced complete new snapshots, so any SheetImportError
    leaves the stored collections untouched.
    """

    def __init__(
        self,
        report_type: str,
        store: Optional[CollectionStore] = None,
        test_mode: bool = False,
    ):
        self.report_type = report_type
        self.store = store if store is not None else JsonFileStore()
        self.test_mode = test_mode
        # Extra context sent along with the report (header row, date, mode...)
        self.metadata: dict[str, Any] = {}

    def run(self, source: Path | str | Sequence[Sequence[Any]]) -> BaseModel:
        """
        Orchestrates the pipeline execution. `source` is a sheet file or rows
        of raw cells that were already decoded.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} IMPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        rows = self.extract(source)
        if not rows:
            raise EmptyInput("The sheet is empty.")

        # --- 2. TRANSFORM ---
        report = self.transform(rows)

        # --- 3. LOAD ---
        self.load(report)

        logger.info(f"✅ {self.report_type.capitalize()} import finished.")
        logger.info("=" * 60)
        return report

    def extract(self, source: Path | str | Sequence[Sequence[Any]]) -> list[list[Any]]:
        if isinstance(source, (str, Path)):
            path = Path(source)
            logger.info(f"  > Reading: {path.name}")
            self.metadata["file"] = path.name
            return utils.load_sheet(path)
        return [list(row) if row is not None else [] for row in source]

    @abstractmethod
    def transform(self, rows: list[list[Any]]) -> BaseModel:
        """
        Detects the header, extracts candidates and computes the new
        snapshots from the stored ones. Returns the import report.
        """
        pass

    @abstractmethod
    def save(self) -> None:
        """Hands the snapshots computed by transform back to the store."""
        pass

    def load(self, report: BaseModel) -> None:
        """
        Saves the new snapshots and posts the report to the webhook.
        """
        self.save()
        logger.info(report.summary())

        if not self.test_mode:
            data_handler.post_to_webhook(self.report_type, report, self.metadata)
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
