import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import requests
from pydantic import BaseModel

from . import settings
from .schemas import CatalogItem, DailySalesEntry, SalesLedger

logger = logging.getLogger(__name__)


class CollectionStore(ABC):
    """
    Opaque key/value holder for whole collections. The engine loads a full
    snapshot, computes a new one and hands it back; the store never sees
    partial updates.
    """

    @abstractmethod
    def load_collection(self, key: str) -> Any | None:
        pass

    @abstractmethod
    def save_collection(self, key: str, value: Any) -> None:
        pass


class JsonFileStore(CollectionStore):
    """One JSON file per key. Saves replace the file atomically."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else settings.DATA_DIR

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def load_collection(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save_collection(self, key: str, value: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(value, f, ensure_ascii=False, indent=2, default=str)
        os.replace(tmp_path, path)

    def keys(self) -> list[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))

    def export_all(self) -> dict[str, Any]:
        """Every collection in one dict, for backups."""
        return {key: self.load_collection(key) for key in self.keys()}

    def import_all(self, data: dict[str, Any]) -> None:
        """Restores a backup. Collections missing from `data` are removed."""
        for key in self.keys():
            if key not in data:
                self._path(key).unlink()
        for key, value in data.items():
            self.save_collection(key, value)


# --- Typed snapshots ---


def load_catalog(store: CollectionStore) -> list[CatalogItem]:
    raw = store.load_collection(settings.INVENTORY_KEY) or []
    return [CatalogItem.model_validate(item) for item in raw]


def save_catalog(store: CollectionStore, catalog: list[CatalogItem]) -> None:
    store.save_collection(
        settings.INVENTORY_KEY,
        [item.model_dump(mode="json", by_alias=True) for item in catalog],
    )


def clear_catalog(store: CollectionStore) -> None:
    """Explicit deletion of every title. Never called by the import pipelines."""
    store.save_collection(settings.INVENTORY_KEY, [])
    logger.warning("⚠️ Catalog cleared.")


def load_ledger(store: CollectionStore) -> SalesLedger:
    entries = store.load_collection(settings.SALES_GOALS_KEY) or []
    sold_log = store.load_collection(settings.SALES_LOG_KEY) or {}
    return SalesLedger(
        entries=[DailySalesEntry.model_validate(e) for e in entries],
        sold_log=sold_log,
    )


def save_ledger(store: CollectionStore, ledger: SalesLedger) -> None:
    store.save_collection(
        settings.SALES_GOALS_KEY,
        [entry.model_dump(mode="json", by_alias=True) for entry in ledger.entries],
    )
    store.save_collection(settings.SALES_LOG_KEY, ledger.sold_log)


# --- Outputs ---


def export_catalog_csv(catalog: list[CatalogItem], csv_path: Path) -> Path:
    """Writes a catalog snapshot with display values for unset fields."""
    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(
        [
            {
                "ISBN": item.isbn,
                "Title": item.display_title,
                "Author": item.display_author,
                "Genre": item.genre,
                "Price": round(item.price, 2),
                "Stock": item.stock_count,
                "Enriched": item.enriched,
                "Description": item.description,
            }
            for item in catalog
        ],
        columns=["ISBN", "Title", "Author", "Genre", "Price", "Stock", "Enriched", "Description"],
    )
    df.to_csv(csv_path, index=False, encoding="utf-8-sig")
    logger.info(f"✅ Catalog exported to: {csv_path}")
    return csv_path


def post_to_webhook(
    report_type: str, report: BaseModel, metadata: Optional[dict[str, Any]] = None
) -> bool:
    """
    Posts an import report to the webhook. Failures are logged, not raised:
    the import itself has already been saved.
    """
    if not settings.WEBHOOK_URL:
        logger.info("WEBHOOK_URL not set. Skipping webhook post.")
        return False

    payload = {
        "reportType": report_type,
        "report": report.model_dump(mode="json", by_alias=True),
        "metadata": metadata or {},
    }

    try:
        response = requests.post(settings.WEBHOOK_URL, json=payload, timeout=15)
        response.raise_for_status()
        logger.info("✅ Report posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
