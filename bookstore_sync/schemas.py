import datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import settings


def new_id() -> str:
    return uuid4().hex


class ImportMode(str, Enum):
    REPLACE = "replace"
    ADD = "add"


class CatalogItem(BaseModel):
    """
    One stocked title, in the shape the point-of-sale app persists it.
    `title` and `author` are None while unset; extra stored keys such as
    `targetAge` are kept as-is.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(default_factory=new_id)
    isbn: str = ""
    title: Optional[str] = None
    author: Optional[str] = None
    genre: str = ""
    description: str = ""
    price: float = Field(default=0.0, ge=0)
    stock_count: int = Field(default=0, ge=0, alias="stockCount")
    enriched: bool = False

    @field_validator("title", mode="before")
    @classmethod
    def _unset_title(cls, value: Any) -> Any:
        if isinstance(value, str) and (
            not value.strip() or value.strip().lower() in settings.LEGACY_TITLE_SENTINELS
        ):
            return None
        return value

    @field_validator("author", mode="before")
    @classmethod
    def _unset_author(cls, value: Any) -> Any:
        if isinstance(value, str) and (
            not value.strip() or value.strip().lower() in settings.LEGACY_AUTHOR_SENTINELS
        ):
            return None
        return value

    @field_validator("genre", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("price", "stock_count", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def display_title(self) -> str:
        return self.title or settings.UNTITLED_DISPLAY

    @property
    def display_author(self) -> str:
        return self.author or settings.UNKNOWN_AUTHOR_DISPLAY


class DailySalesEntry(BaseModel):
    """Sales total and goals for one calendar day."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(default_factory=new_id)
    date: str
    min_goal: float = Field(default=0.0, alias="minGoal")
    super_goal: float = Field(default=0.0, alias="superGoal")
    actual_sales: float = Field(default=0.0, alias="actualSales")

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        return datetime.date.fromisoformat(value).isoformat()


class SalesLedger(BaseModel):
    """
    Daily totals plus, per day, the stock units each ISBN had deducted by
    sales imports. The log is what lets a 'replace' import undo a day.
    """

    entries: list[DailySalesEntry] = Field(default_factory=list)
    sold_log: dict[str, dict[str, int]] = Field(default_factory=dict)

    def entry_for(self, day: str) -> DailySalesEntry | None:
        return next((e for e in self.entries if e.date == day), None)


# --- Candidates (parsed rows pending merge) ---


class CatalogCandidate(BaseModel):
    """A normalized catalog row. None means the sheet did not supply the field."""

    isbn: str
    title: Optional[str] = None
    author: Optional[str] = None
    genre: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    stock_count: Optional[int] = None


class SaleCandidate(BaseModel):
    isbn: str
    quantity: int = Field(..., gt=0)
    price: Optional[float] = None


# --- Header detection ---


class ColumnMap(BaseModel):
    header_row: int
    columns: dict[str, int]

    def index_of(self, field: str) -> int | None:
        return self.columns.get(field)


# --- Reports ---


class CatalogReport(BaseModel):
    added: int = 0
    updated: int = 0
    rejected: int = 0
    absorbed: list[str] = Field(default_factory=list)

    def summary(self) -> str:
        text = f"Catalog sync finished: {self.added} new title(s), {self.updated} updated."
        if self.rejected:
            text += f" {self.rejected} row(s) skipped (invalid code)."
        if self.absorbed:
            text += f" {len(self.absorbed)} duplicate record(s) folded."
        return text


class SalesReport(BaseModel):
    items_updated: int = Field(default=0, serialization_alias="itemsUpdated")
    total_value: float = Field(default=0.0, serialization_alias="totalValue")
    stock_subtracted: int = Field(default=0, serialization_alias="stockSubtracted")
    rejected: int = 0

    def summary(self) -> str:
        text = (
            f"Sales import finished: {self.items_updated} title(s), "
            f"total {self.total_value:.2f}, {self.stock_subtracted} unit(s) taken from stock."
        )
        if self.rejected:
            text += f" {self.rejected} row(s) skipped."
        return text
