class SheetImportError(Exception):
    """Base class for errors that abort a whole import before anything is saved."""


class SchemaNotFound(SheetImportError):
    """No header row with the mandatory columns was found in the scan window."""

    def __init__(self, missing_fields: list[str], scanned_rows: int):
        self.missing_fields = list(missing_fields)
        self.scanned_rows = scanned_rows
        columns = ", ".join(FIELD_LABELS.get(f, f) for f in self.missing_fields)
        super().__init__(
            f"Could not find the column(s) {columns} in the first {scanned_rows} rows. "
            "Check the sheet header."
        )


class EmptyInput(SheetImportError):
    """The sheet had no rows, or no row survived extraction."""

    def __init__(self, message: str = "No valid data found in the sheet."):
        super().__init__(message)


# Human-readable names for the logical columns, used in error messages.
FIELD_LABELS = {
    "isbn": "ISBN/EAN/barcode",
    "quantity": "quantity",
    "stock": "stock",
    "price": "price",
    "title": "title",
    "author": "author",
    "genre": "genre",
    "description": "synopsis",
}
