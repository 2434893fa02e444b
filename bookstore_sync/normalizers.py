import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any

import pandas as pd

NON_DIGIT_RX = re.compile(r"\D")
SCIENTIFIC_RX = re.compile(r"^[+-]?\d+(?:[.,]\d+)?[eE][+-]?\d+$")
TRAILING_ZERO_FRACTION_RX = re.compile(r"^(\d+)[.,]0+$")
CURRENCY_NOISE_RX = re.compile(r"[^\d,.\-]")


def is_blank(value: Any) -> bool:
    """True for None, NaN and whitespace-only cells."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def clean_text(value: Any) -> str | None:
    if is_blank(value):
        return None
    return str(value).strip()


def normalize_isbn(raw: Any) -> str:
    """
    Turns a raw cell into a digit-only ISBN.

    Spreadsheets often store long codes as floats, which show up either as
    9788573210452.0 or in scientific notation (9.78853E+12). Both are expanded
    to a full integer string before non-digits are stripped.
    Returns "" when nothing usable is left (empty or all zeros).
    """
    if is_blank(raw) or isinstance(raw, bool):
        return ""

    if isinstance(raw, float):
        text = str(int(raw)) if raw.is_integer() else repr(raw)
    else:
        text = str(raw).strip()

    if SCIENTIFIC_RX.match(text):
        try:
            text = str(int(Decimal(text.replace(",", "."))))
        except (InvalidOperation, ValueError, OverflowError):
            return ""
    else:
        match = TRAILING_ZERO_FRACTION_RX.match(text)
        if match:
            text = match.group(1)

    digits = NON_DIGIT_RX.sub("", text)
    if not digits.strip("0"):
        return ""
    return digits


def parse_currency(raw: Any) -> float | None:
    """
    Parses a price cell. Returns None (not 0) for blank or unparseable input.

    Separator rules:
    - both '.' and ',' present: the last one is the decimal separator
    - only ',' present: the last ',' is the decimal separator
    - only '.' present, more than once: '.' is a thousands separator
    """
    if is_blank(raw) or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)

    text = CURRENCY_NOISE_RX.sub("", str(raw))
    if not text:
        return None

    last_dot = text.rfind(".")
    last_comma = text.rfind(",")
    if last_dot != -1 and last_comma != -1:
        if last_comma > last_dot:
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif last_comma != -1:
        head, _, tail = text.rpartition(",")
        text = head.replace(",", "") + "." + tail
    elif text.count(".") > 1:
        text = text.replace(".", "")

    try:
        value = float(text)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_quantity(raw: Any) -> int:
    """Absolute value of the cell, floored to an int. Unparseable -> 0."""
    if is_blank(raw) or isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace(",", ".")
        try:
            value = float(text)
        except ValueError:
            return 0
    if math.isnan(value) or math.isinf(value):
        return 0
    return math.floor(abs(value))


def parse_stock(raw: Any) -> int | None:
    """Like parse_quantity, but a cell that holds no number ("N/D", "-") is absent, not 0."""
    value = parse_currency(raw)
    if value is None or math.isinf(value):
        return None
    return math.floor(abs(value))
