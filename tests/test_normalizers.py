"""Unit tests for cell value normalization."""
import math

import pytest

from bookstore_sync.normalizers import (
    clean_text,
    is_blank,
    normalize_isbn,
    parse_currency,
    parse_quantity,
    parse_stock,
)


def test_normalize_isbn_strips_formatting():
    assert normalize_isbn("978-85-7321-045-2") == "9788573210452"
    assert normalize_isbn(" 978 8573210452 ") == "9788573210452"


def test_normalize_isbn_repairs_scientific_notation():
    """A code Excel showed as 9.78853E+12 matches the digits it stands for."""
    assert normalize_isbn("9.78853E+12") == normalize_isbn("9788530000000")
    assert normalize_isbn("9.78853E+12") == "9788530000000"
    assert normalize_isbn("9,78853E+12") == "9788530000000"


def test_normalize_isbn_handles_float_cells():
    assert normalize_isbn(9788573210452.0) == "9788573210452"
    assert normalize_isbn(9.78853e12) == "9788530000000"
    assert normalize_isbn("9788573210452.0") == "9788573210452"
    assert normalize_isbn(9788573210452) == "9788573210452"


@pytest.mark.parametrize("raw", [None, "", "   ", "0", "000-000", float("nan"), "abc"])
def test_normalize_isbn_invalid_values_are_empty(raw):
    assert normalize_isbn(raw) == ""


def test_parse_currency_separator_disambiguation():
    assert parse_currency("1.234,56") == pytest.approx(1234.56)
    assert parse_currency("1,234.56") == pytest.approx(1234.56)
    assert parse_currency("49,90") == pytest.approx(49.90)
    assert parse_currency("12.50") == pytest.approx(12.5)
    assert parse_currency("1.234.567") == pytest.approx(1234567)


def test_parse_currency_strips_symbols():
    assert parse_currency("R$ 29,90") == pytest.approx(29.90)
    assert parse_currency("$ 1,299.00") == pytest.approx(1299.0)
    assert parse_currency(" 7 ") == pytest.approx(7.0)


def test_parse_currency_numbers_pass_through():
    assert parse_currency(29.9) == pytest.approx(29.9)
    assert parse_currency(0) == 0.0


def test_parse_currency_absent_is_none_not_zero():
    assert parse_currency(None) is None
    assert parse_currency("") is None
    assert parse_currency("n/d") is None
    assert parse_currency(float("nan")) is None
    assert parse_currency("0,00") == 0.0


def test_parse_quantity():
    assert parse_quantity("3") == 3
    assert parse_quantity("2,7") == 2
    assert parse_quantity(-4) == 4
    assert parse_quantity("-1.9") == 1
    assert parse_quantity(5.0) == 5
    assert parse_quantity("abc") == 0
    assert parse_quantity(None) == 0
    assert parse_quantity(float("nan")) == 0


def test_blank_and_text_helpers():
    assert is_blank(None)
    assert is_blank("  ")
    assert is_blank(math.nan)
    assert not is_blank(0)
    assert clean_text("  Dom Casmurro ") == "Dom Casmurro"
    assert clean_text("") is None


def test_parse_stock_keeps_non_numbers_absent():
    assert parse_stock("12") == 12
    assert parse_stock("0") == 0
    assert parse_stock(3.0) == 3
    assert parse_stock("N/D") is None
    assert parse_stock("-") is None
    assert parse_stock("consultar") is None
    assert parse_stock("") is None
