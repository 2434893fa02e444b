"""Tests for header row detection and column mapping."""
import pytest

from bookstore_sync.exceptions import EmptyInput, SchemaNotFound
from bookstore_sync.headers import (
    CATALOG_MODE,
    SALES_MODE,
    canonical_header,
    classify_headers,
    map_row,
    match_column,
)


def test_canonical_header_ignores_case_accents_and_spaces():
    assert canonical_header("  Preço  Venda ") == "precovenda"
    assert canonical_header("TÍTULO") == "titulo"
    assert canonical_header(None) == ""


def test_match_column_first_match_wins_left_to_right():
    cells = ["nome", "isbn", "codigodebarras"]
    assert match_column(cells, "isbn") == 1
    assert match_column(cells, "isbn", taken={1}) == 2
    assert match_column(cells, "author") is None


def test_catalog_header_maps_known_fields():
    rows = [["Título", "ISBN", "Preço"], ["Dom Casmurro", "9788573210452", "29,90"]]
    column_map = classify_headers(rows, CATALOG_MODE)
    assert column_map.header_row == 0
    assert column_map.columns == {"isbn": 1, "price": 2, "title": 0}


def test_header_found_below_preamble():
    rows = [
        ["Livraria Nobel - Relatório"],
        [],
        ["Gerado em", "2024-05-01"],
        ["EAN", "Nome", "Autor", "Gênero", "Sinopse", "Estoque", "Valor"],
        ["9788573210452", "Dom Casmurro", "Machado de Assis", "Clássicos", "...", "3", "29,90"],
    ]
    column_map = classify_headers(rows, CATALOG_MODE)
    assert column_map.header_row == 3
    assert column_map.columns == {
        "isbn": 0,
        "title": 1,
        "author": 2,
        "genre": 3,
        "description": 4,
        "stock": 5,
        "price": 6,
    }


def test_long_description_is_not_taken_as_title():
    columns = map_row(["ISBN", "Descrição Longa", "Descrição"], CATALOG_MODE)
    assert columns["description"] == 1
    assert columns["title"] == 2


def test_author_name_column_is_not_taken_as_title():
    columns = map_row(["Nome do Autor", "ISBN", "Nome"], CATALOG_MODE)
    assert columns["author"] == 0
    assert columns["title"] == 2


def test_sales_header_requires_quantity():
    rows = [["ISBN", "Título", "Preço"], ["9788573210452", "Dom Casmurro", "29,90"]]
    with pytest.raises(SchemaNotFound) as exc:
        classify_headers(rows, SALES_MODE)
    assert exc.value.missing_fields == ["quantity"]
    assert "quantity" in str(exc.value)


def test_sales_quantity_column_is_not_a_price():
    columns = map_row(["Código", "Qtd Vendida", "Valor Unitário"], SALES_MODE)
    assert columns == {"isbn": 0, "quantity": 1, "price": 2}


def test_missing_identifier_names_the_column():
    rows = [["Título", "Preço"], ["Dom Casmurro", "29,90"]]
    with pytest.raises(SchemaNotFound) as exc:
        classify_headers(rows, CATALOG_MODE)
    assert exc.value.missing_fields == ["isbn"]
    assert "ISBN" in str(exc.value)


def _sheet_with_header_at(row_number):
    rows = [["relatório", "linha", str(i)] for i in range(row_number - 1)]
    rows.append(["ISBN", "Título"])
    rows.append(["9788573210452", "Dom Casmurro"])
    return rows


def test_header_on_row_50_is_found():
    column_map = classify_headers(_sheet_with_header_at(50), CATALOG_MODE)
    assert column_map.header_row == 49


def test_header_on_row_51_is_outside_the_scan_window():
    with pytest.raises(SchemaNotFound) as exc:
        classify_headers(_sheet_with_header_at(51), CATALOG_MODE)
    assert exc.value.scanned_rows == 50


def test_empty_sheet_raises_empty_input():
    with pytest.raises(EmptyInput):
        classify_headers([], CATALOG_MODE)


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        classify_headers([["ISBN"]], "inventory")
