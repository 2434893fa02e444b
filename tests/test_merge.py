"""Tests for the catalog merge precedence rules."""
import pytest

from bookstore_sync.merge import low_stock, merge_catalog
from bookstore_sync.schemas import CatalogCandidate, CatalogItem


def _item(**kwargs):
    base = {"id": "book-1", "isbn": "123456", "title": "Real Title", "price": 29.9}
    base.update(kwargs)
    return CatalogItem(**base)


def test_novel_isbn_is_appended_with_defaults():
    catalog, report = merge_catalog(
        [], [CatalogCandidate(isbn="9788573210452", title="Dom Casmurro", price=29.9)]
    )
    assert report.added == 1 and report.updated == 0
    book = catalog[0]
    assert book.isbn == "9788573210452"
    assert book.title == "Dom Casmurro"
    assert book.author is None
    assert book.display_author == "Desconhecido"
    assert book.genre == "Geral"
    assert book.stock_count == 0
    assert book.enriched is False
    assert book.id


def test_sparse_update_keeps_title_and_price():
    """A synopsis-only sheet enriches the item without touching the rest."""
    existing = [_item()]
    catalog, report = merge_catalog(
        existing, [CatalogCandidate(isbn="123456", description="new synopsis")]
    )
    book = catalog[0]
    assert report.updated == 1 and report.added == 0
    assert book.title == "Real Title"
    assert book.price == pytest.approx(29.9)
    assert book.description == "new synopsis"
    assert book.enriched is True
    assert book.id == "book-1"


def test_merge_does_not_mutate_input_catalog():
    existing = [_item()]
    merge_catalog(existing, [CatalogCandidate(isbn="123456", price=10.0, genre="Drama")])
    assert existing[0].price == pytest.approx(29.9)
    assert existing[0].genre == ""


def test_title_and_author_fill_only_when_unset():
    existing = [
        _item(id="a", isbn="111111", title="Curated", author="Someone"),
        _item(id="b", isbn="222222", title="Título não informado", author="Desconhecido"),
    ]
    candidates = [
        CatalogCandidate(isbn="111111", title="Other", author="Other Author"),
        CatalogCandidate(isbn="222222", title="Filled", author="Filled Author"),
    ]
    catalog, _ = merge_catalog(existing, candidates)
    assert (catalog[0].title, catalog[0].author) == ("Curated", "Someone")
    assert (catalog[1].title, catalog[1].author) == ("Filled", "Filled Author")


def test_description_only_replaced_by_longer_text():
    existing = [_item(description="A fairly complete synopsis.")]
    catalog, _ = merge_catalog(existing, [CatalogCandidate(isbn="123456", description="Short.")])
    assert catalog[0].description == "A fairly complete synopsis."

    catalog, _ = merge_catalog(
        catalog,
        [CatalogCandidate(isbn="123456", description="A fairly complete synopsis, now longer.")],
    )
    assert catalog[0].description == "A fairly complete synopsis, now longer."


def test_genre_last_import_wins():
    existing = [_item(genre="Romance")]
    catalog, _ = merge_catalog(
        existing,
        [
            CatalogCandidate(isbn="123456", genre="Clássicos"),
            CatalogCandidate(isbn="123456", genre="Literatura Brasileira"),
        ],
    )
    assert catalog[0].genre == "Literatura Brasileira"


def test_absent_price_and_stock_never_zero_existing_values():
    existing = [_item(stock_count=7)]
    catalog, _ = merge_catalog(existing, [CatalogCandidate(isbn="123456", title="x")])
    assert catalog[0].price == pytest.approx(29.9)
    assert catalog[0].stock_count == 7

    catalog, _ = merge_catalog(catalog, [CatalogCandidate(isbn="123456", price=0.0, stock_count=0)])
    assert catalog[0].price == 0.0
    assert catalog[0].stock_count == 0


def test_existing_isbn_matched_after_normalization():
    existing = [_item(isbn="978-85-7321-045-2")]
    catalog, report = merge_catalog(existing, [CatalogCandidate(isbn="9788573210452", price=35.0)])
    assert report.updated == 1 and report.added == 0
    assert len(catalog) == 1
    assert catalog[0].isbn == "9788573210452"
    assert catalog[0].price == pytest.approx(35.0)


def test_stored_duplicates_converge_to_one_item():
    existing = [
        _item(id="a", isbn="978-85-7321-045-2", title=None, stock_count=0),
        _item(id="b", isbn="9788573210452", title="Dom Casmurro", price=10.0, stock_count=4),
    ]
    catalog, report = merge_catalog(existing, [CatalogCandidate(isbn="9788573210452", price=35.0)])
    assert len(catalog) == 1
    book = catalog[0]
    assert book.id == "a"
    assert book.isbn == "9788573210452"
    assert book.title == "Dom Casmurro"
    assert book.stock_count == 4
    assert book.price == pytest.approx(35.0)
    assert report.absorbed == ["b"]
    assert report.updated == 1 and report.added == 0
    assert len(existing) == 2


def test_duplicate_isbn_in_batch_updates_item_added_earlier():
    candidates = [
        CatalogCandidate(isbn="9788573210452", title="Dom Casmurro", price=29.9),
        CatalogCandidate(isbn="9788573210452", title="Other Title", price=31.0),
    ]
    catalog, report = merge_catalog([], candidates)
    assert len(catalog) == 1
    assert report.added == 1 and report.updated == 1
    assert catalog[0].title == "Dom Casmurro"
    assert catalog[0].price == pytest.approx(31.0)


def test_reimport_is_idempotent():
    candidates = [
        CatalogCandidate(isbn="9788573210452", title="Dom Casmurro", price=29.9, stock_count=3),
        CatalogCandidate(isbn="9788535914849", description="Synopsis", genre="Romance"),
    ]
    once, first = merge_catalog([], candidates)
    twice, second = merge_catalog(once, candidates)
    assert first.added == 2
    assert second.added == 0 and second.updated == 2
    assert [b.model_dump() for b in twice] == [b.model_dump() for b in once]


def test_sheet_a_then_b_then_a_matches_a_then_b():
    prices = [CatalogCandidate(isbn="123456", price=39.9, stock_count=2)]
    synopses = [CatalogCandidate(isbn="123456", description="Longer synopsis text", author="Author")]
    a_b, _ = merge_catalog([_item()], prices)
    a_b, _ = merge_catalog(a_b, synopses)
    a_b_a, _ = merge_catalog(a_b, prices)
    assert [b.model_dump() for b in a_b_a] == [b.model_dump() for b in a_b]


def test_extra_stored_fields_are_preserved():
    existing = [CatalogItem.model_validate({"id": "x", "isbn": "123456", "targetAge": "Livre"})]
    catalog, _ = merge_catalog(existing, [CatalogCandidate(isbn="123456", price=5.0)])
    dumped = catalog[0].model_dump(by_alias=True)
    assert dumped["targetAge"] == "Livre"
    assert dumped["stockCount"] == 0


def test_low_stock_lists_titles_about_to_run_out():
    catalog = [
        _item(id="a", isbn="111111", stock_count=0),
        _item(id="b", isbn="222222", stock_count=2),
        _item(id="c", isbn="333333", stock_count=3),
        _item(id="d", isbn="444444", stock_count=10),
    ]
    assert [b.id for b in low_stock(catalog)] == ["b", "c"]
    assert [b.id for b in low_stock(catalog, threshold=10)] == ["b", "c", "d"]
