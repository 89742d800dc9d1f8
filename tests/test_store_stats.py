from __future__ import annotations

from shopagent.core.catalog.schemas import Product
from shopagent.core.gateway.stats import compute_store_stats


def _product(product_id: int, price: float, category: str) -> Product:
    return Product(id=product_id, title=f"p{product_id}", price=price, category=category)


def test_stats_group_by_category_in_first_seen_order() -> None:
    stats = compute_store_stats([_product(1, 10, "A"), _product(2, 30, "B"), _product(3, 20, "A")])

    assert stats.total_products == 3
    assert stats.total_cost == 60
    assert stats.average_price == 20
    assert [category.name for category in stats.categories] == ["A", "B"]
    a, b = stats.categories
    assert (a.product_count, a.total_cost, a.average_price) == (2, 30, 15)
    assert (b.product_count, b.total_cost, b.average_price) == (1, 30, 30)


def test_stats_keep_category_strings_verbatim() -> None:
    stats = compute_store_stats([_product(1, 5, "Books"), _product(2, 5, "books")])

    assert [category.name for category in stats.categories] == ["Books", "books"]


def test_stats_on_empty_catalog_are_zero() -> None:
    stats = compute_store_stats([])

    assert stats.total_products == 0
    assert stats.total_cost == 0
    assert stats.average_price == 0
    assert stats.categories == []
    assert stats.to_wire()["averagePrice"] == 0
