from __future__ import annotations

from collections.abc import Iterable

from shopagent.core.catalog.schemas import Product
from shopagent.core.protocol.actions import CategoryStats, StoreStats


def _mean(total: float, count: int) -> float:
    return total / count if count else 0.0


def compute_store_stats(products: Iterable[Product]) -> StoreStats:
    # category keys are used verbatim and keep first-seen order
    groups: dict[str, list[float]] = {}
    total_cost = 0.0
    total_products = 0
    for product in products:
        groups.setdefault(product.category, []).append(product.price)
        total_cost += product.price
        total_products += 1

    categories = [
        CategoryStats(
            name=name,
            product_count=len(prices),
            total_cost=sum(prices),
            average_price=_mean(sum(prices), len(prices)),
        )
        for name, prices in groups.items()
    ]
    return StoreStats(
        total_products=total_products,
        total_cost=total_cost,
        average_price=_mean(total_cost, total_products),
        categories=categories,
    )
