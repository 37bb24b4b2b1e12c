# Search/ranking.py
from enum import Enum
from typing import List, Optional

from MARKET.core.config import UNKNOWN_DISTANCE_KM


class SortOrder(str, Enum):
    NEAREST = "nearest"
    FARTHEST = "farthest"
    CHEAPEST = "cheapest"
    EXPENSIVE = "expensive"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SortOrder"]:
        try:
            return cls(value)
        except ValueError:
            return None


def _distance(item: dict) -> float:
    distance = item.get("distance")
    return UNKNOWN_DISTANCE_KM if distance is None else distance


# sorted() is stable in both directions, so ties keep their input order.
def sort_vendors(vendors: List[dict], sort_by: Optional[str]) -> List[dict]:
    order = SortOrder.parse(sort_by)
    if order is SortOrder.NEAREST:
        return sorted(vendors, key=_distance)
    if order is SortOrder.FARTHEST:
        return sorted(vendors, key=_distance, reverse=True)
    # price orders don't apply to vendors
    return list(vendors)


def sort_products(products: List[dict], sort_by: Optional[str]) -> List[dict]:
    order = SortOrder.parse(sort_by) or SortOrder.NEAREST
    if order is SortOrder.FARTHEST:
        return sorted(products, key=_distance, reverse=True)
    if order is SortOrder.CHEAPEST:
        return sorted(products, key=lambda p: p["finalPrice"])
    if order is SortOrder.EXPENSIVE:
        return sorted(products, key=lambda p: p["finalPrice"], reverse=True)
    return sorted(products, key=_distance)


def sort_bundles(bundles: List[dict], sort_by: Optional[str]) -> List[dict]:
    order = SortOrder.parse(sort_by)
    if order is SortOrder.CHEAPEST:
        return sorted(bundles, key=lambda b: b["totalDiscountedPrice"])
    if order is SortOrder.EXPENSIVE:
        return sorted(bundles, key=lambda b: b["totalDiscountedPrice"], reverse=True)
    if order is SortOrder.NEAREST:
        return sorted(bundles, key=_distance)
    if order is SortOrder.FARTHEST:
        return sorted(bundles, key=_distance, reverse=True)
    return list(bundles)
