import logging
import math
from typing import Optional

import httpx

from ..models import ItemType
from .supabase import ReceiptStoreError, check_configured, get_supabase_headers, table_url

logger = logging.getLogger(__name__)

EXPENSE_TABLES = {
    ItemType.BUDGET: "budget_items",
    ItemType.ACTIVITY: "activities",
    ItemType.RESTAURANT: "restaurants",
}


class ExpenseError(ValueError):
    """An expense cannot be turned into a name and a total to split."""


class ExpenseNotFoundError(ExpenseError):
    """The referenced expense does not exist in the trip."""


def _item_name(item_type: ItemType, item: dict) -> Optional[str]:
    if item_type == ItemType.BUDGET:
        return item.get("subcategory") or item.get("category")
    if item_type == ItemType.ACTIVITY:
        return item.get("title")
    return item.get("name")


def _item_total(item_type: ItemType, item: dict) -> Optional[float]:
    # Restaurants only carry a display price range such as "€€"
    if item_type == ItemType.RESTAURANT:
        return None

    raw = item.get("total_price") if item_type == ItemType.BUDGET else item.get("price")
    if raw is None or raw == "":
        return 0.0
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ExpenseError(f"{item_type.value} price {raw!r} is not a number") from e


def resolve_expense(
    item_type: ItemType,
    item: dict,
    total: Optional[float] = None,
) -> tuple[str, float]:
    """
    Map an expense row to the name and amount a split is made over.

    Budget items use subcategory (falling back to category) and total_price,
    activities use title and price. Restaurants need an explicit total.
    An explicit total always wins over the stored price.

    Returns:
        Tuple of (item_name, total)

    Raises:
        ExpenseError: If no usable name or total can be determined
    """
    name = _item_name(item_type, item)
    if not name:
        raise ExpenseError(f"{item_type.value} item has no name")

    if total is None:
        total = _item_total(item_type, item)
    if total is None:
        raise ExpenseError("Restaurant splits need an explicit total")
    if not math.isfinite(total):
        raise ExpenseError(f"Total {total!r} is not a finite number")
    if total < 0:
        raise ExpenseError("Total must not be negative")

    return name, total


async def fetch_expense_item(trip_id: str, item_type: ItemType, item_id: str) -> Optional[dict]:
    """
    Fetch one expense row belonging to a trip.

    Returns:
        The row if found, None if the trip has no such item

    Raises:
        ReceiptStoreError: If Supabase is not configured, unreachable or
            returns an error status
    """
    check_configured()

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                table_url(EXPENSE_TABLES[item_type]),
                headers=await get_supabase_headers(),
                params={"id": f"eq.{item_id}", "trip_id": f"eq.{trip_id}", "select": "*"},
            )
    except httpx.RequestError as e:
        raise ReceiptStoreError(f"Expense store unreachable: {e}") from e

    if response.status_code != 200:
        logger.error(
            "Failed to fetch %s %s: HTTP %s %s",
            item_type.value, item_id, response.status_code, response.text,
        )
        raise ReceiptStoreError(f"Failed to fetch {item_type.value} (HTTP {response.status_code})")

    data = response.json()
    if data:
        return data[0]

    logger.info("%s %s not found for trip %s", item_type.value, item_id, trip_id)
    return None
