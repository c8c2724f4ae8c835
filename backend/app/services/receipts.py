import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from ..models import ItemType, ParticipantShare, Receipt, ReceiptCreate, ReceiptUpdate
from .allocation import compute_debts, find_payer
from .expenses import ExpenseError, ExpenseNotFoundError, fetch_expense_item, resolve_expense
from .shares import validate_shares
from .supabase import ReceiptStoreError, check_configured, get_supabase_headers, table_url

logger = logging.getLogger(__name__)

RECEIPTS_TABLE = "cost_sharing_receipts"


def _to_receipt(row: dict) -> Receipt:
    return Receipt.model_validate({**row, "id": str(row["id"]), "trip_id": str(row["trip_id"])})


def _first_row(response: httpx.Response) -> Optional[dict]:
    data = response.json()
    if isinstance(data, list):
        return data[0] if data else None
    return data or None


def _unexpected(action: str, response: httpx.Response) -> ReceiptStoreError:
    logger.error("Failed to %s receipt: HTTP %s %s", action, response.status_code, response.text)
    return ReceiptStoreError(f"Failed to {action} receipt (HTTP {response.status_code})")


def build_receipt_payload(
    item_type: ItemType,
    item_name: str,
    total: float,
    persons: list[ParticipantShare],
) -> dict:
    """
    Build the stored representation of a split.

    Payer and debts are always derived from persons and total, never
    taken from the caller.
    """
    payer = find_payer(persons)
    return {
        "item_type": item_type.value,
        "item_name": item_name,
        "total": total,
        "payer": payer.name if payer else "",
        "persons": [p.model_dump(by_alias=True) for p in persons],
        "debts": [d.model_dump(by_alias=True) for d in compute_debts(persons, total)],
    }


async def list_receipts(trip_id: str) -> list[Receipt]:
    """
    Fetch all cost-sharing receipts of a trip, oldest first.

    Raises:
        ReceiptStoreError: If the store is unavailable or returns an error
    """
    check_configured()

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                table_url(RECEIPTS_TABLE),
                headers=await get_supabase_headers(),
                params={"trip_id": f"eq.{trip_id}", "select": "*", "order": "created_at.asc"},
            )
    except httpx.RequestError as e:
        raise ReceiptStoreError(f"Receipt store unreachable: {e}") from e

    if response.status_code != 200:
        raise _unexpected("list", response)

    return [_to_receipt(row) for row in response.json()]


async def get_receipt(trip_id: str, receipt_id: str) -> Optional[Receipt]:
    """Fetch one receipt of a trip, or None if it does not exist."""
    check_configured()

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                table_url(RECEIPTS_TABLE),
                headers=await get_supabase_headers(),
                params={"id": f"eq.{receipt_id}", "trip_id": f"eq.{trip_id}", "select": "*"},
            )
    except httpx.RequestError as e:
        raise ReceiptStoreError(f"Receipt store unreachable: {e}") from e

    if response.status_code != 200:
        raise _unexpected("fetch", response)

    row = _first_row(response)
    return _to_receipt(row) if row else None


async def create_receipt(trip_id: str, payload: dict) -> Receipt:
    """
    Insert a receipt for a trip.

    Args:
        trip_id: Owning trip
        payload: Stored fields, see build_receipt_payload

    Returns:
        The created receipt with its assigned id
    """
    check_configured()

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                table_url(RECEIPTS_TABLE),
                headers=await get_supabase_headers(),
                json={**payload, "trip_id": trip_id},
            )
    except httpx.RequestError as e:
        raise ReceiptStoreError(f"Receipt store unreachable: {e}") from e

    if response.status_code not in (200, 201):
        raise _unexpected("create", response)

    row = _first_row(response)
    if row is None:
        raise ReceiptStoreError("Receipt store returned no row for the created receipt")

    logger.info("Created receipt %s for trip %s", row["id"], trip_id)
    return _to_receipt(row)


async def update_receipt(trip_id: str, receipt_id: str, payload: dict) -> Optional[Receipt]:
    """Replace stored fields of a receipt. Returns None if it does not exist."""
    check_configured()

    try:
        async with httpx.AsyncClient() as client:
            response = await client.patch(
                table_url(RECEIPTS_TABLE),
                headers=await get_supabase_headers(),
                params={"id": f"eq.{receipt_id}", "trip_id": f"eq.{trip_id}"},
                json={**payload, "updated_at": datetime.now(timezone.utc).isoformat()},
            )
    except httpx.RequestError as e:
        raise ReceiptStoreError(f"Receipt store unreachable: {e}") from e

    if response.status_code != 200:
        raise _unexpected("update", response)

    row = _first_row(response)
    return _to_receipt(row) if row else None


async def delete_receipt(trip_id: str, receipt_id: str) -> bool:
    """Delete a receipt. Returns False if it did not exist."""
    check_configured()

    try:
        async with httpx.AsyncClient() as client:
            response = await client.delete(
                table_url(RECEIPTS_TABLE),
                headers=await get_supabase_headers(),
                params={"id": f"eq.{receipt_id}", "trip_id": f"eq.{trip_id}"},
            )
    except httpx.RequestError as e:
        raise ReceiptStoreError(f"Receipt store unreachable: {e}") from e

    if response.status_code == 204:
        return True
    if response.status_code != 200:
        raise _unexpected("delete", response)

    deleted = _first_row(response) is not None
    if deleted:
        logger.info("Deleted receipt %s of trip %s", receipt_id, trip_id)
    return deleted


async def save_split(trip_id: str, request: ReceiptCreate) -> Receipt:
    """
    Finalize a split: validate it, compute debts and store the receipt.

    Raises:
        ExpenseNotFoundError: If item_id does not belong to the trip
        ExpenseError: If no name or total can be determined
        ShareValidationError: If the share table cannot be finalized
        ReceiptStoreError: If the receipt cannot be saved
    """
    if request.item_id is not None:
        item = await fetch_expense_item(trip_id, request.item_type, request.item_id)
        if item is None:
            raise ExpenseNotFoundError(
                f"{request.item_type.value} {request.item_id} not found in trip {trip_id}"
            )
        item_name, total = resolve_expense(request.item_type, item, request.total)
        item_name = request.item_name or item_name
    elif request.item_name and request.total is not None:
        item_name, total = request.item_name, request.total
    else:
        raise ExpenseError("Provide item_id, or item_name together with total")

    validate_shares(request.persons, total)
    payload = build_receipt_payload(request.item_type, item_name, total, request.persons)
    return await create_receipt(trip_id, payload)


async def resplit_receipt(
    trip_id: str,
    receipt_id: str,
    request: ReceiptUpdate,
) -> Optional[Receipt]:
    """
    Apply an edit to a stored receipt and recompute its payer and debts.

    Returns:
        The updated receipt, or None if it does not exist
    """
    existing = await get_receipt(trip_id, receipt_id)
    if existing is None:
        return None

    persons = request.persons if request.persons is not None else existing.persons
    total = request.total if request.total is not None else existing.total
    validate_shares(persons, total)

    payload = build_receipt_payload(
        request.item_type or existing.item_type,
        request.item_name or existing.item_name,
        total,
        persons,
    )
    return await update_receipt(trip_id, receipt_id, payload)
