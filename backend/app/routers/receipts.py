import logging

from fastapi import APIRouter, HTTPException

from ..models import Receipt, ReceiptCreate, ReceiptUpdate
from ..services.expenses import ExpenseError, ExpenseNotFoundError
from ..services.receipts import (
    ReceiptStoreError,
    delete_receipt,
    list_receipts,
    resplit_receipt,
    save_split,
)
from ..services.shares import ShareValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["Cost Sharing Receipts"])


@router.get("/{trip_id}/cost-sharing-receipts", response_model=list[Receipt])
async def get_receipts(trip_id: str) -> list[Receipt]:
    """List the saved cost-sharing receipts of a trip, oldest first."""
    try:
        return await list_receipts(trip_id)
    except ReceiptStoreError as e:
        raise HTTPException(status_code=502, detail=f"Could not load receipts: {str(e)}")
    except Exception as e:
        logger.exception("Unexpected error listing receipts for trip %s", trip_id)
        raise HTTPException(status_code=500, detail=f"Failed to fetch receipts: {str(e)}")


@router.post("/{trip_id}/cost-sharing-receipts", response_model=Receipt, status_code=201)
async def create_receipt(trip_id: str, request: ReceiptCreate) -> Receipt:
    """
    Finalize a split for one expense and save it.

    The expense is given either by item_id, in which case name and price
    come from the trip's budget items, activities or restaurants, or by an
    explicit item_name and total. Restaurants always need a total.
    Payer and debts are computed from the share table.
    """
    try:
        return await save_split(trip_id, request)
    except ExpenseNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ExpenseError, ShareValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ReceiptStoreError as e:
        raise HTTPException(status_code=502, detail=f"Could not save split: {str(e)}")
    except Exception as e:
        logger.exception("Unexpected error saving split for trip %s", trip_id)
        raise HTTPException(status_code=500, detail=f"Failed to save split: {str(e)}")


@router.put("/{trip_id}/cost-sharing-receipts/{receipt_id}", response_model=Receipt)
async def update_receipt(trip_id: str, receipt_id: str, request: ReceiptUpdate) -> Receipt:
    """Edit a saved receipt. Debts and payer are recomputed."""
    try:
        receipt = await resplit_receipt(trip_id, receipt_id, request)
    except ShareValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ReceiptStoreError as e:
        raise HTTPException(status_code=502, detail=f"Could not update split: {str(e)}")
    except Exception as e:
        logger.exception("Unexpected error updating receipt %s", receipt_id)
        raise HTTPException(status_code=500, detail=f"Failed to update split: {str(e)}")

    if receipt is None:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return receipt


@router.delete("/{trip_id}/cost-sharing-receipts/{receipt_id}")
async def remove_receipt(trip_id: str, receipt_id: str) -> dict:
    try:
        deleted = await delete_receipt(trip_id, receipt_id)
    except ReceiptStoreError as e:
        raise HTTPException(status_code=502, detail=f"Could not delete receipt: {str(e)}")
    except Exception as e:
        logger.exception("Unexpected error deleting receipt %s", receipt_id)
        raise HTTPException(status_code=500, detail=f"Failed to delete receipt: {str(e)}")

    if not deleted:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return {"message": "Receipt deleted successfully"}
