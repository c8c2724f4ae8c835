from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from ..models import SettlementSummary
from ..services.receipts import ReceiptStoreError
from ..services.settlement import get_trip_summary

router = APIRouter(prefix="/trips", tags=["Settlements"])


@router.get("/{trip_id}/cost-sharing-summary", response_model=SettlementSummary)
async def get_summary(
    trip_id: str,
    receipt_ids: Optional[list[str]] = Query(None, description="Only include these receipts"),
) -> SettlementSummary:
    """
    Combine the receipts of a trip into one summary.

    Debts between each pair of people are netted so a single amount
    remains per pair. A short payment plan that settles everyone is
    included as well.
    """
    try:
        return await get_trip_summary(trip_id, receipt_ids)
    except ReceiptStoreError as e:
        raise HTTPException(status_code=502, detail=f"Could not load receipts: {str(e)}")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to calculate summary: {str(e)}")
