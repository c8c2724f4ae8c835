from fastapi import APIRouter, HTTPException

from ..models import (
    ChangeCountRequest,
    Debt,
    DebtPreviewRequest,
    InitializeSharesRequest,
    ParticipantShare,
    RenameRequest,
    SetPayerRequest,
    SetPercentRequest,
)
from ..services.allocation import compute_debts
from ..services.shares import (
    ShareValidationError,
    change_participant_count,
    initialize_shares,
    rename_participant,
    set_payer,
    set_share_percent,
    validate_shares,
)

router = APIRouter(prefix="/cost-sharing", tags=["Cost Sharing"])


@router.post("/shares/initialize", response_model=list[ParticipantShare])
async def initialize(request: InitializeSharesRequest) -> list[ParticipantShare]:
    """Create an evenly split share table; the first person pays."""
    return initialize_shares(request.count)


@router.post("/shares/count", response_model=list[ParticipantShare])
async def change_count(request: ChangeCountRequest) -> list[ParticipantShare]:
    """
    Resize a share table.

    Existing names are kept, percentages are split evenly again and the
    first person becomes the payer.
    """
    return change_participant_count(request.count, request.persons)


@router.post("/shares/percent", response_model=list[ParticipantShare])
async def change_percent(request: SetPercentRequest) -> list[ParticipantShare]:
    """Set one person's percentage and spread the rest over the others."""
    try:
        return set_share_percent(request.persons, request.index, request.percent)
    except IndexError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/shares/payer", response_model=list[ParticipantShare])
async def change_payer(request: SetPayerRequest) -> list[ParticipantShare]:
    """Make one person the only payer."""
    try:
        return set_payer(request.persons, request.index)
    except IndexError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/shares/rename", response_model=list[ParticipantShare])
async def rename(request: RenameRequest) -> list[ParticipantShare]:
    try:
        return rename_participant(request.persons, request.index, request.name)
    except IndexError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/debts", response_model=list[Debt])
async def preview_debts(request: DebtPreviewRequest) -> list[Debt]:
    """
    Compute the debts of a split without saving it.

    Amounts are unrounded; format them for display on the client.
    """
    try:
        validate_shares(request.persons, request.total)
    except ShareValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return compute_debts(request.persons, request.total)
