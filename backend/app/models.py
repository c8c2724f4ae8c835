from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemType(str, Enum):
    """Kind of trip expense a split covers."""
    BUDGET = "budget"
    ACTIVITY = "activity"
    RESTAURANT = "restaurant"


class ParticipantShare(BaseModel):
    """One person's percentage of a shared expense."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    percent: float = Field(..., ge=0, le=100, allow_inf_nan=False)
    is_payer: bool = Field(False, alias="isPayer")


class Debt(BaseModel):
    """Money one participant owes another."""
    model_config = ConfigDict(populate_by_name=True)

    from_person: str = Field(..., alias="from")
    to_person: str = Field(..., alias="to")
    amount: float = Field(..., ge=0)


class Receipt(BaseModel):
    """A finalized split for one expense, as stored per trip."""
    id: str
    trip_id: str
    item_type: ItemType
    item_name: str
    total: float = Field(..., ge=0, allow_inf_nan=False)
    payer: str
    persons: list[ParticipantShare] = []
    debts: list[Debt] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReceiptCreate(BaseModel):
    """Request body for finalizing a split.

    Either ``item_id`` (looked up in the trip's expense tables) or an
    explicit ``item_name`` and ``total`` must be given.
    """
    item_type: ItemType
    item_id: Optional[str] = None
    item_name: Optional[str] = None
    total: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    persons: list[ParticipantShare]


class ReceiptUpdate(BaseModel):
    """Partial edit of a stored receipt."""
    item_type: Optional[ItemType] = None
    item_name: Optional[str] = None
    total: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    persons: Optional[list[ParticipantShare]] = None


class NetBalance(BaseModel):
    """Net amount between two people. Positive = person_a owes person_b."""
    person_a: str
    person_b: str
    amount: float


class PersonTotal(BaseModel):
    """A person's summed cost share across receipts."""
    name: str
    amount: float


class Settlement(BaseModel):
    """A payment from one participant to another."""
    model_config = ConfigDict(populate_by_name=True)

    from_person: str = Field(..., alias="from")
    to_person: str = Field(..., alias="to")
    amount: float


class SettlementSummary(BaseModel):
    """Combined view over a set of receipts."""
    receipt_count: int
    total_cost: float
    person_totals: list[PersonTotal] = []
    net_debts: list[Debt] = []
    settlements: list[Settlement] = []


class InitializeSharesRequest(BaseModel):
    count: int = Field(..., ge=1)


class ChangeCountRequest(BaseModel):
    count: int = Field(..., ge=1)
    persons: list[ParticipantShare] = []


class SetPercentRequest(BaseModel):
    persons: list[ParticipantShare]
    index: int = Field(..., ge=0)
    percent: float = Field(..., allow_inf_nan=False)


class SetPayerRequest(BaseModel):
    persons: list[ParticipantShare]
    index: int = Field(..., ge=0)


class RenameRequest(BaseModel):
    persons: list[ParticipantShare]
    index: int = Field(..., ge=0)
    name: str = Field(..., min_length=1)


class DebtPreviewRequest(BaseModel):
    """Request body for previewing the debts of an unsaved split."""
    persons: list[ParticipantShare]
    total: float = Field(..., ge=0, allow_inf_nan=False)
