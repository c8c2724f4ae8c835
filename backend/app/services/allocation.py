import logging
from typing import Optional

from ..models import Debt, ParticipantShare

logger = logging.getLogger(__name__)


def find_payer(shares: list[ParticipantShare]) -> Optional[ParticipantShare]:
    """Return the first participant flagged as payer, if any."""
    return next((s for s in shares if s.is_payer), None)


def person_amounts(shares: list[ParticipantShare], total: float) -> dict[str, float]:
    """
    Each participant's portion of the total, payer included.

    Amounts are not rounded; formatting to cents is left to the caller.
    """
    amounts: dict[str, float] = {}
    for share in shares:
        amounts[share.name] = amounts.get(share.name, 0.0) + (share.percent / 100) * total
    return amounts


def compute_debts(shares: list[ParticipantShare], total: float) -> list[Debt]:
    """
    Compute what every non-payer owes the payer for one expense.

    The payer's own portion is self-paid and produces no debt, and
    participants whose portion is zero are left out. The order of the
    result follows the order of shares.

    Args:
        shares: Finalized share table (exactly one payer expected)
        total: Amount being split

    Returns:
        List of Debt objects, empty when no payer is flagged
    """
    payer = find_payer(shares)
    if payer is None:
        logger.debug("No payer in share table, returning no debts")
        return []

    debts: list[Debt] = []
    for share in shares:
        if share.name == payer.name:
            continue

        amount = (share.percent / 100) * total
        if amount > 0:
            debts.append(Debt(from_person=share.name, to_person=payer.name, amount=amount))

    return debts
