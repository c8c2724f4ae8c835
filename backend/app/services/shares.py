import math
from decimal import Decimal, ROUND_HALF_UP, ROUND_FLOOR
from typing import Optional

from ..config import get_settings
from ..models import ParticipantShare

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class ShareValidationError(ValueError):
    """A share table cannot be finalized as it stands."""


def _to_decimal(value: float) -> Decimal:
    return Decimal(str(value))


def default_name(index: int) -> str:
    return f"Person {index + 1}"


def _even_split(count: int) -> list[Decimal]:
    """
    Split 100 percent across count people, truncated to cents.

    The rounding loss is added to the first person so the list
    always sums to exactly 100.00 (e.g. 3 -> 33.34, 33.33, 33.33).
    """
    if count < 1:
        raise ValueError(f"Participant count must be at least 1, got {count}")

    base = Decimal(10000 // count) / HUNDRED
    rest = (HUNDRED - base * count).quantize(CENT, rounding=ROUND_HALF_UP)
    return [base + rest if i == 0 else base for i in range(count)]


def initialize_shares(count: int) -> list[ParticipantShare]:
    """
    Create a fresh share table for count participants.

    Args:
        count: Number of participants (>= 1)

    Returns:
        Evenly split shares with default names; the first person pays
    """
    return [
        ParticipantShare(name=default_name(i), percent=float(percent), is_payer=i == 0)
        for i, percent in enumerate(_even_split(count))
    ]


def change_participant_count(
    new_count: int,
    previous: list[ParticipantShare],
) -> list[ParticipantShare]:
    """
    Resize a share table and redistribute percentages evenly.

    Names survive where their index still exists. The payer is always
    reset to the first person, since the previous payer may be gone.
    """
    return [
        ParticipantShare(
            name=previous[i].name if i < len(previous) else default_name(i),
            percent=float(percent),
            is_payer=i == 0,
        )
        for i, percent in enumerate(_even_split(new_count))
    ]


def _check_index(shares: list[ParticipantShare], index: int) -> None:
    if not 0 <= index < len(shares):
        raise IndexError(f"Participant index {index} out of range for {len(shares)} participants")


def set_share_percent(
    shares: list[ParticipantShare],
    index: int,
    new_percent: float,
) -> list[ParticipantShare]:
    """
    Set one participant's percentage and spread the rest over the others.

    The edited value is clamped to [0, 100] and kept to 2 decimals. Whole
    percentage points of the remainder are split evenly, with the first
    others (in list order) taking one extra point each until none are
    left. A fractional remainder, which only appears when the edited
    value has decimals, goes to the first other participant.

    Args:
        shares: Current share table
        index: Position of the edited participant
        new_percent: Requested percentage for that participant

    Returns:
        New share table summing to exactly 100
    """
    _check_index(shares, index)

    if len(shares) == 1:
        return [shares[0].model_copy(update={"percent": 100.0})]

    percent = min(max(_to_decimal(new_percent), Decimal("0")), HUNDRED)
    percent = percent.quantize(CENT, rounding=ROUND_HALF_UP)

    rest = HUNDRED - percent
    whole = rest.to_integral_value(rounding=ROUND_FLOOR)
    fraction = rest - whole

    others = len(shares) - 1
    even = whole // others
    extra = whole - even * others

    result: list[ParticipantShare] = []
    first_other = True
    for i, share in enumerate(shares):
        if i == index:
            result.append(share.model_copy(update={"percent": float(percent)}))
            continue

        value = even
        if extra > 0:
            value += 1
            extra -= 1
        if first_other:
            value += fraction
            first_other = False
        result.append(share.model_copy(update={"percent": float(value)}))

    return result


def set_payer(shares: list[ParticipantShare], index: int) -> list[ParticipantShare]:
    """Make the participant at index the only payer."""
    _check_index(shares, index)
    return [
        share.model_copy(update={"is_payer": i == index})
        for i, share in enumerate(shares)
    ]


def rename_participant(
    shares: list[ParticipantShare],
    index: int,
    name: str,
) -> list[ParticipantShare]:
    _check_index(shares, index)
    return [
        share.model_copy(update={"name": name}) if i == index else share.model_copy()
        for i, share in enumerate(shares)
    ]


def percent_sum(shares: list[ParticipantShare]) -> float:
    """Sum of all percentages, computed exactly and returned as float."""
    return float(sum((_to_decimal(s.percent) for s in shares), Decimal("0")))


def validate_shares(
    shares: list[ParticipantShare],
    total: Optional[float] = None,
) -> None:
    """
    Check that a share table can be finalized.

    Raises:
        ShareValidationError: On an empty table, a percent sum away from 100,
            a percent with more than two decimals, a payer count other than
            one, duplicate names or a negative total
    """
    if not shares:
        raise ShareValidationError("At least one participant is required")

    for share in shares:
        if _to_decimal(share.percent).as_tuple().exponent < -2:
            raise ShareValidationError(
                f"Percent for {share.name} has more than two decimals: {share.percent}"
            )

    tolerance = get_settings().share_tolerance
    total_percent = percent_sum(shares)
    if abs(total_percent - 100) > tolerance:
        raise ShareValidationError(
            f"Shares must sum to 100 percent, got {total_percent:.2f}"
        )

    payers = [s for s in shares if s.is_payer]
    if len(payers) != 1:
        raise ShareValidationError(
            f"Exactly one participant must be the payer, found {len(payers)}"
        )

    names = [s.name for s in shares]
    if len(set(names)) != len(names):
        raise ShareValidationError("Participant names must be unique")

    if total is not None and not math.isfinite(total):
        raise ShareValidationError("Total must be a finite number")
    if total is not None and total < 0:
        raise ShareValidationError("Total must not be negative")
