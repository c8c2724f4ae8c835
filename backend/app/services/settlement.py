import logging
from collections.abc import Iterable
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Protocol

from ..models import Debt, PersonTotal, Settlement, SettlementSummary
from .receipts import list_receipts

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class HasDebts(Protocol):
    debts: list[Debt]


def _dec(value: float) -> Decimal:
    return Decimal(str(value))


def aggregate(receipts: Iterable[HasDebts]) -> dict[tuple[str, str], float]:
    """
    Net all debts from a set of receipts into one balance per pair of people.

    Amounts are summed per direction with Decimal so the result does not
    depend on the order of receipts. Names are matched exactly.

    Args:
        receipts: Receipts (or anything with a ``debts`` list) to combine

    Returns:
        Dict keyed by (person_a, person_b) with person_a < person_b.
        Positive value = person_a owes person_b, negative = person_b owes
        person_a. Pairs that cancel out completely are omitted.
    """
    owed: dict[tuple[str, str], Decimal] = {}
    for receipt in receipts:
        for debt in receipt.debts:
            key = (debt.from_person, debt.to_person)
            owed[key] = owed.get(key, Decimal("0")) + _dec(debt.amount)

    balances: dict[tuple[str, str], float] = {}
    pairs = {tuple(sorted(key)) for key in owed if key[0] != key[1]}
    for person_a, person_b in sorted(pairs):
        net = owed.get((person_a, person_b), Decimal("0")) - owed.get((person_b, person_a), Decimal("0"))
        if net != 0:
            balances[(person_a, person_b)] = float(net)

    return balances


def net_debts(balances: dict[tuple[str, str], float]) -> list[Debt]:
    """Turn signed pair balances into directed debts with positive amounts."""
    debts: list[Debt] = []
    for (person_a, person_b), amount in sorted(balances.items()):
        if amount > 0:
            debts.append(Debt(from_person=person_a, to_person=person_b, amount=amount))
        elif amount < 0:
            debts.append(Debt(from_person=person_b, to_person=person_a, amount=-amount))
    return debts


def person_totals(receipts: Iterable) -> dict[str, float]:
    """
    Sum each person's share of the cost across receipts.

    People appear in the order they are first seen.
    """
    totals: dict[str, Decimal] = {}
    for receipt in receipts:
        total = _dec(receipt.total)
        for person in receipt.persons:
            share = _dec(person.percent) / 100 * total
            totals[person.name] = totals.get(person.name, Decimal("0")) + share

    return {name: float(amount) for name, amount in totals.items()}


def calculate_balances(receipts: Iterable[HasDebts]) -> dict[str, float]:
    """
    Calculate each person's net position over a set of receipts.

    Positive balance = person is owed money (fronted more than their share)
    Negative balance = person owes money

    Returns:
        Dict mapping name to balance, rounded to cents
    """
    balances: dict[str, Decimal] = {}
    for receipt in receipts:
        for debt in receipt.debts:
            amount = _dec(debt.amount)
            balances[debt.to_person] = balances.get(debt.to_person, Decimal("0")) + amount
            balances[debt.from_person] = balances.get(debt.from_person, Decimal("0")) - amount

    return {
        name: float(balance.quantize(CENT, rounding=ROUND_HALF_UP))
        for name, balance in balances.items()
    }


def calculate_settlements(balances: dict[str, float]) -> list[Settlement]:
    """
    Calculate a short list of payments using a greedy algorithm.

    Repeatedly matches the largest creditor with the largest debtor
    until all balances are settled.

    Args:
        balances: Dict mapping name to their balance

    Returns:
        List of Settlement objects representing payments to make
    """
    creditors: list[tuple[str, Decimal]] = []
    debtors: list[tuple[str, Decimal]] = []

    for name, balance in balances.items():
        bal = _dec(balance).quantize(CENT, rounding=ROUND_HALF_UP)
        if bal > CENT:
            creditors.append((name, bal))
        elif bal < -CENT:
            debtors.append((name, -bal))

    settlements: list[Settlement] = []

    while creditors and debtors:
        creditors.sort(key=lambda x: x[1], reverse=True)
        debtors.sort(key=lambda x: x[1], reverse=True)

        creditor, credit_amount = creditors.pop(0)
        debtor, debt_amount = debtors.pop(0)

        settle_amount = min(credit_amount, debt_amount)

        if settle_amount > CENT:
            settlements.append(Settlement(
                from_person=debtor,
                to_person=creditor,
                amount=float(settle_amount.quantize(CENT, rounding=ROUND_HALF_UP)),
            ))

        new_credit = credit_amount - settle_amount
        new_debt = debt_amount - settle_amount

        if new_credit > CENT:
            creditors.append((creditor, new_credit))
        if new_debt > CENT:
            debtors.append((debtor, new_debt))

    return settlements


def summarize(receipts: list) -> SettlementSummary:
    """
    Build the combined view over a set of receipts.

    Per-person totals and net debts are left unrounded; the settlement
    plan is rounded to cents.
    """
    total_cost = sum((_dec(r.total) for r in receipts), Decimal("0"))
    return SettlementSummary(
        receipt_count=len(receipts),
        total_cost=float(total_cost),
        person_totals=[
            PersonTotal(name=name, amount=amount)
            for name, amount in person_totals(receipts).items()
        ],
        net_debts=net_debts(aggregate(receipts)),
        settlements=calculate_settlements(calculate_balances(receipts)),
    )


async def get_trip_summary(
    trip_id: str,
    receipt_ids: Optional[list[str]] = None,
) -> SettlementSummary:
    """
    Summarize the cost-sharing receipts of a trip.

    Args:
        trip_id: The trip ID
        receipt_ids: Restrict the summary to these receipts; None means all

    Returns:
        SettlementSummary over the chosen receipts
    """
    receipts = await list_receipts(trip_id)
    if receipt_ids is not None:
        selected = set(receipt_ids)
        receipts = [r for r in receipts if r.id in selected]

    logger.info("Summarizing %d receipts for trip %s", len(receipts), trip_id)
    return summarize(receipts)
