"""Debt simplification - greedy two-pointer settlement planning"""

from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Sequence

from splitledger.domain.balances import compute_balances
from splitledger.domain.models import Expense, PlanEntry, Settlement
from splitledger.utils.money import TOLERANCE, is_zero, round2


def simplify_debts(balances: Mapping[str, Decimal]) -> List[PlanEntry]:
    """
    Produce an ordered list of payments that zeroes every balance.

    Algorithm:
    - Debtors (balance < -0.01) sorted most negative first
    - Creditors (balance > 0.01) sorted largest first
    - Match the current debtor and creditor for min(|debt|, credit),
      carry the residual in full precision, advance a side once its
      residual drops below 0.01

    Output has at most len(debtors) + len(creditors) - 1 entries, every
    amount is rounded to cents, and no entry pays oneself. Sorting is
    stable, so equal balances keep their mapping order.
    """
    debtors = [[member, balance] for member, balance in balances.items() if balance < -TOLERANCE]
    creditors = [[member, balance] for member, balance in balances.items() if balance > TOLERANCE]

    debtors.sort(key=lambda entry: entry[1])
    creditors.sort(key=lambda entry: entry[1], reverse=True)

    plan: List[PlanEntry] = []
    i = 0
    j = 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]
        amount = min(abs(debtor[1]), creditor[1])

        plan.append(PlanEntry(from_member=debtor[0], to_member=creditor[0], amount=round2(amount)))

        # Residuals stay unrounded so cents do not drift across iterations
        debtor[1] += amount
        creditor[1] -= amount

        if is_zero(debtor[1]):
            i += 1
        if is_zero(creditor[1]):
            j += 1

    return plan


def apply_plan(balances: Mapping[str, Decimal], plan: Sequence[PlanEntry]) -> Dict[str, Decimal]:
    """Return balances as they would be after every plan entry is paid"""
    residual = dict(balances)
    for entry in plan:
        residual[entry.from_member] = residual.get(entry.from_member, Decimal("0")) + entry.amount
        residual[entry.to_member] = residual.get(entry.to_member, Decimal("0")) - entry.amount
    return residual


def compute_settlement_plan(
    members: Iterable[str],
    expenses: Sequence[Expense],
    settlements: Sequence[Settlement],
) -> tuple[Dict[str, Decimal], List[PlanEntry]]:
    """
    Main entry point: balances and settlement plan for one record snapshot.

    Returns (balances, plan).
    """
    balances = compute_balances(members, expenses, settlements)
    return balances, simplify_debts(balances)
