"""Balance calculator - folds expenses and settlements into net balances"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, Sequence

from splitledger.domain.models import (
    Expense,
    ExpenseStatus,
    Settlement,
    SettlementStatus,
    SplitMode,
)

logger = logging.getLogger(__name__)


def _account(balances: Dict[str, Decimal], member: str) -> None:
    """Open a zero balance for an id missing from the roster"""
    if member not in balances:
        logger.warning(
            "Member not in group roster, opening zero balance",
            extra={"member_id": member},
        )
        balances[member] = Decimal("0")


def _apply_itemized(balances: Dict[str, Decimal], expense: Expense) -> None:
    payer_credit = Decimal("0")

    for item in expense.items:
        if item.settled:
            continue  # Paid outside the ledger
        if not item.assigned_to:
            logger.warning(
                "Skipping item with no assignees",
                extra={"expense_id": expense.expense_id, "item": item.description},
            )
            continue

        per_share = item.amount / len(item.assigned_to)
        for member in item.assigned_to:
            _account(balances, member)
            balances[member] -= per_share
        payer_credit += item.amount

    _account(balances, expense.payer)
    balances[expense.payer] += payer_credit


def _apply_split(balances: Dict[str, Decimal], expense: Expense) -> None:
    if not expense.participants:
        logger.warning(
            "Skipping expense with zero participants",
            extra={"expense_id": expense.expense_id},
        )
        return

    share = expense.amount / len(expense.participants)
    for member in expense.participants:
        _account(balances, member)
        balances[member] -= share

    _account(balances, expense.payer)
    balances[expense.payer] += expense.amount


def compute_balances(
    members: Iterable[str],
    expenses: Sequence[Expense],
    settlements: Sequence[Settlement],
) -> Dict[str, Decimal]:
    """
    Compute each member's signed net balance.

    Positive: the group owes the member. Negative: the member owes the group.

    Rules:
    - Settled expenses are ignored entirely
    - Itemized expenses split each unsettled item among its assignees;
      the payer is credited only for unsettled items
    - Equal/subset expenses split the amount among participants;
      a split with no participants is skipped
    - Only confirmed settlements move balances (credit payer, debit recipient)
    - Ids found in records but not in members get a zero-initialized entry

    Values are kept at full Decimal precision; round at presentation.
    Inputs are never mutated.
    """
    balances: Dict[str, Decimal] = {member: Decimal("0") for member in members}

    for expense in expenses:
        if expense.status == ExpenseStatus.SETTLED:
            continue

        # An itemized expense without items falls back to the participants split
        if expense.split_mode == SplitMode.ITEMIZED and expense.items:
            _apply_itemized(balances, expense)
        else:
            _apply_split(balances, expense)

    for settlement in settlements:
        if settlement.status != SettlementStatus.CONFIRMED:
            continue
        _account(balances, settlement.from_member)
        _account(balances, settlement.to_member)
        balances[settlement.from_member] += settlement.amount
        balances[settlement.to_member] -= settlement.amount

    return balances
