"""Record lifecycle transitions - each returns a new record, inputs stay untouched"""

from dataclasses import replace
from decimal import Decimal
from typing import List, Sequence, Tuple

from splitledger.domain.exceptions import (
    InvalidExpenseError,
    InvalidSettlementError,
    InvalidStateTransitionError,
    NotPermittedError,
)
from splitledger.domain.models import (
    Expense,
    ExpenseStatus,
    PlanEntry,
    Settlement,
    SettlementStatus,
    SplitMode,
)
from splitledger.utils.money import round2

# Maximum allowed gap between an itemized expense total and the sum of its items
ITEMIZED_TOLERANCE = Decimal("0.1")


def _whole_cents(amount: Decimal) -> bool:
    return amount == round2(amount)


def validate_expense(expense: Expense, tolerance: Decimal = ITEMIZED_TOLERANCE) -> None:
    """
    Check an expense before it is stored.

    Raises:
        InvalidExpenseError: negative or sub-cent amounts, empty splits, or itemized
            totals that do not reconcile within tolerance
    """
    if expense.amount < 0:
        raise InvalidExpenseError("Expense amount must not be negative")
    if not _whole_cents(expense.amount):
        raise InvalidExpenseError("Expense amount must be in whole cents")

    if expense.split_mode == SplitMode.ITEMIZED:
        if not expense.items:
            raise InvalidExpenseError("Itemized expense needs at least one item")
        for item in expense.items:
            if item.amount < 0:
                raise InvalidExpenseError(f"Item '{item.description}' has a negative amount")
            if not _whole_cents(item.amount):
                raise InvalidExpenseError(f"Item '{item.description}' must be in whole cents")
            if not item.assigned_to:
                raise InvalidExpenseError(f"Item '{item.description}' is not assigned to anyone")
        items_total = sum((item.amount for item in expense.items), Decimal("0"))
        if abs(items_total - expense.amount) > tolerance:
            raise InvalidExpenseError(
                f"Item totals ({items_total}) do not match expense total ({expense.amount})"
            )
    elif not expense.participants:
        raise InvalidExpenseError("Expense must be split among at least one participant")


def validate_settlement(settlement: Settlement) -> None:
    """Raises InvalidSettlementError for non-positive or sub-cent amounts and self-payments"""
    if settlement.amount <= 0:
        raise InvalidSettlementError("Settlement amount must be positive")
    if not _whole_cents(settlement.amount):
        raise InvalidSettlementError("Settlement amount must be in whole cents")
    if settlement.from_member == settlement.to_member:
        raise InvalidSettlementError("Settlement payer and recipient must differ")


def toggle_item_settled(expense: Expense, index: int, actor: str | None = None) -> Expense:
    """
    Flip one item's settled flag.

    The expense becomes SETTLED once every item is settled and returns to
    ACTIVE when any item is un-settled again. When actor is given it must be
    the payer.
    """
    if expense.split_mode != SplitMode.ITEMIZED:
        raise InvalidStateTransitionError("Only itemized expenses have items to settle")
    if actor is not None and actor != expense.payer:
        raise NotPermittedError("Only the payer can mark items as paid")
    if not 0 <= index < len(expense.items):
        raise InvalidStateTransitionError(f"Item index {index} out of range")

    item = expense.items[index]
    items = expense.items[:index] + (replace(item, settled=not item.settled),) + expense.items[index + 1:]
    all_settled = all(i.settled for i in items)

    return replace(
        expense,
        items=items,
        status=ExpenseStatus.SETTLED if all_settled else ExpenseStatus.ACTIVE,
    )


def mark_expense_settled(expense: Expense) -> Expense:
    """Move the whole expense out of the active ledger into history"""
    if expense.status == ExpenseStatus.SETTLED:
        raise InvalidStateTransitionError("Expense is already settled")
    return replace(expense, status=ExpenseStatus.SETTLED)


def confirm_settlement(settlement: Settlement, actor: str) -> Settlement:
    """Recipient acknowledges a pending settlement"""
    if actor != settlement.to_member:
        raise NotPermittedError("Only the recipient can confirm a settlement")
    if settlement.status != SettlementStatus.PENDING:
        raise InvalidStateTransitionError("Settlement is already confirmed")
    return replace(settlement, status=SettlementStatus.CONFIRMED)


def settlement_from_plan_entry(entry: PlanEntry, group_id: str | None = None) -> Settlement:
    """Turn a proposed payment into a pending settlement record"""
    settlement = Settlement(
        from_member=entry.from_member,
        to_member=entry.to_member,
        amount=entry.amount,
        status=SettlementStatus.PENDING,
        group_id=group_id,
    )
    validate_settlement(settlement)
    return settlement


def partition_history(expenses: Sequence[Expense]) -> Tuple[List[Expense], List[Expense]]:
    """Split expenses into (active, settled)"""
    active = [e for e in expenses if e.status != ExpenseStatus.SETTLED]
    settled = [e for e in expenses if e.status == ExpenseStatus.SETTLED]
    return active, settled
