"""Unit tests for record lifecycle transitions"""

import pytest
from decimal import Decimal
from splitledger.domain.balances import compute_balances
from splitledger.domain.exceptions import (
    InvalidExpenseError,
    InvalidSettlementError,
    InvalidStateTransitionError,
    NotPermittedError,
)
from splitledger.domain.lifecycle import (
    confirm_settlement,
    mark_expense_settled,
    partition_history,
    settlement_from_plan_entry,
    toggle_item_settled,
    validate_expense,
    validate_settlement,
)
from splitledger.domain.models import (
    Expense,
    ExpenseItem,
    ExpenseStatus,
    PlanEntry,
    Settlement,
    SettlementStatus,
    SplitMode,
)


def test_toggle_item_returns_new_expense(dinner_itemized: Expense):
    updated = toggle_item_settled(dinner_itemized, 1, actor="alice")

    assert updated.items[1].settled is True
    assert updated.status == ExpenseStatus.ACTIVE
    # Original snapshot untouched
    assert dinner_itemized.items[1].settled is False


def test_toggle_last_item_settles_expense(dinner_itemized: Expense):
    updated = toggle_item_settled(toggle_item_settled(dinner_itemized, 0), 1)

    assert updated.status == ExpenseStatus.SETTLED
    assert compute_balances(["alice", "bob", "carol"], [updated], []) == {
        "alice": Decimal("0"),
        "bob": Decimal("0"),
        "carol": Decimal("0"),
    }


def test_untoggle_reactivates_expense(dinner_itemized: Expense):
    settled = toggle_item_settled(toggle_item_settled(dinner_itemized, 0), 1)

    reopened = toggle_item_settled(settled, 0)

    assert reopened.status == ExpenseStatus.ACTIVE
    assert reopened.items[0].settled is False


def test_toggle_only_by_payer(dinner_itemized: Expense):
    with pytest.raises(NotPermittedError):
        toggle_item_settled(dinner_itemized, 0, actor="bob")


def test_toggle_rejects_bad_index_and_non_itemized(dinner_itemized: Expense):
    with pytest.raises(InvalidStateTransitionError):
        toggle_item_settled(dinner_itemized, 5)

    equal = Expense(payer="a", amount=Decimal("10"), split_mode=SplitMode.EQUAL, participants=("a", "b"))
    with pytest.raises(InvalidStateTransitionError):
        toggle_item_settled(equal, 0)


def test_mark_expense_settled(dinner_itemized: Expense):
    settled = mark_expense_settled(dinner_itemized)

    assert settled.status == ExpenseStatus.SETTLED
    assert dinner_itemized.status == ExpenseStatus.ACTIVE

    with pytest.raises(InvalidStateTransitionError):
        mark_expense_settled(settled)


def test_confirm_settlement_by_recipient_only():
    pending = Settlement(from_member="bob", to_member="alice", amount=Decimal("10"))

    with pytest.raises(NotPermittedError):
        confirm_settlement(pending, actor="bob")

    confirmed = confirm_settlement(pending, actor="alice")
    assert confirmed.status == SettlementStatus.CONFIRMED
    assert pending.status == SettlementStatus.PENDING

    with pytest.raises(InvalidStateTransitionError):
        confirm_settlement(confirmed, actor="alice")


def test_settlement_from_plan_entry_is_pending():
    entry = PlanEntry(from_member="bob", to_member="alice", amount=Decimal("12.34"))

    settlement = settlement_from_plan_entry(entry, group_id="g1")

    assert settlement.status == SettlementStatus.PENDING
    assert (settlement.from_member, settlement.to_member, settlement.amount) == ("bob", "alice", Decimal("12.34"))
    assert settlement.group_id == "g1"


def test_validate_expense_itemized_tolerance(dinner_itemized: Expense):
    validate_expense(dinner_itemized)

    close_enough = Expense(
        payer="alice",
        amount=Decimal("90.05"),
        split_mode=SplitMode.ITEMIZED,
        items=dinner_itemized.items,
    )
    validate_expense(close_enough)

    mismatched = Expense(
        payer="alice",
        amount=Decimal("95"),
        split_mode=SplitMode.ITEMIZED,
        items=dinner_itemized.items,
    )
    with pytest.raises(InvalidExpenseError, match="do not match"):
        validate_expense(mismatched)


@pytest.mark.parametrize(
    "expense",
    [
        Expense(payer="a", amount=Decimal("-1"), split_mode=SplitMode.EQUAL, participants=("a",)),
        Expense(payer="a", amount=Decimal("10"), split_mode=SplitMode.SUBSET, participants=()),
        Expense(payer="a", amount=Decimal("10"), split_mode=SplitMode.ITEMIZED),
        Expense(
            payer="a",
            amount=Decimal("10"),
            split_mode=SplitMode.ITEMIZED,
            items=(ExpenseItem(description="x", amount=Decimal("10"), assigned_to=()),),
        ),
    ],
)
def test_validate_expense_rejects_malformed(expense: Expense):
    with pytest.raises(InvalidExpenseError):
        validate_expense(expense)


def test_validate_settlement():
    validate_settlement(Settlement(from_member="a", to_member="b", amount=Decimal("1")))

    with pytest.raises(InvalidSettlementError):
        validate_settlement(Settlement(from_member="a", to_member="b", amount=Decimal("0")))
    with pytest.raises(InvalidSettlementError):
        validate_settlement(Settlement(from_member="a", to_member="a", amount=Decimal("5")))


def test_partition_history(dinner_itemized: Expense):
    settled = mark_expense_settled(dinner_itemized)

    active, history = partition_history([dinner_itemized, settled])

    assert active == [dinner_itemized]
    assert history == [settled]


def test_sub_cent_amounts_are_rejected():
    """Stored amounts are cents; a fractional cent would be silently rounded away"""
    with pytest.raises(InvalidSettlementError, match="whole cents"):
        validate_settlement(Settlement(from_member="a", to_member="b", amount=Decimal("0.004")))
    with pytest.raises(InvalidSettlementError, match="whole cents"):
        settlement_from_plan_entry(PlanEntry(from_member="a", to_member="b", amount=Decimal("5.005")))

    with pytest.raises(InvalidExpenseError, match="whole cents"):
        validate_expense(
            Expense(payer="a", amount=Decimal("10.005"), split_mode=SplitMode.EQUAL, participants=("a", "b"))
        )
    with pytest.raises(InvalidExpenseError, match="whole cents"):
        validate_expense(
            Expense(
                payer="a",
                amount=Decimal("10.00"),
                split_mode=SplitMode.ITEMIZED,
                items=(ExpenseItem(description="x", amount=Decimal("10.005"), assigned_to=("b",)),),
            )
        )

    validate_settlement(Settlement(from_member="a", to_member="b", amount=Decimal("0.10")))
