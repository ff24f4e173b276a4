"""Ledger views - balances and settlement plan, stored or stateless"""

import time
from decimal import Decimal
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from splitledger.api.v1.groups import load_group
from splitledger.api.v1.schemas import (
    BalancesResponse,
    PlanResponse,
    PlanEntrySchema,
    LedgerComputeRequest,
    LedgerComputeResponse,
)
from splitledger.api.dependencies import get_request_id
from splitledger.domain.balances import compute_balances
from splitledger.domain.models import Expense, ExpenseItem, Settlement
from splitledger.domain.simplifier import compute_settlement_plan
from splitledger.infrastructure.database.session import get_db
from splitledger.infrastructure.database.repositories import (
    ExpenseRepository,
    SettlementRepository,
    expense_to_domain,
    group_to_domain,
    settlement_to_domain,
)
from splitledger.infrastructure.observability.logging import log_ledger_computed
from splitledger.infrastructure.observability.metrics import record_computation
from splitledger.utils.money import presentable

router = APIRouter()


def load_snapshot(db: Session, group_id: str):
    """Read one consistent snapshot of a group's records: (members, expenses, settlements)"""
    db_group = load_group(db, group_id)
    members = group_to_domain(db_group).members
    expenses = [expense_to_domain(r) for r in ExpenseRepository(db).get_expenses_by_group(db_group.id)]
    settlements = [settlement_to_domain(r) for r in SettlementRepository(db).get_settlements_by_group(db_group.id)]
    return members, expenses, settlements


def _plan_schema(plan):
    return [PlanEntrySchema(from_member=e.from_member, to_member=e.to_member, amount=e.amount) for e in plan]


@router.get("/groups/{group_id}/balances", response_model=BalancesResponse)
def get_balances(group_id: str, request: Request, db: Session = Depends(get_db)):
    """
    Net balance per member, rounded to cents.

    Positive: the group owes the member. Negative: the member owes the group.
    """
    start_time = time.time()
    members, expenses, settlements = load_snapshot(db, group_id)
    balances = compute_balances(members, expenses, settlements)

    duration_ms = (time.time() - start_time) * 1000
    record_computation("balances")
    log_ledger_computed(get_request_id(request), group_id, "balances", len(balances), 0, duration_ms)

    return BalancesResponse(
        group_id=group_id,
        balances={member: presentable(value) for member, value in balances.items()},
        total=presentable(sum(balances.values(), Decimal("0"))),
    )


@router.get("/groups/{group_id}/plan", response_model=PlanResponse)
def get_plan(group_id: str, request: Request, db: Session = Depends(get_db)):
    """Minimal list of payments that would settle every balance in the group"""
    start_time = time.time()
    members, expenses, settlements = load_snapshot(db, group_id)
    balances, plan = compute_settlement_plan(members, expenses, settlements)

    duration_ms = (time.time() - start_time) * 1000
    record_computation("plan", len(plan))
    log_ledger_computed(get_request_id(request), group_id, "plan", len(balances), len(plan), duration_ms)

    return PlanResponse(group_id=group_id, entries=_plan_schema(plan), all_settled=not plan)


@router.post("/ledger/compute", response_model=LedgerComputeResponse)
def compute(request_body: LedgerComputeRequest, request: Request):
    """Compute balances and plan for records supplied in the request, without touching the store"""
    start_time = time.time()
    expenses = [
        Expense(
            payer=e.payer,
            amount=e.amount,
            split_mode=e.split_mode,
            participants=tuple(e.participants),
            items=tuple(
                ExpenseItem(
                    description=i.description,
                    amount=i.amount,
                    assigned_to=tuple(i.assigned_to),
                    settled=i.settled,
                )
                for i in e.items
            ),
            status=e.status,
        )
        for e in request_body.expenses
    ]
    settlements = [
        Settlement(from_member=s.from_member, to_member=s.to_member, amount=s.amount, status=s.status)
        for s in request_body.settlements
    ]
    balances, plan = compute_settlement_plan(request_body.members, expenses, settlements)

    duration_ms = (time.time() - start_time) * 1000
    record_computation("stateless", len(plan))
    log_ledger_computed(get_request_id(request), "-", "stateless", len(balances), len(plan), duration_ms)

    return LedgerComputeResponse(
        balances={member: presentable(value) for member, value in balances.items()},
        plan=_plan_schema(plan),
    )
