"""Expense endpoints - create, list, toggle item paid, settle, delete"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from splitledger.api.v1.groups import load_group
from splitledger.api.v1.schemas import (
    ExpenseCreateRequest,
    ExpenseResponse,
    ExpenseListResponse,
    ItemToggleRequest,
    expense_response,
)
from splitledger.api.dependencies import get_request_id, parse_record_id
from splitledger.config import settings
from splitledger.domain.exceptions import (
    InvalidExpenseError,
    InvalidStateTransitionError,
    NotPermittedError,
    RecordNotFoundError,
)
from splitledger.domain.lifecycle import (
    mark_expense_settled,
    partition_history,
    toggle_item_settled,
    validate_expense,
)
from splitledger.domain.models import Expense, ExpenseItem, ExpenseStatus, SplitMode
from splitledger.infrastructure.database.session import get_db
from splitledger.infrastructure.database.repositories import ExpenseRepository, expense_to_domain, group_to_domain

router = APIRouter()


def _load_expense(db: Session, expense_id: str):
    expense_uuid = parse_record_id(expense_id, "expense")
    try:
        return ExpenseRepository(db).require_expense(expense_uuid)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Expense not found")


@router.post("/groups/{group_id}/expenses", response_model=ExpenseResponse, status_code=201)
def create_expense(
    group_id: str,
    request_body: ExpenseCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Log a new expense.

    Split rules:
    - equal: participants default to the current group roster
    - subset: participants must be given explicitly
    - itemized: item amounts must add up to the total (within tolerance)
    """
    request_id = get_request_id(request)
    db_group = load_group(db, group_id)

    try:
        group = group_to_domain(db_group)
        if request_body.payer not in group.members:
            raise InvalidExpenseError("Payer is not a member of this group")

        participants = request_body.participants
        if request_body.split_mode == SplitMode.EQUAL and participants is None:
            participants = group.members
        if request_body.split_mode == SplitMode.ITEMIZED:
            participants = []

        expense = Expense(
            payer=request_body.payer,
            amount=request_body.amount,
            split_mode=request_body.split_mode,
            participants=tuple(participants or ()),
            items=tuple(
                ExpenseItem(
                    description=item.description,
                    amount=item.amount,
                    assigned_to=tuple(item.assigned_to),
                    settled=item.settled,
                )
                for item in request_body.items
            ),
            description=request_body.description,
        )
        validate_expense(expense, tolerance=settings.itemized_tolerance)

        db_expense = ExpenseRepository(db).create_expense(group_id=db_group.id, expense=expense)
        db.commit()

        return expense_response(expense_to_domain(db_expense))

    except InvalidExpenseError as e:
        db.rollback()
        logging.warning(f"Rejected expense: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/groups/{group_id}/expenses", response_model=ExpenseListResponse)
def list_expenses(
    group_id: str,
    status: Optional[ExpenseStatus] = Query(None, description="Filter by active/settled"),
    db: Session = Depends(get_db),
):
    db_group = load_group(db, group_id)
    expenses = [expense_to_domain(r) for r in ExpenseRepository(db).get_expenses_by_group(db_group.id)]
    if status is not None:
        active, settled = partition_history(expenses)
        expenses = settled if status == ExpenseStatus.SETTLED else active
    return ExpenseListResponse(
        group_id=group_id,
        expenses=[expense_response(e) for e in expenses],
    )


@router.post("/expenses/{expense_id}/items/{index}/toggle", response_model=ExpenseResponse)
def toggle_item(
    expense_id: str,
    index: int,
    request_body: ItemToggleRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Flip an item's paid flag; the expense moves to history once every item is paid"""
    request_id = get_request_id(request)
    db_expense = _load_expense(db, expense_id)

    try:
        updated = toggle_item_settled(expense_to_domain(db_expense), index, actor=request_body.member_id)
        ExpenseRepository(db).apply_state(db_expense, updated)
        db.commit()

    except NotPermittedError as e:
        db.rollback()
        logging.warning(f"Toggle refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=403, detail=str(e))

    except InvalidStateTransitionError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info(
        "Expense item toggled",
        extra={
            "request_id": request_id,
            "expense_id": expense_id,
            "item_index": index,
            "expense_status": updated.status.value,
        },
    )
    return expense_response(expense_to_domain(db_expense))


@router.post("/expenses/{expense_id}/settle", response_model=ExpenseResponse)
def settle_expense(expense_id: str, request: Request, db: Session = Depends(get_db)):
    """Mark the whole expense paid, moving it to history"""
    db_expense = _load_expense(db, expense_id)

    try:
        updated = mark_expense_settled(expense_to_domain(db_expense))
        ExpenseRepository(db).apply_state(db_expense, updated)
        db.commit()
        return expense_response(expense_to_domain(db_expense))

    except InvalidStateTransitionError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(expense_id: str, request: Request, db: Session = Depends(get_db)):
    db_expense = _load_expense(db, expense_id)

    try:
        ExpenseRepository(db).delete_expense(db_expense)
        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")
