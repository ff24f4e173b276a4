"""Settlement endpoints - propose, confirm, list"""

import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from splitledger.api.v1.groups import load_group
from splitledger.api.v1.schemas import (
    SettlementCreateRequest,
    SettlementConfirmRequest,
    SettlementResponse,
    SettlementListResponse,
    settlement_response,
)
from splitledger.api.dependencies import get_notifier, get_request_id, parse_record_id
from splitledger.domain.exceptions import (
    InvalidSettlementError,
    InvalidStateTransitionError,
    NotPermittedError,
    RecordNotFoundError,
)
from splitledger.domain.lifecycle import confirm_settlement, settlement_from_plan_entry
from splitledger.domain.models import PlanEntry, SettlementStatus
from splitledger.infrastructure.clients.notifier import SettlementNotifier, settlement_event
from splitledger.infrastructure.database.session import get_db
from splitledger.infrastructure.database.repositories import SettlementRepository, settlement_to_domain, group_to_domain
from splitledger.infrastructure.observability.logging import log_settlement_event
from splitledger.infrastructure.observability.metrics import record_settlement

router = APIRouter()


@router.post("/groups/{group_id}/settlements", response_model=SettlementResponse, status_code=201)
def propose_settlement(
    group_id: str,
    request_body: SettlementCreateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    notifier: SettlementNotifier = Depends(get_notifier),
):
    """
    Record a payment one member made (or will make) to another.

    The settlement starts pending and only moves balances once the
    recipient confirms it.
    """
    request_id = get_request_id(request)
    db_group = load_group(db, group_id)

    try:
        members = group_to_domain(db_group).members
        for member in (request_body.from_member, request_body.to_member):
            if member not in members:
                raise InvalidSettlementError(f"{member} is not a member of this group")

        entry = PlanEntry(
            from_member=request_body.from_member,
            to_member=request_body.to_member,
            amount=request_body.amount,
        )
        settlement = settlement_from_plan_entry(entry, group_id=group_id)

        db_settlement = SettlementRepository(db).create_settlement(db_group.id, settlement)
        db.commit()

    except InvalidSettlementError as e:
        db.rollback()
        logging.warning(f"Rejected settlement: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    stored = settlement_to_domain(db_settlement)
    record_settlement("proposed")
    log_settlement_event(request_id, stored.settlement_id, "proposed")
    background_tasks.add_task(notifier.send_event, settlement_event("SETTLEMENT_PROPOSED", stored))

    return settlement_response(stored)


@router.post("/settlements/{settlement_id}/confirm", response_model=SettlementResponse)
def confirm(
    settlement_id: str,
    request_body: SettlementConfirmRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    notifier: SettlementNotifier = Depends(get_notifier),
):
    """Recipient acknowledges receipt; the settlement now counts toward balances"""
    request_id = get_request_id(request)
    settlement_uuid = parse_record_id(settlement_id, "settlement")
    repo = SettlementRepository(db)

    try:
        db_settlement = repo.require_settlement(settlement_uuid)
        confirmed = confirm_settlement(settlement_to_domain(db_settlement), actor=request_body.member_id)
        repo.apply_state(db_settlement, confirmed)
        db.commit()

    except RecordNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Settlement not found")

    except NotPermittedError as e:
        db.rollback()
        logging.warning(f"Confirmation refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=403, detail=str(e))

    except InvalidStateTransitionError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_settlement("confirmed")
    log_settlement_event(request_id, settlement_id, "confirmed")
    background_tasks.add_task(notifier.send_event, settlement_event("SETTLEMENT_CONFIRMED", confirmed))

    return settlement_response(settlement_to_domain(db_settlement))


@router.get("/groups/{group_id}/settlements", response_model=SettlementListResponse)
def list_settlements(
    group_id: str,
    status: Optional[SettlementStatus] = Query(None, description="Filter by pending/confirmed"),
    to_member: Optional[str] = Query(None, description="Only settlements addressed to this member"),
    db: Session = Depends(get_db),
):
    """List settlements; pending ones addressed to a member are their inbox"""
    db_group = load_group(db, group_id)
    records = SettlementRepository(db).get_settlements_by_group(db_group.id, status, to_member)
    return SettlementListResponse(
        group_id=group_id,
        settlements=[settlement_response(settlement_to_domain(r)) for r in records],
    )
