"""Group endpoints - roster management and history clearing"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from splitledger.api.v1.schemas import GroupCreateRequest, GroupResponse, MemberAddRequest, HistoryClearResponse
from splitledger.api.dependencies import get_request_id, parse_record_id
from splitledger.domain.exceptions import RecordNotFoundError
from splitledger.infrastructure.database.session import get_db
from splitledger.infrastructure.database.repositories import GroupRepository, ExpenseRepository, group_to_domain

router = APIRouter()


def load_group(db: Session, group_id: str):
    """Fetch group row; 400 on a malformed id, 404 when it does not exist"""
    group_uuid = parse_record_id(group_id, "group")
    try:
        return GroupRepository(db).require_group(group_uuid)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Group not found")


def _group_response(db_group) -> GroupResponse:
    group = group_to_domain(db_group)
    return GroupResponse(group_id=group.group_id, name=group.name, members=group.members)


@router.post("/groups", response_model=GroupResponse, status_code=201)
def create_group(request_body: GroupCreateRequest, request: Request, db: Session = Depends(get_db)):
    """Create a group with an initial roster"""
    try:
        db_group = GroupRepository(db).create_group(request_body.name, request_body.members)
        db.commit()
        return _group_response(db_group)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/groups/{group_id}", response_model=GroupResponse)
def get_group(group_id: str, db: Session = Depends(get_db)):
    return _group_response(load_group(db, group_id))


@router.post("/groups/{group_id}/members", response_model=GroupResponse)
def add_member(group_id: str, request_body: MemberAddRequest, request: Request, db: Session = Depends(get_db)):
    """Add a member to the roster; adding an existing member is a no-op"""
    db_group = load_group(db, group_id)

    try:
        GroupRepository(db).add_member(db_group, request_body.member_id)
        db.commit()
        return _group_response(db_group)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/groups/{group_id}", status_code=204)
def delete_group(group_id: str, request: Request, db: Session = Depends(get_db)):
    """Delete a group with all its expenses and settlements"""
    db_group = load_group(db, group_id)

    try:
        GroupRepository(db).delete_group(db_group)
        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info("Group deleted", extra={"request_id": get_request_id(request), "group_id": group_id})


@router.delete("/groups/{group_id}/history", response_model=HistoryClearResponse)
def clear_history(group_id: str, request: Request, db: Session = Depends(get_db)):
    """Permanently delete every settled expense in the group"""
    request_id = get_request_id(request)
    db_group = load_group(db, group_id)

    try:
        deleted = ExpenseRepository(db).delete_settled(db_group.id)
        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info(
        f"Cleared {deleted} settled expenses",
        extra={"request_id": request_id, "group_id": group_id},
    )
    return HistoryClearResponse(group_id=group_id, deleted=deleted)
