"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Dict, List, Optional

from splitledger.domain.models import ExpenseStatus, SettlementStatus, SplitMode


class GroupCreateRequest(BaseModel):
    """Request body for POST /v1/groups"""

    name: str = Field(..., min_length=1, description="Group display name")
    members: List[str] = Field(default_factory=list, description="Initial member ids, in display order")


class MemberAddRequest(BaseModel):
    """Request body for POST /v1/groups/{group_id}/members"""

    member_id: str = Field(..., min_length=1)


class GroupResponse(BaseModel):
    group_id: str
    name: str
    members: List[str]


class ExpenseItemSchema(BaseModel):
    """Line item of an itemized expense"""

    description: str = ""
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    assigned_to: List[str] = Field(..., min_length=1, description="Members sharing this item")
    settled: bool = False


class ExpenseCreateRequest(BaseModel):
    """Request body for POST /v1/groups/{group_id}/expenses"""

    payer: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    split_mode: SplitMode = SplitMode.EQUAL
    participants: Optional[List[str]] = Field(
        default=None, description="Required for subset splits; equal splits default to the roster"
    )
    items: List[ExpenseItemSchema] = Field(default_factory=list)
    description: str = ""


class ExpenseResponse(BaseModel):
    expense_id: str
    group_id: str
    payer: str
    amount: Decimal
    split_mode: SplitMode
    participants: List[str]
    items: List[ExpenseItemSchema]
    status: ExpenseStatus
    description: str
    created_at: Optional[str] = None


class ExpenseListResponse(BaseModel):
    group_id: str
    expenses: List[ExpenseResponse]


class ItemToggleRequest(BaseModel):
    """Request body for POST /v1/expenses/{expense_id}/items/{index}/toggle"""

    member_id: str = Field(..., min_length=1, description="Acting member; must be the payer")


class HistoryClearResponse(BaseModel):
    group_id: str
    deleted: int


class SettlementCreateRequest(BaseModel):
    """Request body for POST /v1/groups/{group_id}/settlements"""

    from_member: str = Field(..., min_length=1)
    to_member: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, decimal_places=2)


class SettlementConfirmRequest(BaseModel):
    """Request body for POST /v1/settlements/{settlement_id}/confirm"""

    member_id: str = Field(..., min_length=1, description="Acting member; must be the recipient")


class SettlementResponse(BaseModel):
    settlement_id: str
    group_id: str
    from_member: str
    to_member: str
    amount: Decimal
    status: SettlementStatus
    created_at: Optional[str] = None


class SettlementListResponse(BaseModel):
    group_id: str
    settlements: List[SettlementResponse]


class PlanEntrySchema(BaseModel):
    """Single proposed payment"""

    from_member: str
    to_member: str
    amount: Decimal


class BalancesResponse(BaseModel):
    """Response for GET /v1/groups/{group_id}/balances"""

    group_id: str
    balances: Dict[str, Decimal]
    total: Decimal


class PlanResponse(BaseModel):
    """Response for GET /v1/groups/{group_id}/plan"""

    group_id: str
    entries: List[PlanEntrySchema]
    all_settled: bool


class ExpenseInput(BaseModel):
    """Expense snapshot for stateless computation"""

    payer: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    split_mode: SplitMode = SplitMode.EQUAL
    participants: List[str] = Field(default_factory=list)
    items: List[ExpenseItemSchema] = Field(default_factory=list)
    status: ExpenseStatus = ExpenseStatus.ACTIVE


class SettlementInput(BaseModel):
    """Settlement snapshot for stateless computation"""

    from_member: str = Field(..., min_length=1)
    to_member: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    status: SettlementStatus = SettlementStatus.PENDING


class LedgerComputeRequest(BaseModel):
    """Request body for POST /v1/ledger/compute"""

    members: List[str] = Field(default_factory=list)
    expenses: List[ExpenseInput] = Field(default_factory=list)
    settlements: List[SettlementInput] = Field(default_factory=list)


class LedgerComputeResponse(BaseModel):
    balances: Dict[str, Decimal]
    plan: List[PlanEntrySchema]


def expense_response(expense) -> ExpenseResponse:
    """Build response from a domain Expense"""
    return ExpenseResponse(
        expense_id=expense.expense_id,
        group_id=expense.group_id,
        payer=expense.payer,
        amount=expense.amount,
        split_mode=expense.split_mode,
        participants=list(expense.participants),
        items=[
            ExpenseItemSchema(
                description=item.description,
                amount=item.amount,
                assigned_to=list(item.assigned_to),
                settled=item.settled,
            )
            for item in expense.items
        ],
        status=expense.status,
        description=expense.description,
        created_at=expense.created_at.isoformat() if expense.created_at else None,
    )


def settlement_response(settlement) -> SettlementResponse:
    """Build response from a domain Settlement"""
    return SettlementResponse(
        settlement_id=settlement.settlement_id,
        group_id=settlement.group_id,
        from_member=settlement.from_member,
        to_member=settlement.to_member,
        amount=settlement.amount,
        status=settlement.status,
        created_at=settlement.created_at.isoformat() if settlement.created_at else None,
    )
