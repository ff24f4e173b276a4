"""Data access layer for groups, expenses and settlements"""

import uuid
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from splitledger.infrastructure.database.models import (
    LedgerGroup,
    GroupMember,
    ExpenseRecord,
    ExpenseItemRecord,
    SettlementRecord,
)
from splitledger.domain.models import (
    Expense,
    ExpenseItem,
    ExpenseStatus,
    Group,
    Settlement,
    SettlementStatus,
    SplitMode,
)
from splitledger.domain.exceptions import RecordNotFoundError


def group_to_domain(record: LedgerGroup) -> Group:
    return Group(
        name=record.name,
        members=[m.member_id for m in record.members],
        group_id=str(record.id),
    )


def expense_to_domain(record: ExpenseRecord) -> Expense:
    return Expense(
        payer=record.payer,
        amount=Decimal(record.amount),
        split_mode=SplitMode(record.split_mode),
        participants=tuple(record.participants or ()),
        items=tuple(
            ExpenseItem(
                description=item.description,
                amount=Decimal(item.amount),
                assigned_to=tuple(item.assigned_to or ()),
                settled=item.settled,
            )
            for item in record.items
        ),
        status=ExpenseStatus(record.status),
        description=record.description,
        expense_id=str(record.id),
        group_id=str(record.group_id),
        created_at=record.created_at,
    )


def settlement_to_domain(record: SettlementRecord) -> Settlement:
    return Settlement(
        from_member=record.from_member,
        to_member=record.to_member,
        amount=Decimal(record.amount),
        status=SettlementStatus(record.status),
        settlement_id=str(record.id),
        group_id=str(record.group_id),
        created_at=record.created_at,
    )


class GroupRepository:
    """Repository for groups and their rosters"""

    def __init__(self, db: Session):
        self.db = db

    def create_group(self, name: str, members: List[str]) -> LedgerGroup:
        """Persist group with its roster, dropping duplicate member ids"""
        db_group = LedgerGroup(name=name)
        self.db.add(db_group)
        self.db.flush()  # Get ID without committing

        for member_id in dict.fromkeys(members):
            self.add_member(db_group, member_id)

        return db_group

    def get_group_by_id(self, group_id: uuid.UUID) -> Optional[LedgerGroup]:
        return (
            self.db.query(LedgerGroup)
            .filter(LedgerGroup.id == group_id)
            .first()
        )

    def require_group(self, group_id: uuid.UUID) -> LedgerGroup:
        db_group = self.get_group_by_id(group_id)
        if db_group is None:
            raise RecordNotFoundError(f"Group {group_id} not found")
        return db_group

    def add_member(self, db_group: LedgerGroup, member_id: str) -> bool:
        """Append member to roster; returns False if already present"""
        if any(m.member_id == member_id for m in db_group.members):
            return False
        db_group.members.append(
            GroupMember(member_id=member_id, position=len(db_group.members))
        )
        self.db.flush()
        return True

    def delete_group(self, db_group: LedgerGroup) -> None:
        self.db.delete(db_group)
        self.db.flush()


class ExpenseRepository:
    """Repository for expenses and their line items"""

    def __init__(self, db: Session):
        self.db = db

    def create_expense(self, group_id: uuid.UUID, expense: Expense) -> ExpenseRecord:
        """Create expense with items"""
        db_expense = ExpenseRecord(
            group_id=group_id,
            payer=expense.payer,
            amount=expense.amount,
            split_mode=expense.split_mode.value,
            participants=list(expense.participants),
            description=expense.description,
            status=expense.status.value,
        )
        self.db.add(db_expense)
        self.db.flush()

        for position, item in enumerate(expense.items):
            db_expense.items.append(
                ExpenseItemRecord(
                    position=position,
                    description=item.description,
                    amount=item.amount,
                    assigned_to=list(item.assigned_to),
                    settled=item.settled,
                )
            )
        self.db.flush()

        return db_expense

    def get_expense_by_id(self, expense_id: uuid.UUID) -> Optional[ExpenseRecord]:
        return (
            self.db.query(ExpenseRecord)
            .filter(ExpenseRecord.id == expense_id)
            .first()
        )

    def require_expense(self, expense_id: uuid.UUID) -> ExpenseRecord:
        db_expense = self.get_expense_by_id(expense_id)
        if db_expense is None:
            raise RecordNotFoundError(f"Expense {expense_id} not found")
        return db_expense

    def get_expenses_by_group(
        self, group_id: uuid.UUID, status: Optional[ExpenseStatus] = None
    ) -> List[ExpenseRecord]:
        """Fetch expenses for a group, oldest first"""
        query = self.db.query(ExpenseRecord).filter(ExpenseRecord.group_id == group_id)
        if status is not None:
            query = query.filter(ExpenseRecord.status == status.value)
        return query.order_by(ExpenseRecord.created_at.asc()).all()

    def apply_state(self, db_expense: ExpenseRecord, expense: Expense) -> ExpenseRecord:
        """Write an updated domain expense's status and item flags back to its row"""
        db_expense.status = expense.status.value
        for db_item, item in zip(db_expense.items, expense.items):
            db_item.settled = item.settled
        self.db.flush()
        return db_expense

    def delete_expense(self, db_expense: ExpenseRecord) -> None:
        self.db.delete(db_expense)
        self.db.flush()

    def delete_settled(self, group_id: uuid.UUID) -> int:
        """Delete every settled expense in a group; returns how many were removed"""
        settled = self.get_expenses_by_group(group_id, ExpenseStatus.SETTLED)
        for db_expense in settled:
            self.db.delete(db_expense)
        self.db.flush()
        return len(settled)


class SettlementRepository:
    """Repository for settlements"""

    def __init__(self, db: Session):
        self.db = db

    def create_settlement(self, group_id: uuid.UUID, settlement: Settlement) -> SettlementRecord:
        db_settlement = SettlementRecord(
            group_id=group_id,
            from_member=settlement.from_member,
            to_member=settlement.to_member,
            amount=settlement.amount,
            status=settlement.status.value,
        )
        self.db.add(db_settlement)
        self.db.flush()
        return db_settlement

    def get_settlement_by_id(self, settlement_id: uuid.UUID) -> Optional[SettlementRecord]:
        return (
            self.db.query(SettlementRecord)
            .filter(SettlementRecord.id == settlement_id)
            .first()
        )

    def require_settlement(self, settlement_id: uuid.UUID) -> SettlementRecord:
        db_settlement = self.get_settlement_by_id(settlement_id)
        if db_settlement is None:
            raise RecordNotFoundError(f"Settlement {settlement_id} not found")
        return db_settlement

    def get_settlements_by_group(
        self,
        group_id: uuid.UUID,
        status: Optional[SettlementStatus] = None,
        to_member: Optional[str] = None,
    ) -> List[SettlementRecord]:
        """Fetch settlements for a group, oldest first"""
        query = self.db.query(SettlementRecord).filter(SettlementRecord.group_id == group_id)
        if status is not None:
            query = query.filter(SettlementRecord.status == status.value)
        if to_member is not None:
            query = query.filter(SettlementRecord.to_member == to_member)
        return query.order_by(SettlementRecord.created_at.asc()).all()

    def apply_state(self, db_settlement: SettlementRecord, settlement: Settlement) -> SettlementRecord:
        db_settlement.status = settlement.status.value
        self.db.flush()
        return db_settlement
