"""SQLAlchemy ORM models for the group record store"""

import uuid
from sqlalchemy import Column, Boolean, DateTime, Integer, ForeignKey, Numeric, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class LedgerGroup(Base):
    """Group of members sharing expenses"""

    __tablename__ = "ledger_group"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    members = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMember.position",
    )
    expenses = relationship("ExpenseRecord", back_populates="group", cascade="all, delete-orphan")
    settlements = relationship("SettlementRecord", back_populates="group", cascade="all, delete-orphan")


class GroupMember(Base):
    """Roster entry; position preserves insertion order"""

    __tablename__ = "group_member"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id = Column(Uuid(as_uuid=True), ForeignKey("ledger_group.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(Text, nullable=False)
    position = Column(Integer, nullable=False)

    group = relationship("LedgerGroup", back_populates="members")


class ExpenseRecord(Base):
    """Expense paid by one member for others"""

    __tablename__ = "expense"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id = Column(Uuid(as_uuid=True), ForeignKey("ledger_group.id", ondelete="CASCADE"), nullable=False, index=True)
    payer = Column(Text, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    split_mode = Column(Text, nullable=False)
    participants = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    group = relationship("LedgerGroup", back_populates="expenses")
    items = relationship(
        "ExpenseItemRecord",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseItemRecord.position",
    )


class ExpenseItemRecord(Base):
    """Line item of an itemized expense"""

    __tablename__ = "expense_item"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    expense_id = Column(Uuid(as_uuid=True), ForeignKey("expense.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    description = Column(Text, nullable=False, default="")
    amount = Column(Numeric(14, 2), nullable=False)
    assigned_to = Column(JSON, nullable=False, default=list)
    settled = Column(Boolean, nullable=False, default=False)

    expense = relationship("ExpenseRecord", back_populates="items")


class SettlementRecord(Base):
    """Direct payment between two members"""

    __tablename__ = "settlement"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id = Column(Uuid(as_uuid=True), ForeignKey("ledger_group.id", ondelete="CASCADE"), nullable=False, index=True)
    from_member = Column(Text, nullable=False)
    to_member = Column(Text, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    group = relationship("LedgerGroup", back_populates="settlements")
