"""Domain models - pure Python dataclasses representing ledger records"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class SplitMode(str, Enum):
    """How an expense is divided between members"""

    EQUAL = "equal"
    SUBSET = "subset"
    ITEMIZED = "itemized"


class ExpenseStatus(str, Enum):
    ACTIVE = "active"
    SETTLED = "settled"


class SettlementStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class ExpenseItem:
    """Single line item of an itemized expense"""

    description: str
    amount: Decimal
    assigned_to: Tuple[str, ...]
    settled: bool = False


@dataclass(frozen=True)
class Expense:
    """Money a payer advanced on behalf of other members"""

    payer: str
    amount: Decimal
    split_mode: SplitMode
    participants: Tuple[str, ...] = ()
    items: Tuple[ExpenseItem, ...] = ()
    status: ExpenseStatus = ExpenseStatus.ACTIVE
    description: str = ""
    expense_id: Optional[str] = None
    group_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Settlement:
    """Direct payment from one member to another, outside the expense pool"""

    from_member: str
    to_member: str
    amount: Decimal
    status: SettlementStatus = SettlementStatus.PENDING
    settlement_id: Optional[str] = None
    group_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PlanEntry:
    """One proposed payment in a settlement plan"""

    from_member: str
    to_member: str
    amount: Decimal  # rounded to cents


@dataclass
class Group:
    """Named roster of members; member order is display order"""

    name: str
    members: list[str] = field(default_factory=list)
    group_id: Optional[str] = None
