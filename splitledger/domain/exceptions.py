"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidExpenseError(DomainException):
    """Expense record is malformed (bad split, item totals do not reconcile)"""

    pass


class InvalidSettlementError(DomainException):
    """Settlement amount is not positive or payer and recipient are the same"""

    pass


class RecordNotFoundError(DomainException):
    """Requested group, expense or settlement does not exist"""

    pass


class NotPermittedError(DomainException):
    """Member is not allowed to perform this transition"""

    pass


class InvalidStateTransitionError(DomainException):
    """Record is not in a state that allows the requested change"""

    pass
