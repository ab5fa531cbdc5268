"""Balance ledger: bounds-checked debit and credit over in-memory values.

Nothing here persists anything. Callers write the returned Employee in the
same transaction as the request that caused the change, so a failed write
leaves no trace of the debit.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from ..common.validators import require_non_negative
from ..core.exceptions import InsufficientBalance
from ..employees.model import Employee
from ..timecalc.arithmetic import round_hours
from .model import Balance

logger = logging.getLogger(__name__)

ABSENCE_DAYS = "absence days"
LATE_EARLY_HOURS = "late/early hours"


def debit(balance: Balance, amount, *, kind: str = "balance") -> Balance:
    amount = Decimal(str(require_non_negative(amount, "Amount")))
    if balance.used + amount > balance.allowed:
        raise InsufficientBalance(kind=kind, requested=amount, remaining=balance.remaining)
    return Balance(allowed=balance.allowed, used=balance.used + amount)


def credit(balance: Balance, amount) -> Balance:
    amount = Decimal(str(require_non_negative(amount, "Amount")))
    return Balance(allowed=balance.allowed, used=max(Decimal("0"), balance.used - amount))


def absence_balance(employee: Employee) -> Balance:
    return Balance(allowed=Decimal(employee.allowed_absence_days), used=Decimal(employee.total_absence_days))


def late_early_balance(employee: Employee) -> Balance:
    return Balance(allowed=employee.allowed_late_early_hours, used=employee.used_late_early_hours)


def debit_absence_days(employee: Employee, days: int) -> Employee:
    updated = debit(absence_balance(employee), int(days), kind=ABSENCE_DAYS)
    logger.info("Debit %s absence day(s) from %s (used %s/%s)", days, employee.employee_id, updated.used, updated.allowed)
    return employee.with_changes(total_absence_days=int(updated.used))


def credit_absence_days(employee: Employee, days: int) -> Employee:
    updated = credit(absence_balance(employee), int(days))
    logger.info("Credit %s absence day(s) to %s (used %s/%s)", days, employee.employee_id, updated.used, updated.allowed)
    return employee.with_changes(total_absence_days=int(updated.used))


def debit_late_early_hours(employee: Employee, hours) -> Employee:
    updated = debit(late_early_balance(employee), round_hours(hours), kind=LATE_EARLY_HOURS)
    logger.info("Debit %s late/early hour(s) from %s (used %s/%s)", hours, employee.employee_id, updated.used, updated.allowed)
    return employee.with_changes(used_late_early_hours=updated.used)


def credit_late_early_hours(employee: Employee, hours) -> Employee:
    updated = credit(late_early_balance(employee), round_hours(hours))
    logger.info("Credit %s late/early hour(s) to %s (used %s/%s)", hours, employee.employee_id, updated.used, updated.allowed)
    return employee.with_changes(used_late_early_hours=updated.used)
