"""
Payment aggregation.
Derives a read-only earnings summary from a user's tasks.
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from .config import config
from .models import BANK_INFO_FIELDS, TaskStatus


def as_amount(value: Any) -> Decimal:
    """Coerce a stored reward (Decimal from DynamoDB, or int/str) to Decimal."""
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def total_earned(tasks: Iterable[Dict[str, Any]]) -> Decimal:
    """Sum of rewards over verified tasks."""
    return sum(
        (as_amount(task.get('reward')) for task in tasks if task.get('status') == TaskStatus.VERIFIED),
        Decimal('0')
    )


def empty_bank_info() -> Dict[str, str]:
    return {field: '' for field in BANK_INFO_FIELDS}


def summarize_payments(
    tasks: Iterable[Dict[str, Any]],
    total_paid: Any = None,
    bank_info: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Build the payment summary for one user.

    Args:
        tasks: The user's tasks (any status)
        total_paid: Amount already paid out; defaults to 0 when absent
        bank_info: The user's bank details, if any

    Returns:
        dict: {
            'totalEarned': Decimal,
            'totalPaid': Decimal,
            'pendingPayout': Decimal,
            'verifiedTasks': int,
            'currency': str,
            'bankInfo': dict
        }
    """
    tasks = list(tasks)
    earned = total_earned(tasks)
    paid = as_amount(total_paid)

    return {
        'totalEarned': earned,
        'totalPaid': paid,
        'pendingPayout': earned - paid,
        'verifiedTasks': len([t for t in tasks if t.get('status') == TaskStatus.VERIFIED]),
        'currency': config.CURRENCY,
        'bankInfo': {**empty_bank_info(), **(bank_info or {})}
    }
