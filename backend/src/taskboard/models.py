"""
Data models and status constants for the task rewards backend.
Based on the task lifecycle: Assigned → Submitted → Approved → Verified
(a rejected submission sends the task back to Assigned).
"""


class TaskStatus:
    """Task lifecycle statuses."""
    ASSIGNED = 'assigned'
    SUBMITTED = 'submitted'
    APPROVED = 'approved'
    VERIFIED = 'verified'

    ALL = (ASSIGNED, SUBMITTED, APPROVED, VERIFIED)
    PENDING = (ASSIGNED, SUBMITTED)


class SubmissionStatus:
    """Submission review statuses."""
    SUBMITTED = 'submitted'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    VERIFIED = 'verified'


class Role:
    """User roles."""
    SUPER_ADMIN = 'super_admin'
    STATE_HEAD = 'state_head'
    TEAM_MEMBER = 'team_member'

    ALL = (SUPER_ADMIN, STATE_HEAD, TEAM_MEMBER)
    # Roles that only exist inside a state
    STATE_SCOPED = (STATE_HEAD, TEAM_MEMBER)


class TransactionType:
    """Transaction types recorded in the payouts table."""
    PAYOUT = 'PAYOUT'


BANK_INFO_FIELDS = ('accountName', 'accountNumber', 'bankName')

DUE_DATE_NOT_SET = 'Not set'
