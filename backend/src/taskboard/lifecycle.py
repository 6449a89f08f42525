"""
Task lifecycle engine.

    (none) --create--> assigned --submit--> submitted --approve--> approved
                          ^                     |     |                |
                          +------reject---------+     +----verify------+--> verified

Every mutation is read-then-guarded-write: the task is read, the edge and the
caller are checked against what was read, and one conditional write persists
the result. A check failure leaves the task untouched.
"""
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, DecimalException
from typing import Any, Callable, Dict, List, Optional, Tuple

from boto3.dynamodb.types import DYNAMODB_CONTEXT

from .errors import InvalidInput, InvalidTransition, NotFound
from .logging import logger
from .models import Role, SubmissionStatus, TaskStatus
from .roles import Caller, StateHead, SuperAdmin, TeamMember, describe, unknown_caller
from .utils import utc_now


class Action:
    """Lifecycle edges."""
    CREATE = 'create'
    SUBMIT = 'submit'
    APPROVE = 'approve'
    REJECT = 'reject'
    VERIFY = 'verify'


@dataclass(frozen=True)
class Edge:
    sources: Tuple[Optional[str], ...]
    target: str


EDGES = {
    Action.CREATE: Edge(sources=(None,), target=TaskStatus.ASSIGNED),
    Action.SUBMIT: Edge(sources=(TaskStatus.ASSIGNED,), target=TaskStatus.SUBMITTED),
    Action.APPROVE: Edge(sources=(TaskStatus.SUBMITTED,), target=TaskStatus.APPROVED),
    Action.REJECT: Edge(sources=(TaskStatus.SUBMITTED,), target=TaskStatus.ASSIGNED),
    Action.VERIFY: Edge(sources=(TaskStatus.SUBMITTED, TaskStatus.APPROVED), target=TaskStatus.VERIFIED),
}


def edge_for(from_status: Optional[str], to_status: str) -> str:
    """
    Find the action connecting two statuses.

    Raises:
        InvalidTransition: no edge leads from from_status to to_status
    """
    for action, edge in EDGES.items():
        if from_status in edge.sources and edge.target == to_status:
            return action
    raise InvalidTransition(f"No transition from {from_status or 'nothing'} to {to_status}")


def may_perform(caller: Caller, task: Dict[str, Any], action: str) -> bool:
    """Role guard for an action on a task (status is checked separately)."""
    if action == Action.SUBMIT:
        return caller.user_id == task.get('assignedTo')

    if isinstance(caller, SuperAdmin):
        return action in (Action.APPROVE, Action.REJECT, Action.VERIFY)
    if isinstance(caller, StateHead):
        if action == Action.CREATE:
            return True
        if action in (Action.APPROVE, Action.REJECT):
            return task.get('state') == caller.state
        return False
    if isinstance(caller, TeamMember):
        return False
    raise unknown_caller(caller)


def check_transition(caller: Caller, task: Dict[str, Any], action: str) -> Edge:
    """
    Validate an action against the task's current status and the caller.

    Returns:
        The edge that will be taken

    Raises:
        InvalidTransition: wrong source status or caller not allowed
    """
    edge = EDGES.get(action)
    if edge is None:
        raise InvalidInput(f"Unknown action: {action}")

    status = task.get('status')
    if status not in edge.sources:
        raise InvalidTransition(
            f"Cannot {action} task {task.get('taskId')}: status is {status}"
        )
    if not may_perform(caller, task, action):
        raise InvalidTransition(
            f"{describe(caller)} may not {action} task {task.get('taskId')}"
        )
    return edge


def transition_fields(
    caller: Caller,
    action: str,
    now: str,
    reason: Optional[str] = None,
    submission_id: Optional[str] = None
) -> Dict[str, Any]:
    """Task attributes written by an action."""
    fields = {'status': EDGES[action].target, 'updatedAt': now}

    if action == Action.SUBMIT:
        fields['latestSubmissionId'] = submission_id
    elif action == Action.APPROVE:
        fields.update({'approvedBy': caller.user_id, 'approvedAt': now})
    elif action == Action.REJECT:
        fields.update({
            'rejectionReason': reason or '',
            'rejectedBy': caller.user_id,
            'rejectedAt': now
        })
    elif action == Action.VERIFY:
        fields.update({'verifiedBy': caller.user_id, 'verifiedAt': now})
    return fields


def submission_fields(caller: Caller, action: str, now: str, reason: Optional[str] = None) -> Dict[str, Any]:
    """Submission attributes written by a review action."""
    if action == Action.APPROVE:
        return {'status': SubmissionStatus.APPROVED, 'approvedBy': caller.user_id, 'approvedAt': now}
    if action == Action.REJECT:
        return {
            'status': SubmissionStatus.REJECTED,
            'rejectionReason': reason or '',
            'rejectedBy': caller.user_id,
            'rejectedAt': now
        }
    if action == Action.VERIFY:
        return {'status': SubmissionStatus.VERIFIED, 'verifiedBy': caller.user_id, 'verifiedAt': now}
    return {}


def apply_transition(
    caller: Caller,
    task: Dict[str, Any],
    action: str,
    now: str,
    reason: Optional[str] = None,
    submission_id: Optional[str] = None
) -> Dict[str, Any]:
    """Check and apply an action in memory; the input task is not modified."""
    check_transition(caller, task, action)
    return {**task, **transition_fields(caller, action, now, reason, submission_id)}


# =============================================================================
# Input validation
# =============================================================================

def parse_reward(value: Any) -> Decimal:
    """
    Validate a reward amount.

    Accepts ints, Decimals and numeric strings; floats go through str() so
    that 0.1 stays 0.1. The amount must fit a DynamoDB number (38 significant
    digits, exponent within +/-125).

    Raises:
        InvalidInput: missing, boolean, non-numeric, non-finite, negative or
            not storable
    """
    if value is None or isinstance(value, bool):
        raise InvalidInput("Reward must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (DecimalException, ValueError):
        raise InvalidInput(f"Reward must be a number, got {value!r}")
    if not amount.is_finite():
        raise InvalidInput("Reward must be a finite number")
    if amount < 0:
        raise InvalidInput("Reward cannot be negative")
    try:
        return DYNAMODB_CONTEXT.create_decimal(amount)
    except DecimalException:
        raise InvalidInput(f"Reward {value!r} is out of range or too precise")


def parse_due_date(value: Any) -> Optional[str]:
    """
    Normalize an optional due date to ISO-8601.

    None or an empty string means "not set" and is valid.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if not isinstance(value, str):
        raise InvalidInput("Due date must be an ISO-8601 string")

    text = value.strip()
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass
    try:
        # fromisoformat only understands a trailing Z from Python 3.11
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        return datetime.fromisoformat(text).isoformat()
    except ValueError:
        raise InvalidInput(f"Invalid due date: {value!r}")


def parse_proof_files(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(f, str) and f.strip() for f in value):
        raise InvalidInput("proofFiles must be a list of file references")
    return [f.strip() for f in value]


# =============================================================================
# Lifecycle service
# =============================================================================

class TaskLifecycle:
    """Applies lifecycle actions against the task store."""

    def __init__(self, store, clock: Callable[[], str] = None):
        self.store = store
        self.clock = clock or utc_now

    def _load(self, task_id: str) -> Dict[str, Any]:
        if not task_id:
            raise InvalidInput("Missing taskId")
        task = self.store.get_task(task_id)
        if not task:
            raise NotFound(f"Task {task_id} not found")
        return task

    def create_task(
        self,
        caller: Caller,
        title: str,
        description: str,
        assigned_to: str,
        reward: Any,
        due_date: Any = None
    ) -> Dict[str, Any]:
        """
        Assign a new task to a team member of the caller's state.

        Args:
            caller: Must be a StateHead
            title: Required task title
            description: Free text
            assigned_to: userId of a team member in the caller's state
            reward: Non-negative amount
            due_date: Optional ISO-8601 date

        Returns:
            The created task item
        """
        if not may_perform(caller, {}, Action.CREATE):
            raise InvalidTransition(f"{describe(caller)} may not create tasks")

        if not isinstance(title, str) or not title.strip():
            raise InvalidInput("Title is required")
        if description is not None and not isinstance(description, str):
            raise InvalidInput("Description must be text")
        if not assigned_to:
            raise InvalidInput("assignedTo is required")

        amount = parse_reward(reward)
        due = parse_due_date(due_date)

        assignee = self.store.get_user(assigned_to)
        if not assignee:
            raise NotFound(f"User {assigned_to} not found")
        if assignee.get('role') != Role.TEAM_MEMBER or assignee.get('state') != caller.state:
            raise InvalidInput(f"User {assigned_to} is not a team member of {caller.state}")

        now = self.clock()
        task = {
            'taskId': str(uuid.uuid4()),
            'title': title.strip(),
            'description': (description or '').strip(),
            'assignedTo': assigned_to,
            'assignedBy': caller.user_id,
            'state': caller.state,
            'reward': amount,
            'status': EDGES[Action.CREATE].target,
            'dueDate': due,
            'createdAt': now,
            'updatedAt': now
        }

        self.store.create_task(task)
        logger.info(
            f"Task {task['taskId']}: create by {describe(caller)} "
            f"(assignedTo={assigned_to}, reward={amount})"
        )
        return task

    def submit_task(
        self,
        caller: Caller,
        task_id: str,
        proof_text: str = '',
        proof_files: List[str] = None
    ) -> Dict[str, Any]:
        """
        Submit proof of completion for an assigned task.

        Returns:
            The created submission item
        """
        if proof_text is not None and not isinstance(proof_text, str):
            raise InvalidInput("proofText must be text")
        files = parse_proof_files(proof_files)
        text = (proof_text or '').strip()
        if not text and not files:
            raise InvalidInput("Proof text or at least one proof file is required")

        task = self._load(task_id)
        check_transition(caller, task, Action.SUBMIT)

        now = self.clock()
        submission = {
            'submissionId': str(uuid.uuid4()),
            'taskId': task_id,
            'userId': caller.user_id,
            'proofText': text,
            'proofFiles': files,
            'submittedAt': now,
            'status': SubmissionStatus.SUBMITTED
        }
        fields = transition_fields(caller, Action.SUBMIT, now, submission_id=submission['submissionId'])

        self.store.transition_task(task_id, task['status'], fields, new_submission=submission)
        self._log(caller, task, Action.SUBMIT)
        return submission

    def approve_task(self, caller: Caller, task_id: str) -> Dict[str, Any]:
        return self._review(caller, task_id, Action.APPROVE)

    def reject_task(self, caller: Caller, task_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        """Send a submitted task back to assigned; reward, assignee and due date are kept."""
        if reason is not None and not isinstance(reason, str):
            raise InvalidInput("Rejection reason must be text")
        return self._review(caller, task_id, Action.REJECT, reason=(reason or '').strip())

    def verify_task(self, caller: Caller, task_id: str) -> Dict[str, Any]:
        return self._review(caller, task_id, Action.VERIFY)

    def transition(self, caller: Caller, task_id: str, to_status: str, **kwargs) -> Dict[str, Any]:
        """
        Move a task to to_status through whichever edge connects the statuses.

        Creation is not reachable here; use create_task.
        """
        if to_status not in TaskStatus.ALL:
            raise InvalidInput(f"Unknown status: {to_status}")

        task = self._load(task_id)
        action = edge_for(task.get('status'), to_status)
        if action == Action.SUBMIT:
            return self.submit_task(caller, task_id, **kwargs)
        if action == Action.APPROVE:
            return self.approve_task(caller, task_id)
        if action == Action.REJECT:
            return self.reject_task(caller, task_id, **kwargs)
        if action == Action.VERIFY:
            return self.verify_task(caller, task_id)
        raise InvalidTransition(f"No transition from {task.get('status')} to {to_status}")

    def _review(self, caller: Caller, task_id: str, action: str, reason: Optional[str] = None) -> Dict[str, Any]:
        task = self._load(task_id)
        check_transition(caller, task, action)

        now = self.clock()
        fields = transition_fields(caller, action, now, reason=reason)
        submission_id = self._current_submission_id(task)

        self.store.transition_task(
            task_id,
            task['status'],
            fields,
            submission_id=submission_id,
            submission_fields=submission_fields(caller, action, now, reason) if submission_id else None
        )
        self._log(caller, task, action)
        return {**task, **fields}

    def _current_submission_id(self, task: Dict[str, Any]) -> Optional[str]:
        """Submission under review: the task's pointer, else the newest open one."""
        if task.get('latestSubmissionId'):
            return task['latestSubmissionId']

        open_statuses = (SubmissionStatus.SUBMITTED, SubmissionStatus.APPROVED)
        candidates = [
            s for s in self.store.list_submissions(task['taskId'])
            if s.get('status') in open_statuses
        ]
        if not candidates:
            return None
        return candidates[-1]['submissionId']

    def _log(self, caller: Caller, task: Dict[str, Any], action: str) -> None:
        logger.info(
            f"Task {task.get('taskId')}: {action} by {describe(caller)} "
            f"({task.get('status')} -> {EDGES[action].target})"
        )
