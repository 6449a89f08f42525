"""
DynamoDB-backed Task Store and User Store.

Reads translate a filter dict into a GSI query (or a scan) plus a filter
expression. Writes that move a task through its lifecycle are conditioned on
the status that was read, so a concurrent writer makes the write fail instead
of being silently overwritten.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

import boto3
from boto3.dynamodb.conditions import Attr, Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from .config import config
from .errors import InvalidInput, InvalidTransition, NotFound, StoreUnavailable, TaskboardError
from .logging import logger
from .models import TransactionType
from .visibility import matches_filter

CONDITIONAL_FAILURES = ('ConditionalCheckFailedException', 'TransactionCanceledException')

# Filter key -> GSI, most selective first
TASK_INDEXES = (
    ('assignedTo', 'AssigneeIndex'),
    ('state', 'StateIndex'),
    ('assignedBy', 'AssignerIndex'),
    ('status', 'StatusIndex'),
)
USER_INDEXES = (
    ('state', 'StateIndex'),
    ('role', 'RoleIndex'),
)

_dynamodb = None
_store = None


def get_dynamodb():
    """Get or create DynamoDB resource."""
    global _dynamodb
    if _dynamodb is None:
        _dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)
    return _dynamodb


def get_store() -> 'DynamoStore':
    """Get or create the process-wide store used by the handlers."""
    global _store
    if _store is None:
        _store = DynamoStore()
    return _store


def is_multi(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def build_filter_expression(item_filter: Dict[str, Any]):
    """
    AND together one condition per filter key.

    Scalar values become Attr(key).eq(value), collections Attr(key).is_in(...).
    Returns None for an empty filter.
    """
    combined = None
    for key, value in item_filter.items():
        if is_multi(value):
            condition = Attr(key).is_in(sorted(value))
        else:
            condition = Attr(key).eq(value)
        combined = condition if combined is None else combined & condition
    return combined


def plan_query(item_filter: Dict[str, Any], indexes: Sequence[Tuple[str, str]]) -> Dict[str, Any]:
    """
    Choose how to read the rows selected by a filter.

    The first index whose key has a scalar value in the filter becomes the
    key condition; every other key goes into the filter expression.

    Returns:
        Keyword arguments for Table.query (when 'IndexName' is present) or
        Table.scan.
    """
    params = {}
    remaining = dict(item_filter)

    for key, index_name in indexes:
        value = remaining.get(key)
        if value is not None and not is_multi(value):
            params['IndexName'] = index_name
            params['KeyConditionExpression'] = Key(key).eq(remaining.pop(key))
            break

    filter_expression = build_filter_expression(remaining)
    if filter_expression is not None:
        params['FilterExpression'] = filter_expression
    return params


def build_update(fields: Dict[str, Any]) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """Build a SET update expression with placeholder names and values."""
    if not fields:
        raise InvalidInput("Nothing to update")

    names = {}
    values = {}
    assignments = []
    for i, (name, value) in enumerate(fields.items()):
        names[f'#f{i}'] = name
        values[f':v{i}'] = value
        assignments.append(f'#f{i} = :v{i}')
    return 'SET ' + ', '.join(assignments), names, values


class DynamoStore:
    """Document-store CRUD over the Tasks, Users, Submissions and Transactions tables."""

    def __init__(
        self,
        dynamodb=None,
        tasks_table: str = None,
        users_table: str = None,
        submissions_table: str = None,
        transactions_table: str = None
    ):
        self.dynamodb = dynamodb or get_dynamodb()
        self.tasks_table = tasks_table or config.TASKS_TABLE
        self.users_table = users_table or config.USERS_TABLE
        self.submissions_table = submissions_table or config.SUBMISSIONS_TABLE
        self.transactions_table = transactions_table if transactions_table is not None else config.TRANSACTIONS_TABLE
        self._serializer = TypeSerializer()

    # ---- low-level helpers ----

    def _call(self, description: str, operation, conflict: TaskboardError = None, **kwargs):
        """
        Run a DynamoDB operation, mapping botocore failures to store errors.

        Conditional-check failures raise `conflict` (InvalidTransition by
        default); anything else raises StoreUnavailable.
        """
        try:
            return operation(**kwargs)
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code', 'Unknown')
            if code in CONDITIONAL_FAILURES:
                logger.warning(f"Conditional write rejected during {description}: {code}")
                raise conflict or InvalidTransition(f"Conflicting update during {description}")
            logger.error(f"DynamoDB error during {description}: {code} {e}")
            raise StoreUnavailable(f"Store unavailable during {description}")
        except BotoCoreError as e:
            logger.error(f"DynamoDB transport error during {description}: {e}")
            raise StoreUnavailable(f"Store unavailable during {description}")

    def _read_all(self, table_name: str, description: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Query (or scan) following LastEvaluatedKey until exhausted."""
        table = self.dynamodb.Table(table_name)
        operation = table.query if 'KeyConditionExpression' in params else table.scan

        items = []
        request = dict(params)
        while True:
            response = self._call(description, operation, **request)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return items
            request['ExclusiveStartKey'] = last_key

    def _get(self, table_name: str, key: Dict[str, Any], description: str) -> Optional[Dict[str, Any]]:
        table = self.dynamodb.Table(table_name)
        response = self._call(description, table.get_item, Key=key)
        return response.get('Item')

    def _list(
        self,
        table_name: str,
        key_name: str,
        item_filter: Dict[str, Any],
        indexes: Sequence[Tuple[str, str]],
        description: str
    ) -> List[Dict[str, Any]]:
        if any(is_multi(v) and not v for v in item_filter.values()):
            return []

        key_value = item_filter.get(key_name)
        if key_value is not None and not is_multi(key_value):
            # Primary-key lookup, remaining keys checked on the single item
            item = self._get(table_name, {key_name: key_value}, description)
            return [item] if item and matches_filter(item, item_filter) else []

        return self._read_all(table_name, description, plan_query(item_filter, indexes))

    def _typed(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return {k: self._serializer.serialize(v) for k, v in document.items()}

    # ---- tasks ----

    def list_tasks(self, task_filter: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """
        List tasks matching a filter over state, assignedTo, assignedBy, status.

        Args:
            task_filter: Scalar values match by equality, lists by membership

        Returns:
            Matching task items (unordered)
        """
        return self._list(self.tasks_table, 'taskId', task_filter or {}, TASK_INDEXES, 'list tasks')

    def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        return self._get(self.tasks_table, {'taskId': task_id}, f"get task {task_id}")

    def create_task(self, task: Dict[str, Any]) -> str:
        """Insert a new task item; returns its taskId."""
        table = self.dynamodb.Table(self.tasks_table)
        self._call(
            f"create task {task['taskId']}",
            table.put_item,
            conflict=InvalidInput(f"Task {task['taskId']} already exists"),
            Item=task,
            ConditionExpression=Attr('taskId').not_exists()
        )
        logger.info(f"Created task {task['taskId']} in {self.tasks_table}")
        return task['taskId']

    def update_task_status(self, task_id: str, fields: Dict[str, Any], expected_status: str) -> None:
        """
        Update task fields only if the stored status still equals expected_status.

        Raises:
            InvalidTransition: the task changed since it was read
        """
        update_expression, names, values = build_update(fields)
        names['#status_guard'] = 'status'
        values[':expected_status'] = expected_status

        table = self.dynamodb.Table(self.tasks_table)
        self._call(
            f"update task {task_id}",
            table.update_item,
            conflict=InvalidTransition(f"Task {task_id} is no longer {expected_status}"),
            Key={'taskId': task_id},
            UpdateExpression=update_expression,
            ConditionExpression='#status_guard = :expected_status',
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values
        )

    def transition_task(
        self,
        task_id: str,
        expected_status: str,
        task_fields: Dict[str, Any],
        new_submission: Optional[Dict[str, Any]] = None,
        submission_id: Optional[str] = None,
        submission_fields: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Atomically apply a lifecycle step to a task and its submission.

        Transactional write:
        1. Update the task, conditioned on its current status
        2. Put the new submission (submit) or update the existing one (review)

        Args:
            task_id: Task to update
            expected_status: Status the task had when it was read
            task_fields: Attributes to SET on the task
            new_submission: Submission item to create alongside the update
            submission_id: Existing submission to update
            submission_fields: Attributes to SET on that submission
        """
        if new_submission is None and not (submission_id and submission_fields):
            self.update_task_status(task_id, task_fields, expected_status)
            return

        update_expression, names, values = build_update(task_fields)
        names['#status_guard'] = 'status'
        values[':expected_status'] = expected_status

        transact_items = [
            {
                'Update': {
                    'TableName': self.tasks_table,
                    'Key': self._typed({'taskId': task_id}),
                    'UpdateExpression': update_expression,
                    'ConditionExpression': '#status_guard = :expected_status',
                    'ExpressionAttributeNames': names,
                    'ExpressionAttributeValues': self._typed(values)
                }
            }
        ]

        if new_submission is not None:
            transact_items.append({
                'Put': {
                    'TableName': self.submissions_table,
                    'Item': self._typed(new_submission),
                    'ConditionExpression': 'attribute_not_exists(submissionId)'
                }
            })
        else:
            sub_expression, sub_names, sub_values = build_update(submission_fields)
            transact_items.append({
                'Update': {
                    'TableName': self.submissions_table,
                    'Key': self._typed({'submissionId': submission_id}),
                    'UpdateExpression': sub_expression,
                    'ConditionExpression': 'attribute_exists(submissionId)',
                    'ExpressionAttributeNames': sub_names,
                    'ExpressionAttributeValues': self._typed(sub_values)
                }
            })

        self._call(
            f"transition task {task_id}",
            self.dynamodb.meta.client.transact_write_items,
            conflict=InvalidTransition(f"Task {task_id} is no longer {expected_status}"),
            TransactItems=transact_items
        )

    # ---- submissions ----

    def create_submission(self, submission: Dict[str, Any]) -> str:
        """Insert a submission item on its own; returns its submissionId."""
        table = self.dynamodb.Table(self.submissions_table)
        self._call(
            f"create submission {submission['submissionId']}",
            table.put_item,
            conflict=InvalidInput(f"Submission {submission['submissionId']} already exists"),
            Item=submission,
            ConditionExpression=Attr('submissionId').not_exists()
        )
        return submission['submissionId']

    def get_submission(self, submission_id: str) -> Optional[Dict[str, Any]]:
        return self._get(self.submissions_table, {'submissionId': submission_id}, f"get submission {submission_id}")

    def list_submissions(self, task_id: str) -> List[Dict[str, Any]]:
        """All submissions for a task, oldest first (byTask GSI)."""
        items = self._read_all(
            self.submissions_table,
            f"list submissions for {task_id}",
            {'IndexName': 'byTask', 'KeyConditionExpression': Key('taskId').eq(task_id)}
        )
        return sorted(items, key=lambda s: s.get('submittedAt', ''))

    # ---- users ----

    def list_users(self, user_filter: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """List users matching a filter over userId, state, role."""
        return self._list(self.users_table, 'userId', user_filter or {}, USER_INDEXES, 'list users')

    def list_users_any(self, user_filters: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Union of several user filters, de-duplicated by userId."""
        seen = {}
        for user_filter in user_filters:
            for user in self.list_users(user_filter):
                seen.setdefault(user['userId'], user)
        return list(seen.values())

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._get(self.users_table, {'userId': user_id}, f"get user {user_id}")

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Update profile fields of an existing user; returns the updated item."""
        update_expression, names, values = build_update(fields)
        table = self.dynamodb.Table(self.users_table)
        response = self._call(
            f"update user {user_id}",
            table.update_item,
            conflict=NotFound(f"User {user_id} not found"),
            Key={'userId': user_id},
            UpdateExpression=update_expression,
            ConditionExpression=Attr('userId').exists(),
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values,
            ReturnValues='ALL_NEW'
        )
        return response.get('Attributes', {})

    # ---- payouts ----

    def get_total_paid(self, user_id: str) -> Decimal:
        """
        Sum of payout transactions for a user.

        Returns Decimal('0') when no transactions table is configured.
        """
        if not self.transactions_table:
            return Decimal('0')

        items = self._read_all(
            self.transactions_table,
            f"list payouts for {user_id}",
            {
                'IndexName': 'byUser',
                'KeyConditionExpression': Key('userId').eq(user_id),
                'FilterExpression': Attr('type').eq(TransactionType.PAYOUT)
            }
        )
        return sum((Decimal(str(item.get('amount', 0))) for item in items), Decimal('0'))
