"""
Shared fixtures: a store over in-memory DynamoDB tables seeded with two
states' teams.
"""
import itertools
import json
import os
import sys

import pytest

# Add src to path for import
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
sys.path.insert(0, os.path.dirname(__file__))

from fakes import FakeDynamoResource  # noqa: E402
from taskboard.lifecycle import TaskLifecycle  # noqa: E402
from taskboard.roles import StateHead, SuperAdmin, TeamMember  # noqa: E402
from taskboard.store import DynamoStore  # noqa: E402

USERS = [
    {'userId': 'admin-1', 'name': 'Ada Admin', 'email': 'ada@example.com', 'role': 'super_admin',
     'createdAt': '2026-01-01T00:00:00+00:00'},
    {'userId': 'head-lagos', 'name': 'Sade Head', 'email': 'sade@example.com', 'role': 'state_head',
     'state': 'Lagos', 'createdAt': '2026-01-02T00:00:00+00:00'},
    {'userId': 'member-lagos', 'name': 'Musa Member', 'email': 'musa@example.com', 'role': 'team_member',
     'state': 'Lagos', 'createdAt': '2026-01-03T00:00:00+00:00',
     'bankInfo': {'accountName': 'Musa Member', 'accountNumber': '0123456789', 'bankName': 'First Bank'}},
    {'userId': 'member2-lagos', 'name': 'Bola Member', 'email': 'bola@example.com', 'role': 'team_member',
     'state': 'Lagos', 'createdAt': '2026-01-04T00:00:00+00:00'},
    {'userId': 'head-abuja', 'name': 'Emeka Head', 'email': 'emeka@example.com', 'role': 'state_head',
     'state': 'Abuja', 'createdAt': '2026-01-05T00:00:00+00:00'},
    {'userId': 'member-abuja', 'name': 'Ngozi Member', 'email': 'ngozi@example.com', 'role': 'team_member',
     'state': 'Abuja', 'createdAt': '2026-01-06T00:00:00+00:00'},
]


@pytest.fixture()
def dynamodb():
    return FakeDynamoResource({
        'tasks': 'taskId',
        'users': 'userId',
        'submissions': 'submissionId',
        'transactions': 'transactionId',
    })


@pytest.fixture()
def store(dynamodb):
    dynamodb.Table('users').seed(*USERS)
    return DynamoStore(
        dynamodb=dynamodb,
        tasks_table='tasks',
        users_table='users',
        submissions_table='submissions',
        transactions_table='transactions'
    )


@pytest.fixture()
def clock():
    """Strictly increasing timestamps so ordering is deterministic."""
    counter = itertools.count(1)
    return lambda: f"2026-10-19T10:{next(counter):02d}:00+00:00"


@pytest.fixture()
def lifecycle(store, clock):
    return TaskLifecycle(store, clock=clock)


@pytest.fixture()
def admin():
    return SuperAdmin(user_id='admin-1')


@pytest.fixture()
def head():
    return StateHead(user_id='head-lagos', state='Lagos')


@pytest.fixture()
def other_head():
    return StateHead(user_id='head-abuja', state='Abuja')


@pytest.fixture()
def member():
    return TeamMember(user_id='member-lagos', state='Lagos')


@pytest.fixture()
def member2():
    return TeamMember(user_id='member2-lagos', state='Lagos')


@pytest.fixture()
def other_member():
    return TeamMember(user_id='member-abuja', state='Abuja')


def api_event(user_id=None, body=None, path=None, query=None):
    """API Gateway proxy event with Cognito claims."""
    event = {
        'httpMethod': 'POST' if body is not None else 'GET',
        'pathParameters': path,
        'queryStringParameters': query,
        'body': json.dumps(body) if body is not None else None,
        'requestContext': {}
    }
    if user_id:
        event['requestContext'] = {'authorizer': {'claims': {'sub': user_id, 'email': f'{user_id}@example.com'}}}
    return event
