"""
Tests for the API Gateway Lambda handlers.
"""
import json
from unittest.mock import patch

import pytest

from conftest import api_event


def invoke(module_path, store, event):
    """Run a handler with its store replaced by the fixture store."""
    module = __import__(module_path, fromlist=['handler'])
    with patch(f'{module_path}.get_store', return_value=store):
        response = module.handler(event, None)
    return response['statusCode'], json.loads(response['body'])


def create(store, **overrides):
    body = {
        'title': 'Distribute flyers',
        'description': 'Ikeja market',
        'assignedTo': 'member-lagos',
        'reward': 5000,
        'dueDate': '2026-11-30'
    }
    body.update(overrides)
    return invoke('handlers.tasks.create_task', store, api_event('head-lagos', body=body))


class TestTaskHandlers:
    """Create, list and fetch tasks."""

    def test_create_task(self, store):
        """State head assigns a task."""
        status, body = create(store)

        assert status == 201
        assert body['task']['status'] == 'assigned'
        assert body['task']['reward'] == 5000

    def test_create_requires_identity(self, store):
        """No Cognito claims means 401."""
        status, body = invoke('handlers.tasks.create_task', store, api_event(body={'title': 'x'}))
        assert status == 401

    def test_create_by_member_is_conflict(self, store):
        status, _ = invoke(
            'handlers.tasks.create_task', store,
            api_event('member-lagos', body={'title': 'x', 'assignedTo': 'member2-lagos', 'reward': 1})
        )
        assert status == 409

    def test_negative_reward_is_bad_request(self, store):
        status, body = create(store, reward=-1)
        assert status == 400
        assert 'negative' in body['error']

    def test_invalid_json(self, store):
        event = api_event('head-lagos', body={})
        event['body'] = '{not json'
        status, body = invoke('handlers.tasks.create_task', store, event)
        assert status == 400

    def test_list_tasks_scoped_to_member(self, store):
        """Members only see their own tasks; missing due date shows as 'Not set'."""
        create(store)
        create(store, assignedTo='member2-lagos', dueDate=None)

        status, body = invoke('handlers.tasks.list_tasks', store, api_event('member2-lagos'))

        assert status == 200
        assert len(body['tasks']) == 1
        assert body['tasks'][0]['dueDateLabel'] == 'Not set'
        assert body['counts']['all'] == 1

    def test_list_tasks_status_filter(self, store):
        create(store)
        status, body = invoke(
            'handlers.tasks.list_tasks', store,
            api_event('head-lagos', query={'status': 'submitted,approved'})
        )
        assert status == 200
        assert body['tasks'] == []

    def test_list_tasks_outside_scope_is_empty(self, store):
        create(store)
        status, body = invoke('handlers.tasks.list_tasks', store, api_event('head-abuja', query={'state': 'Lagos'}))
        assert status == 200
        assert body['tasks'] == []

    def test_list_tasks_store_unavailable(self, store, dynamodb):
        """A failing store yields 503 with an empty list, never a partial one."""
        dynamodb.Table('tasks').fail_with = 'InternalServerError'

        status, body = invoke('handlers.tasks.list_tasks', store, api_event('admin-1'))

        assert status == 503
        assert body['tasks'] == []
        assert 'error' in body

    def test_get_task_hidden_from_other_state(self, store):
        _, created = create(store)
        task_id = created['task']['taskId']

        status, _ = invoke('handlers.tasks.get_task', store, api_event('member-abuja', path={'taskId': task_id}))
        assert status == 404

        status, body = invoke('handlers.tasks.get_task', store, api_event('member-lagos', path={'taskId': task_id}))
        assert status == 200
        assert body['task']['taskId'] == task_id


class TestLifecycleHandlers:
    """Submit, approve, reject and verify over HTTP."""

    def test_full_flow(self, store):
        _, created = create(store)
        task_id = created['task']['taskId']
        path = {'taskId': task_id}

        status, body = invoke(
            'handlers.submissions.submit_task', store,
            api_event('member-lagos', body={'proofText': 'Done', 'proofFiles': ['proofs/x/a.jpg']}, path=path)
        )
        assert status == 201

        status, body = invoke('handlers.reviews.approve_task', store, api_event('head-lagos', body={}, path=path))
        assert status == 200
        assert body['task']['status'] == 'approved'

        status, body = invoke('handlers.reviews.verify_task', store, api_event('admin-1', body={}, path=path))
        assert status == 200
        assert body['task']['status'] == 'verified'

        status, body = invoke('handlers.payments.get_payment_summary', store, api_event('member-lagos'))
        assert status == 200
        assert body['totalEarned'] == 5000
        assert body['currency'] == 'NGN'
        assert body['bankInfo']['bankName'] == 'First Bank'

    def test_reject_then_list_submissions(self, store):
        _, created = create(store)
        path = {'taskId': created['task']['taskId']}
        invoke('handlers.submissions.submit_task', store, api_event('member-lagos', body={'proofText': 'Done'}, path=path))

        status, body = invoke(
            'handlers.reviews.reject_task', store,
            api_event('head-lagos', body={'reason': 'Blurry'}, path=path)
        )
        assert status == 200
        assert body['task']['status'] == 'assigned'

        status, body = invoke('handlers.submissions.list_submissions', store, api_event('head-lagos', path=path))
        assert status == 200
        assert [s['status'] for s in body['submissions']] == ['rejected']

    def test_invalid_transition_is_conflict(self, store):
        _, created = create(store)
        path = {'taskId': created['task']['taskId']}

        status, body = invoke('handlers.reviews.verify_task', store, api_event('admin-1', body={}, path=path))

        assert status == 409
        assert 'error' in body

    def test_unknown_task(self, store):
        status, _ = invoke('handlers.reviews.approve_task', store, api_event('head-lagos', body={}, path={'taskId': 'nope'}))
        assert status == 404


class TestUserHandlers:
    """Users, teams, dashboard and settings."""

    def test_list_users_for_state_head(self, store):
        status, body = invoke('handlers.users.list_users', store, api_event('head-lagos'))

        assert status == 200
        assert sorted(u['userId'] for u in body['users']) == ['head-lagos', 'member-lagos', 'member2-lagos']

    def test_teams_forbidden_for_state_head(self, store):
        status, _ = invoke('handlers.users.list_teams', store, api_event('head-lagos'))
        assert status == 403

    def test_teams_for_admin(self, store):
        status, body = invoke('handlers.users.list_teams', store, api_event('admin-1'))

        assert status == 200
        assert set(body['teams']) == {'Lagos', 'Abuja'}

    def test_team_stats_for_state_head(self, store):
        create(store)
        status, body = invoke('handlers.dashboard.get_team_stats', store, api_event('head-lagos'))
        assert status == 200
        assert body['memberStats']['member-lagos']['totalTasks'] == 1
        assert body['totals'] == {'totalTasks': 1, 'completedTasks': 0}

    def test_team_stats_forbidden_for_member(self, store):
        status, _ = invoke('handlers.dashboard.get_team_stats', store, api_event('member-lagos'))
        assert status == 403

    @pytest.mark.parametrize('user_id, team_size', [('admin-1', 5), ('head-lagos', 2), ('member-lagos', 0)])
    def test_dashboard(self, store, user_id, team_size):
        create(store)
        status, body = invoke('handlers.dashboard.get_dashboard', store, api_event(user_id))

        assert status == 200
        assert body['stats']['teamMembers'] == team_size

    def test_update_profile(self, store):
        status, body = invoke(
            'handlers.users.update_profile', store,
            api_event('member-lagos', body={'name': 'Musa M.', 'email': 'musa.m@example.com'})
        )
        assert status == 200
        assert body['user']['email'] == 'musa.m@example.com'

    def test_update_profile_cannot_change_role(self, store):
        status, _ = invoke('handlers.users.update_profile', store, api_event('member-lagos', body={'role': 'super_admin'}))
        assert status == 400


class TestStoreUnavailableReads:
    """Read endpoints answer 503 with an empty result and an error banner."""

    def test_dashboard(self, store, dynamodb):
        dynamodb.Table('tasks').fail_with = 'ProvisionedThroughputExceededException'

        status, body = invoke('handlers.dashboard.get_dashboard', store, api_event('head-lagos'))

        assert status == 503
        assert body['stats'] == {
            'totalTasks': 0, 'completedTasks': 0, 'pendingTasks': 0, 'totalEarned': 0, 'teamMembers': 0
        }
        assert 'error' in body

    def test_payment_summary(self, store, dynamodb):
        dynamodb.Table('tasks').fail_with = 'ProvisionedThroughputExceededException'

        status, body = invoke('handlers.payments.get_payment_summary', store, api_event('member-lagos'))

        assert status == 503
        assert body['tasks'] == []
        assert body['totalEarned'] == 0
        assert body['pendingPayout'] == 0
        assert 'error' in body

    def test_team_stats(self, store, dynamodb):
        dynamodb.Table('tasks').fail_with = 'ProvisionedThroughputExceededException'

        status, body = invoke('handlers.dashboard.get_team_stats', store, api_event('head-lagos'))

        assert status == 503
        assert body['members'] == []
        assert body['memberStats'] == {}
        assert body['totals'] == {'totalTasks': 0, 'completedTasks': 0}
        assert 'error' in body

    def test_teams(self, store, dynamodb):
        dynamodb.Table('users').fail_with = 'InternalServerError'

        status, body = invoke('handlers.users.list_teams', store, api_event('admin-1'))

        assert status == 503
        assert body['teams'] == {}
        assert 'error' in body


class TestRequestHelpers:
    """Response formatting, body parsing and request logging."""

    def test_format_response_encodes_decimals(self):
        from decimal import Decimal
        from taskboard.utils import format_response

        response = format_response(200, {'reward': Decimal('5000'), 'fee': Decimal('2.5')})

        assert json.loads(response['body']) == {'reward': 5000, 'fee': 2.5}
        assert response['headers']['Access-Control-Allow-Origin'] == '*'

    @pytest.mark.parametrize('raw', ['[1, 2]', '"text"'])
    def test_parse_body_requires_object(self, raw):
        from taskboard.errors import InvalidInput
        from taskboard.utils import parse_body

        with pytest.raises(InvalidInput):
            parse_body({'body': raw})

    def test_list_param(self):
        from taskboard.utils import get_list_param

        assert get_list_param({'queryStringParameters': {'status': 'submitted, approved'}}, 'status') == [
            'submitted', 'approved'
        ]
        assert get_list_param({'queryStringParameters': {'status': 'all'}}, 'status') == []
        assert get_list_param({'queryStringParameters': None}, 'status') == []

    def test_event_summary_drops_body_and_headers(self):
        from taskboard.logging import summarize_event

        event = api_event('member-lagos', body={'bankInfo': {'accountNumber': '0123'}}, path={'taskId': 't1'})
        event['headers'] = {'Authorization': 'Bearer secret'}

        summary = summarize_event(event)

        assert summary == {'httpMethod': 'POST', 'pathParameters': {'taskId': 't1'}, 'sub': 'member-lagos'}
