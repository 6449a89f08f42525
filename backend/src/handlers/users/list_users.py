"""
List Users Handler.
Team members see themselves, state heads see their state's team members and
themselves, the super admin sees everyone.

GET /users?role=team_member
"""
from taskboard.auth import get_caller
from taskboard.errors import StoreUnavailable, TaskboardError
from taskboard.logging import logger, log_event
from taskboard.store import get_store
from taskboard.utils import format_response, get_query_param
from taskboard.visibility import narrow, user_filters


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)

        requested = {
            'role': get_query_param(event, 'role'),
            'state': get_query_param(event, 'state')
        }
        filters = [f for f in (narrow(scope, requested) for scope in user_filters(caller)) if f is not None]

        users = store.list_users_any(filters)
        users.sort(key=lambda u: (u.get('state') or '', u.get('name') or ''))

        return format_response(200, {'users': users})

    except StoreUnavailable as e:
        logger.error(f"User list unavailable: {e.message}")
        return format_response(e.status_code, {'users': [], 'error': e.message})
    except TaskboardError as e:
        logger.warning(f"List users rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error listing users: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
