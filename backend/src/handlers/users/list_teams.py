"""
List Teams Handler.
Super admin only: every state's head and team members.

GET /teams
"""
from taskboard.auth import get_caller
from taskboard.errors import Forbidden, StoreUnavailable, TaskboardError
from taskboard.logging import logger, log_event
from taskboard.reports import group_teams_by_state
from taskboard.roles import SuperAdmin
from taskboard.store import get_store
from taskboard.utils import format_response
from taskboard.visibility import user_filters


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)
        if not isinstance(caller, SuperAdmin):
            raise Forbidden("Only the super admin can view all teams")

        teams = group_teams_by_state(store.list_users_any(user_filters(caller)))

        return format_response(200, {'teams': teams})

    except StoreUnavailable as e:
        logger.error(f"Team list unavailable: {e.message}")
        return format_response(e.status_code, {'teams': {}, 'error': e.message})
    except TaskboardError as e:
        logger.warning(f"List teams rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error listing teams: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
