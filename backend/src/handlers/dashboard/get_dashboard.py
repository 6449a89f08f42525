"""
Dashboard Handler.
Headline task numbers for the caller's scope.

GET /dashboard
"""
from taskboard.auth import get_caller
from taskboard.errors import StoreUnavailable, TaskboardError
from taskboard.logging import logger, log_event
from taskboard.models import Role
from taskboard.reports import dashboard_stats
from taskboard.roles import StateHead, SuperAdmin, TeamMember, unknown_caller
from taskboard.store import get_store
from taskboard.utils import format_response
from taskboard.visibility import task_filter


def team_for(store, caller):
    """Users counted as the caller's team, or None when the role has no team."""
    if isinstance(caller, TeamMember):
        return None
    if isinstance(caller, StateHead):
        return store.list_users({'state': caller.state, 'role': Role.TEAM_MEMBER})
    if isinstance(caller, SuperAdmin):
        return [u for u in store.list_users({}) if u.get('role') in Role.STATE_SCOPED]
    raise unknown_caller(caller)


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)

        tasks = store.list_tasks(task_filter(caller))
        stats = dashboard_stats(tasks, team_for(store, caller))

        return format_response(200, {'role': caller.role, 'stats': stats})

    except StoreUnavailable as e:
        logger.error(f"Dashboard unavailable: {e.message}")
        return format_response(e.status_code, {'stats': dashboard_stats([]), 'error': e.message})
    except TaskboardError as e:
        logger.warning(f"Dashboard rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error building dashboard: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
