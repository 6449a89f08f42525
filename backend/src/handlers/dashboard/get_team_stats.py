"""
Team Stats Handler.
State head only: per team member task totals and earnings.

GET /team-stats
"""
from taskboard.auth import get_caller
from taskboard.errors import Forbidden, StoreUnavailable, TaskboardError
from taskboard.logging import logger, log_event
from taskboard.models import Role
from taskboard.reports import member_stats
from taskboard.roles import StateHead
from taskboard.store import get_store
from taskboard.utils import format_response
from taskboard.visibility import task_filter


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)
        if not isinstance(caller, StateHead):
            raise Forbidden("Only state heads can view team stats")

        members = store.list_users({'state': caller.state, 'role': Role.TEAM_MEMBER})
        stats = member_stats(members, store.list_tasks(task_filter(caller)))

        totals = {
            'totalTasks': sum(s['totalTasks'] for s in stats.values()),
            'completedTasks': sum(s['completedTasks'] for s in stats.values())
        }

        return format_response(200, {
            'state': caller.state,
            'members': members,
            'memberStats': stats,
            'totals': totals
        })

    except StoreUnavailable as e:
        logger.error(f"Team stats unavailable: {e.message}")
        return format_response(e.status_code, {
            'members': [],
            'memberStats': {},
            'totals': {'totalTasks': 0, 'completedTasks': 0},
            'error': e.message
        })
    except TaskboardError as e:
        logger.warning(f"Team stats rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error building team stats: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
