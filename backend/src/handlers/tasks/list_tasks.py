"""
List Tasks Handler.
Returns the tasks visible to the caller, newest first.

GET /tasks?status=submitted,approved&assignedBy=<userId>
"""
from taskboard.auth import get_caller
from taskboard.errors import StoreUnavailable, TaskboardError
from taskboard.logging import logger, log_event
from taskboard.reports import due_date_label, status_counts
from taskboard.store import get_store
from taskboard.utils import format_response, get_list_param, get_query_param
from taskboard.visibility import scoped_task_filter


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)

        requested = {
            'status': get_list_param(event, 'status'),
            'assignedTo': get_query_param(event, 'assignedTo'),
            'assignedBy': get_query_param(event, 'assignedBy'),
            'state': get_query_param(event, 'state')
        }
        task_filter = scoped_task_filter(caller, requested)

        tasks = store.list_tasks(task_filter) if task_filter is not None else []
        tasks.sort(key=lambda t: t.get('createdAt', ''), reverse=True)

        return format_response(200, {
            'tasks': [{**task, 'dueDateLabel': due_date_label(task)} for task in tasks],
            'counts': status_counts(tasks)
        })

    except StoreUnavailable as e:
        logger.error(f"Task list unavailable: {e.message}")
        return format_response(e.status_code, {'tasks': [], 'counts': status_counts([]), 'error': e.message})
    except TaskboardError as e:
        logger.warning(f"List tasks rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error listing tasks: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
