"""
Get Task Handler.
GET /tasks/{taskId}
"""
from taskboard.auth import get_caller
from taskboard.errors import TaskboardError
from taskboard.logging import logger, log_event
from taskboard.reports import due_date_label
from taskboard.store import get_store
from taskboard.utils import format_response, get_path_param
from taskboard.visibility import ensure_task_visible


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)
        task_id = get_path_param(event, 'taskId')

        task = ensure_task_visible(caller, store.get_task(task_id) if task_id else None, task_id)

        return format_response(200, {'task': {**task, 'dueDateLabel': due_date_label(task)}})

    except TaskboardError as e:
        logger.warning(f"Get task rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error getting task: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
