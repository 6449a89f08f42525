"""
Approve Task Handler.
A state head of the task's state, or the super admin, approves a submitted task.

POST /tasks/{taskId}/approve
"""
from taskboard.auth import get_caller
from taskboard.errors import TaskboardError
from taskboard.lifecycle import TaskLifecycle
from taskboard.logging import logger, log_event
from taskboard.store import get_store
from taskboard.utils import format_response, get_path_param


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)
        task_id = get_path_param(event, 'taskId')

        task = TaskLifecycle(store).approve_task(caller, task_id)

        return format_response(200, {
            'message': 'Task approved successfully',
            'task': task
        })

    except TaskboardError as e:
        logger.warning(f"Approve rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error during approve: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
