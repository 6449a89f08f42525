"""
Verify Task Handler.
The super admin verifies a submitted or approved task; verified tasks are payable.

POST /tasks/{taskId}/verify
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

        task = TaskLifecycle(store).verify_task(caller, task_id)

        return format_response(200, {
            'message': 'Task verified successfully',
            'task': task
        })

    except TaskboardError as e:
        logger.warning(f"Verify rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error during verify: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
