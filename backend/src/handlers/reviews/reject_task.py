"""
Reject Task Handler.
Sends a submitted task back to 'assigned' so the assignee can resubmit.
The submission is kept and marked 'rejected' with the reason.

POST /tasks/{taskId}/reject
Body: { "reason": "Photo does not show the finished work" }
"""
from taskboard.auth import get_caller
from taskboard.errors import TaskboardError
from taskboard.lifecycle import TaskLifecycle
from taskboard.logging import logger, log_event
from taskboard.store import get_store
from taskboard.utils import format_response, get_path_param, parse_body


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)
        task_id = get_path_param(event, 'taskId')
        body = parse_body(event)

        task = TaskLifecycle(store).reject_task(caller, task_id, reason=body.get('reason'))

        return format_response(200, {
            'message': 'Submission rejected, task reopened',
            'task': task
        })

    except TaskboardError as e:
        logger.warning(f"Rejection refused: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error rejecting task: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
