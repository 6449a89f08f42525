"""
Submit Task Handler.
The assignee submits proof of completion; the task moves to 'submitted'.

POST /tasks/{taskId}/submit
Body: { "proofText": "...", "proofFiles": ["proofs/<taskId>/photo.jpg"] }
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

        submission = TaskLifecycle(store).submit_task(
            caller,
            task_id,
            proof_text=body.get('proofText', ''),
            proof_files=body.get('proofFiles')
        )

        return format_response(201, {
            'message': 'Task submitted successfully',
            'submissionId': submission['submissionId'],
            'submission': submission
        })

    except TaskboardError as e:
        logger.warning(f"Submission rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error submitting task: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
