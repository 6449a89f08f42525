"""
List Submissions Handler.
Returns every submission for a task the caller can see, with proof files
as presigned download URLs.

GET /tasks/{taskId}/submissions
"""
from taskboard.auth import get_caller
from taskboard.errors import StoreUnavailable, TaskboardError
from taskboard.logging import logger, log_event
from taskboard.s3_utils import sign_proof_files
from taskboard.store import get_store
from taskboard.utils import format_response, get_path_param
from taskboard.visibility import ensure_task_visible


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)
        task_id = get_path_param(event, 'taskId')

        ensure_task_visible(caller, store.get_task(task_id) if task_id else None, task_id)
        submissions = [sign_proof_files(s) for s in store.list_submissions(task_id)]

        return format_response(200, {'taskId': task_id, 'submissions': submissions})

    except StoreUnavailable as e:
        logger.error(f"Submission list unavailable: {e.message}")
        return format_response(e.status_code, {'submissions': [], 'error': e.message})
    except TaskboardError as e:
        logger.warning(f"List submissions rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error listing submissions: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
