"""
Create Task Handler.
A state head assigns a task to a team member of their state.

POST /tasks
Body: { "title": "...", "description": "...", "assignedTo": "<userId>",
        "reward": 5000, "dueDate": "2026-11-30" }
"""
from taskboard.auth import get_caller
from taskboard.errors import TaskboardError
from taskboard.lifecycle import TaskLifecycle
from taskboard.logging import logger, log_event
from taskboard.store import get_store
from taskboard.utils import format_response, parse_body


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)
        body = parse_body(event)

        task = TaskLifecycle(store).create_task(
            caller,
            title=body.get('title'),
            description=body.get('description', ''),
            assigned_to=body.get('assignedTo'),
            reward=body.get('reward'),
            due_date=body.get('dueDate')
        )

        return format_response(201, {
            'message': 'Task assigned successfully',
            'task': task
        })

    except TaskboardError as e:
        logger.warning(f"Create task rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error creating task: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
