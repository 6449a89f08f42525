"""
Update Profile Handler.
PUT /me
Body: { "name": "...", "email": "...",
        "bankInfo": { "accountName": "...", "accountNumber": "...", "bankName": "..." } }
"""
from taskboard.auth import get_caller
from taskboard.errors import TaskboardError
from taskboard.logging import logger, log_event
from taskboard.profiles import update_profile
from taskboard.store import get_store
from taskboard.utils import format_response, parse_body


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        caller = get_caller(event, store)
        body = parse_body(event)

        user = update_profile(store, caller, body)

        return format_response(200, {'message': 'Profile updated!', 'user': user})

    except TaskboardError as e:
        logger.warning(f"Profile update rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error updating profile: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
