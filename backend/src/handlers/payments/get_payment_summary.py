"""
Payment Summary Handler.
Earnings of the caller: verified rewards, payouts so far, pending payout,
bank details and task history.

GET /payments/summary
"""
from taskboard.auth import get_profile
from taskboard.errors import StoreUnavailable, TaskboardError
from taskboard.logging import logger, log_event
from taskboard.payments import summarize_payments
from taskboard.roles import caller_from_profile
from taskboard.store import get_store
from taskboard.utils import format_response
from taskboard.visibility import scoped_task_filter


def handler(event, context):
    log_event(event)

    try:
        store = get_store()
        profile = get_profile(event, store)
        caller = caller_from_profile(profile)

        tasks = store.list_tasks(scoped_task_filter(caller, {'assignedTo': caller.user_id}))
        tasks.sort(key=lambda t: t.get('createdAt', ''), reverse=True)

        summary = summarize_payments(
            tasks,
            total_paid=store.get_total_paid(caller.user_id),
            bank_info=profile.get('bankInfo')
        )

        return format_response(200, {
            'userId': caller.user_id,
            **summary,
            'tasks': tasks
        })

    except StoreUnavailable as e:
        logger.error(f"Payment summary unavailable: {e.message}")
        return format_response(e.status_code, {**summarize_payments([]), 'tasks': [], 'error': e.message})
    except TaskboardError as e:
        logger.warning(f"Payment summary rejected: {e.message}")
        return format_response(e.status_code, {'error': e.message})
    except Exception as e:
        logger.exception(f"Error building payment summary: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
