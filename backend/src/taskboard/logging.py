"""
Logging for the task rewards Lambdas.

One 'taskboard' logger, level from LOG_LEVEL. Request bodies and headers
(bank details, tokens) are never logged.
"""
import json
import logging

from .config import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Request fields worth a log line; everything else is noise or sensitive
EVENT_FIELDS = ('httpMethod', 'resource', 'path', 'pathParameters', 'queryStringParameters')

logger = logging.getLogger('taskboard')
logger.setLevel(config.LOG_LEVEL)

# Lambda reuses the process between invocations
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)


def summarize_event(event: dict) -> dict:
    """Route, parameters and caller sub of an API Gateway event."""
    summary = {k: event.get(k) for k in EVENT_FIELDS if event.get(k) is not None}
    try:
        summary['sub'] = event['requestContext']['authorizer']['claims']['sub']
    except (KeyError, TypeError):
        pass
    return summary


def log_event(event: dict) -> None:
    """Log the incoming request without its body or headers."""
    try:
        logger.info(f"Request: {json.dumps(summarize_event(event), default=str, sort_keys=True)}")
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Could not log event: {e}")
