"""
Common utility functions for Lambda handlers.
"""
import json
import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .errors import InvalidInput

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


class DecimalEncoder(json.JSONEncoder):
    """Encodes DynamoDB Decimals (rewards, payouts) and string sets."""

    def default(self, o):
        if isinstance(o, Decimal):
            # 5000 stays 5000, 2500.5 becomes a float
            if o % 1 == 0:
                return int(o)
            return float(o)
        if isinstance(o, set):
            return sorted(o)
        return super().default(o)


CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Credentials': True,
    'Access-Control-Allow-Methods': 'GET,POST,PUT,OPTIONS',
    'Content-Type': 'application/json'
}


def format_response(status_code: int, body: Any, headers: Dict[str, str] = None) -> Dict[str, Any]:
    """
    API Gateway proxy response; Decimals from DynamoDB are encoded as numbers.

    Args:
        status_code: HTTP status, usually TaskboardError.status_code on failure
        body: JSON-serializable payload
        headers: Extra headers merged over the CORS defaults
    """
    return {
        'statusCode': status_code,
        'headers': {**CORS_HEADERS, **(headers or {})},
        'body': json.dumps(body, cls=DecimalEncoder)
    }


def parse_body(event: dict) -> dict:
    """
    Parse the JSON body of an API Gateway event.

    Raises:
        InvalidInput: body is not valid JSON or not an object
    """
    body = event.get('body')
    if body is None or body == '':
        return {}
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            raise InvalidInput('Invalid JSON')
    if not isinstance(body, dict):
        raise InvalidInput('Request body must be a JSON object')
    return body


def get_path_param(event: dict, param_name: str) -> Optional[str]:
    """Extract path parameter from event."""
    try:
        return event['pathParameters'][param_name]
    except (KeyError, TypeError):
        return None


def get_query_param(event: dict, param_name: str, default: str = None) -> Optional[str]:
    """Extract query string parameter from event."""
    params = event.get('queryStringParameters') or {}
    return params.get(param_name, default)


def get_list_param(event: dict, param_name: str) -> List[str]:
    """Comma-separated query parameter as a list; 'all' or missing means no filter."""
    raw = get_query_param(event, param_name)
    if not raw or raw == 'all':
        return []
    return [part.strip() for part in raw.split(',') if part.strip()]


def utc_now() -> str:
    """Current time as a timezone-aware ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def is_valid_email(email: str) -> bool:
    """Validate email format using regex."""
    return isinstance(email, str) and re.match(EMAIL_PATTERN, email) is not None
