"""
Authentication utilities for extracting the caller from Cognito tokens.
"""
from typing import Optional

from .errors import NotFound, Unauthenticated
from .roles import Caller, caller_from_profile


def get_user_sub(event: dict) -> Optional[str]:
    """
    Extract user sub (unique ID) from Cognito authorizer claims.

    Args:
        event: API Gateway Lambda proxy event

    Returns:
        User sub string or None if not authenticated
    """
    try:
        return event['requestContext']['authorizer']['claims']['sub']
    except (KeyError, TypeError):
        return None


def get_profile(event: dict, store) -> dict:
    """
    Load the caller's profile document from the Users table.

    Raises:
        Unauthenticated: no Cognito identity on the request
        NotFound: identity has no profile
    """
    user_id = get_user_sub(event)
    if not user_id:
        raise Unauthenticated("Missing user identity")

    profile = store.get_user(user_id)
    if not profile:
        raise NotFound(f"No profile for user {user_id}")
    return profile


def get_caller(event: dict, store) -> Caller:
    """Resolve the authenticated caller; the profile is trusted as authoritative."""
    return caller_from_profile(get_profile(event, store))
