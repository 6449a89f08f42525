"""
Profile settings: a user edits their own name, email and bank details.
"""
from typing import Any, Dict

from .errors import InvalidInput
from .logging import logger
from .models import BANK_INFO_FIELDS
from .roles import Caller, describe
from .utils import is_valid_email

EDITABLE_FIELDS = ('name', 'email', 'bankInfo')


def validate_profile_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check a settings form payload.

    Role and state are not editable; any key outside name, email and
    bankInfo is rejected.

    Returns:
        The cleaned fields to write
    """
    if not changes:
        raise InvalidInput("No profile fields provided")

    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise InvalidInput(f"Fields not editable: {', '.join(sorted(unknown))}")

    fields = {}

    if 'name' in changes:
        name = changes['name']
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput("Name cannot be empty")
        fields['name'] = name.strip()

    if 'email' in changes:
        email = changes['email'].strip() if isinstance(changes['email'], str) else changes['email']
        if not is_valid_email(email):
            raise InvalidInput("Invalid email format")
        fields['email'] = email

    if 'bankInfo' in changes:
        bank_info = changes['bankInfo']
        if not isinstance(bank_info, dict):
            raise InvalidInput("bankInfo must be an object")
        unknown_bank = set(bank_info) - set(BANK_INFO_FIELDS)
        if unknown_bank:
            raise InvalidInput(f"Unknown bankInfo fields: {', '.join(sorted(unknown_bank))}")
        cleaned = {}
        for key in BANK_INFO_FIELDS:
            value = bank_info.get(key, '')
            if value is None:
                value = ''
            if not isinstance(value, str):
                raise InvalidInput(f"bankInfo.{key} must be text")
            cleaned[key] = value.strip()
        if cleaned['accountNumber'] and not cleaned['accountNumber'].isdigit():
            raise InvalidInput("Account number must contain digits only")
        fields['bankInfo'] = cleaned

    return fields


def update_profile(store, caller: Caller, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and persist the caller's own profile changes; returns the updated user."""
    fields = validate_profile_changes(changes)
    user = store.update_user(caller.user_id, fields)
    logger.info(f"Profile updated by {describe(caller)}: {', '.join(sorted(fields))}")
    return user
