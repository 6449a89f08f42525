"""
Caller identities.

Every lifecycle and visibility call receives the caller explicitly as one of
three variants. Each variant carries only what its rules need: a super admin
has no state, state heads and team members always have one.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .errors import InvalidInput
from .models import Role


@dataclass(frozen=True)
class SuperAdmin:
    user_id: str

    role = Role.SUPER_ADMIN

    @property
    def state(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class StateHead:
    user_id: str
    state: str

    role = Role.STATE_HEAD


@dataclass(frozen=True)
class TeamMember:
    user_id: str
    state: str

    role = Role.TEAM_MEMBER


Caller = Union[SuperAdmin, StateHead, TeamMember]


def unknown_caller(caller: Any) -> InvalidInput:
    """Error for a value outside the closed set of caller variants."""
    return InvalidInput(f"Unknown caller type: {type(caller).__name__}")


def caller_from_profile(profile: Dict[str, Any]) -> Caller:
    """
    Build a caller from a user profile document.

    Args:
        profile: User item with at least 'userId' and 'role'

    Returns:
        SuperAdmin, StateHead or TeamMember

    Raises:
        InvalidInput: unknown role, or a state-scoped role without a state
    """
    user_id = profile.get('userId')
    role = profile.get('role')
    state = profile.get('state') or None

    if not user_id:
        raise InvalidInput("Profile has no userId")

    if role == Role.SUPER_ADMIN:
        return SuperAdmin(user_id=user_id)

    if role in Role.STATE_SCOPED and not state:
        raise InvalidInput(f"A {role} profile must have a state")

    if role == Role.STATE_HEAD:
        return StateHead(user_id=user_id, state=state)
    if role == Role.TEAM_MEMBER:
        return TeamMember(user_id=user_id, state=state)

    raise InvalidInput(f"Unknown role: {role!r}")


def describe(caller: Caller) -> str:
    """Short caller label for log lines."""
    if isinstance(caller, SuperAdmin):
        return f"super_admin:{caller.user_id}"
    if isinstance(caller, (StateHead, TeamMember)):
        return f"{caller.role}:{caller.user_id}@{caller.state}"
    raise unknown_caller(caller)
