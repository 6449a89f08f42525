"""
Role-scoped visibility rules for tasks and users.

The caller's scope is expressed once, as store filters. The same filters are
handed to DynamoStore (server-side query) and evaluated by matches_filter
(client-side post-filter), so both paths select the same rows.

    team_member  tasks: state == own state AND assignedTo == self
                 users: self
    state_head   tasks: state == own state
                 users: team members of own state, plus self
    super_admin  tasks: all
                 users: all
"""
from typing import Any, Dict, Iterable, List, Optional

from .errors import InvalidInput, NotFound
from .models import Role
from .roles import Caller, StateHead, SuperAdmin, TeamMember, unknown_caller

TASK_FILTER_KEYS = ('state', 'assignedTo', 'assignedBy', 'status')
USER_FILTER_KEYS = ('userId', 'state', 'role')


def task_filter(caller: Caller) -> Dict[str, Any]:
    """Store filter selecting exactly the tasks the caller may see."""
    if isinstance(caller, SuperAdmin):
        return {}
    if isinstance(caller, StateHead):
        return {'state': caller.state}
    if isinstance(caller, TeamMember):
        return {'state': caller.state, 'assignedTo': caller.user_id}
    raise unknown_caller(caller)


def user_filters(caller: Caller) -> List[Dict[str, Any]]:
    """
    Store filters whose union is the set of users the caller may see.

    An empty filter matches everything, so [{}] means "all users".
    """
    if isinstance(caller, SuperAdmin):
        return [{}]
    if isinstance(caller, StateHead):
        return [
            {'state': caller.state, 'role': Role.TEAM_MEMBER},
            {'userId': caller.user_id},
        ]
    if isinstance(caller, TeamMember):
        return [{'userId': caller.user_id}]
    raise unknown_caller(caller)


def matches_filter(item: Dict[str, Any], item_filter: Dict[str, Any]) -> bool:
    """
    Evaluate a store filter against a single document.

    Scalar values mean equality; list/tuple/set values mean membership.
    """
    for key, expected in item_filter.items():
        value = item.get(key)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def narrow(scope: Dict[str, Any], requested: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Intersect the caller's scope with a filter supplied by the request.

    Returns None when the intersection is provably empty (the request asks
    for a value the scope excludes). The scope always wins: a request can
    narrow what the caller sees but never widen it.
    """
    merged = dict(scope)
    for key, wanted in (requested or {}).items():
        if wanted is None or wanted == '' or wanted == []:
            continue
        if key not in merged:
            merged[key] = wanted
            continue
        allowed = merged[key]
        allowed_set = set(allowed) if isinstance(allowed, (list, tuple, set, frozenset)) else {allowed}
        wanted_set = set(wanted) if isinstance(wanted, (list, tuple, set, frozenset)) else {wanted}
        common = allowed_set & wanted_set
        if not common:
            return None
        merged[key] = next(iter(common)) if len(common) == 1 else sorted(common)
    return merged


def scoped_task_filter(caller: Caller, requested: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    """Caller scope narrowed by request parameters (state, assignedTo, assignedBy, status)."""
    if requested:
        unknown = set(requested) - set(TASK_FILTER_KEYS)
        if unknown:
            raise InvalidInput(f"Unsupported task filter: {', '.join(sorted(unknown))}")
    return narrow(task_filter(caller), requested)


def can_view_task(caller: Caller, task: Dict[str, Any]) -> bool:
    return matches_filter(task, task_filter(caller))


def can_view_user(caller: Caller, user: Dict[str, Any]) -> bool:
    return any(matches_filter(user, f) for f in user_filters(caller))


def filter_tasks(caller: Caller, tasks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Client-side post-filter: keep only tasks visible to the caller."""
    return [task for task in tasks if can_view_task(caller, task)]


def filter_users(caller: Caller, users: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Client-side post-filter: keep only users visible to the caller."""
    return [user for user in users if can_view_user(caller, user)]


def ensure_task_visible(caller: Caller, task: Optional[Dict[str, Any]], task_id: str) -> Dict[str, Any]:
    """Return the task, or NotFound when it is missing or outside the caller's scope."""
    if not task or not can_view_task(caller, task):
        raise NotFound(f"Task {task_id} not found")
    return task
