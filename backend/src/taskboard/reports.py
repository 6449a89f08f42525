"""
Dashboard and team reports built from already-scoped task and user lists.
"""
from typing import Any, Dict, Iterable, List, Optional

from .models import DUE_DATE_NOT_SET, Role, TaskStatus
from .payments import total_earned


def due_date_label(task: Dict[str, Any]) -> str:
    """Due date for display; tasks without one show 'Not set'."""
    return task.get('dueDate') or DUE_DATE_NOT_SET


def status_counts(tasks: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """Number of tasks per status, plus 'all'."""
    counts = {status: 0 for status in TaskStatus.ALL}
    total = 0
    for task in tasks:
        total += 1
        status = task.get('status')
        if status in counts:
            counts[status] += 1
    counts['all'] = total
    return counts


def dashboard_stats(
    tasks: Iterable[Dict[str, Any]],
    team_members: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """
    Headline numbers for the dashboard.

    Completed means verified; pending means assigned or submitted.
    """
    tasks = list(tasks)
    return {
        'totalTasks': len(tasks),
        'completedTasks': len([t for t in tasks if t.get('status') == TaskStatus.VERIFIED]),
        'pendingTasks': len([t for t in tasks if t.get('status') in TaskStatus.PENDING]),
        'totalEarned': total_earned(tasks),
        'teamMembers': len(team_members) if team_members is not None else 0
    }


def member_stats(members: Iterable[Dict[str, Any]], tasks: Iterable[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Per team member totals, keyed by userId."""
    by_member = {}
    for member in members:
        by_member[member['userId']] = []
    for task in tasks:
        assignee = task.get('assignedTo')
        if assignee in by_member:
            by_member[assignee].append(task)

    return {
        user_id: {
            'totalTasks': len(member_tasks),
            'completedTasks': len([t for t in member_tasks if t.get('status') == TaskStatus.VERIFIED]),
            'totalEarned': total_earned(member_tasks)
        }
        for user_id, member_tasks in by_member.items()
    }


def group_teams_by_state(users: Iterable[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Group users into per-state teams.

    Users without a state (the super admin) are skipped. If a state has more
    than one state head, the first one seen is reported.
    """
    teams = {}
    for user in users:
        state = user.get('state')
        if not state:
            continue
        team = teams.setdefault(state, {'stateHead': None, 'members': []})
        if user.get('role') == Role.STATE_HEAD:
            if team['stateHead'] is None:
                team['stateHead'] = user
        elif user.get('role') == Role.TEAM_MEMBER:
            team['members'].append(user)
    return teams
