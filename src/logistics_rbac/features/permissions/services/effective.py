"""Nearest-wins collapse of role-permission assignments along a role chain."""

from typing import Dict, Iterable, List, Sequence, Tuple

from ..entities import RolePermission


def collapse_nearest(
    chain_ids: Sequence[str],
    assignments: Iterable[RolePermission],
) -> Dict[str, Tuple[RolePermission, int]]:
    """Pick, per permission, the assignment held by the nearest role in the chain.

    Args:
        chain_ids: role id followed by its ancestors, nearest first
        assignments: direct assignments of any role in the chain

    Returns:
        permission_id -> (decisive assignment, distance from the first role)
    """
    distance = {role_id: index for index, role_id in enumerate(chain_ids)}
    decisive: Dict[str, Tuple[RolePermission, int]] = {}
    for assignment in assignments:
        depth = distance.get(assignment.role_id)
        if depth is None:
            continue
        current = decisive.get(assignment.permission_id)
        if current is None or depth < current[1]:
            decisive[assignment.permission_id] = (assignment, depth)
    return decisive


def granted_permission_ids(decisive: Dict[str, Tuple[RolePermission, int]]) -> List[str]:
    return [pid for pid, (assignment, _) in decisive.items() if assignment.granted]
