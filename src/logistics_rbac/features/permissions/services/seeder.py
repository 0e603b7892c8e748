"""Idempotent seeding of the default logistics roles and permissions."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

from ....config.constants import DEFAULT_RESOURCES, DEFAULT_ROLE_GRANTS, DEFAULT_ROLES
from ..entities import Permission, Role
from .assignment_service import AssignmentService
from .permission_catalog_service import PermissionCatalogService
from .role_hierarchy_service import RoleHierarchyService


logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    """What a seeding run created."""
    created_permissions: List[str] = field(default_factory=list)
    created_roles: List[str] = field(default_factory=list)
    grants: int = 0
    admin_users: List[str] = field(default_factory=list)


class RBACSeeder:
    """Creates the default catalog, roles and grants when missing."""

    def __init__(
        self,
        roles: RoleHierarchyService,
        catalog: PermissionCatalogService,
        assignments: AssignmentService,
        resources: Mapping[str, Sequence[str]] = DEFAULT_RESOURCES,
        role_definitions: Sequence[Tuple[str, str, Optional[str]]] = tuple(DEFAULT_ROLES),
        role_grants: Mapping[str, Mapping[str, Sequence[str]]] = DEFAULT_ROLE_GRANTS
    ):
        self.roles = roles
        self.catalog = catalog
        self.assignments = assignments
        self.resources = resources
        self.role_definitions = role_definitions
        self.role_grants = role_grants

    async def seed(self, admin_user_ids: Iterable[str] = ()) -> SeedReport:
        """Run every seeding step; safe to call repeatedly."""
        report = SeedReport()
        logger.info("Starting role and permission seeder")

        permissions = await self._seed_permissions(report)
        roles = await self._seed_roles(report)
        await self._seed_grants(roles, permissions, report)

        admin = roles.get("admin")
        if admin is not None:
            for user_id in admin_user_ids:
                await self.assignments.assign_role_to_user(user_id, admin.id)
                report.admin_users.append(user_id)

        logger.info(
            f"Seeder finished: {len(report.created_permissions)} permissions, "
            f"{len(report.created_roles)} roles, {report.grants} grants"
        )
        return report

    async def _seed_permissions(self, report: SeedReport) -> Dict[str, Permission]:
        permissions: Dict[str, Permission] = {}
        for resource, actions in self.resources.items():
            for action in actions:
                permission = await self.catalog.get_by_code(resource, action)
                if permission is None:
                    permission = await self.catalog.create(resource, action, is_system=True)
                    report.created_permissions.append(permission.code)
                permissions[permission.code] = permission
        return permissions

    async def _seed_roles(self, report: SeedReport) -> Dict[str, Role]:
        roles: Dict[str, Role] = {}
        for name, description, parent_name in self.role_definitions:
            role = await self.roles.get_by_name(name)
            if role is None:
                parent = roles.get(parent_name) if parent_name else None
                if parent_name and parent is None:
                    logger.warning(f"Parent role {parent_name} missing for {name}; creating as root")
                role = await self.roles.create(
                    name,
                    parent_id=parent.id if parent else None,
                    description=description,
                    is_system=True,
                )
                report.created_roles.append(name)
            roles[name] = role
        return roles

    async def _seed_grants(
        self,
        roles: Dict[str, Role],
        permissions: Dict[str, Permission],
        report: SeedReport
    ) -> None:
        for role_name, grants in self.role_grants.items():
            role = roles.get(role_name)
            if role is None:
                logger.warning(f"Role not found while seeding grants: {role_name}")
                continue

            if "*" in grants:
                codes = list(permissions.keys())
            else:
                codes = [f"{resource}:{action}" for resource, actions in grants.items() for action in actions]

            for code in codes:
                permission = permissions.get(code)
                if permission is None:
                    logger.warning(f"Permission not found while seeding grants: {code}")
                    continue
                await self.assignments.assign_permission_to_role(role.id, permission.id)
                report.grants += 1
