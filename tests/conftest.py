"""Pytest configuration and fixtures for logistics-rbac tests."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from logistics_rbac import RBACModule, RBACSettings, UserRecord
from logistics_rbac.features.cache import MemoryAdapter, ResolutionCache


@pytest.fixture
def settings():
    """Settings independent of the developer's environment."""
    return RBACSettings(
        _env_file=None,
        cache_backend="memory",
        cache_ttl_seconds=300,
        resolution_timeout_seconds=2.0,
    )


@pytest.fixture
def users():
    """Known users; ``root`` carries the super-admin designation."""
    return [
        UserRecord(id="root", system_role="super_admin"),
        UserRecord(id="alice"),
        UserRecord(id="bob"),
        UserRecord(id="carol"),
    ]


@pytest.fixture
def rbac(settings, users):
    """In-memory module with a memory decision cache."""
    return RBACModule.in_memory(users=users, settings=settings)


@pytest.fixture
def memory_cache():
    return MemoryAdapter(max_size=100)


@pytest.fixture
def decision_cache(memory_cache):
    return ResolutionCache(memory_cache, ttl_seconds=300, prefix="perm")


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def past(now):
    return now - timedelta(hours=1)


@pytest.fixture
def future(now):
    return now + timedelta(hours=1)


@pytest_asyncio.fixture
async def logistics_tree(rbac):
    """admin > manager > driver, plus a standalone customer role and a small catalog.

    Grants:
        admin:    shipments:delete
        manager:  shipments:read, reports:generate
        driver:   deliveries:complete
        customer: shipments:track
    """
    roles = rbac.roles
    admin = await roles.create("admin")
    manager = await roles.create("manager", parent_id=admin.id)
    driver = await roles.create("driver", parent_id=manager.id)
    customer = await roles.create("customer")

    catalog = rbac.catalog
    perms = {
        "shipments:read": await catalog.create("shipments", "read"),
        "shipments:delete": await catalog.create("shipments", "delete"),
        "shipments:track": await catalog.create("shipments", "track"),
        "reports:generate": await catalog.create("reports", "generate"),
        "deliveries:complete": await catalog.create("deliveries", "complete"),
    }

    assign = rbac.assignments.assign_permission_to_role
    await assign(admin.id, perms["shipments:delete"].id)
    await assign(manager.id, perms["shipments:read"].id)
    await assign(manager.id, perms["reports:generate"].id)
    await assign(driver.id, perms["deliveries:complete"].id)
    await assign(customer.id, perms["shipments:track"].id)

    return {
        "roles": {"admin": admin, "manager": manager, "driver": driver, "customer": customer},
        "permissions": perms,
    }
