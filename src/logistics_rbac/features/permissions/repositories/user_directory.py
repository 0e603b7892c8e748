"""AsyncPG user lookup over the ``rbac_users`` projection."""

from typing import Optional
import logging

from ....core.exceptions import DatabaseError
from ....database.connection import DatabaseManager
from ..entities import UserRecord


logger = logging.getLogger(__name__)


class AsyncPGUserDirectory:
    """Reads the user fields authorization needs."""

    def __init__(self, db: DatabaseManager, table: str = "rbac_users"):
        if not table.replace("_", "").replace(".", "").isalnum():
            raise ValueError(f"Invalid table name: {table}")
        self.db = db
        self.table = table

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        try:
            row = await self.db.fetchrow(
                f"SELECT id, system_role FROM {self.table} WHERE id = $1", user_id
            )
        except Exception as e:
            logger.error(f"Failed to load user {user_id}: {e}")
            raise DatabaseError(f"Failed to retrieve user: {e}")
        if row is None:
            return None
        return UserRecord(id=row["id"], system_role=row["system_role"])
