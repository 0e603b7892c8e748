"""Database access for the asyncpg repositories."""

from pathlib import Path

from .connection import DatabaseManager

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


async def apply_schema(db: DatabaseManager) -> None:
    """Create the RBAC tables if they do not exist."""
    await db.execute(SCHEMA_PATH.read_text(encoding="utf-8"))


__all__ = ["DatabaseManager", "SCHEMA_PATH", "apply_schema"]
