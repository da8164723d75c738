"""Dialect-aware SQL helpers: embedding upsert."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession


def get_dialect(engine: Engine | AsyncEngine) -> str:
    """Return 'sqlite', 'postgresql', or the raw dialect name."""
    # AsyncEngine wraps a sync engine
    sync_engine = getattr(engine, "sync_engine", engine)
    name = sync_engine.dialect.name
    if name in ("postgresql", "postgres"):
        return "postgresql"
    return name


async def upsert(
    session: AsyncSession,
    dialect: str,
    model: type,
    values: dict[str, Any],
    conflict_keys: list[str],
) -> int:
    """INSERT ... ON CONFLICT DO UPDATE into *model*'s table. Returns rowcount.

    Supported on SQLite and PostgreSQL.
    """
    if dialect == "postgresql":
        from sqlalchemy.dialects import postgresql as dialect_module
    elif dialect == "sqlite":
        from sqlalchemy.dialects import sqlite as dialect_module
    else:
        msg = f"Upsert is not supported for dialect {dialect!r}"
        raise ValueError(msg)

    stmt = dialect_module.insert(model).values(**values)
    update_cols = {k: v for k, v in values.items() if k not in conflict_keys}
    if update_cols:
        stmt = stmt.on_conflict_do_update(index_elements=conflict_keys, set_=update_cols)
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=conflict_keys)

    result = await session.execute(stmt)
    return result.rowcount  # type: ignore[return-value]
