# farmsync/db/upsert.py
from typing import Any, Dict, Iterable

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from farmsync.core.errors import StorageError

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def build_upsert(
    db: AsyncSession,
    model,
    values: Dict[str, Any],
    update_fields: Iterable[str],
):
    """INSERT .. ON CONFLICT (primary key) DO UPDATE .. RETURNING *.

    Only the columns named in update_fields are overwritten when the row
    already exists; anything else (created_at for products) keeps the value
    from the first insert.
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise StorageError(f"Upsert is not supported on dialect {dialect!r}")

    table = model.__table__
    stmt = insert(table).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[column.name for column in table.primary_key.columns],
        set_={field: stmt.excluded[field] for field in update_fields},
    )
    return stmt.returning(*table.columns)
