
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import delete, select, update

from farmsync.db.models.products import Product
from farmsync.db.upsert import build_upsert

async def get_product_row(
    db: AsyncSession,
    owner_id: str,
    product_id: str,
    for_update: bool = False,
) -> Optional[Dict[str, Any]]:
    stmt = select(*Product.__table__.columns).where(
        Product.owner_id == owner_id,
        Product.id == product_id,
    )
    if for_update:
        # SQLite ignores FOR UPDATE; PostgreSQL holds the row until commit.
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    row = result.mappings().one_or_none()
    return dict(row) if row is not None else None

async def upsert_product(
    db: AsyncSession,
    values: Dict[str, Any],
    update_fields: Iterable[str],
) -> Dict[str, Any]:
    result = await db.execute(build_upsert(db, Product, values, update_fields))
    return dict(result.mappings().one())

async def decrement_stock(
    db: AsyncSession,
    owner_id: str,
    product_id: str,
    quantity: int,
    now: datetime,
) -> int:
    """Relative update: stock = stock - quantity, evaluated by the database.

    There is no floor at zero. Returns the number of rows touched (0 when the
    product does not exist for this owner).
    """
    result = await db.execute(
        update(Product)
        .where(Product.owner_id == owner_id, Product.id == product_id)
        .values(stock=Product.stock - quantity, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount

async def list_products(
    db: AsyncSession,
    owner_id: str,
) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(*Product.__table__.columns)
        .where(Product.owner_id == owner_id)
        .order_by(Product.created_at.desc(), Product.id)
    )
    return [dict(row) for row in result.mappings().all()]

async def delete_product(
    db: AsyncSession,
    owner_id: str,
    product_id: str,
) -> int:
    result = await db.execute(
        delete(Product)
        .where(Product.owner_id == owner_id, Product.id == product_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
