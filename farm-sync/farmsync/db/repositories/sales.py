
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import insert, select

from farmsync.db.models.products import Product
from farmsync.db.models.sales import Sale
from farmsync.db.upsert import build_upsert


def _sales_with_product_name():
    # LEFT JOIN: a sale whose product is gone still comes back, with a null
    # name and cost.
    return select(
        *Sale.__table__.columns,
        Product.name.label("product_name"),
        Product.cost.label("product_cost"),
    ).outerjoin(
        Product,
        and_(Product.owner_id == Sale.owner_id, Product.id == Sale.product_id),
    )

async def get_sale_row(
    db: AsyncSession,
    owner_id: str,
    sale_id: str,
    for_update: bool = False,
) -> Optional[Dict[str, Any]]:
    stmt = select(*Sale.__table__.columns).where(
        Sale.owner_id == owner_id,
        Sale.id == sale_id,
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    row = result.mappings().one_or_none()
    return dict(row) if row is not None else None

async def get_sale(
    db: AsyncSession,
    owner_id: str,
    sale_id: str,
) -> Optional[Dict[str, Any]]:
    result = await db.execute(
        _sales_with_product_name().where(Sale.owner_id == owner_id, Sale.id == sale_id)
    )
    row = result.mappings().one_or_none()
    return dict(row) if row is not None else None

async def insert_sale(
    db: AsyncSession,
    values: Dict[str, Any],
) -> None:
    await db.execute(insert(Sale).values(**values))

async def upsert_sale(
    db: AsyncSession,
    values: Dict[str, Any],
    update_fields: Iterable[str],
) -> Dict[str, Any]:
    result = await db.execute(build_upsert(db, Sale, values, update_fields))
    return dict(result.mappings().one())

async def list_sales(
    db: AsyncSession,
    owner_id: str,
) -> List[Dict[str, Any]]:
    result = await db.execute(
        _sales_with_product_name()
        .where(Sale.owner_id == owner_id)
        .order_by(Sale.created_at.desc(), Sale.id)
    )
    return [dict(row) for row in result.mappings().all()]
