# farmsync/domain/sync/service.py
import logging
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from farmsync.core.config import settings
from farmsync.core.errors import StorageError, ValidationError
from farmsync.core.time_utils import utcnow
from farmsync.db.models.products import Product
from farmsync.db.models.sales import Sale
from farmsync.db.repositories.products import get_product_row, list_products, upsert_product
from farmsync.db.repositories.sales import get_sale, get_sale_row, list_sales, upsert_sale
from .merge import MergePolicy, last_write_wins
from .schemas import ProductIn, SaleIn

logger = logging.getLogger(__name__)

# Used for fields a brand-new product was pushed without.
PRODUCT_DEFAULTS = {"stock": 0, "cost": Decimal("0.00"), "price": Decimal("0.00")}


def require(value, field: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")


async def reconcile_product(
    db: AsyncSession,
    owner_id: str,
    record: ProductIn,
    policy: MergePolicy = last_write_wins,
) -> Dict[str, Any]:
    """Insert or overwrite the product (owner_id, record.id).

    Safe to retry: resending the same record converges on one row with the
    same values. created_at is written once, on the first insert. An omitted
    stock, cost or price keeps the stored value.
    """
    require(owner_id, "ownerId")
    require(record.id, "product.id")

    incoming = {field: getattr(record, field) for field in Product.MUTABLE_FIELDS}

    try:
        async with db.begin():
            existing = await get_product_row(db, owner_id, record.id, for_update=True)
            merged = policy(existing, incoming)
            for field, default in PRODUCT_DEFAULTS.items():
                if merged.get(field) is None:
                    merged[field] = default

            now = utcnow()
            row = await upsert_product(
                db,
                {**merged, "owner_id": owner_id, "id": record.id, "created_at": now, "updated_at": now},
                update_fields=[*Product.MUTABLE_FIELDS, "updated_at"],
            )
    except SQLAlchemyError as exc:
        logger.exception(f"Failed to upsert product {record.id}", extra={"owner_id": owner_id})
        raise StorageError("Failed to save product") from exc

    logger.info(
        f"{'Updated' if existing else 'Created'} product {record.id}",
        extra={"owner_id": owner_id},
    )
    return row


async def reconcile_sale(
    db: AsyncSession,
    owner_id: str,
    record: SaleIn,
    policy: MergePolicy = last_write_wins,
) -> Dict[str, Any]:
    """Insert or overwrite the sale (owner_id, record.id).

    This path does not touch product stock; it replays sales the client has
    already applied locally. created_at is the client's sale time: a submitted
    value replaces the stored one, an omitted one keeps it (or, for a new row,
    falls back to the server clock).
    """
    require(owner_id, "ownerId")
    require(record.id, "sale.id")

    incoming = {field: getattr(record, field) for field in Sale.MUTABLE_FIELDS}
    update_fields = ["product_id", "quantity", "price", "updated_at"]
    if record.created_at is not None:
        update_fields.append("created_at")

    try:
        async with db.begin():
            existing = await get_sale_row(db, owner_id, record.id, for_update=True)
            merged = policy(existing, incoming)

            now = utcnow()
            if merged.get("created_at") is None:
                merged["created_at"] = now
            await upsert_sale(
                db,
                {**merged, "owner_id": owner_id, "id": record.id, "updated_at": now},
                update_fields=update_fields,
            )
            row = await get_sale(db, owner_id, record.id)
    except SQLAlchemyError as exc:
        logger.exception(f"Failed to upsert sale {record.id}", extra={"owner_id": owner_id})
        raise StorageError("Failed to save sale") from exc

    logger.info(
        f"{'Updated' if existing else 'Created'} sale {record.id}",
        extra={"owner_id": owner_id},
    )
    return row


async def sync_owner(
    db: AsyncSession,
    owner_id: str,
) -> Dict[str, List[Dict[str, Any]]]:
    """Everything the owner has, newest first, for bootstrap or full resync."""
    require(owner_id, "ownerId")

    try:
        async with db.begin():
            if db.get_bind().dialect.name == "postgresql":
                # Both reads see one snapshot, so a sale never references a
                # product that is missing from the same response.
                await db.connection(
                    execution_options={"isolation_level": settings.SYNC_ISOLATION_LEVEL}
                )
            products = await list_products(db, owner_id)
            sales = await list_sales(db, owner_id)
    except SQLAlchemyError as exc:
        logger.exception("Sync read failed", extra={"owner_id": owner_id})
        raise StorageError("Sync failed") from exc

    logger.info(
        f"Synced {len(products)} products and {len(sales)} sales",
        extra={"owner_id": owner_id},
    )
    return {"products": products, "sales": sales}
