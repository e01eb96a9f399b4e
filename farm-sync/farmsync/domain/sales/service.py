# farmsync/domain/sales/service.py
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from farmsync.core.errors import StorageError, ValidationError
from farmsync.core.time_utils import utcnow
from farmsync.db.repositories.products import decrement_stock
from farmsync.db.repositories.sales import get_sale, insert_sale, list_sales
from farmsync.domain.sync.service import require
from farmsync.domain.types import to_money

logger = logging.getLogger(__name__)


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("quantity must be a positive integer")
    return quantity


def _validate_price(price) -> Decimal:
    try:
        value = Decimal(str(price))
    except (InvalidOperation, ValueError):
        raise ValidationError("price must be a number")
    if not value.is_finite() or value < 0:
        raise ValidationError("price must be a non-negative number")
    return to_money(value)


async def record_sale(
    db: AsyncSession,
    owner_id: str,
    product_id: str,
    quantity: int,
    price,
) -> Dict[str, Any]:
    """Insert a sale and take its quantity off the product's stock, atomically.

    Both writes share one transaction: if either fails, neither is visible.
    Stock is not checked before the decrement, so concurrent sales against
    low stock can leave it negative. Counts are corrected out of band.
    """
    require(owner_id, "ownerId")
    require(product_id, "productId")
    require(quantity, "quantity")
    require(price, "price")
    quantity = _validate_quantity(quantity)
    price = _validate_price(price)

    sale_id = uuid4().hex

    try:
        async with db.begin():
            now = utcnow()
            await insert_sale(
                db,
                {
                    "owner_id": owner_id,
                    "id": sale_id,
                    "product_id": product_id,
                    "quantity": quantity,
                    "price": price,
                    "created_at": now,
                    "updated_at": now,
                },
            )

            updated = await decrement_stock(db, owner_id, product_id, quantity, now)
            if updated == 0:
                logger.warning(
                    f"Sale {sale_id} references unknown product {product_id}; no stock decremented",
                    extra={"owner_id": owner_id},
                )

            sale = await get_sale(db, owner_id, sale_id)
    except SQLAlchemyError as exc:
        logger.exception(f"Failed to record sale for product {product_id}", extra={"owner_id": owner_id})
        raise StorageError("Failed to record sale") from exc

    logger.info(
        f"Recorded sale {sale_id} ({quantity} x {product_id})",
        extra={"owner_id": owner_id},
    )
    return sale


async def get_sales(
    db: AsyncSession,
    owner_id: str,
) -> List[Dict[str, Any]]:
    require(owner_id, "ownerId")

    try:
        async with db.begin():
            return await list_sales(db, owner_id)
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch sales", extra={"owner_id": owner_id})
        raise StorageError("Failed to fetch sales") from exc
