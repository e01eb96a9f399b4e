# farmsync/domain/products/service.py
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from farmsync.core.errors import NotFoundError, StorageError
from farmsync.db.repositories import products as product_repo
from farmsync.domain.sync.service import require

logger = logging.getLogger(__name__)


async def get_products(
    db: AsyncSession,
    owner_id: str,
) -> List[Dict[str, Any]]:
    require(owner_id, "ownerId")

    try:
        async with db.begin():
            return await product_repo.list_products(db, owner_id)
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch products", extra={"owner_id": owner_id})
        raise StorageError("Failed to fetch products") from exc


async def delete_product(
    db: AsyncSession,
    owner_id: str,
    product_id: str,
) -> None:
    """Hard-delete one product.

    Sales that point at it are kept and come back from sync with a null
    product name.
    """
    require(owner_id, "ownerId")
    require(product_id, "productId")

    try:
        async with db.begin():
            deleted = await product_repo.delete_product(db, owner_id, product_id)
    except SQLAlchemyError as exc:
        logger.exception(f"Failed to delete product {product_id}", extra={"owner_id": owner_id})
        raise StorageError("Failed to delete product") from exc

    if deleted == 0:
        raise NotFoundError("Product not found")

    logger.info(f"Deleted product {product_id}", extra={"owner_id": owner_id})
