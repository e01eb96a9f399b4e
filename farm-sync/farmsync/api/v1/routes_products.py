# farmsync/api/v1/routes_products.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession


from farmsync.db.base import get_db
from farmsync.domain.products.schemas import ProductListResponse
from farmsync.domain.products.service import delete_product, get_products
from farmsync.domain.sync.schemas import ProductEnvelope, ProductUpsertRequest
from farmsync.domain.sync.service import reconcile_product


router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=ProductEnvelope)
async def upsert_product_endpoint(
    payload: ProductUpsertRequest,
    db: AsyncSession = Depends(get_db),
):
    product = await reconcile_product(db, payload.owner_id, payload.product)
    return {"ok": True, "product": product}

@router.get("", response_model=ProductListResponse)
async def list_products_endpoint(
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    db: AsyncSession = Depends(get_db),
):
    products = await get_products(db, owner_id)
    return {"ok": True, "products": products}

@router.delete("/{product_id}")
async def delete_product_endpoint(
    product_id: str,
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    db: AsyncSession = Depends(get_db),
):
    await delete_product(db, owner_id, product_id)
    return {"ok": True, "message": "Product deleted successfully"}
