# farmsync/api/v1/routes_sales.py
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession


from farmsync.db.base import get_db
from farmsync.domain.sales.schemas import SaleListResponse, SaleRecordRequest
from farmsync.domain.sales.service import get_sales, record_sale
from farmsync.domain.sync.schemas import SaleEnvelope, SaleUpsertRequest
from farmsync.domain.sync.service import reconcile_sale


router = APIRouter(prefix="/sales", tags=["sales"])


@router.post("", response_model=SaleEnvelope)
async def create_sale_endpoint(
    payload: Union[SaleUpsertRequest, SaleRecordRequest],
    db: AsyncSession = Depends(get_db),
):
    # A body carrying a "sale" object replays a client-side sale (no stock
    # effect); a flat body records a new sale and decrements stock.
    if isinstance(payload, SaleUpsertRequest):
        sale = await reconcile_sale(db, payload.owner_id, payload.sale)
    else:
        sale = await record_sale(
            db,
            payload.owner_id,
            payload.product_id,
            payload.quantity,
            payload.price,
        )
    return {"ok": True, "sale": sale}

@router.get("", response_model=SaleListResponse)
async def list_sales_endpoint(
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    db: AsyncSession = Depends(get_db),
):
    sales = await get_sales(db, owner_id)
    return {"ok": True, "sales": sales}
