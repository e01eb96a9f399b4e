# farmsync/domain/sales/schemas.py
from typing import List

from pydantic import Field

from farmsync.domain.sync.schemas import SaleOut
from farmsync.domain.types import CamelModel, Identifier, Money


class SaleRecordRequest(CamelModel):
    owner_id: Identifier
    product_id: Identifier
    quantity: int = Field(gt=0, strict=True)
    price: Money = Field(ge=0)


class SaleListResponse(CamelModel):
    ok: bool = True
    sales: List[SaleOut]
