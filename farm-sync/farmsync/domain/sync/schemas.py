# farmsync/domain/sync/schemas.py
from typing import List, Optional

from pydantic import AliasChoices, Field

from farmsync.domain.types import CamelModel, Identifier, Money, Timestamp


class ProductIn(CamelModel):
    id: Identifier
    name: str = Field(min_length=1, max_length=255)
    # Omitted fields keep the stored value; a new product starts them at 0.
    stock: Optional[int] = None
    cost: Optional[Money] = Field(default=None, ge=0)
    price: Optional[Money] = Field(default=None, ge=0)


class SaleIn(CamelModel):
    id: Identifier
    product_id: Optional[Identifier] = None
    # Offline clients have historically sent "qty".
    quantity: int = Field(gt=0, strict=True, validation_alias=AliasChoices("qty", "quantity"))
    price: Money = Field(ge=0)
    created_at: Optional[Timestamp] = None


class ProductUpsertRequest(CamelModel):
    owner_id: Identifier
    product: ProductIn


class SaleUpsertRequest(CamelModel):
    owner_id: Identifier
    sale: SaleIn


class ProductOut(CamelModel):
    id: str
    owner_id: str
    name: str
    stock: int
    cost: Money
    price: Money
    created_at: Timestamp
    updated_at: Timestamp


class SaleOut(CamelModel):
    id: str
    owner_id: str
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    product_cost: Optional[Money] = None
    quantity: int
    price: Money
    created_at: Timestamp
    updated_at: Timestamp


class ProductEnvelope(CamelModel):
    ok: bool = True
    product: ProductOut


class SaleEnvelope(CamelModel):
    ok: bool = True
    sale: SaleOut


class SyncResponse(CamelModel):
    ok: bool = True
    products: List[ProductOut]
    sales: List[SaleOut]
