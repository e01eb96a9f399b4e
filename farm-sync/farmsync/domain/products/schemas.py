# farmsync/domain/products/schemas.py
from typing import List

from farmsync.domain.sync.schemas import ProductOut
from farmsync.domain.types import CamelModel


class ProductListResponse(CamelModel):
    ok: bool = True
    products: List[ProductOut]
