# farmsync/api/v1/routes_sync.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession


from farmsync.db.base import get_db
from farmsync.domain.sync.schemas import SyncResponse
from farmsync.domain.sync.service import sync_owner


router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("", response_model=SyncResponse)
async def sync_endpoint(
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    db: AsyncSession = Depends(get_db),
):
    snapshot = await sync_owner(db, owner_id)
    return {"ok": True, **snapshot}
