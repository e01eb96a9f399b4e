# farmsync/domain/status/service.py
import logging
import time
from datetime import datetime
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func, select

from farmsync.core.errors import StorageError
from farmsync.core.time_utils import to_utc_iso, utcnow

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


async def database_status(db: AsyncSession) -> Dict[str, Any]:
    try:
        async with db.begin():
            result = await db.execute(select(func.now()))
            db_time = result.scalar()
    except SQLAlchemyError as exc:
        logger.exception("Database status check failed")
        raise StorageError("Database connection failed") from exc

    dialect = db.get_bind().dialect
    version = dialect.server_version_info

    return {
        "ok": True,
        "database": {
            "connected": True,
            "dialect": dialect.name,
            "version": ".".join(str(part) for part in version) if version else None,
            "time": to_utc_iso(db_time) if isinstance(db_time, datetime) else str(db_time),
        },
        "server": {
            "time": to_utc_iso(utcnow()),
            "uptime": round(time.monotonic() - STARTED_AT, 3),
        },
    }
