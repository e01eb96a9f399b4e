from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from farmsync.core.config import settings

DB_URL = settings.DB_URL

engine = create_async_engine(DB_URL, future=True, echo=settings.DB_ECHO, pool_pre_ping=True)
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db():
    # The session (and its pooled connection) is released on every exit path,
    # including when the request handler raises.
    async with AsyncSessionLocal() as session:
        yield session


async def init_models(bind=engine):
    """Create the products and sales tables if they do not exist yet."""
    # Import for side effects: registers both tables on Base.metadata.
    from farmsync.db.models import products, sales  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
