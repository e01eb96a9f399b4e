# farmsync/db/models/sales.py
from sqlalchemy import Column, Index, Integer, Numeric, String, DateTime

from farmsync.db.base import Base


class Sale(Base):
    __tablename__ = "sales"

    """A single sale of one product, as recorded by a client.

    The unit price is captured at the time of sale so history does not move
    when the product's price changes. product_id is deliberately not a foreign
    key: a sale may outlive its product, or arrive before the product has been
    synced, and is then rendered with a null product name.
    """

    owner_id = Column(String(255), primary_key=True)
    id = Column(String(255), primary_key=True)

    product_id = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_sales_owner_id", "owner_id"),
        Index("ix_sales_created_at", "created_at"),
    )

    MUTABLE_FIELDS = ("product_id", "quantity", "price", "created_at")
