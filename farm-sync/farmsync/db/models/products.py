# farmsync/db/models/products.py
from sqlalchemy import Column, Index, Integer, Numeric, String, DateTime

from farmsync.db.base import Base


class Product(Base):
    __tablename__ = "products"

    """A sellable product in one owner's inventory.

    The id is generated by the client and is the merge key for upserts, so the
    primary key is (owner_id, id) rather than a server sequence. Stock is a
    plain integer that sales decrement without a floor, so it can go negative.
    """

    owner_id = Column(String(255), primary_key=True)
    id = Column(String(255), primary_key=True)

    name = Column(String(255), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    cost = Column(Numeric(10, 2), nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_products_owner_id", "owner_id"),
    )

    MUTABLE_FIELDS = ("name", "stock", "cost", "price")
