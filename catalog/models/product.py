from sqlalchemy import Column, Integer, String, DateTime, Index
from sqlalchemy.sql import func
from catalog.database import Base


CODE_MAX_LENGTH = 9
NAME_MAX_LENGTH = 90
CATEGORY_MAX_LENGTH = 28
BRAND_MAX_LENGTH = 28
TYPE_MAX_LENGTH = 21
DESCRIPTION_MAX_LENGTH = 180

# Fields a client may set; id and timestamps are owned by the server.
MUTABLE_FIELDS = ("code", "name", "category", "brand", "type", "description")


class Product(Base):
    __tablename__ = "product"
    __table_args__ = (
        Index("ix_product_code", "code", unique=True),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(CODE_MAX_LENGTH), nullable=False)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    category = Column(String(CATEGORY_MAX_LENGTH), nullable=False)
    brand = Column(String(BRAND_MAX_LENGTH), nullable=True)
    type = Column(String(TYPE_MAX_LENGTH), nullable=True)
    description = Column(String(DESCRIPTION_MAX_LENGTH), nullable=True)
    created_at = Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column("updated_at", DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Product(id={self.id}, code='{self.code}', name='{self.name}')>"
