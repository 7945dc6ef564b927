import enum

from sqlalchemy import (
    BIGINT,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    TIMESTAMP,
    text,
)
from pgvector.sqlalchemy import Vector
from catalog_search.core.config import settings
from catalog_search.core.database import Base


class ProductType(str, enum.Enum):
    BEELD = "beeld"
    SCHILDERIJ = "schilderij"
    VAAS = "vaas"
    MOK = "mok"
    ONDERZETTER = "onderzetter"
    SIERAAD = "sieraad"
    KANDELAAR = "kandelaar"
    KLOK = "klok"
    KUSSEN = "kussen"
    OVERIG = "overig"


class Product(Base):
    __tablename__ = "products"

    id = Column(BIGINT, primary_key=True, autoincrement=False)
    title = Column(String, nullable=False)
    full_title = Column(String)
    description = Column(Text, server_default="")
    content = Column(Text, server_default="")
    url = Column(String)
    is_visible = Column(Boolean, nullable=False, server_default=text("true"))
    price = Column(Numeric(10, 2), nullable=False, server_default=text("0"))
    old_price = Column(Numeric(10, 2))
    artist = Column(String)
    dimensions = Column(String)
    stock = Column(Integer, server_default=text("0"))
    stock_sold = Column(Integer, server_default=text("0"))
    type = Column(String(32), nullable=False, server_default=ProductType.OVERIG.value)
    image = Column(String)
    embedding = Column(Vector(settings.EMBEDDING_DIMENSIONS))
    created_at = Column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

    __table_args__ = (
        Index("idx_products_visible", "is_visible"),
        Index(
            "idx_products_embedding",
            embedding,
            postgresql_using="hnsw",
            postgresql_with={"m": 16, "ef_construction": 64},
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, title='{self.title}', price={self.price})>"


class Category(Base):
    __tablename__ = "categories"

    id = Column(BIGINT, primary_key=True, autoincrement=False)
    title = Column(String, nullable=False)
    url = Column(String)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Tag(Base):
    __tablename__ = "tags"

    id = Column(BIGINT, primary_key=True, autoincrement=False)
    title = Column(String, nullable=False, index=True)
    url = Column(String)
    is_visible = Column(Boolean, server_default=text("true"))
    updated_at = Column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class ProductCategory(Base):
    __tablename__ = "product_categories"

    product_id = Column(
        BIGINT, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True
    )
    category_id = Column(
        BIGINT, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True, index=True
    )


class ProductTag(Base):
    __tablename__ = "product_tags"

    product_id = Column(
        BIGINT, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id = Column(
        BIGINT, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True
    )
