from typing import Any, Dict, Iterable, List

from sqlalchemy import select, func, update, distinct, literal_column
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_search.models.product import Product, ProductCategory, ProductTag
from catalog_search.repositories.base import BaseRepository

SEARCH_COLUMNS = (
    Product.id,
    Product.title,
    Product.full_title,
    Product.description,
    Product.url,
    Product.price,
    Product.old_price,
    Product.image,
    Product.type,
    Product.artist,
    Product.dimensions,
    Product.stock,
    Product.stock_sold,
)


class ProductRepository(BaseRepository[Product]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Product)

    def build_upsert(self, values: Dict[str, Any]):
        stmt = insert(Product).values(**values)
        update_set = {
            name: stmt.excluded[name] for name in values if name != "id"
        }
        update_set["updated_at"] = func.now()
        # xmax = 0 only holds for rows created by this statement
        return stmt.on_conflict_do_update(
            index_elements=[Product.id], set_=update_set
        ).returning(literal_column("(xmax = 0)").label("inserted"))

    async def upsert_product(self, values: Dict[str, Any]) -> bool:
        """
        Inserts the product or overwrites every given column of the existing row.
        Returns True when a new row was created.
        """
        result = await self._execute(self.build_upsert(values))
        return bool(result.scalar())

    async def add_categories(self, product_id: int, category_ids: Iterable[int]) -> None:
        await self.insert_missing(
            ProductCategory,
            [{"product_id": product_id, "category_id": cid} for cid in category_ids],
        )

    async def add_tags(self, product_id: int, tag_ids: Iterable[int]) -> None:
        await self.insert_missing(
            ProductTag,
            [{"product_id": product_id, "tag_id": tid} for tid in tag_ids],
        )

    # --- Vector search ---
    def build_vector_search(
        self, query_vector: List[float], threshold: float, limit: int
    ):
        distance = Product.embedding.cosine_distance(query_vector)
        similarity = 1 - distance
        category_ids = func.array_agg(distinct(ProductCategory.category_id)).filter(
            ProductCategory.category_id.isnot(None)
        )
        return (
            select(
                *SEARCH_COLUMNS,
                similarity.label("similarity"),
                category_ids.label("category_ids"),
            )
            .outerjoin(ProductCategory, ProductCategory.product_id == Product.id)
            .where(
                Product.is_visible.is_(True),
                Product.embedding.isnot(None),
                similarity >= threshold,
            )
            .group_by(Product.id)
            .order_by(distance, Product.stock_sold.desc().nulls_last())
            .limit(limit)
        )

    async def search_by_vector(
        self, query_vector: List[float], threshold: float, limit: int
    ) -> List[Dict[str, Any]]:
        """
        Visible, embedded products with similarity >= threshold, most similar
        first and best sellers first on ties.
        """
        result = await self._execute(
            self.build_vector_search(query_vector, threshold, limit)
        )
        return [dict(row) for row in result.mappings().all()]

    async def hide_missing(self, visible_ids: Iterable[int]) -> int:
        """
        Marks stored products that are absent from the latest visible set as
        invisible. Rows are never deleted.
        """
        stmt = (
            update(Product)
            .where(Product.is_visible.is_(True), Product.id.notin_(list(visible_ids)))
            .values(is_visible=False, updated_at=func.now())
        )
        result = await self._execute(stmt)
        return result.rowcount or 0

    async def stats(self) -> Dict[str, Any]:
        stmt = select(
            func.count().label("total"),
            func.count(Product.embedding).label("with_embeddings"),
            func.count().filter(Product.price > 0).label("with_price"),
            func.avg(Product.price).label("avg_price"),
            func.max(Product.price).label("max_price"),
        ).select_from(Product)
        row = (await self._execute(stmt)).mappings().first()
        return {
            "total": row["total"] or 0,
            "with_embeddings": row["with_embeddings"] or 0,
            "with_price": row["with_price"] or 0,
            "avg_price": round(float(row["avg_price"] or 0), 2),
            "max_price": float(row["max_price"] or 0),
        }
