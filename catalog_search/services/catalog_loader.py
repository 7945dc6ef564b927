import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from catalog_search.schemas.catalog import (
    RawBrand,
    RawCategory,
    RawCategoryLink,
    RawProduct,
    RawTag,
    RawTagLink,
    RawVariant,
)

logger = logging.getLogger(__name__)

SNAPSHOT_FILES = {
    "products": "products.json",
    "variants": "variants.json",
    "categories": "categories.json",
    "category_links": "categories-products.json",
    "tags": "tags.json",
    "tag_links": "tags-products.json",
    "brands": "brands.json",
}

EMPTY_VARIANT = RawVariant()


@dataclass
class CatalogSnapshot:
    """One full export of the upstream catalog plus the lookups built from it."""

    products: List[RawProduct]
    variants: List[RawVariant] = field(default_factory=list)
    categories: List[RawCategory] = field(default_factory=list)
    category_links: List[RawCategoryLink] = field(default_factory=list)
    tags: List[RawTag] = field(default_factory=list)
    tag_links: List[RawTagLink] = field(default_factory=list)
    brands: List[RawBrand] = field(default_factory=list)

    def __post_init__(self):
        self.variant_by_product: Dict[int, RawVariant] = {
            v.product_id: v for v in self.variants if v.is_default and v.product_id
        }
        self.category_names: Dict[int, str] = {c.id: c.title for c in self.categories}
        self.brand_names: Dict[int, str] = {b.id: b.title for b in self.brands}
        self.tag_ids = {t.id for t in self.tags}
        # Only visible tags contribute text to embeddings
        self.visible_tag_names: Dict[int, str] = {
            t.id: t.title for t in self.tags if t.is_visible
        }

        self.categories_by_product: Dict[int, List[int]] = defaultdict(list)
        for link in self.category_links:
            ids = self.categories_by_product[link.product_id]
            if link.category_id is not None and link.category_id not in ids:
                ids.append(link.category_id)

        self.tags_by_product: Dict[int, List[int]] = defaultdict(list)
        for link in self.tag_links:
            ids = self.tags_by_product[link.product_id]
            if link.tag_id is not None and link.tag_id not in ids:
                ids.append(link.tag_id)

    @classmethod
    def from_records(cls, **records: List[Dict[str, Any]]) -> "CatalogSnapshot":
        return cls(
            products=[RawProduct.model_validate(r) for r in records.get("products", [])],
            variants=[RawVariant.model_validate(r) for r in records.get("variants", [])],
            categories=[RawCategory.model_validate(r) for r in records.get("categories", [])],
            category_links=[
                RawCategoryLink.model_validate(r) for r in records.get("category_links", [])
            ],
            tags=[RawTag.model_validate(r) for r in records.get("tags", [])],
            tag_links=[RawTagLink.model_validate(r) for r in records.get("tag_links", [])],
            brands=[RawBrand.model_validate(r) for r in records.get("brands", [])],
        )

    @classmethod
    def load(cls, directory: Path) -> "CatalogSnapshot":
        """Reads every export file from ``directory``; a missing file is an error."""
        directory = Path(directory)
        records = {}
        for key, filename in SNAPSHOT_FILES.items():
            with open(directory / filename, "r", encoding="utf-8") as f:
                records[key] = json.load(f)
            logger.info(f"📖 {filename}: {len(records[key])} records")
        return cls.from_records(**records)

    @property
    def visible_products(self) -> List[RawProduct]:
        return [p for p in self.products if p.is_visible]

    def variant_for(self, product_id: int) -> RawVariant:
        return self.variant_by_product.get(product_id, EMPTY_VARIANT)

    def category_ids_for(self, product_id: int) -> List[int]:
        return [
            cid for cid in self.categories_by_product.get(product_id, [])
            if cid in self.category_names
        ]

    def tag_ids_for(self, product_id: int) -> List[int]:
        return [tid for tid in self.tags_by_product.get(product_id, []) if tid in self.tag_ids]

    def brand_name(self, brand_id: Optional[int]) -> Optional[str]:
        if brand_id is None:
            return None
        return self.brand_names.get(brand_id)
