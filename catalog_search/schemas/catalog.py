"""
Raw records of the upstream catalog export (Lightspeed eCom resources).

References to other resources arrive as ``{"resource": {"id": 123}}`` and
missing optional objects (brand, image) arrive as ``false``; both are flattened
here so the rest of the code only sees plain ids and values.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _resource_id(value: Any) -> Optional[int]:
    if isinstance(value, dict):
        resource = value.get("resource") or {}
        value = resource.get("id") if isinstance(resource, dict) else None
    if value in (None, False, ""):
        return None
    return int(value)


class RawRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RawProduct(RawRecord):
    id: int
    title: str
    full_title: Optional[str] = Field(default=None, alias="fulltitle")
    description: Optional[str] = None
    content: Optional[str] = None
    url: Optional[str] = None
    is_visible: bool = Field(default=False, alias="isVisible")
    brand_id: Optional[int] = Field(default=None, alias="brand")
    image: Optional[str] = None

    @field_validator("brand_id", mode="before")
    @classmethod
    def _brand(cls, value):
        return _resource_id(value)

    @field_validator("image", mode="before")
    @classmethod
    def _image(cls, value):
        if isinstance(value, dict):
            return value.get("src")
        return value or None


class RawVariant(RawRecord):
    product_id: Optional[int] = Field(default=None, alias="product")
    is_default: bool = Field(default=False, alias="isDefault")
    price: float = Field(default=0.0, alias="priceIncl")
    old_price: Optional[float] = Field(default=None, alias="oldPriceIncl")
    stock: int = Field(default=0, alias="stockLevel")
    stock_sold: int = Field(default=0, alias="stockSold")

    @field_validator("product_id", mode="before")
    @classmethod
    def _product(cls, value):
        return _resource_id(value)

    @field_validator("price", "stock", "stock_sold", mode="before")
    @classmethod
    def _zero_default(cls, value):
        return value or 0

    @field_validator("old_price", mode="before")
    @classmethod
    def _old_price(cls, value):
        # Lightspeed reports "no prior price" as 0
        return value or None


class RawCategory(RawRecord):
    id: int
    title: str
    url: Optional[str] = None


class RawTag(RawRecord):
    id: int
    title: str
    url: Optional[str] = None
    is_visible: bool = Field(default=False, alias="isVisible")


class RawBrand(RawRecord):
    id: int
    title: str


class RawCategoryLink(RawRecord):
    category_id: Optional[int] = Field(default=None, alias="category")
    product_id: Optional[int] = Field(default=None, alias="product")

    @field_validator("category_id", "product_id", mode="before")
    @classmethod
    def _ids(cls, value):
        return _resource_id(value)


class RawTagLink(RawRecord):
    tag_id: Optional[int] = Field(default=None, alias="tag")
    product_id: Optional[int] = Field(default=None, alias="product")

    @field_validator("tag_id", "product_id", mode="before")
    @classmethod
    def _ids(cls, value):
        return _resource_id(value)
