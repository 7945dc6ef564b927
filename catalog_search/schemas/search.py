from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    # Left untyped so a non-string query reaches the engine and gets a 400
    query: Any = None


class CategoryRef(BaseModel):
    id: int
    name: Optional[str] = None


class SearchResultItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    full_title: Optional[str] = Field(default=None, alias="fullTitle")
    description: Optional[str] = None
    url: Optional[str] = None
    price: float
    old_price: Optional[float] = Field(default=None, alias="oldPrice")
    on_sale: bool = Field(default=False, alias="onSale")
    discount: int = 0
    image: Optional[str] = None
    type: Optional[str] = None
    artist: Optional[str] = None
    dimensions: Optional[str] = None
    stock: Optional[int] = None
    stock_sold: int = Field(default=0, alias="stockSold")
    is_popular: bool = Field(default=False, alias="isPopular")
    is_scarce: bool = Field(default=False, alias="isScarce")
    categories: List[CategoryRef] = []
    similarity: Optional[float] = None


class QueryInfo(BaseModel):
    original: str
    took_ms: int


class SearchResults(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    showing: int
    items: List[SearchResultItem]
    advice: str
    discount_code: Optional[str] = Field(default=None, alias="discountCode")


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    needs_more_info: bool = Field(default=False, alias="needsMoreInfo")
    query: QueryInfo
    results: SearchResults


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None
