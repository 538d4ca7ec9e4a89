"""
Pydantic schemas for product-related API endpoints
"""
from pydantic import BaseModel, Field
from typing import List
from enum import Enum


class SortOption(str, Enum):
    """Storefront sort options"""
    FEATURED = "Featured"
    PRICE_LOW_TO_HIGH = "Price: Low to High"
    PRICE_HIGH_TO_LOW = "Price: High to Low"


class ProductSchema(BaseModel):
    """Catalog product"""
    product_id: int
    name: str
    handle: str
    product_url: str
    price: float = Field(ge=0)
    room: str
    product_type: str
    collection_names: List[str] = []
    image_urls: List[str] = Field(min_length=1)

    class Config:
        from_attributes = True

    @property
    def primary_image(self) -> str:
        return self.image_urls[0]


class ProductListResponse(BaseModel):
    """Filtered and sorted product list"""
    products: List[ProductSchema]
    total: int
    collection: str
    search: str = ""
    sort_by: SortOption = SortOption.FEATURED


class CollectionsResponse(BaseModel):
    collections: List[str]


class ProductDetailResponse(BaseModel):
    """Product detail page"""
    product: ProductSchema
    formatted_price: str
    primary_image: str
    is_new_arrival: bool
    related_products: List[ProductSchema] = []
