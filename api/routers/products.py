"""
Product API routes
"""
from fastapi import APIRouter, HTTPException, Query
import logging

from schemas.products import (
    CollectionsResponse,
    ProductDetailResponse,
    ProductListResponse,
    SortOption,
)
from services.catalog_service import ALL_PRODUCTS, catalog_service, format_price

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=ProductListResponse)
async def get_products(
    collection: str = Query(ALL_PRODUCTS),
    search: str = Query(""),
    sort_by: SortOption = Query(SortOption.FEATURED),
):
    """Product list filtered by collection and search term, then sorted"""
    products = catalog_service.filter_and_sort(collection=collection, search=search.strip(), sort_by=sort_by)
    logger.info(f"Products: collection={collection!r} search={search!r} sort={sort_by.value!r} -> {len(products)}")
    return ProductListResponse(
        products=products,
        total=len(products),
        collection=collection,
        search=search,
        sort_by=sort_by,
    )


@router.get("/collections", response_model=CollectionsResponse)
async def get_collections():
    return CollectionsResponse(collections=catalog_service.collections())


@router.get("/{product_id}", response_model=ProductDetailResponse)
async def get_product(product_id: int):
    """Product detail with related products of the same type"""
    product = catalog_service.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    return ProductDetailResponse(
        product=product,
        formatted_price=format_price(product.price),
        primary_image=product.primary_image,
        is_new_arrival=catalog_service.is_new_arrival(product),
        related_products=catalog_service.related(product),
    )
