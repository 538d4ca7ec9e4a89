"""
In-memory product catalog: collection filter, search and price sort
"""
import logging
from typing import List, Optional

from config.catalog_data import PRODUCTS
from schemas.products import ProductSchema, SortOption

logger = logging.getLogger(__name__)

ALL_PRODUCTS = "All Products"
NEW_ARRIVALS = "New Arrivals"
RELATED_LIMIT = 4


def format_price(price: float) -> str:
    """AUD storefront price, e.g. $1,299.00"""
    return f"${price:,.2f}"


class CatalogService:
    """Read-only access to the static product list"""

    def __init__(self, products: Optional[List[dict]] = None):
        records = PRODUCTS if products is None else products
        self.products = [ProductSchema(**record) for record in records]
        logger.info(f"Catalog loaded with {len(self.products)} products")

    def collections(self) -> List[str]:
        names = {name for product in self.products for name in product.collection_names}
        return [ALL_PRODUCTS] + sorted(names)

    def filter_and_sort(
        self, collection: str = ALL_PRODUCTS, search: str = "", sort_by: SortOption = SortOption.FEATURED
    ) -> List[ProductSchema]:
        result = self.products

        if collection and collection != ALL_PRODUCTS:
            result = [p for p in result if collection in p.collection_names]

        if search:
            term = search.lower()
            result = [p for p in result if term in p.name.lower() or term in p.product_type.lower()]

        if sort_by == SortOption.PRICE_LOW_TO_HIGH:
            result = sorted(result, key=lambda p: p.price)
        elif sort_by == SortOption.PRICE_HIGH_TO_LOW:
            result = sorted(result, key=lambda p: p.price, reverse=True)
        else:
            result = list(result)

        return result

    def get(self, product_id: int) -> Optional[ProductSchema]:
        for product in self.products:
            if product.product_id == product_id:
                return product
        return None

    def related(self, product: ProductSchema) -> List[ProductSchema]:
        """Other products of the same type, catalog order"""
        related = [
            p for p in self.products if p.product_type == product.product_type and p.product_id != product.product_id
        ]
        return related[:RELATED_LIMIT]

    @staticmethod
    def is_new_arrival(product: ProductSchema) -> bool:
        return NEW_ARRIVALS in product.collection_names


# Global catalog instance
catalog_service = CatalogService()
