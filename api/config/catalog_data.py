"""
Static product catalog.

Order here is the "Featured" order shown in the storefront.
"""

CDN = "https://cedora.com.au/cdn/shop/files"
STORE = "https://cedora.com.au/products"


def _product(product_id, name, handle, price, room, product_type, collections, image_count=2):
    return {
        "product_id": product_id,
        "name": name,
        "handle": handle,
        "product_url": f"{STORE}/{handle}",
        "price": price,
        "room": room,
        "product_type": product_type,
        "collection_names": collections,
        "image_urls": [f"{CDN}/{handle}-{i}.jpg" for i in range(1, image_count + 1)],
    }


PRODUCTS = [
    _product(1, "Oslo Sofa", "oslo-sofa", 1899.0, "Living Room", "Sofa", ["Living", "New Arrivals"], 3),
    _product(2, "Bergen Modular Sofa", "bergen-modular-sofa", 2799.0, "Living Room", "Sofa", ["Living", "Modular"]),
    _product(3, "Sienna Armchair", "sienna-armchair", 749.0, "Living Room", "Armchair", ["Living", "Sale"]),
    _product(4, "Marlo Coffee Table", "marlo-coffee-table", 549.0, "Living Room", "Coffee Table", ["Living", "Tables"]),
    _product(5, "Aria Travertine Coffee Table", "aria-travertine-coffee-table", 1299.0, "Living Room", "Coffee Table", ["Living", "Tables", "New Arrivals"]),
    _product(6, "Kobe Bed Frame", "kobe-bed-frame", 1399.0, "Bedroom", "Bed", ["Bedroom"]),
    _product(7, "Nara Upholstered Bed", "nara-upholstered-bed", 1649.0, "Bedroom", "Bed", ["Bedroom", "New Arrivals"]),
    _product(8, "Luca Bedside Table", "luca-bedside-table", 329.0, "Bedroom", "Bedside Table", ["Bedroom", "Sale"]),
    _product(9, "Porto Dining Table", "porto-dining-table", 1599.0, "Dining Room", "Dining Table", ["Dining", "Tables"]),
    _product(10, "Elba Dining Chair", "elba-dining-chair", 279.0, "Dining Room", "Dining Chair", ["Dining", "Sale"]),
    _product(11, "Cove Dining Chair", "cove-dining-chair", 319.0, "Dining Room", "Dining Chair", ["Dining"]),
    _product(12, "Haven Floor Lamp", "haven-floor-lamp", 249.0, "Study", "Lighting", ["Lighting", "New Arrivals"], 1),
]
