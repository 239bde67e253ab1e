"""Sample catalogue for a fresh store: two products and the combo that bundles them.

Sample records use fixed ids so local tooling (load tests, manual curl
sessions) can reference them without a catalogue endpoint.
"""

import structlog
from protean.utils.globals import current_domain

from ordering.catalogue.combo import Combo
from ordering.catalogue.product import Product

logger = structlog.get_logger(__name__)

SAMPLE_PRODUCTS = [
    {
        "product_id": "campus-tshirt",
        "name": "Campus T-shirt",
        "price": 150000,
        "description": "Cotton T-shirt with the campus logo",
        "category": "apparel",
        "stock_quantity": 100,
    },
    {
        "product_id": "campus-cap",
        "name": "Campus Cap",
        "price": 100000,
        "description": "Adjustable cap with embroidered logo",
        "category": "accessories",
        "stock_quantity": 100,
    },
]

SAMPLE_COMBO_ID = "campus-tshirt-cap"
SAMPLE_COMBO_NAME = "T-shirt + Cap"
SAMPLE_COMBO_PRICE = 220000


def seed_catalog() -> bool:
    """Insert the sample catalogue if the store has no products. Returns True if seeded."""
    product_repo = current_domain.repository_for(Product)
    if product_repo._dao.query.all().items:
        logger.info("catalog_seed_skipped", reason="catalogue not empty")
        return False

    products = [Product.create(**data) for data in SAMPLE_PRODUCTS]
    for product in products:
        product_repo.add(product)

    combo = Combo.create(
        name=SAMPLE_COMBO_NAME,
        combo_price=SAMPLE_COMBO_PRICE,
        required_product_counts={str(product.id): 1 for product in products},
        combo_id=SAMPLE_COMBO_ID,
    )
    current_domain.repository_for(Combo).add(combo)

    logger.info("catalog_seeded", products=len(products), combos=1)
    return True
