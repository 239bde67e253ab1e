"""In-memory catalogue: fixed products and combos for tests and local runs."""

from collections.abc import Iterable

from ordering.catalogue.port import CatalogLookup, ComboCatalog
from ordering.pricing.model import ComboDefinition, ProductRecord


class InMemoryCatalog(CatalogLookup, ComboCatalog):
    """Catalogue backed by plain dicts. Records lookups for test assertions."""

    def __init__(self, products: Iterable[ProductRecord] = (), combos: Iterable[ComboDefinition] = ()):
        self.products: dict[str, ProductRecord] = {product.id: product for product in products}
        self.combos: list[ComboDefinition] = list(combos)
        self.lookups: list[list[str]] = []

    def add_product(self, product: ProductRecord) -> None:
        self.products[product.id] = product

    def add_combo(self, combo: ComboDefinition) -> None:
        self.combos.append(combo)

    def find_many(self, ids: Iterable[str], available_only: bool = True) -> list[ProductRecord]:
        ids = list(ids)
        self.lookups.append(ids)
        found = []
        for product_id in dict.fromkeys(ids):
            product = self.products.get(product_id)
            if product is None or (available_only and not product.available):
                continue
            found.append(product)
        return found

    def active_combos(self) -> list[ComboDefinition]:
        return list(self.combos)
