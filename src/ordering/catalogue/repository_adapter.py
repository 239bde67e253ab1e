"""Catalogue lookups backed by the domain's repositories."""

from collections.abc import Iterable

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.combo import Combo
from ordering.catalogue.port import CatalogLookup, ComboCatalog
from ordering.catalogue.product import Product
from ordering.pricing.model import ComboDefinition, ProductRecord


class RepositoryCatalog(CatalogLookup, ComboCatalog):
    """Reads Product and Combo aggregates through ``current_domain``."""

    def find_many(self, ids: Iterable[str], available_only: bool = True) -> list[ProductRecord]:
        repo = current_domain.repository_for(Product)
        found = []
        for product_id in dict.fromkeys(str(i) for i in ids):
            try:
                product = repo.get(product_id)
            except ObjectNotFoundError:
                continue
            if available_only and not product.available:
                continue
            found.append(product.to_record())
        return found

    def active_combos(self) -> list[ComboDefinition]:
        combos = current_domain.repository_for(Combo)._dao.query.filter(active=True).all().items
        ordered = sorted(combos, key=lambda combo: (combo.position or 0, combo.created_at))
        return [combo.to_definition() for combo in ordered]
