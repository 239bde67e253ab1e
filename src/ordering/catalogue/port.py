"""Catalogue ports: read-only lookups the pricing engine programs against.

Products and combos are owned by the catalogue; ordering only reads them.
Adapters: ``RepositoryCatalog`` (protean repositories) for the running
service and ``InMemoryCatalog`` for tests and local tooling.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ordering.pricing.model import ComboDefinition, ProductRecord


class CatalogLookup(ABC):
    """Resolves product ids to catalogue records."""

    @abstractmethod
    def find_many(self, ids: Iterable[str], available_only: bool = True) -> list[ProductRecord]:
        """Return the records for ``ids`` that exist (and are available, if requested).

        Unknown ids are simply absent from the result; callers compare lengths
        to detect them.
        """
        ...


class ComboCatalog(ABC):
    """Supplies the combo definitions currently on offer."""

    @abstractmethod
    def active_combos(self) -> list[ComboDefinition]:
        """Active combos in definition order."""
        ...
