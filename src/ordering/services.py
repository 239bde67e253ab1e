"""Lifecycle-scoped wiring of the ordering core.

``OrderingServices`` owns the catalogue, the order store and the sheet sink.
The web app opens it at startup and closes it at shutdown; tests build one
around in-memory adapters. Opening installs the sink that the sheet event
handler delivers to.
"""

import structlog

from ordering.catalogue.port import CatalogLookup, ComboCatalog
from ordering.order.assembly import OrderAssembler
from ordering.order.code import OrderCodeAllocator
from ordering.persistence.port import OrderStore
from ordering.pricing.optimizer import PriceOptimizer
from ordering.sheets import build_sink, reset_sink, set_sink
from ordering.sheets.port import OrderSheetSink

logger = structlog.get_logger(__name__)


class OrderingServices:
    def __init__(
        self,
        catalog: CatalogLookup,
        combos: ComboCatalog,
        store: OrderStore,
        sink: OrderSheetSink,
    ):
        self.catalog = catalog
        self.combos = combos
        self.store = store
        self.sink = sink
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> "OrderingServices":
        if not self._open:
            set_sink(self.sink)
            self._open = True
            logger.info("ordering_services_opened", sink=type(self.sink).__name__, store=type(self.store).__name__)
        return self

    def close(self) -> None:
        if self._open:
            reset_sink()
            self._open = False
            logger.info("ordering_services_closed")

    def __enter__(self):
        return self.open()

    def __exit__(self, *exc_info):
        self.close()

    @property
    def optimizer(self) -> PriceOptimizer:
        return PriceOptimizer(self.catalog, self.combos)

    @property
    def assembler(self) -> OrderAssembler:
        if not self._open:
            raise RuntimeError("OrderingServices is not open")
        return OrderAssembler(
            optimizer=self.optimizer,
            allocator=OrderCodeAllocator(self.store),
            store=self.store,
        )


def build_default_services() -> OrderingServices:
    """Services backed by the domain's repositories and the configured sheet sink."""
    from ordering.catalogue.repository_adapter import RepositoryCatalog
    from ordering.persistence.repository_adapter import RepositoryOrderStore

    catalog = RepositoryCatalog()
    return OrderingServices(
        catalog=catalog,
        combos=catalog,
        store=RepositoryOrderStore(),
        sink=build_sink(),
    )
