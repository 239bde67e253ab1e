import pytest
from ordering.catalogue.fake_adapter import InMemoryCatalog
from ordering.persistence.fake_adapter import InMemoryOrderStore
from ordering.persistence.repository_adapter import RepositoryOrderStore
from ordering.pricing.model import ComboDefinition, ProductRecord
from ordering.sheets import reset_sink, set_sink
from ordering.sheets.fake_adapter import FakeSheetSink
from protean.integrations.pytest import DomainFixture

TSHIRT = ProductRecord(id="tshirt", name="Campus T-shirt", price=150000)
CAP = ProductRecord(id="cap", name="Campus Cap", price=100000)
MUG = ProductRecord(id="mug", name="Campus Mug", price=60000)
TOTE = ProductRecord(id="tote", name="Tote Bag", price=80000, available=False)

SHIRT_AND_CAP = ComboDefinition(
    id="combo-shirt-cap",
    name="T-shirt + Cap",
    required_product_counts={"tshirt": 1, "cap": 1},
    combo_price=220000,
)
TWO_MUGS = ComboDefinition(
    id="combo-two-mugs",
    name="Mug pair",
    required_product_counts={"mug": 2},
    combo_price=100000,
)


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture()
def catalog():
    return InMemoryCatalog(products=[TSHIRT, CAP, MUG, TOTE], combos=[SHIRT_AND_CAP, TWO_MUGS])


@pytest.fixture()
def order_store():
    return InMemoryOrderStore()


@pytest.fixture()
def repository_store():
    """Order store on the domain's repositories; saving an order releases its events."""
    return RepositoryOrderStore()


@pytest.fixture()
def sheet_sink():
    sink = FakeSheetSink()
    set_sink(sink)
    yield sink
    reset_sink()
