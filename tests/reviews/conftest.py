import pytest
from protean.integrations.pytest import DomainFixture
from reviews.ledger import reset_order_ledger, set_order_ledger
from reviews.ledger.fake_adapter import FakeOrderLedger


@pytest.fixture(scope="session")
def reviews_bed():
    from reviews.domain import reviews

    bed = DomainFixture(reviews)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(reviews_bed):
    with reviews_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def ledger():
    """A fresh in-memory order ledger for every test."""
    fake = FakeOrderLedger()
    set_order_ledger(fake)
    yield fake
    reset_order_ledger()
