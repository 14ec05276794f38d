import pytest

from price_service.server import create_app
from price_service.store import PriceStore


@pytest.fixture
def store() -> PriceStore:
    return PriceStore()


@pytest.fixture
def app(store: PriceStore):
    app = create_app(store)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
