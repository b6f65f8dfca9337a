import pytest

from frodata import EntitySet, ODataService, Query
from testing.integration.config import (
    PRODUCT_TYPE,
    PRODUCTS_SET,
    SERVICE_NAME,
    SERVICE_URL,
)
from testing.integration.fake_service import FakeODataService


@pytest.fixture
def _fake_server() -> FakeODataService:
    return FakeODataService()


@pytest.fixture
def _service(_fake_server: FakeODataService):
    service = ODataService.connect(
        SERVICE_URL,
        name=SERVICE_NAME,
        transport=_fake_server.transport(),
    )
    service.register_entity_set(PRODUCTS_SET, PRODUCT_TYPE)
    yield service
    # free resources
    service.close()


@pytest.fixture
def _products(_service: ODataService) -> EntitySet:
    return _service.entity_set(PRODUCTS_SET)


@pytest.fixture
def _query(_products: EntitySet) -> Query:
    return _products.query()
