from frodata import Entity, EntitySet, Query, Response
from testing.integration.config import PRODUCT_COUNT
from testing.integration.fake_service import FakeODataService


def test_execute(_query: Query):
    page = _query.execute()
    assert isinstance(page, Response)
    assert len(page) == PRODUCT_COUNT
    assert all(isinstance(e, Entity) for e in page)
    assert all(e.type == "ODataDemo.Product" for e in page)
    assert page.total_count is None


def test_execute_with_filter(_query: Query):
    page = _query.where(_query["Name"].eq("Bread")).execute()
    assert len(page) == 1
    assert page[0]["Name"] == "Bread"
    assert page[0]["ID"] == 0


def test_execute_with_include_count(_query: Query):
    page = _query.where(_query["Rating"].eq(3)).limit(2).include_count().execute()
    assert len(page) == 2
    assert page.total_count == 7


def test_execute_with_select(_query: Query):
    page = _query.select("ID", "Name").limit(1).execute()
    assert sorted(page[0].keys()) == ["ID", "Name"]


def test_execute_with_order_and_paging(_query: Query):
    page = _query.order_by("Price desc").skip(1).limit(2).execute()
    assert [e["Name"] for e in page] == ["DVD Player", "Fruit Punch"]


def test_execute_sends_serialized_query(
    _query: Query, _fake_server: FakeODataService
):
    _query.where(_query["Name"].eq("Salt & Pepper")).limit(3).execute()

    assert _fake_server.params_of(0) == {
        "$filter": "Name eq 'Salt & Pepper'",
        "$top": "3",
    }
    assert _fake_server.requests[0].headers["OData-Version"] == "4.0"
    assert _fake_server.requests[0].headers["Accept"] == "application/json"


def test_execute_does_not_mutate_query(_query: Query):
    _query.where(_query["Rating"].gt(3))
    before = str(_query)
    first = _query.execute()
    second = _query.execute()
    assert str(_query) == before
    assert [e["ID"] for e in first] == [e["ID"] for e in second] == [0, 7, 9]


def test_find(_query: Query):
    product = _query.find(0)
    assert isinstance(product, Entity)
    assert product.type == "ODataDemo.Product"
    assert product["ID"] == 0


def test_find_with_expand(_query: Query):
    product_with_categories = _query.expand("Categories").find(0)
    assert product_with_categories["Categories"] == [{"ID": 0, "Name": "Food"}]


def test_find_ignores_filter_and_paging(
    _query: Query, _fake_server: FakeODataService
):
    _query.where(_query["Name"].eq("Milk")).skip(3).limit(1).select("ID", "Name")
    product = _query.find(0)

    assert product["Name"] == "Bread"
    assert _fake_server.requests[0].url.path.endswith("/Products(0)")
    assert _fake_server.params_of(0) == {"$select": "ID,Name"}


def test_count(_query: Query):
    assert isinstance(_query.count(), int)
    assert _query.count() == PRODUCT_COUNT


def test_count_with_filters(_query: Query):
    assert _query.where(_query["Name"].eq("Bread")).count() == 1


def test_count_ignores_paging_options(_query: Query, _fake_server: FakeODataService):
    _query.where(_query["Rating"].eq(3)).skip(2).limit(1).order_by("Name")
    assert _query.count() == 7

    assert _fake_server.requests[0].url.path.endswith("/Products/$count")
    assert _fake_server.params_of(0) == {"$filter": "Rating eq 3"}


def test_count_with_byte_order_mark(_query: Query, _fake_server: FakeODataService):
    _fake_server.bom_count = True
    assert _query.count() == PRODUCT_COUNT


def test_is_empty(_query: Query):
    assert _query.is_empty() is False


def test_is_empty_with_filters(_products: EntitySet):
    non_empty = _products.query()
    empty = _products.query()

    assert non_empty.where(non_empty["Name"].eq("Bread")).is_empty() is False
    assert empty.where(empty["Name"].eq("NonExistent")).is_empty() is True


def test_entity_set_shortcuts(_products: EntitySet):
    assert _products.count() == PRODUCT_COUNT
    assert _products.find(9)["Name"] == "Lemonade"


def test_string_function_filter(_query: Query):
    page = _query.where(_query["Name"].contains("Lemon")).execute()
    assert sorted(e["Name"] for e in page) == ["Lemonade", "Pink Lemonade"]


def test_control_characters_in_filter(_query: Query, _fake_server: FakeODataService):
    _query.where(_query["Name"].eq("a\nb"))
    assert str(_query) == "Products?$filter=Name eq 'a%0Ab'"

    assert _query.execute().is_empty()
    assert _fake_server.params_of(0) == {"$filter": "Name eq 'a\nb'"}
    assert b"%0A" in _fake_server.requests[0].url.raw_path
