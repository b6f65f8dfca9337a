import pytest

from frodata import Query, UnknownPropertyError, ValidationError
from frodata.models.query import PropertyCriteria
from frodata.models.schema import Property


def test_bare_collection(_query: Query):
    assert str(_query) == "Products"
    assert dict(_query.params) == {}


def test_getitem_returns_property_criteria(_query: Query):
    criteria = _query["Name"]
    assert isinstance(criteria, PropertyCriteria)
    assert isinstance(criteria.property, Property)
    assert criteria.property.name == "Name"
    assert criteria.property.type == "Edm.String"


def test_getitem_unknown_property(_query: Query):
    with pytest.raises(UnknownPropertyError, match="Property 'Color' is not declared"):
        _query["Color"]
    # The error is also a generic lookup failure
    with pytest.raises(LookupError):
        _query["Color"]


def test_getitem_rejects_navigation_property(_query: Query):
    # navigation properties cannot be compared
    with pytest.raises(ValidationError):
        _query["Categories"]


def test_where(_query: Query):
    criteria = _query["Name"].eq("Bread")
    assert _query.where(criteria) is _query
    assert dict(_query.params) == {"$filter": "Name eq 'Bread'"}
    assert str(_query) == "Products?$filter=Name eq 'Bread'"


def test_where_accumulates_with_and(_query: Query):
    _query.where(_query["Price"].gt(2.5)).where(_query["Rating"].le(3))
    assert str(_query) == "Products?$filter=Price gt 2.5 and Rating le 3"


def test_where_groups_disjunctions(_query: Query):
    _query.where(_query["Rating"].eq(4) | _query["Rating"].eq(5))
    assert _query.params["$filter"] == "Rating eq 4 or Rating eq 5"

    _query.where(_query["Price"].lt(10))
    assert _query.params["$filter"] == "(Rating eq 4 or Rating eq 5) and Price lt 10"


def test_where_rejects_non_criteria(_query: Query):
    with pytest.raises(TypeError, match="Invalid criterion type"):
        _query.where("Name eq 'Bread'")  # type: ignore
    assert dict(_query.params) == {}


def test_search(_query: Query):
    term = '"mountain bike"'
    assert _query.search(term) is _query
    assert dict(_query.params) == {"$search": '"mountain bike"'}
    assert str(_query) == 'Products?$search="mountain bike"'


def test_search_with_multiple_terms(_query: Query):
    _query.search('"mountain bike"').search("NOT clothing")
    assert dict(_query.params) == {"$search": '"mountain bike" AND NOT clothing'}
    assert str(_query) == 'Products?$search="mountain bike" AND NOT clothing'


def test_skip(_query: Query):
    assert _query.skip(5) is _query
    assert dict(_query.params) == {"$skip": 5}
    assert str(_query) == "Products?$skip=5"


def test_limit(_query: Query):
    assert _query.limit(5) is _query
    assert dict(_query.params) == {"$top": 5}
    assert str(_query) == "Products?$top=5"


@pytest.mark.parametrize("value", [-1, 2.5, "5", True, None])
def test_skip_and_limit_validation(_query: Query, value):
    with pytest.raises(ValidationError):
        _query.skip(value)
    with pytest.raises(ValidationError):
        _query.limit(value)
    # failed builder calls leave no trace
    assert str(_query) == "Products"


def test_skip_zero_is_serialized(_query: Query):
    _query.skip(0)
    assert str(_query) == "Products?$skip=0"


def test_include_count(_query: Query):
    assert _query.include_count() is _query
    assert dict(_query.params) == {"$count": "true"}
    assert str(_query) == "Products?$count=true"
    # idempotent
    _query.include_count()
    assert str(_query) == "Products?$count=true"


def test_select(_query: Query):
    assert _query.select("Name", "Price") is _query
    assert dict(_query.params) == {"$select": "Name,Price"}
    assert str(_query) == "Products?$select=Name,Price"


def test_expand(_query: Query):
    assert _query.expand("Supplier") is _query
    assert dict(_query.params) == {"$expand": "Supplier"}
    assert str(_query) == "Products?$expand=Supplier"


def test_order_by(_query: Query):
    assert _query.order_by("Name", "Price") is _query
    assert dict(_query.params) == {"$orderby": "Name,Price"}
    assert str(_query) == "Products?$orderby=Name,Price"


def test_name_lists_replace_previous_values(_query: Query):
    _query.select("Name").select("Price", "Rating")
    _query.expand("Supplier").expand("Categories")
    _query.order_by("Name").order_by("Price desc")
    assert dict(_query.params) == {
        "$select": "Price,Rating",
        "$expand": "Categories",
        "$orderby": "Price desc",
    }


def test_empty_name_list_clears_option(_query: Query):
    _query.select("Name").expand("Supplier")
    _query.select()
    assert str(_query) == "Products?$expand=Supplier"


def test_options_keep_first_set_order(_query: Query):
    _query.limit(5).where(_query["Name"].eq("Bread")).skip(10).limit(3)
    assert str(_query) == "Products?$top=3&$filter=Name eq 'Bread'&$skip=10"


def test_structural_characters_are_escaped(_query: Query):
    _query.where(_query["Name"].eq("Salt & Pepper #1"))
    assert str(_query) == "Products?$filter=Name eq 'Salt %26 Pepper %231'"


def test_params_view_is_read_only(_query: Query):
    _query.skip(5)
    with pytest.raises(TypeError):
        _query.params["$skip"] = 10  # type: ignore


@pytest.mark.parametrize(
    "chain",
    [
        lambda q: q.where(q["Name"].eq("Bread")),
        lambda q: q.search("bread"),
        lambda q: q.skip(1),
        lambda q: q.limit(1),
        lambda q: q.include_count(),
        lambda q: q.select("Name"),
        lambda q: q.expand("Supplier"),
        lambda q: q.order_by("Name"),
        lambda q: q.order_by("Price").skip(2).include_count().where(q["ID"].gt(1)),
        lambda q: q.expand("Categories").search("x").select("ID").limit(2),
    ],
)
def test_builders_return_same_instance(_query: Query, chain):
    assert chain(_query) is _query


def test_entity_set_is_bound(_query: Query, _products):
    _query.skip(1).limit(2)
    assert _query.entity_set is _products
    assert repr(_query) == "Query('Products?$skip=1&$top=2')"
