import pydantic
import pytest

from frodata import (
    Entity,
    EntityType,
    Property,
    UnknownPropertyError,
    ValidationError,
)
from testing.integration.config import PRODUCT_TYPE, TAG_TYPE


ORDER_LINE_TYPE = EntityType(
    name="OrderLine",
    namespace="Demo",
    key=["OrderID", "Code"],
    properties=[
        Property(name="OrderID", type="Edm.Int32", nullable=False),
        Property(name="Code", type="Edm.String", nullable=False),
    ],
)


def test_entity_type_full_name():
    assert PRODUCT_TYPE.full_name == "ODataDemo.Product"
    assert PRODUCT_TYPE.has_property("Price")
    assert not PRODUCT_TYPE.has_property("Categories")


def test_entity_type_property_lookup():
    assert PRODUCT_TYPE.get_property("Rating").type == "Edm.Int16"
    with pytest.raises(UnknownPropertyError) as excinfo:
        PRODUCT_TYPE.get_property("Colour")
    assert excinfo.value.property_name == "Colour"
    assert excinfo.value.entity_type == "ODataDemo.Product"


def test_entity_type_key_must_be_declared():
    with pytest.raises(pydantic.ValidationError, match="Key properties"):
        EntityType(name="Broken", namespace="Demo", key=["ID"], properties=[])


def test_single_key_segment():
    assert PRODUCT_TYPE.key_segment(0) == "(0)"
    assert PRODUCT_TYPE.key_segment({"ID": 7}) == "(7)"
    with pytest.raises(ValidationError):
        PRODUCT_TYPE.key_segment("zero")


def test_composite_key_segment():
    assert (
        ORDER_LINE_TYPE.key_segment({"OrderID": 1, "Code": "A'1"})
        == "(OrderID=1,Code='A''1')"
    )
    with pytest.raises(ValidationError, match="composite key"):
        ORDER_LINE_TYPE.key_segment(1)
    with pytest.raises(ValidationError, match="Expected key properties"):
        ORDER_LINE_TYPE.key_segment({"OrderID": 1})


def test_key_segment_escapes_path_characters():
    assert TAG_TYPE.key_segment("a#b") == "('a%23b')"
    assert TAG_TYPE.key_segment("a/b") == "('a%2Fb')"
    assert TAG_TYPE.key_segment("a?b") == "('a%3Fb')"
    assert TAG_TYPE.key_segment("100%") == "('100%25')"
    assert TAG_TYPE.key_segment("new arrivals") == "('new%20arrivals')"
    assert TAG_TYPE.key_segment("O'Neil") == "('O''Neil')"
    assert (
        ORDER_LINE_TYPE.key_segment({"OrderID": 1, "Code": "x,y=z"})
        == "(OrderID=1,Code='x%2Cy%3Dz')"
    )


def test_keyless_entity_type():
    keyless = EntityType(name="Log", namespace="Demo")
    with pytest.raises(ValidationError, match="declares no key"):
        keyless.key_segment(1)


def test_entity_from_payload_strips_annotations():
    entity = Entity.from_payload(
        {
            "@odata.context": "$metadata#Products/$entity",
            "@odata.etag": 'W/"0"',
            "ID": 0,
            "Name": "Bread",
            "Price@odata.type": "#Double",
            "Price": 2.5,
            "Categories": [{"@odata.id": "Categories(0)", "ID": 0, "Name": "Food"}],
        },
        default_type="ODataDemo.Product",
    )
    assert entity.type == "ODataDemo.Product"
    assert entity["ID"] == 0
    assert entity["Categories"] == [{"ID": 0, "Name": "Food"}]
    assert sorted(entity.keys()) == ["Categories", "ID", "Name", "Price"]
    assert "Price" in entity
    assert entity.get("Rating") is None


def test_entity_derived_type():
    entity = Entity.from_payload(
        {"@odata.type": "#ODataDemo.FeaturedProduct", "ID": 1},
        default_type="ODataDemo.Product",
    )
    assert entity.type == "ODataDemo.FeaturedProduct"


def test_entity_missing_field():
    entity = Entity.from_payload({"ID": 1}, default_type="ODataDemo.Product")
    with pytest.raises(KeyError, match="has no field 'Name'"):
        entity["Name"]


def test_entity_from_non_object():
    with pytest.raises(TypeError, match="Expected a JSON object"):
        Entity.from_payload([1, 2], default_type="ODataDemo.Product")  # type: ignore


def test_entity_non_string_type_annotation():
    with pytest.raises(TypeError, match="Expected a string '@odata.type'"):
        Entity.from_payload(
            {"@odata.type": 42, "ID": 1}, default_type="ODataDemo.Product"
        )
