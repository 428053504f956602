#!/usr/bin/env python3
"""
Tests for the Resolver: namespace nesting, enum ownership, global roots.
"""

import pytest

from ardour_emmylua.resolver import Resolver, namespace_of, resolve
from ardour_emmylua.exceptions import StructureError
from ardour_emmylua.schemas import ClassKind, ExtractionResult, LuaClass, LuaEnum


def _class(name, kind=ClassKind.CLASS):
    return LuaClass(name=name, kind=kind)


def test_namespace_of():
    assert namespace_of("ARDOUR.Location.Flags") == "ARDOUR.Location"
    assert namespace_of("Session") is None


@pytest.mark.parametrize("order", [["A", "A.B"], ["A.B", "A"]])
def test_nesting_is_independent_of_discovery_order(order):
    hierarchy = resolve([_class(name) for name in order])
    parent, nested = hierarchy.class_map["A"], hierarchy.class_map["A.B"]

    assert [lua_class.name for lua_class in hierarchy.classes] == ["A", "A.B"]
    assert parent.nested_classes == [nested]
    assert nested.parent == "A"
    assert parent.parent is None


def test_equal_length_names_keep_discovery_order():
    hierarchy = resolve([_class("B.Y"), _class("A.X"), _class("B"), _class("A")])
    assert [lua_class.name for lua_class in hierarchy.classes] == ["B", "A", "B.Y", "A.X"]
    assert hierarchy.class_map["A"].nested_classes[0].name == "A.X"
    assert hierarchy.class_map["B"].nested_classes[0].name == "B.Y"


def test_missing_intermediate_namespace_leaves_class_top_level():
    """Only the direct namespace counts: A.B.C does not nest under A."""
    hierarchy = resolve([_class("A", ClassKind.NAMESPACE), _class("A.B.C")])
    assert hierarchy.class_map["A.B.C"].parent is None
    assert hierarchy.class_map["A"].nested_classes == []


def test_enums_attach_to_their_owning_class():
    location = _class("ARDOUR.Location")
    flags = LuaEnum(type="ARDOUR.Location.Flags", values=["ARDOUR.Location.Flags.IsMark"])
    mode = LuaEnum(type="ARDOUR.TrackMode", values=["ARDOUR.TrackMode.Normal"])

    hierarchy = Resolver().resolve([location], [flags, mode])

    assert location.nested_enums == [flags]
    assert flags.parent == "ARDOUR.Location"
    assert mode.parent is None
    assert hierarchy.enums == [flags, mode]


def test_duplicate_class_name_is_fatal():
    with pytest.raises(StructureError, match="Duplicate class name: ARDOUR.Route"):
        resolve([_class("ARDOUR.Route"), _class("ARDOUR.Route")])


def test_global_roots():
    """
    Enum namespaces and value namespaces come first, then top-level classes:
    a namespace contributes its own name, anything else its namespace.
    """
    extraction = ExtractionResult(
        classes=[
            _class("ARDOUR.LuaAPI", ClassKind.NAMESPACE),
            _class("Session", ClassKind.POINTER_CLASS),
            _class("C.StringVector", ClassKind.ARRAY),
            _class("ARDOUR.LuaAPI.Vamp", ClassKind.NAMESPACE),
        ],
        enums=[
            LuaEnum(type="ARDOUR.TrackMode", values=["ARDOUR.TrackMode.Normal", "ARDOUR.TrackMode.NonLayered"]),
        ],
    )
    hierarchy = resolve(extraction)

    # Vamp nests under LuaAPI, Session has no namespace
    assert hierarchy.global_roots == ["ARDOUR", "ARDOUR.TrackMode", "ARDOUR.LuaAPI", "C"]


def test_resolving_an_extraction_result_ignores_extra_enums():
    extraction = ExtractionResult(classes=[_class("A")], enums=[])
    hierarchy = Resolver().resolve(extraction, [LuaEnum(type="X.Y", values=["X.Y.Z"])])
    assert hierarchy.enums == []
