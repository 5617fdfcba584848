"""Tests for invert() across every structural kind.

Each round-trip case parses an input forward with the schema, parses the
result with the inverted schema, and expects the original input back.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

import pytest

from invertible import schema as s
from invertible.contracts.errors import SchemaValidationError
from invertible.inversion import invert
from invertible.invertible import InvertibleSchema
from invertible.schema import MISSING
from invertible.testing import parse_float_node, round_trip

FLOAT = parse_float_node()

ROUND_TRIP_CASES: list[tuple[str, s.Schema, list[Any]]] = [
    ("object", s.object_({"foo": FLOAT}), [{"foo": "5.3"}]),
    ("array", s.array(FLOAT), [["5", "10.3"]]),
    ("union", s.union([FLOAT, s.boolean()]), ["10.3", True]),
    (
        "discriminated_union",
        s.discriminated_union(
            "type",
            [
                s.object_({"type": s.literal("a"), "value": FLOAT}),
                s.object_({"type": s.literal("b"), "value": s.boolean()}),
            ],
        ),
        [{"type": "a", "value": "3.5"}, {"type": "b", "value": True}],
    ),
    (
        "intersection",
        s.intersection(s.object_({"a": FLOAT}), s.object_({"b": FLOAT.optional()})),
        [{"a": "3.5"}, {"a": "3.5", "b": "7.8"}],
    ),
    ("tuple", s.tuple_([FLOAT, s.number()], rest=FLOAT), [["3", 4, "5", "6"]]),
    ("record", s.record(FLOAT), [{"a": "3.5", "b": "3.6"}]),
    ("map", s.map_(s.string(), FLOAT), [{"a": "22.8", "b": "317"}]),
    ("set", s.set_(FLOAT), [{"3", "4.5"}]),
    ("lazy", s.lazy(lambda: FLOAT), ["3", "4.5"]),
    ("refine", FLOAT.refine(lambda n: n % 2), ["3", "5", "7.1"]),
    ("optional", FLOAT.optional(), [None, "3.5"]),
    ("nullable", FLOAT.nullable(), [None, "3.5"]),
    ("default", FLOAT.default("13"), ["3.5"]),
    ("catch", FLOAT.catch(18), ["3.5"]),
    ("branded", FLOAT.brand("test"), ["3.5"]),
    ("pipeline", FLOAT.pipe(s.number().negative()), ["-3.5"]),
    ("readonly_array", s.array(FLOAT).readonly(), [["5.3"], ["5", "10.3"]]),
    ("readonly_nested_array", s.object_({"xs": s.array(FLOAT).readonly()}), [{"xs": ["5.3"]}]),
]


class TestRoundTrip:
    """invert(S).parse(S.parse(v)) == v for every structural kind."""

    @pytest.mark.parametrize(
        ("schema", "inputs"),
        [(schema, inputs) for _, schema, inputs in ROUND_TRIP_CASES],
        ids=[name for name, _, _ in ROUND_TRIP_CASES],
    )
    def test_round_trip(self, schema: s.Schema, inputs: list[Any]) -> None:
        for value in inputs:
            assert round_trip(schema, value) == value

    def test_object_forward_output_is_domain_value(self) -> None:
        schema = s.object_({"foo": FLOAT})

        assert schema.parse({"foo": "5.3"}) == {"foo": 5.3}
        assert invert(schema).parse({"foo": 5.3}) == {"foo": "5.3"}

    def test_set_forward_output_is_domain_value(self) -> None:
        schema = s.set_(FLOAT)

        assert schema.parse({"3", "4.5"}) == {3.0, 4.5}
        assert invert(schema).parse({3.0, 4.5}) == {"3", "4.5"}

    def test_discriminated_union_non_float_branch_unchanged(self) -> None:
        schema = s.discriminated_union(
            "type",
            [
                s.object_({"type": s.literal("a"), "value": FLOAT}),
                s.object_({"type": s.literal("b"), "value": s.boolean()}),
            ],
        )
        inverted = invert(schema)

        assert inverted.parse({"type": "a", "value": 3.5}) == {"type": "a", "value": "3.5"}
        assert inverted.parse({"type": "b", "value": False}) == {"type": "b", "value": False}

    def test_readonly_round_trip(self) -> None:
        schema = s.object_({"a": FLOAT}).readonly()

        forward = schema.parse({"a": "3.5"})
        back = invert(schema).parse(forward)

        assert isinstance(forward, MappingProxyType)
        assert isinstance(back, MappingProxyType)
        assert dict(back) == {"a": "3.5"}

    def test_readonly_array_inverse_accepts_frozen_output(self) -> None:
        schema = s.array(FLOAT).readonly()

        forward = schema.parse(["5.3"])
        back = invert(schema).parse(forward)

        assert isinstance(forward, s.FrozenList)
        assert isinstance(back, s.FrozenList)
        assert back == ["5.3"]

    def test_missing_optional_key_stays_missing(self) -> None:
        schema = s.object_({"a": FLOAT, "b": FLOAT.optional()})

        assert round_trip(schema, {"a": "1"}) == {"a": "1"}
        assert "b" not in invert(schema).parse({"a": 1.0})

    def test_function_arguments_are_inverted(self) -> None:
        schema = s.function([FLOAT], s.boolean())
        received: list[Any] = []

        def impl(value: Any) -> bool:
            received.append(value)
            return True

        wrapped = invert(schema).parse(impl)

        assert wrapped(3.5) is True
        assert received == ["3.5"]

    def test_function_return_is_inverted(self) -> None:
        schema = s.function([s.number()], FLOAT)

        wrapped = invert(schema).parse(lambda n: n * 2)

        assert wrapped(2.25) == "4.5"


class TestInvertibleNode:
    """Inverting a bidirectional node swaps its four parts."""

    def test_parts_are_swapped(self, float_node: InvertibleSchema) -> None:
        inverted = invert(float_node)

        assert isinstance(inverted, InvertibleSchema)
        assert inverted.parse_fn is float_node.format_fn
        assert inverted.format_fn is float_node.parse_fn
        assert isinstance(inverted.input_schema, s.NumberSchema)
        assert isinstance(inverted.output_schema, s.StringSchema)

    def test_inverse_method_matches_invert(self, float_node: InvertibleSchema) -> None:
        assert float_node.inverse().parse(2.5) == invert(float_node).parse(2.5) == "2.5"

    def test_double_inversion_restores_forward_behaviour(self, float_node: InvertibleSchema) -> None:
        twice = invert(invert(float_node))

        assert twice.parse("5.3") == float_node.parse("5.3") == 5.3
        assert twice.safe_parse("abc").success is False

    def test_nested_node_schemas_are_inverted(self) -> None:
        node = s.object_({"x": FLOAT})
        outer = InvertibleSchema(
            s.string(),
            lambda text, ctx: {"x": text},
            node,
            lambda value, ctx: value["x"],
        )
        inverted = invert(outer)

        # Input side is now the inverted object: number -> string field
        assert inverted.parse({"x": 4.5}) == "4.5"
        assert outer.parse("4.5") == {"x": 4.5}

    def test_plain_pipeline_order_is_reversed(self) -> None:
        schema = FLOAT.pipe(s.number().negative())
        inverted = invert(schema)

        assert isinstance(inverted, s.PipelineSchema)
        assert isinstance(inverted.in_, s.NumberSchema)
        assert isinstance(inverted.out, InvertibleSchema)
        assert inverted.safe_parse(3.5).success is False  # negativity still enforced first


class TestStructure:
    """Inversion builds new nodes and never edits the input tree."""

    def test_leaves_are_returned_unchanged(self) -> None:
        for leaf in (s.string(), s.number(), s.boolean(), s.none(), s.literal("x"), s.any_(), s.never()):
            assert invert(leaf) is leaf

    def test_original_tree_is_untouched(self) -> None:
        shape = {"foo": FLOAT}
        schema = s.object_(shape)

        invert(schema)

        assert schema.shape["foo"] is FLOAT
        assert schema.parse({"foo": "1.5"}) == {"foo": 1.5}

    def test_shared_subschema_inverted_per_parent(self) -> None:
        shared = s.array(FLOAT)
        schema = s.object_({"left": shared, "right": shared})
        inverted = invert(schema)

        assert inverted.shape["left"] is not shared
        assert inverted.shape["left"] is not inverted.shape["right"]
        assert shared.parse(["1"]) == [1.0]

    def test_object_settings_preserved(self) -> None:
        schema = s.object_({"a": FLOAT}).strict()
        inverted = invert(schema)

        assert inverted.unknown_keys == schema.unknown_keys
        assert inverted.safe_parse({"a": 1.0, "extra": 1}).success is False

    def test_object_catchall_inverted(self) -> None:
        schema = s.object_({}, catchall=FLOAT)

        assert round_trip(schema, {"x": "1.5", "y": "2"}) == {"x": "1.5", "y": "2"}

    def test_array_length_bounds_preserved(self) -> None:
        inverted = invert(s.array(FLOAT).min(2))

        assert inverted.safe_parse([1.0]).success is False
        assert inverted.parse([1.0, 2.5]) == ["1", "2.5"]

    def test_default_catch_and_brand_are_unwrapped(self, float_node: InvertibleSchema) -> None:
        for wrapped in (float_node.default("1"), float_node.catch(0), float_node.brand("Price")):
            assert isinstance(invert(wrapped), InvertibleSchema)

    def test_default_not_applied_on_inverse(self) -> None:
        schema = s.object_({"a": FLOAT.default("13")})

        assert schema.parse({}) == {"a": 13.0}
        assert invert(schema).safe_parse({}).success is False

    def test_catch_fallback_not_applied_on_inverse(self) -> None:
        inverted = invert(FLOAT.catch(18))

        with pytest.raises(SchemaValidationError):
            inverted.parse("not a number")

    def test_optional_and_nullable_rewrapped(self) -> None:
        assert isinstance(invert(FLOAT.optional()), s.OptionalSchema)
        assert isinstance(invert(FLOAT.nullable()), s.NullableSchema)
        assert invert(FLOAT.optional()).parse(MISSING) is MISSING

    def test_union_options_inverted_in_order(self) -> None:
        inverted = invert(s.union([FLOAT, s.boolean()]))

        assert isinstance(inverted, s.UnionSchema)
        assert isinstance(inverted.options[0], InvertibleSchema)
        assert isinstance(inverted.options[1], s.BooleanSchema)


class TestLazy:
    """Lazy nodes are inverted lazily so recursive schemas terminate."""

    def test_getter_not_called_during_inversion(self) -> None:
        calls: list[int] = []

        def getter() -> s.Schema:
            calls.append(1)
            return FLOAT

        inverted = invert(s.lazy(getter))

        assert calls == []
        assert inverted.parse(3.0) == "3"
        assert calls == [1]

    def test_self_referential_schema(self) -> None:
        tree: s.Schema = s.lazy(
            lambda: s.object_({"value": FLOAT, "children": s.array(tree)}),
        )
        data = {
            "value": "1",
            "children": [
                {"value": "2.5", "children": []},
                {"value": "3", "children": [{"value": "-4.25", "children": []}]},
            ],
        }

        inverted = invert(tree)

        assert tree.parse(data)["children"][1]["children"][0]["value"] == -4.25
        assert inverted.parse(tree.parse(data)) == data

    def test_self_referential_double_inversion(self) -> None:
        tree: s.Schema = s.lazy(lambda: s.object_({"value": FLOAT, "next": tree.optional()}))
        data = {"value": "1", "next": {"value": "2"}}

        assert invert(invert(tree)).parse(data) == tree.parse(data)
