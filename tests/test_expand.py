from point_expander.core.bind.binder import bind
from point_expander.core.convert.cast import F32, F64, I32, U8
from point_expander.core.errors import ArgumentTypeMismatch, ShapeMismatch
from point_expander.core.expand.expander import expand, expand_call, point
from point_expander.core.io.parse_call import parse_call
from point_expander.core.model import CallSite, TypedSequence
from point_expander.core.rules.rule_table import rule_by_name


def test_point_scenarios():
    assert point(1, 1) == [1, 1]
    assert point(1, 1, 1) == [1, 1, 1]
    assert point(1, 1, 1, F32) == [1.0, 1.0, 1.0]
    assert point([1, 1, 1, 1, 2], F32) == [1.0, 1.0, 1.0, 1.0, 2.0]


def test_point_four_bare_expressions_is_rejected():
    try:
        point(1, 1, 1, 1)
        assert False, "expected ShapeMismatch"
    except ShapeMismatch as e:
        assert e.code == "E_SHAPE_MISMATCH"


def test_default_rules_use_i32():
    seq = point(4, 5)
    assert isinstance(seq, TypedSequence)
    assert seq.element_type == I32
    assert point(1, 2, 3).element_type == I32


def test_typed_rules_use_call_site_type():
    seq = point([1, 2], U8)
    assert seq.element_type == U8
    assert point(1, 2, 3, F64).element_type == F64


def test_expand_preserves_source_order_and_length():
    xs = [5, 3, 5, 1, 3]
    seq = point(xs, F32)
    assert seq == [5.0, 3.0, 5.0, 1.0, 3.0]
    assert len(seq) == len(xs)


def test_expand_converts_every_element():
    assert point(1.9, -1.9, 2, I32) == [1, -1, 2]
    assert point([-1, 256, 3], U8) == [255, 0, 3]
    assert point(2**31, 0) == [-(2**31), 0]


def test_expand_with_explicit_rule_and_bindings():
    seq = expand(rule_by_name("pair"), {"x": 1, "y": 2})
    assert seq == [1, 2]
    assert seq.element_type == I32

    seq = expand(rule_by_name("typed-list"), {"xs": [1, 2, 3]}, F32)
    assert seq == [1.0, 2.0, 3.0]


def test_expand_typed_rule_needs_element_type():
    try:
        expand(rule_by_name("typed-triple"), {"x": 1, "y": 2, "z": 3})
        assert False, "expected ValueError"
    except ValueError:
        pass


def test_bind_then_expand_pipeline():
    call = CallSite.from_args([2, 1], F64)
    rule = rule_by_name("typed-list")
    assert expand(rule, bind(rule, call), F64) == expand_call(call)


def test_untyped_float_arguments_are_rejected():
    try:
        point(1.0, 1.0, 1.0)
        assert False, "expected ArgumentTypeMismatch"
    except ArgumentTypeMismatch as e:
        assert e.code == "E_ARG_TYPE"


def test_each_call_gets_its_own_sequence():
    a = point(1, 1)
    b = point(1, 1)
    assert a == b
    assert a is not b
    a.append(3)
    assert b == [1, 1]


def test_typed_sequence_repr():
    assert repr(point(1, 2)) == "TypedSequence[i32]([1, 2])"


def test_text_scenarios_with_long_form_type_names():
    assert expand_call(parse_call("1, 1, 1, float32")) == [1.0, 1.0, 1.0]
    assert expand_call(parse_call("[1,1,1,1,2]: float32")) == [1.0, 1.0, 1.0, 1.0, 2.0]


def test_huge_integers_convert_to_infinity():
    assert point([10**400], F64) == [float("inf")]
    assert point([2**1024, -(2**1024)], F32) == [float("inf"), float("-inf")]


def test_none_argument_is_rejected_as_non_numeric():
    try:
        expand_call(parse_call("1, 1, None"))
        assert False, "expected ArgumentTypeMismatch"
    except ArgumentTypeMismatch as e:
        assert e.path == "args[2]"
