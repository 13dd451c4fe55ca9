from __future__ import annotations

from point_expander.core.convert.cast import is_bool, is_integer, is_numeric
from point_expander.core.errors import ArgumentTypeMismatch, ShapeMismatch
from point_expander.core.model import Bindings, CallSite, ExpansionRule


def bind(rule: ExpansionRule, call: CallSite) -> Bindings:
    """Bind the call site's expressions to the rule's capture slots.

    Fixed-arity rules bind positionally, in source order. The repeated rule
    binds its single slot to the full ordered list.

    Every argument is checked before anything is bound: default-typed rules
    take integers only (no implicit cast), typed rules take any number
    (bools only for integer targets).
    """
    if not rule.shape.accepts(call):
        raise ShapeMismatch(
            code="E_SHAPE_MISMATCH",
            message=f"rule {rule.name} does not accept {call.describe()}",
        )

    default_typed = rule.element_type is not None
    float_target = call.type_tag is not None and call.type_tag.is_float
    for i, arg in enumerate(call.args):
        if default_typed and not is_integer(arg):
            raise ArgumentTypeMismatch(
                code="E_ARG_TYPE",
                message=(
                    f"argument {i} ({arg!r}) is not an integer; "
                    "add a trailing type to convert it"
                ),
                path=f"args[{i}]",
            )
        if not is_numeric(arg):
            raise ArgumentTypeMismatch(
                code="E_ARG_TYPE",
                message=f"argument {i} ({arg!r}) is not numeric",
                path=f"args[{i}]",
            )
        if float_target and is_bool(arg):
            raise ArgumentTypeMismatch(
                code="E_ARG_TYPE",
                message=f"argument {i} ({arg!r}) is a bool; bools only cast to integer types",
                path=f"args[{i}]",
            )

    if rule.is_repeated:
        return {rule.slots[0]: list(call.args)}
    return dict(zip(rule.slots, call.args))
