from __future__ import annotations

from typing import Any, Optional

from point_expander.core.bind.binder import bind
from point_expander.core.convert.cast import TypeTag, cast
from point_expander.core.match.matcher import match
from point_expander.core.model import Bindings, CallSite, ExpansionRule, TypedSequence


def resolve_element_type(rule: ExpansionRule, call: CallSite) -> TypeTag:
    if rule.element_type is not None:
        return rule.element_type
    assert call.type_tag is not None
    return call.type_tag


def expand(
    rule: ExpansionRule,
    bindings: Bindings,
    element_type: Optional[TypeTag] = None,
) -> TypedSequence:
    """Build the output sequence for a bound rule.

    Captures are converted with `cast` and appended in bind order. The
    sequence is only returned once complete.
    """
    tag = element_type or rule.element_type
    if tag is None:
        raise ValueError(f"rule {rule.name} needs an element type from the call site")

    out = TypedSequence(tag)
    for slot in rule.slots:
        captured = bindings[slot]
        if rule.is_repeated:
            for expr in captured:
                out.append(cast(expr, tag))
        else:
            out.append(cast(captured, tag))
    return out


def expand_call(call: CallSite) -> TypedSequence:
    m = match(call)
    bindings = bind(m.rule, call)
    return expand(m.rule, bindings, resolve_element_type(m.rule, call))


def point(*args: Any) -> TypedSequence:
    """Expand a Python-level invocation.

        point(1, 1)                  -> [1, 1]            (i32)
        point(1, 1, 1, F32)          -> [1.0, 1.0, 1.0]
        point([1, 1, 1, 1, 2], F32)  -> [1.0, 1.0, 1.0, 1.0, 2.0]
    """
    return expand_call(CallSite.from_args(*args))
