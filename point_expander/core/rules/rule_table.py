from __future__ import annotations

from point_expander.core.convert.cast import I32
from point_expander.core.model import ExpansionRule, FixedArity, Repeated


DEFAULT_ELEMENT_TYPE = I32

# Declaration order is precedence order. Fixed-arity rules come before the
# repeated rule.
RULE_TABLE: tuple[ExpansionRule, ...] = (
    ExpansionRule(
        name="pair",
        shape=FixedArity(2, has_trailing_type=False),
        element_type=DEFAULT_ELEMENT_TYPE,
        binding_arity=2,
        slots=("x", "y"),
    ),
    ExpansionRule(
        name="triple",
        shape=FixedArity(3, has_trailing_type=False),
        element_type=DEFAULT_ELEMENT_TYPE,
        binding_arity=3,
        slots=("x", "y", "z"),
    ),
    ExpansionRule(
        name="typed-triple",
        shape=FixedArity(3, has_trailing_type=True),
        element_type=None,
        binding_arity=3,
        slots=("x", "y", "z"),
    ),
    ExpansionRule(
        name="typed-list",
        shape=Repeated(min_items=1),
        element_type=None,
        binding_arity=None,
        slots=("xs",),
    ),
)


def rule_by_name(name: str) -> ExpansionRule:
    for rule in RULE_TABLE:
        if rule.name == name:
            return rule
    raise KeyError(name)
