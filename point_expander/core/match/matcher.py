from __future__ import annotations

import logging
from typing import Sequence

from point_expander.core.errors import ShapeMismatch
from point_expander.core.model import CallSite, ExpansionRule, MatchResult
from point_expander.core.rules.rule_table import RULE_TABLE

logger = logging.getLogger(__name__)


def match(call: CallSite, rules: Sequence[ExpansionRule] = RULE_TABLE) -> MatchResult:
    """Return the first rule (in declaration order) whose shape accepts `call`.

    There is no backtracking: a 2- or 3-argument call is taken by the
    fixed-arity rules even though a one-or-more test would also accept it.
    Raises ShapeMismatch when no rule accepts the call.
    """
    for rule in rules:
        if rule.shape.accepts(call):
            logger.debug("matched rule %s for %s", rule.name, call.describe())
            return MatchResult(rule=rule, captures=call.args)

    accepted = "; ".join(r.shape.describe() for r in rules)
    raise ShapeMismatch(
        code="E_SHAPE_MISMATCH",
        message=f"no rule matches {call.describe()} (accepted shapes: {accepted})",
    )
