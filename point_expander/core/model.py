from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from point_expander.core.convert.cast import TypeTag


@dataclass(frozen=True)
class FixedArity:
    arity: int
    has_trailing_type: bool

    def accepts(self, call: "CallSite") -> bool:
        return (
            not call.bracketed
            and len(call.args) == self.arity
            and (call.type_tag is not None) == self.has_trailing_type
        )

    def describe(self) -> str:
        s = f"{self.arity} bare expressions"
        return s + " + type" if self.has_trailing_type else s


@dataclass(frozen=True)
class Repeated:
    min_items: int = 1

    def accepts(self, call: "CallSite") -> bool:
        return call.bracketed and len(call.args) >= self.min_items and call.type_tag is not None

    def describe(self) -> str:
        return f"[list of >= {self.min_items} expressions]: type"


Shape = Union[FixedArity, Repeated]


@dataclass(frozen=True)
class ExpansionRule:
    name: str
    shape: Shape
    # None: the element type comes from the call site's trailing type.
    element_type: Optional[TypeTag]
    # Number of positional captures; None for the repeated group.
    binding_arity: Optional[int]
    slots: tuple[str, ...]

    @property
    def is_repeated(self) -> bool:
        return isinstance(self.shape, Repeated)


@dataclass(frozen=True)
class CallSite:
    args: tuple[Any, ...]
    bracketed: bool = False
    type_tag: Optional[TypeTag] = None

    @classmethod
    def from_args(cls, *args: Any) -> "CallSite":
        """Build a call site from a Python-level invocation.

        A trailing TypeTag is the type annotation; a single list/tuple left
        over is the bracketed list.
        """
        type_tag: Optional[TypeTag] = None
        rest = args
        if rest and isinstance(rest[-1], TypeTag):
            type_tag = rest[-1]
            rest = rest[:-1]
        if len(rest) == 1 and isinstance(rest[0], (list, tuple)):
            return cls(args=tuple(rest[0]), bracketed=True, type_tag=type_tag)
        return cls(args=tuple(rest), bracketed=False, type_tag=type_tag)

    def describe(self) -> str:
        if self.bracketed:
            s = f"bracketed list of {len(self.args)} expressions"
        else:
            s = f"{len(self.args)} bare expressions"
        if self.type_tag is not None:
            s += f" + type {self.type_tag.name}"
        return s


# slot name -> one expression, or the ordered list for a repeated group
Bindings = dict[str, Any]


@dataclass(frozen=True)
class MatchResult:
    rule: ExpansionRule
    captures: tuple[Any, ...]


class TypedSequence(list):
    """A list whose items were all converted to `element_type`."""

    def __init__(self, element_type: TypeTag, items: Iterable[Any] = ()) -> None:
        super().__init__(items)
        self.element_type = element_type

    def __repr__(self) -> str:
        return f"TypedSequence[{self.element_type.name}]({list.__repr__(self)})"
