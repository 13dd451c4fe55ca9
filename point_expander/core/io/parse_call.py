from __future__ import annotations

import ast
import logging
import re
from typing import Any, Optional

from point_expander.core.convert.cast import TypeTag
from point_expander.core.errors import CallParseError
from point_expander.core.model import CallSite

logger = logging.getLogger(__name__)


_INVOCATION_RE = re.compile(r"^point!\s*\((?P<inner>.*)\)\s*;?$", re.DOTALL)
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_OPEN = {"(": ")", "[": "]"}
_KEYWORD_LITERALS = ("True", "False", "None")


def parse_call(text: str) -> CallSite:
    """Parse the textual invocation syntax into a CallSite.

    Accepted forms (optionally wrapped in `point!(...)` or `(...)`):

      1, 1
      1, 1, 1, f32
      [1, 1, 1, 1, 2]: f32

    Expressions are Python literals. A trailing bare identifier is a type name.
    """
    inner = _unwrap(text.strip())
    logger.debug("parsing call %r", inner)

    if inner.startswith("["):
        return _parse_bracketed(inner)

    items = _split_top_level(inner)
    type_tag: Optional[TypeTag] = None
    if items and _IDENT_RE.match(items[-1]) and items[-1] not in _KEYWORD_LITERALS:
        type_tag = TypeTag.parse(items.pop())
    return CallSite(args=tuple(parse_literal(s) for s in items), bracketed=False, type_tag=type_tag)


def _unwrap(text: str) -> str:
    m = _INVOCATION_RE.match(text)
    if m:
        return m.group("inner").strip()
    if text.startswith("(") and _closing_index(text, 0) == len(text) - 1:
        return text[1:-1].strip()
    return text


def _parse_bracketed(inner: str) -> CallSite:
    end = _closing_index(inner, 0)
    body = inner[1:end]
    if "[" in body:
        raise CallParseError(code="E_CALL_PARSE", message="nested lists are not supported")

    rest = inner[end + 1 :].strip()
    type_tag: Optional[TypeTag] = None
    if rest:
        if not rest.startswith(":"):
            raise CallParseError(
                code="E_CALL_PARSE",
                message=f"expected ': <type>' after the list, got {rest!r}",
            )
        type_tag = TypeTag.parse(rest[1:])

    items = _split_top_level(body)
    return CallSite(args=tuple(parse_literal(s) for s in items), bracketed=True, type_tag=type_tag)


def _closing_index(text: str, start: int) -> int:
    stack: list[str] = []
    for i in range(start, len(text)):
        ch = text[i]
        if ch in _OPEN:
            stack.append(_OPEN[ch])
        elif ch in (")", "]"):
            if not stack or stack.pop() != ch:
                raise CallParseError(code="E_CALL_PARSE", message=f"unbalanced {ch!r} at offset {i}")
            if not stack:
                return i
    raise CallParseError(code="E_CALL_PARSE", message=f"unclosed {text[start]!r}")


def _split_top_level(body: str) -> list[str]:
    if not body.strip():
        return []

    items: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in body:
        if ch in _OPEN:
            depth += 1
        elif ch in (")", "]"):
            depth -= 1
        if ch == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    items.append("".join(current).strip())

    for i, item in enumerate(items):
        if not item:
            raise CallParseError(
                code="E_CALL_PARSE",
                message=f"empty expression at position {i}",
                path=f"args[{i}]",
            )
    return items


def parse_literal(source: str) -> Any:
    try:
        return ast.literal_eval(source)
    except (ValueError, SyntaxError) as e:
        raise CallParseError(
            code="E_CALL_PARSE",
            message=f"not a literal expression: {source!r}",
        ) from e
