from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExpandError(Exception):
    """Base error envelope. The CLI prints these instead of tracebacks."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<call>"
        return f"{loc}: {self.code}: {self.message}"


class CallLoadError(ExpandError):
    pass


class CallParseError(ExpandError):
    pass


class UnknownTypeError(ExpandError):
    pass


class ShapeMismatch(ExpandError):
    """No rule in the table accepts the call site's shape."""


class ArgumentTypeMismatch(ExpandError):
    """An argument cannot be pushed into a default-typed sequence without a cast."""
