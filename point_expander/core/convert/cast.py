"""Primitive numeric type tags and the `as`-style conversion utility.

Integer conversions never fail and never saturate: the source value is
reduced modulo 2**bits and reinterpreted as two's complement for signed
targets. Float targets round to the nearest representable value, going to
+/-inf when out of range.
"""
from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Literal, Union

import numpy as np

from point_expander.core.errors import ArgumentTypeMismatch, UnknownTypeError


TypeKind = Literal["signed", "unsigned", "float"]
Number = Union[int, float]


@dataclass(frozen=True)
class TypeTag:
    name: str
    kind: TypeKind
    bits: int

    def __str__(self) -> str:
        return self.name

    @property
    def is_float(self) -> bool:
        return self.kind == "float"

    @property
    def min_value(self) -> Number:
        if self.kind == "signed":
            return -(1 << (self.bits - 1))
        if self.kind == "unsigned":
            return 0
        return float(np.finfo(_FLOAT_DTYPES[self.bits]).min)

    @property
    def max_value(self) -> Number:
        if self.kind == "signed":
            return (1 << (self.bits - 1)) - 1
        if self.kind == "unsigned":
            return (1 << self.bits) - 1
        return float(np.finfo(_FLOAT_DTYPES[self.bits]).max)

    @classmethod
    def parse(cls, name: str) -> "TypeTag":
        key = name.strip()
        tag = TYPE_TAGS.get(key) or TYPE_ALIASES.get(key)
        if tag is None:
            raise UnknownTypeError(
                code="E_UNKNOWN_TYPE",
                message=f"unknown type: {name} (choose one of: {', '.join(TYPE_TAGS)})",
            )
        return tag


_FLOAT_DTYPES = {32: np.float32, 64: np.float64}

I8 = TypeTag("i8", "signed", 8)
I16 = TypeTag("i16", "signed", 16)
I32 = TypeTag("i32", "signed", 32)
I64 = TypeTag("i64", "signed", 64)
I128 = TypeTag("i128", "signed", 128)
ISIZE = TypeTag("isize", "signed", 64)
U8 = TypeTag("u8", "unsigned", 8)
U16 = TypeTag("u16", "unsigned", 16)
U32 = TypeTag("u32", "unsigned", 32)
U64 = TypeTag("u64", "unsigned", 64)
U128 = TypeTag("u128", "unsigned", 128)
USIZE = TypeTag("usize", "unsigned", 64)
F32 = TypeTag("f32", "float", 32)
F64 = TypeTag("f64", "float", 64)

TYPE_TAGS: dict[str, TypeTag] = {
    t.name: t for t in (I8, I16, I32, I64, I128, ISIZE, U8, U16, U32, U64, U128, USIZE, F32, F64)
}

# Long-form names, e.g. `float32`.
TYPE_ALIASES: dict[str, TypeTag] = {
    "int8": I8,
    "int16": I16,
    "int32": I32,
    "int64": I64,
    "int128": I128,
    "uint8": U8,
    "uint16": U16,
    "uint32": U32,
    "uint64": U64,
    "uint128": U128,
    "float32": F32,
    "float64": F64,
}


def is_numeric(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_, numbers.Real))


def is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def is_integer(value: Any) -> bool:
    """True for integer values that are not bools."""
    return isinstance(value, numbers.Integral) and not isinstance(value, (bool, np.bool_))


def wrap_int(n: int, tag: TypeTag) -> int:
    mask = (1 << tag.bits) - 1
    n &= mask
    if tag.kind == "signed" and n >> (tag.bits - 1):
        n -= 1 << tag.bits
    return n


def _truncate(f: float) -> int:
    # NaN and infinities have no integer part; they convert to 0.
    if math.isnan(f) or math.isinf(f):
        return 0
    return math.trunc(f)


def _to_float(value: Number) -> float:
    if isinstance(value, float):
        return value
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def _int_to_f32(n: int) -> float:
    # Round once, straight to 24 significant bits (ties to even). Going
    # through float64 first would round twice for integers wider than 53 bits.
    mag = abs(n)
    shift = mag.bit_length() - 24
    if shift > 0:
        q = mag >> shift
        rem = mag & ((1 << shift) - 1)
        half = 1 << (shift - 1)
        if rem > half or (rem == half and q & 1):
            q += 1
        mag = q << shift
    if mag >= 1 << 128:
        return math.inf if n > 0 else -math.inf
    f = float(mag)
    return -f if n < 0 else f


def cast(value: Any, tag: TypeTag) -> Number:
    """Convert `value` to the representation of `tag`.

    Never raises for numeric input, except bool to a float type (as `as`
    does not allow it). Non-numeric input raises ArgumentTypeMismatch.
    """
    if not is_numeric(value):
        raise ArgumentTypeMismatch(
            code="E_ARG_TYPE",
            message=f"cannot cast {type(value).__name__} value {value!r} to {tag.name}",
        )

    if isinstance(value, (bool, np.bool_)):
        if tag.is_float:
            raise ArgumentTypeMismatch(
                code="E_ARG_TYPE",
                message=f"cannot cast bool value {value!r} to {tag.name}; bools only cast to integers",
            )
        value = int(value)
    elif isinstance(value, numbers.Integral):
        value = int(value)
    else:
        value = float(value)

    if tag.is_float:
        if tag.bits == 64:
            return _to_float(value)
        if isinstance(value, int):
            return float(np.float32(_int_to_f32(value)))
        with np.errstate(over="ignore"):
            return float(np.float32(value))

    if isinstance(value, float):
        value = _truncate(value)
    return wrap_int(value, tag)
