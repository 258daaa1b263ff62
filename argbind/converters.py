"""
Argbind type converters: token -> typed value.

What this module provides
- TypeInfo: one registered conversion rule (name, group, representable bounds,
  convert/format callables). Instances are immutable and shared by every
  argument registered with that type.
- the built-in registry, mirroring the classic C numeric family:
  • bool                                   → "true" | "false" | "1" | "0"
  • int, unsigned                          → 32-bit integers
  • long, unsigned long, long long,
    unsigned long long                     → 64-bit integers
  • float                                  → IEEE single precision
  • double, long double                    → IEEE double precision
  • string                                 → identity
- lookup(type): resolve a TypeInfo, a registered name, or a Python type
  (bool, int, float, str) to its TypeInfo.
- register(info): add a custom TypeInfo to the registry.

Signalling contract
- convert() never knows which argument invoked it; callers attach context.
- malformed token (not a full base-10 literal, unknown boolean spelling)
  → ValueError
- well-formed but unrepresentable in the destination width (including any
  '-' token for unsigned destinations) → OverflowError
"""
import builtins
import math
import re
import struct
import sys
from types import MappingProxyType

from .utils import *


_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")

NUMBER = "number"
STRING = "string"


class TypeInfo:
    """
    A registered conversion/validation rule.

    fields
    - name: display name used in messages ("int", "unsigned long", ...).
    - group: NUMBER or STRING; decides whether constraints bound the value
      itself or its length.
    - lowest/highest: representable bounds; for strings the length bounds
      (0, inf). These are the default constraint of every argument.
    - id: registration order, stable per process.
    """

    __slots__ = ("_name", "_group", "_convert", "_format", "_lowest", "_highest", "_id")

    name = mirror("name")
    group = mirror("group")
    lowest = mirror("lowest")
    highest = mirror("highest")
    id = mirror("id")

    def __init__(self, name, group, convert, /, lowest=Unset, highest=Unset, format=str):
        if not isinstance(name, str) or not name.strip():
            raise TypeError("TypeInfo() name must be a non-empty string")
        if group not in (NUMBER, STRING):
            raise ValueError("TypeInfo() group must be %r or %r" % (NUMBER, STRING))
        if not callable(convert) or not callable(format):
            raise TypeError("TypeInfo() convert and format must be callable")
        if group == STRING:
            lowest, highest = coalesce(lowest, 0), coalesce(highest, math.inf)
        elif lowest is Unset or highest is Unset:
            raise TypeError("numeric TypeInfo() requires lowest and highest bounds")
        if lowest > highest:
            raise ValueError("TypeInfo() lowest must be less or equal than highest")
        self._name = name.strip()
        self._group = group
        self._convert = convert
        self._format = format
        self._lowest = lowest
        self._highest = highest
        self._id = Unset

    @property
    def numeric(self):
        return self._group == NUMBER

    def convert(self, token, /):
        """
        convert one token; raises ValueError (malformed) or OverflowError (unrepresentable).
        """
        if not isinstance(token, str):
            raise TypeError("convert() argument must be a string")
        return self._convert(token)

    def format(self, value, /):
        """
        canonical string form of a value; convert(format(v)) == v for every representable v.
        """
        return self._format(value)

    def measure(self, value, /):
        """
        the quantity constraints apply to: the value itself, or its length for strings.
        """
        return value if self.numeric else len(value)

    def __repr__(self):
        return "TypeInfo(name=%r, group=%r, lowest=%r, highest=%r)" % (
            self._name, self._group, self._lowest, self._highest
        )


def _boolean(token):
    if token in ("true", "1"):
        return True
    if token in ("false", "0"):
        return False
    raise ValueError("cannot convert %r to bool" % token)


def _integer(bits, signed, /):
    if signed:
        lowest, highest = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        lowest, highest = 0, (1 << bits) - 1

    def convert(token):
        if not signed and token.startswith("-"):
            raise OverflowError("negative value %r for an unsigned type" % token)
        if not _INTEGER.fullmatch(token):
            raise ValueError("invalid integer literal %r" % token)
        # int() refuses very long literals; anything past 20 significant digits overflows 64 bits anyway
        if len(token.lstrip("+-").lstrip("0")) > 20:
            raise OverflowError("integer literal %r is too large" % token)
        value = int(token)
        if not lowest <= value <= highest:
            raise OverflowError("integer %r does not fit in %d bits" % (token, bits))
        return value

    return convert, lowest, highest


def _single(token):
    if not _DECIMAL.fullmatch(token):
        raise ValueError("invalid decimal literal %r" % token)
    value = float(token)
    if math.isinf(value):
        raise OverflowError("decimal %r does not fit in a double" % token)
    # packing raises OverflowError when the value rounds past FLT_MAX
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _double(token):
    if not _DECIMAL.fullmatch(token):
        raise ValueError("invalid decimal literal %r" % token)
    value = float(token)
    if math.isinf(value):
        raise OverflowError("decimal %r does not fit in a double" % token)
    return value


def _format_boolean(value):
    return "true" if value else "false"


_registry = {}
_aliases = MappingProxyType({bool: "bool", int: "int", float: "double", str: "string"})


def register(info, /):
    """
    add a TypeInfo to the registry under its name and return it.

    raises
    - TypeError: when info is not a TypeInfo.
    - ValueError: when the name is already registered or info was registered before.
    """
    if not isinstance(info, TypeInfo):
        raise TypeError("register() argument must be a TypeInfo")
    if info.name in _registry or info.id is not Unset:
        raise ValueError("register() type %r is already registered" % info.name)
    info._id = len(_registry)
    _registry[info.name] = info
    return info


def lookup(type, /):
    """
    resolve a TypeInfo from a TypeInfo, a registered name, or a Python type.

    examples
    - lookup(int)             → the 32-bit "int" rule
    - lookup("unsigned long") → the unsigned 64-bit rule
    - lookup(float)           → "double"
    """
    if isinstance(type, TypeInfo):
        return type
    if isinstance(type, builtins.type) and type in _aliases:
        type = _aliases[type]
    if isinstance(type, str):
        try:
            return _registry[type]
        except KeyError:
            raise ValueError("unknown type name %r" % type) from None
    raise TypeError("type must be a TypeInfo, a registered name, or one of bool, int, float, str")


_float = sys.float_info.max
_single_max = struct.unpack("<f", bytes.fromhex("ffff7f7f"))[0]

register(TypeInfo("bool", NUMBER, _boolean, False, True, format=_format_boolean))
for _name, _bits, _signed in (
        ("int", 32, True),
        ("unsigned", 32, False),
        ("long", 64, True),
        ("unsigned long", 64, False),
        ("long long", 64, True),
        ("unsigned long long", 64, False),
):
    _convert, _lowest, _highest = _integer(_bits, _signed)
    register(TypeInfo(_name, NUMBER, _convert, _lowest, _highest))
register(TypeInfo("float", NUMBER, _single, -_single_max, _single_max, format=repr))
register(TypeInfo("double", NUMBER, _double, -_float, _float, format=repr))
register(TypeInfo("long double", NUMBER, _double, -_float, _float, format=repr))
register(TypeInfo("string", STRING, str))

del _name, _bits, _signed, _convert, _lowest, _highest


__all__ = (
    "TypeInfo",
    "NUMBER",
    "STRING",
    "register",
    "lookup",
)
