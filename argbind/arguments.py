r"""
Argbind argument specifications and handles.

Overview
- Cardinality
  • closed interval (minimum, maximum) of tokens an argument consumes;
    maximum may be math.inf (unbounded).
  • Cardinality.of(nargs) maps the classic quantifiers: '?' -> (0, 1),
    '*' -> (0, inf), '+' -> (1, inf), n -> (n, n), (lo, hi) -> itself.

- ArgumentSpec
  • one registered argument, owned by its parser's arena: identifiers,
    cardinality, type, constraint, required flag, binding slot and default.
  • bind(token) runs the conversion and constraint pipeline and translates
    converter signals into parse faults; it is the first layer that knows
    which argument a token belongs to.

- Argument
  • the caller-facing handle: (parser, index, generation). It carries no state
    of its own; every read and write goes through the parser arena, and a
    handle whose spec has been removed raises LookupError.

Value kinds
- NUMBER / STRING: scalar arguments (cardinality maximum <= 1).
- NUMBERS / STRINGS: sequence arguments; every bound token is appended.

Quick example:
    >>> from argbind import Parser
    >>> parser = Parser()
    >>> level = parser.add_optional("-l", "--level", type=int, nargs=1)
    >>> level.set_range(0, 9)
    >>> parser.parse(["-l", "3"])
    >>> level.value()
    3
"""
import collections
import functools
import math
import numbers
import operator
from collections.abc import Iterable
from enum import Enum

from . import converters
from .faults import *
from .utils import *


class ArgumentKind(Enum):
    POSITIONAL = "positional"
    OPTIONAL = "optional"


class ValueKind(Enum):
    NUMBER = "number"
    NUMBERS = "numbers"
    STRING = "string"
    STRINGS = "strings"

    @property
    def scalar(self):
        return self in (ValueKind.NUMBER, ValueKind.STRING)


class Cardinality(collections.namedtuple("Cardinality", ("minimum", "maximum"))):
    """
    Closed token-count interval of an argument.

    Invariants
    - 0 <= minimum <= maximum
    - minimum is an int; maximum is an int or math.inf
    """
    __slots__ = ()

    def __new__(cls, minimum, maximum):
        if not isinstance(minimum, int) or isinstance(minimum, bool):
            raise TypeError("Cardinality() minimum must be an integer")
        if maximum != math.inf and (not isinstance(maximum, int) or isinstance(maximum, bool)):
            raise TypeError("Cardinality() maximum must be an integer or math.inf")
        if minimum < 0:
            raise ValueError("Cardinality() minimum must be non-negative")
        if minimum > maximum:
            raise ValueError("Cardinality() minimum must be less or equal than maximum")
        return super().__new__(cls, minimum, maximum)

    @classmethod
    def of(cls, nargs=Unset, /):
        """
        Resolve an nargs quantifier into a Cardinality.

        Accepted forms
        - Unset (omitted): same as '?'
        - '?', '*', '+'
        - int n >= 0: exactly n tokens
        - (minimum, maximum) pair, maximum may be math.inf
        - an existing Cardinality (returned as-is)
        """
        if isinstance(nargs, Cardinality):
            return nargs
        match coalesce(nargs, "?"):
            case "?":
                return cls(0, 1)
            case "*":
                return cls(0, math.inf)
            case "+":
                return cls(1, math.inf)
            case str() as other:
                raise ValueError("nargs must be one of '?', '*', or '+' (got %r)" % other)
            case bool():
                raise TypeError("nargs must be a quantifier, an integer, or a (minimum, maximum) pair")
            case int() as count:
                return cls(count, count)
            case (minimum, maximum):
                return cls(minimum, maximum)
            case _:
                raise TypeError("nargs must be a quantifier, an integer, or a (minimum, maximum) pair")

    @property
    def unbounded(self):
        return self.maximum == math.inf

    def admits(self, count, /):
        return self.minimum <= count <= self.maximum

    def __str__(self):
        match self:
            case (0, 1):
                return "?"
            case (0, math.inf):
                return "*"
            case (1, math.inf):
                return "+"
            case (minimum, maximum) if minimum == maximum:
                return str(minimum)
        return "%s..%s" % (self.minimum, "∞" if self.unbounded else self.maximum)


class ArgumentSpec:
    """
    A registered argument and its binding slot.

    Parsers own specs; callers only ever see them through an Argument handle.
    Sequence bindings accumulate across parses until reset() is called.
    """

    __slots__ = (
        "kind",
        "identifiers",
        "cardinality",
        "type",
        "constraint",
        "required",
        "exists",
        "binding",
        "default",
        "help",
        "handle",
    )

    def __init__(self, kind, identifiers, type, cardinality, /, required=False, help=None):
        self.kind = kind
        self.identifiers = tuple(identifiers)
        self.type = converters.lookup(type)
        self.cardinality = Cardinality.of(cardinality)
        self.constraint = (self.type.lowest, self.type.highest)
        self.required = required
        self.exists = False
        self.binding = Unset if self.value_kind.scalar else []
        self.default = Unset
        self.help = help
        self.handle = Unset

    @property
    def value_kind(self):
        if self.cardinality.maximum <= 1:
            return ValueKind.NUMBER if self.type.numeric else ValueKind.STRING
        return ValueKind.NUMBERS if self.type.numeric else ValueKind.STRINGS

    @property
    def options(self):
        return "/".join(self.identifiers)

    def bind(self, token, /):
        """
        convert one token, check it against the constraint and store it.

        raises
        - InvalidArgumentError: the token is malformed for the type.
        - OutOfRangeError: the value is unrepresentable or outside the numeric range.
        - LengthError: the string length is outside the length range.
        """
        lo, hi = self.constraint
        try:
            value = self.type.convert(token)
        except OverflowError:
            raise OutOfRangeError(self.handle, token, lo, hi) from None
        except ValueError:
            raise InvalidArgumentError(self.handle, token, self.type.name) from None
        if not lo <= self.type.measure(value) <= hi:
            if self.type.numeric:
                raise OutOfRangeError(self.handle, token, lo, hi)
            raise LengthError(self.handle, token, lo, hi)
        if self.value_kind.scalar:
            self.binding = value
        else:
            self.binding.append(value)
        return value

    def bound(self):
        return self.binding is not Unset if self.value_kind.scalar else bool(self.binding)

    def reset(self):
        self.exists = False
        self.binding = Unset if self.value_kind.scalar else []


def _require(kind, /):
    """
    restrict a handle operation to the given value groups (NUMBER or STRING).
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            if self._spec().type.group != kind:
                raise TypeError("%s() is not supported by %s arguments" % (method.__name__, self._spec().type.name))
            return method(self, *args, **kwargs)
        return wrapper
    return decorator


def _check_bounds(name, lo, hi, /, lowest=-math.inf):
    for bound in (lo, hi):
        if not isinstance(bound, numbers.Real) or isinstance(bound, bool):
            raise TypeError("%s() bounds must be real numbers" % name)
        if math.isnan(bound):
            raise ValueError("%s() bounds cannot be nan" % name)
    if lo < lowest:
        raise ValueError("%s() lower bound must be at least %s" % (name, lowest))
    if lo > hi:
        raise ValueError("%s() lower bound must be less or equal than upper bound" % name)


def _check_length(name, value, /):
    if value != math.inf and (not isinstance(value, int) or isinstance(value, bool)):
        raise TypeError("%s() length must be an integer or math.inf" % name)


class Argument:
    """
    Caller-facing handle of a registered argument.

    A handle is a light view (parser, arena index, arena generation). It is
    hashable and compares equal to any other handle of the same registration.
    Removing arguments from the parser invalidates every handle it returned.
    """

    __slots__ = ("_parser", "_index", "_generation")

    __introspectable__ = (
        "options",
        "kind",
        "type",
        "cardinality",
        "required",
        "help",
    )

    def __init__(self, parser, index, generation, /):
        self._parser = parser
        self._index = index
        self._generation = generation

    def _spec(self):
        if self._parser._generation != self._generation or self._index >= len(self._parser._arena):
            raise LookupError("argument handle refers to a removed argument")
        return self._parser._arena[self._index]

    # --- read-only views ---

    identifiers = property(lambda self: self._spec().identifiers)
    options = property(lambda self: self._spec().options)
    kind = property(lambda self: self._spec().kind)
    cardinality = property(lambda self: self._spec().cardinality)
    value_kind = property(lambda self: self._spec().value_kind)
    range = property(lambda self: self._spec().constraint)
    required = property(lambda self: self._spec().required)
    help = property(lambda self: self._spec().help)

    @property
    def type(self):
        return self._spec().type

    # --- constraints ---

    @_require(converters.NUMBER)
    def set_range(self, lo, hi, /):
        """
        restrict numeric values to the inclusive range [lo, hi].
        """
        _check_bounds("set_range", lo, hi)
        self._spec().constraint = (lo, hi)
        return self

    @_require(converters.STRING)
    def set_length_range(self, lo, hi, /):
        """
        restrict string lengths to the inclusive range [lo, hi]; hi may be math.inf.
        """
        _check_length("set_length_range", lo)
        _check_length("set_length_range", hi)
        _check_bounds("set_length_range", lo, hi, 0)
        self._spec().constraint = (lo, hi)
        return self

    @_require(converters.STRING)
    def set_min_length(self, length, /):
        _check_length("set_min_length", length)
        _check_bounds("set_min_length", length, self._spec().constraint[1], 0)
        self._spec().constraint = (length, self._spec().constraint[1])
        return self

    @_require(converters.STRING)
    def set_max_length(self, length, /):
        _check_length("set_max_length", length)
        _check_bounds("set_max_length", self._spec().constraint[0], length, 0)
        self._spec().constraint = (self._spec().constraint[0], length)
        return self

    # --- metadata ---

    def set_required(self, required=True, /):
        if not isinstance(required, bool):
            raise TypeError("set_required() argument must be a boolean")
        if self._spec().kind is not ArgumentKind.OPTIONAL:
            raise TypeError("set_required() is only supported by optional arguments")
        self._spec().required = required
        return self

    def set_help(self, help, /):
        if not isinstance(help, str):
            raise TypeError("set_help() argument must be a string")
        self._spec().help = help.strip() or None
        return self

    def assign(self, default, /):
        """
        set the fallback returned by value()/values() while nothing is bound.

        sequence arguments take an iterable of values; the default survives reset().
        """
        spec = self._spec()
        if not spec.value_kind.scalar:
            if isinstance(default, str) or not isinstance(default, Iterable):
                raise TypeError("assign() argument must be an iterable for sequence arguments")
            default = list(default)
        spec.default = default
        return self

    # --- results ---

    def exists(self):
        """
        true when the argument was reached by the last parse (positionals) or
        appeared on the command line (optionals).
        """
        return self._spec().exists

    def has_value(self):
        spec = self._spec()
        return spec.bound() or spec.default is not Unset

    def value(self):
        """
        the bound scalar, else the default, else None.

        raises TypeError for sequence arguments (use values()).
        """
        spec = self._spec()
        if not spec.value_kind.scalar:
            raise TypeError("value() is not supported by sequence arguments, use values()")
        if spec.binding is not Unset:
            return spec.binding
        return coalesce(spec.default)

    def values(self):
        """
        every bound value as a new list, else the default, else an empty list.
        """
        spec = self._spec()
        if spec.value_kind.scalar:
            if spec.binding is not Unset:
                return [spec.binding]
            return [] if spec.default is Unset else [spec.default]
        if spec.binding:
            return list(spec.binding)
        return list(coalesce(spec.default, []))

    # --- dunders ---

    def __eq__(self, other):
        if not isinstance(other, Argument):
            return NotImplemented
        return (self._parser, self._index, self._generation) == (other._parser, other._index, other._generation)

    def __hash__(self):
        return hash((id(self._parser), self._index, self._generation))

    def __rich_repr__(self):
        """
        Yield a sequence of (name, object) pairs for pretty printers.
        """
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        try:
            return "argument(%s)" % ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        except LookupError:
            return "argument(<removed>)"


__all__ = (
    "Cardinality",
    "ArgumentKind",
    "ValueKind",
    "ArgumentSpec",
    "Argument",
)
