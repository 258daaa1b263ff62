"""
Argbind utilities (internal helpers, carefully exposed)

Scope
- Core building blocks used across the package for consistent semantics and UX.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level arguments/parsers layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with fresh copies
    of mutable containers to discourage accidental mutation of public API state.

- pluralize(text, count)
  • Tiny English pluralizer for counted nouns in fault messages ("1 value", "3 values").

- split(text)
  • Quote-aware whitespace tokenizer used for single-string command lines.

Usage guidance
- Prefer Unset for API defaults when None is a meaningful user value; materialize with coalesce().
- Use mirror() to expose internal state safely as read-only properties.

Quick examples
    >>> one = coalesce(Unset, "fallback")  # "fallback"
    >>> two = coalesce(None, "fallback")    # None  (None is preserved)
    >>> split('1 2 "31 32 33" 4')
    ['1', '2', '31 32 33', '4']
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    This returns the given object unless it is the Unset sentinel, in which case
    the provided default is returned. Importantly, falsey values like None, 0, "",
    or [] are preserved as-is; they are not treated as "unset".

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None   # None is preserved, not replaced
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> (decorator)

    Notes
    - This utility does not alter behavior beyond metadata; it only updates
      __name__ and __qualname__ for nicer diagnostics.
    - Some built-in or C-implemented callables are not updatable and will
      raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy mutable container values, processing nested items.

    Behavior
    - tuple (including named tuples): returned as-is, it is already immutable.
    - Sequence (non-string): returns a new list with each element processed.
    - Mapping: returns a new dict, preserving original keys and processing values.
    - Set: returns a new set with each element processed.
    - Anything else: returned as-is.
    """
    if isinstance(object, str | tuple):
        return object
    elif isinstance(object, Sequence):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads from an attribute named "_{name}" on the
    instance, and returns fresh copies of mutable containers so callers cannot
    mutate registration state through the public API.

    Example
    - Given self._items, declare items = mirror("items") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def pluralize(text, count, /):
    """
    Counted noun for fault messages: pluralize("value", 1) -> "1 value".

    Only the regular English forms used by this package are handled (+s, +es
    after sibilants).
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() first argument must be a string")
    if count == 1:
        return "%s %s" % (count, text)
    if text.endswith(("s", "sh", "ch", "x", "z")):
        return "%s %ses" % (count, text)
    return "%s %ss" % (count, text)


def split(text, /):
    r"""
    Split a command line into tokens on unquoted whitespace.

    rules
    - runs of unquoted whitespace (spaces, tabs, newlines) separate tokens; leading
      and trailing whitespace is ignored.
    - a double quote toggles quoting; the quote characters themselves are stripped,
      so '"5"6" 7"' yields the single token '56 7'.
    - inside a quoted run, a doubled quote ('""') is a literal embedded quote:
      '"a""b"' yields 'a"b'.
    - a quoted empty run ('""') yields an empty token.
    - an unterminated quote extends to the end of the line.

    examples
    - split('1 2 "31 32 33" 4 "5"6" 7" 8') -> ['1', '2', '31 32 33', '4', '56 7', '8']
    """
    if not isinstance(text, str):
        raise TypeError("split() argument must be a string")

    tokens = []
    current = []
    quoted = False
    pending = False  # a token is open (even if still empty, e.g. after '""')
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == '"':
            if quoted and index + 1 < length and text[index + 1] == '"':
                current.append('"')
                index += 2
                continue
            quoted = not quoted
            pending = True
        elif char.isspace() and not quoted:
            if pending:
                tokens.append("".join(current))
                current.clear()
                pending = False
        else:
            current.append(char)
            pending = True
        index += 1

    if pending:
        tokens.append("".join(current))
    return tokens


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: equality and identity checks must not treat it as None.
- Falsey: bool(Unset) is False, but it is not equivalent to None or 0.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "split",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
