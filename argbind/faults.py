"""
Argbind faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every parse failure.
- ParseError: base type carrying structured fields in a read-only options
  mapping and knowing how to render itself in a friendly, lowercased and
  actionable way.
- one concrete subclass per failure kind; the hierarchy is closed.
- trigger(): central entry point to surface a fault (respecting shell/fancy/colorful).

UX goals
- Argument-first messages: every message names the offending argument by its
  display options ('-o/--opt') or its positional name.
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- Parser.parse raises faults directly; Parser(shell=True) routes them through
  trigger(fault, **ctx) instead.
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich.
"""
import logging
import math
import os
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import *

console = Console(stderr=True)
logger = logging.getLogger("argbind.faults")


class FaultCode(IntEnum):
    """
    canonical fault codes used across the binder (stable identifiers).

    grouping (by high-level domain)
    - cardinality (1210x)
      • CARDINALITY_MISMATCH
    - values (1211x)
      • OUT_OF_RANGE, LENGTH_ERROR, INVALID_ARGUMENT
    - tokens (1212x)
      • UNRECOGNIZED_ARGUMENTS, ARGUMENT_REQUIRED
    - routing (1213x)
      • INVALID_CHOICE

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired (e.g., to shorter labels).
    """
    # --- cardinality errors (12xxx) ---
    CARDINALITY_MISMATCH   = 12101

    # --- value errors (12xxx) ---
    OUT_OF_RANGE           = 12111
    LENGTH_ERROR           = 12112
    INVALID_ARGUMENT       = 12113

    # --- token errors (12xxx) ---
    UNRECOGNIZED_ARGUMENTS = 12121
    ARGUMENT_REQUIRED      = 12122

    # --- routing errors (12xxx) ---
    INVALID_CHOICE         = 12131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _display(argument):
    return getattr(argument, "options", argument)


def _bound(value):
    return "∞" if value == math.inf else "-∞" if value == -math.inf else str(value)


def _interval(lo, hi):
    return "[%s..%s]" % (_bound(lo), _bound(hi))


def _quoted(tokens):
    return ", ".join(map("'%s'".__mod__, tokens))


class ParseError(Exception):
    """
    Base of every parse failure.

    fields
    - subclass-specific payload (argument, token, bounds, ...) is stored in
      the read-only options mapping and exposed through properties.
    - presentation context (prog, shell, fancy, colorful) travels in the same
      mapping; it is merged in by trigger().
    - faults about one argument snapshot its display name ("display") when
      built, so they still render after the argument is unregistered.

    class-level metadata
    - __code__: the FaultCode of the subclass.
    - __title__: a short, lowercase title for the rendered header.
    """
    __code__ = Unset
    __title__ = Unset

    def __init__(self, /, **options):
        if "argument" in options:
            options.setdefault("display", _display(options["argument"]))
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    @property
    def code(self):
        return type(self).__code__

    @property
    def title(self):
        return type(self).__title__

    @property
    def message(self):
        raise NotImplementedError

    @property
    def hint(self):
        raise NotImplementedError

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        prog = (
            getattr(main, "__prog__", None) or
            self.options.get("prog") or
            (os.path.basename(sys.argv[0]) if sys.argv else "") or
            "argbind"
        )

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint"))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left", width=console.width - 4)

        return Group(header, message, hint)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        logger.debug("rendering %s in shell mode", type(self).__name__)
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(**{**self.options, **overrides})

    def __reduce__(self):
        return _restore, (type(self), dict(self.options))


def _restore(cls, options, /):
    return cls(**options)


class CardinalityMismatchError(ParseError):
    """
    an argument received fewer tokens than its minimum (or a positional run
    could not cover it).
    """
    __code__ = FaultCode.CARDINALITY_MISMATCH
    __title__ = "cardinality mismatch"

    def __init__(self, argument, count, minimum, maximum, **options):
        super().__init__(argument=argument, count=count, minimum=minimum, maximum=maximum, **options)

    argument = property(lambda self: self.options["argument"])
    display = property(lambda self: self.options["display"])
    count = property(lambda self: self.options["count"])
    minimum = property(lambda self: self.options["minimum"])
    maximum = property(lambda self: self.options["maximum"])

    @property
    def message(self):
        if self.minimum == self.maximum:
            expected = str(self.minimum)
        else:
            expected = "%s..%s" % (_bound(self.minimum), _bound(self.maximum))
        return "argument '%s': expected values count: %s, got %s" % (self.display, expected, self.count)

    @property
    def hint(self):
        if self.maximum == math.inf:
            return "pass at least %s" % pluralize("value", self.minimum)
        if self.minimum == self.maximum:
            return "pass exactly %s" % pluralize("value", self.minimum)
        return "pass between %s and %s values" % (self.minimum, self.maximum)


class OutOfRangeError(ParseError):
    """
    a converted numeric value falls outside its constraint, or the token is
    not representable in the destination type.
    """
    __code__ = FaultCode.OUT_OF_RANGE
    __title__ = "out of range"

    def __init__(self, argument, token, lo, hi, **options):
        super().__init__(argument=argument, token=token, lo=lo, hi=hi, **options)

    argument = property(lambda self: self.options["argument"])
    display = property(lambda self: self.options["display"])
    token = property(lambda self: self.options["token"])
    lo = property(lambda self: self.options["lo"])
    hi = property(lambda self: self.options["hi"])

    @property
    def message(self):
        return "argument '%s' value: '%s' out of range %s" % (
            self.display, self.token, _interval(self.lo, self.hi)
        )

    @property
    def hint(self):
        return "pick a value between %s and %s" % (_bound(self.lo), _bound(self.hi))


class LengthError(ParseError):
    """
    a string value's length falls outside its constraint.
    """
    __code__ = FaultCode.LENGTH_ERROR
    __title__ = "length error"

    def __init__(self, argument, token, lo, hi, **options):
        super().__init__(argument=argument, token=token, lo=lo, hi=hi, **options)

    argument = property(lambda self: self.options["argument"])
    display = property(lambda self: self.options["display"])
    token = property(lambda self: self.options["token"])
    lo = property(lambda self: self.options["lo"])
    hi = property(lambda self: self.options["hi"])

    @property
    def message(self):
        return "argument '%s' value: '%s' string length out of range %s" % (
            self.display, self.token, _interval(self.lo, self.hi)
        )

    @property
    def hint(self):
        if self.hi == math.inf:
            return "use at least %s" % pluralize("character", self.lo)
        return "use between %s and %s characters" % (self.lo, self.hi)


class InvalidArgumentError(ParseError):
    """
    a token is malformed for its destination type.
    """
    __code__ = FaultCode.INVALID_ARGUMENT
    __title__ = "invalid argument"

    def __init__(self, argument, token, typename, **options):
        super().__init__(argument=argument, token=token, typename=typename, **options)

    argument = property(lambda self: self.options["argument"])
    display = property(lambda self: self.options["display"])
    token = property(lambda self: self.options["token"])
    typename = property(lambda self: self.options["typename"])

    @property
    def message(self):
        return "argument '%s': invalid %s value: '%s'" % (self.display, self.typename, self.token)

    @property
    def hint(self):
        if self.typename == "bool":
            return "use one of 'true', 'false', '1' or '0'"
        return "pass a valid %s literal" % self.typename


class UnrecognizedArgumentsError(ParseError):
    """
    tokens were left after every positional and optional was satisfied.
    """
    __code__ = FaultCode.UNRECOGNIZED_ARGUMENTS
    __title__ = "unrecognized arguments"

    def __init__(self, tokens, **options):
        super().__init__(tokens=tuple(tokens), **options)

    tokens = property(lambda self: self.options["tokens"])

    @property
    def message(self):
        return "unrecognized arguments: %s" % _quoted(self.tokens)

    @property
    def hint(self):
        return "remove the extra %s" % ("token" if len(self.tokens) == 1 else "tokens")


class ArgumentRequiredError(ParseError):
    """
    a required optional argument did not appear.
    """
    __code__ = FaultCode.ARGUMENT_REQUIRED
    __title__ = "argument required"

    def __init__(self, argument, **options):
        super().__init__(argument=argument, **options)

    argument = property(lambda self: self.options["argument"])
    display = property(lambda self: self.options["display"])

    @property
    def message(self):
        return "the following argument is required: '%s'" % self.display

    @property
    def hint(self):
        return "add '%s' to the command line" % self.display


class InvalidChoiceError(ParseError):
    """
    a token in sub-command position names no registered sub-command.
    """
    __code__ = FaultCode.INVALID_CHOICE
    __title__ = "invalid choice"

    def __init__(self, token, choices, **options):
        super().__init__(token=token, choices=tuple(choices), **options)

    token = property(lambda self: self.options["token"])
    choices = property(lambda self: self.options["choices"])

    @property
    def message(self):
        return "invalid choice: '%s' (choose from %s)" % (self.token, _quoted(self.choices))

    @property
    def hint(self):
        return "use one of the listed sub-commands"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseError).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, the fault is raised.

    typical options
    - prog, shell, fancy, colorful.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "ParseError",
    "CardinalityMismatchError",
    "OutOfRangeError",
    "LengthError",
    "InvalidArgumentError",
    "UnrecognizedArgumentsError",
    "ArgumentRequiredError",
    "InvalidChoiceError",
    "FaultCode",
    "trigger",
)
