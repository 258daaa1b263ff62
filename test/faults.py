"""
Faults module behavioral tests (codes, messages, rendering, triggering).

Scope
- Validate FaultCode stability and host normalization via __main__.__codes__.
- Validate structured fields, messages and hints of every ParseError subclass.
- Validate rich rendering (plain and fancy) and trigger() in and out of shell mode.

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is captured with a rich Console writing to a StringIO; nothing is printed.
"""

from __future__ import annotations

import __main__
import io
import math
import pickle
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argbind import (
    Parser,
    ParseError,
    FaultCode,
    CardinalityMismatchError,
    OutOfRangeError,
    LengthError,
    InvalidArgumentError,
    UnrecognizedArgumentsError,
    ArgumentRequiredError,
    InvalidChoiceError,
    trigger,
)
from argbind import faults


def _console():
    return Console(file=io.StringIO(), width=100, color_system=None)


def _render(renderable):
    console = _console()
    console.print(renderable)
    return console.file.getvalue()


class TestFaultCodes(TestCase):
    """Behavioral tests for FaultCode stability and host normalization."""

    def testEveryFaultHasADistinctCode(self):
        classes = (
            CardinalityMismatchError,
            OutOfRangeError,
            LengthError,
            InvalidArgumentError,
            UnrecognizedArgumentsError,
            ArgumentRequiredError,
            InvalidChoiceError,
        )
        codes = [cls.__code__ for cls in classes]
        self.assertEqual(sorted(codes), sorted(FaultCode))
        self.assertTrue(all(issubclass(cls, ParseError) for cls in classes))

    def testNormalize(self):
        self.assertEqual(FaultCode.OUT_OF_RANGE.normalize(), "12111")
        with mock.patch.object(__main__, "__codes__", {FaultCode.OUT_OF_RANGE: "E-RANGE"}, create=True):
            self.assertEqual(FaultCode.OUT_OF_RANGE.normalize(), "E-RANGE")


class TestMessages(TestCase):
    """Behavioral tests for fault fields, messages and hints."""

    def setUp(self):
        parser = Parser()
        self.positional = parser.add_positional("p", nargs=(2, 3))
        self.optional = parser.add_optional("-o", "--opt", type=int, nargs=1)

    def testCardinalityMismatch(self):
        fault = CardinalityMismatchError(self.positional, 1, 2, 3)
        self.assertEqual(str(fault), "argument 'p': expected values count: 2..3, got 1")
        self.assertEqual(fault.hint, "pass between 2 and 3 values")
        self.assertEqual(CardinalityMismatchError(self.positional, 0, 1, math.inf).hint, "pass at least 1 value")
        self.assertEqual(CardinalityMismatchError(self.positional, 0, 2, 2).hint, "pass exactly 2 values")

    def testValueFaults(self):
        self.assertEqual(
            str(OutOfRangeError(self.optional, "20", 5, 15)),
            "argument '-o/--opt' value: '20' out of range [5..15]",
        )
        self.assertEqual(
            str(LengthError(self.positional, "abc", 0, 2)),
            "argument 'p' value: 'abc' string length out of range [0..2]",
        )
        self.assertEqual(LengthError(self.positional, "", 1, math.inf).hint, "use at least 1 character")
        fault = InvalidArgumentError(self.optional, "x", "int")
        self.assertEqual(str(fault), "argument '-o/--opt': invalid int value: 'x'")
        self.assertEqual(fault.hint, "pass a valid int literal")

    def testTokenFaults(self):
        fault = UnrecognizedArgumentsError(["d", "e"])
        self.assertEqual(fault.tokens, ("d", "e"))
        self.assertEqual(str(fault), "unrecognized arguments: 'd', 'e'")
        self.assertEqual(str(ArgumentRequiredError(self.optional)), "the following argument is required: '-o/--opt'")
        choice = InvalidChoiceError("wrongCmd", ["cmd1", "cmd2"])
        self.assertEqual(str(choice), "invalid choice: 'wrongCmd' (choose from 'cmd1', 'cmd2')")

    def testOptionsAreReadOnly(self):
        fault = UnrecognizedArgumentsError(["d"])
        with self.assertRaises(TypeError):
            fault.options["tokens"] = ()

    def testReplaceMergesOptions(self):
        fault = OutOfRangeError(self.optional, "20", 5, 15)
        replaced = fault.__replace__(shell=True)
        self.assertIsInstance(replaced, OutOfRangeError)
        self.assertTrue(replaced.options["shell"])
        self.assertEqual(replaced.token, "20")
        self.assertEqual(replaced.display, "-o/--opt")

    def testDisplaySurvivesRemovedArgument(self):
        parser = Parser(name="tool")
        option = parser.add_optional("-l", "--level", type=int, nargs=1).set_range(0, 9)
        fault = parser.try_parse(["-l", "12"])
        parser.remove_all_arguments()
        with self.assertRaises(LookupError):
            option.options
        self.assertEqual(fault.display, "-l/--level")
        self.assertEqual(str(fault), "argument '-l/--level' value: '12' out of range [0..9]")
        self.assertIn("out of range [0..9]", _render(fault))

    def testPickleRoundTrip(self):
        fault = pickle.loads(pickle.dumps(UnrecognizedArgumentsError(["a", "b"], prog="tool")))
        self.assertEqual(fault.tokens, ("a", "b"))
        self.assertEqual(fault.options["prog"], "tool")


class TestRendering(TestCase):
    """Behavioral tests for rich rendering."""

    def testPlainRendering(self):
        fault = UnrecognizedArgumentsError(["d"], prog="tool", colorful=False)
        text = _render(fault)
        self.assertIn("[ tool — 12121 | Unrecognized Arguments ]", text)
        self.assertIn("unrecognized arguments: 'd'", text)
        self.assertIn(" → remove the extra token", text)

    def testFancyRendering(self):
        fault = InvalidChoiceError("x", ["a"], prog="tool", fancy=True)
        text = _render(fault)
        self.assertIn("Invalid Choice", text)
        self.assertIn("invalid choice: 'x' (choose from 'a')", text)

    def testHostProgOverride(self):
        with mock.patch.object(__main__, "__prog__", "host", create=True):
            text = _render(UnrecognizedArgumentsError(["d"], prog="tool"))
        self.assertIn("[ host — ", text)


class TestTrigger(TestCase):
    """Behavioral tests for trigger() in and out of shell mode."""

    def testRaisesOutsideShellMode(self):
        with self.assertRaises(UnrecognizedArgumentsError) as context:
            trigger(UnrecognizedArgumentsError(["d"]), prog="tool")
        self.assertEqual(context.exception.options["prog"], "tool")

    def testRejectsNonTriggerables(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))

    def testShellModePrintsAndExits(self):
        console = _console()
        with mock.patch.object(faults, "console", console):
            with self.assertRaises(SystemExit) as context:
                trigger(UnrecognizedArgumentsError(["d"]), shell=True, prog="tool")
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unrecognized arguments: 'd'", console.file.getvalue())

    def testShellParser(self):
        parser = Parser(name="tool", shell=True)
        parser.add_positional("p", nargs=1)
        console = _console()
        with mock.patch.object(faults, "console", console):
            with self.assertRaises(SystemExit):
                parser.parse(["a", "b"])
        self.assertIn("[ tool — 12121 | Unrecognized Arguments ]", console.file.getvalue())

    def testTryParseIgnoresShellMode(self):
        parser = Parser(shell=True)
        fault = parser.try_parse(["a", "b"])
        self.assertIsInstance(fault, UnrecognizedArgumentsError)


if __name__ == "__main__":
    unittest.main()
