"""
Utilities behavioral tests (sentinel, helpers, tokenizer).

Scope
- Validate Unset sentinel semantics and coalesce().
- Validate mirror() read-only copies and pluralize() phrasing.
- Validate split() quoting rules on single-string command lines.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from argbind.utils import Unset, UnsetType, coalesce, mirror, pluralize, split


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testUnsetIsSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetSurvivesCopies(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)

    def testUnsetCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):  # NOQA: F-841
                pass

    def testUnsetInUnionChecks(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertIsNone(coalesce(Unset))


class TestHelpers(TestCase):
    """Behavioral tests for mirror() and pluralize()."""

    def testMirrorReturnsFreshCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [1, 2]

        holder = Holder()
        holder.items.append(3)
        self.assertEqual(holder.items, [1, 2])
        with self.assertRaises(AttributeError):
            holder.items = []

    def testPluralize(self):
        self.assertEqual(pluralize("value", 1), "1 value")
        self.assertEqual(pluralize("value", 0), "0 values")
        self.assertEqual(pluralize("match", 2), "2 matches")


class TestSplit(TestCase):
    """Behavioral tests for the quote-aware tokenizer."""

    def testMixedQuotingFixture(self):
        self.assertEqual(
            split('1 2 "31 32 33" 4 "5"6" 7" 8'),
            ["1", "2", "31 32 33", "4", "56 7", "8"],
        )

    def testWhitespaceRunsAndTabs(self):
        self.assertEqual(split("  a \t b   c  "), ["a", "b", "c"])
        self.assertEqual(split(""), [])
        self.assertEqual(split("   "), [])

    def testDoubledQuoteIsLiteral(self):
        self.assertEqual(split('"say ""hi""" now'), ['say "hi"', "now"])

    def testDoubledQuoteInsideQuotedRun(self):
        self.assertEqual(split('"a""b"'), ['a"b'])

    def testNewlinesAndCarriageReturnsSeparate(self):
        self.assertEqual(split("1 2\n3\r\n"), ["1", "2", "3"])
        self.assertEqual(split("a\x0bb\x0cc"), ["a", "b", "c"])
        self.assertEqual(split('"x\ny" z\n'), ["x\ny", "z"])

    def testEmptyQuotedToken(self):
        self.assertEqual(split('a "" b'), ["a", "", "b"])

    def testUnterminatedQuoteRunsToEnd(self):
        self.assertEqual(split('a "b c'), ["a", "b c"])

    def testRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            split(["a"])


if __name__ == "__main__":
    unittest.main()
