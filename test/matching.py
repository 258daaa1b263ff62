"""
Matcher behavioral tests (option-like detection, run seeking, allocation).

Scope
- Validate isoption() including negative numbers as values.
- Validate allocate() counts for mixed '?', '*', '+' and bounded cardinalities,
  the cardinality sum invariant and the greedy left bias.

Conventions
- Test method names follow CamelCase per project convention.
- Quantifier strings like '*++' describe one positional per character.
"""

from __future__ import annotations

import itertools
import math
import unittest
from unittest import TestCase

from argbind.arguments import Cardinality
from argbind.matching import allocate, isoption, seek


def _counts(pattern, total):
    return list(allocate([Cardinality.of(char) for char in pattern], total))


class TestIsOption(TestCase):
    """Behavioral tests for option-like detection and run seeking."""

    def testOptionLikeTokens(self):
        for token in ("-o", "--opt", "/x", "-a5"):
            with self.subTest(token=token):
                self.assertTrue(isoption(token, "-/"))

    def testValueTokens(self):
        for token in ("-5", "-0.5", "/1", "-", "/", "x", "", "o-"):
            with self.subTest(token=token):
                self.assertFalse(isoption(token, "-/"))

    def testCustomPrefixChars(self):
        self.assertTrue(isoption("+x", "+"))
        self.assertFalse(isoption("-x", "+"))

    def testSeek(self):
        tokens = ["a", "-5", "b", "--opt", "c"]
        self.assertEqual(seek(tokens, 0, len(tokens), "-"), 3)
        self.assertEqual(seek(tokens, 4, len(tokens), "-"), 5)
        self.assertEqual(seek(tokens, 0, 2, "-"), 2)


class TestAllocate(TestCase):
    """Behavioral tests for positional token allocation."""

    def testFixtures(self):
        cases = {
            ("+++", 5): [3, 1, 1],
            ("**+", 1): [0, 0, 1],
            ("**+", 3): [2, 0, 1],
            ("**+", 5): [4, 0, 1],
            ("*++", 3): [1, 1, 1],
            ("*++", 5): [3, 1, 1],
            ("+**", 1): [1, 0, 0],
            ("+**", 2): [2, 0, 0],
            ("+**", 5): [5, 0, 0],
            ("++*", 2): [1, 1, 0],
            ("++*", 3): [2, 1, 0],
            ("++*", 5): [4, 1, 0],
            ("+*+", 2): [1, 0, 1],
            ("+*+", 3): [2, 0, 1],
            ("+*+", 5): [4, 0, 1],
            ("*+*", 1): [0, 1, 0],
            ("*+*", 2): [1, 1, 0],
            ("*+*", 3): [2, 1, 0],
            ("*+*", 5): [4, 1, 0],
            ("***", 1): [1, 0, 0],
            ("***", 3): [3, 0, 0],
            ("***", 5): [5, 0, 0],
            ("???", 1): [1, 0, 0],
            ("???", 2): [1, 1, 0],
            ("???", 5): [1, 1, 1],
        }
        for (pattern, total), expected in cases.items():
            with self.subTest(pattern=pattern, total=total):
                self.assertEqual(_counts(pattern, total), expected)

    def testDeficientFixtures(self):
        for pattern, total in (("+++", 1), ("*++", 1), ("++*", 1), ("+*+", 1)):
            with self.subTest(pattern=pattern, total=total):
                counts = _counts(pattern, total)
                minimums = [Cardinality.of(char).minimum for char in pattern]
                self.assertTrue(any(count < minimum for count, minimum in zip(counts, minimums)))

    def testBoundedCardinalities(self):
        cardinalities = [Cardinality.of("+"), Cardinality.of("+"), Cardinality(2, 3)]
        self.assertEqual(list(allocate(cardinalities, 5)), [2, 1, 2])

    def testCardinalitySumInvariant(self):
        shapes = [Cardinality(0, 1), Cardinality(1, 1), Cardinality(1, math.inf), Cardinality(2, 3), Cardinality(0, math.inf)]
        for size in (1, 2, 3):
            for combination in itertools.product(shapes, repeat=size):
                floor = sum(cardinality.minimum for cardinality in combination)
                ceiling = sum(cardinality.maximum for cardinality in combination)
                for total in range(0, 8):
                    counts = list(allocate(combination, total))
                    satisfied = all(cardinality.admits(count) for cardinality, count in zip(combination, counts))
                    with self.subTest(combination=combination, total=total):
                        if floor > total:
                            self.assertFalse(satisfied)
                        elif total <= ceiling:
                            self.assertTrue(satisfied)
                            self.assertEqual(sum(counts), total)

    def testGreedyLeftBias(self):
        self.assertEqual(_counts("**", 4), [4, 0])
        self.assertEqual(_counts("?*", 4), [1, 3])

    def testLazyAllocation(self):
        counts = allocate([Cardinality.of("+")] * 2, 3)
        self.assertEqual(next(counts), 2)


if __name__ == "__main__":
    unittest.main()
