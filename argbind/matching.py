"""
Argbind matcher: token classification and positional allocation.

Scope
- isoption(): decide whether a token looks like an option identifier.
- seek(): find the end of a run of value tokens (the next option-like token).
- allocate(): split a run of positional tokens across positional cardinalities.

These are pure functions over token lists and cardinalities; binding values,
raising faults and marking existence are the parser's job.

Allocation contract (left to right, remaining = total)
1. reserved_i  = sum of the minimums of every later spec
2. available_i = remaining - reserved_i when reserved_i <= remaining, else remaining
3. count_i     = min(maximum_i, available_i)
4. remaining  -= count_i

A count below its spec's minimum is a deficiency the caller reports; tokens
left once every spec is served are unrecognized.
"""
import itertools
import logging

logger = logging.getLogger("argbind.matching")

_DIGITS = frozenset("0123456789")


def isoption(token, prefix_chars, /):
    """
    true when the token is at least two characters long, starts with a prefix
    character, and its second character is not a digit ('-5' is a value).
    """
    return len(token) >= 2 and token[0] in prefix_chars and token[1] not in _DIGITS


def seek(tokens, start, stop, prefix_chars, /):
    """
    index of the first option-like token in tokens[start:stop], or stop.
    """
    for index in range(start, stop):
        if isoption(tokens[index], prefix_chars):
            return index
    return stop


def allocate(cardinalities, total, /):
    """
    Yield how many of `total` tokens each cardinality takes, in order.

    The generator is lazy so a caller can bind each slice as soon as it is
    allocated and stop at the first deficient spec.
    """
    cardinalities = tuple(cardinalities)
    suffix = list(itertools.accumulate(
        (cardinality.minimum for cardinality in reversed(cardinalities)),
        initial=0,
    ))[::-1]

    remaining = total
    for index, cardinality in enumerate(cardinalities):
        reserved = suffix[index + 1]
        available = remaining - reserved if reserved <= remaining else remaining
        count = min(cardinality.maximum, available)
        logger.debug(
            "positional %d: cardinality %s, remaining %d, reserved %d -> %d",
            index, cardinality, remaining, reserved, count,
        )
        remaining -= count
        yield count


__all__ = (
    "isoption",
    "seek",
    "allocate",
)
