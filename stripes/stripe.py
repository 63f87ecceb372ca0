"""
Stripe data model.

A stripe maps a neighbor token to the number of times it was seen inside the
window of a central word. Counts are always strictly positive; a neighbor that
was never seen is absent rather than mapped to zero.
"""

from typing import Dict, NamedTuple

from stripes.errors import InvalidStripe

Stripe = Dict[str, int]


class PartialStripeRecord(NamedTuple):
    """Stripe contributed by a single occurrence of ``word`` in one line"""
    word: str
    stripe: Stripe


class AggregatedRecord(NamedTuple):
    """Sum of every partial stripe emitted for ``word`` across the corpus"""
    word: str
    stripe: Stripe


def validate_stripe(stripe) -> Stripe:
    """
    Check a stripe read from an untrusted source.

    Args:
        stripe: Candidate stripe, usually decoded from JSON

    Returns:
        A fresh dict with the same entries

    Raises:
        InvalidStripe: If the value is not a mapping of str to positive int
    """
    if not isinstance(stripe, dict):
        raise InvalidStripe(f"Stripe must be a mapping, got {type(stripe).__name__}")

    checked = {}
    for neighbor, count in stripe.items():
        if not isinstance(neighbor, str) or not neighbor:
            raise InvalidStripe(f"Invalid neighbor key: {neighbor!r}")
        # bool is an int subclass but never a count
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidStripe(f"Count for {neighbor!r} must be an integer, got {count!r}")
        if count <= 0:
            raise InvalidStripe(f"Count for {neighbor!r} must be positive, got {count}")
        checked[neighbor] = count
    return checked
