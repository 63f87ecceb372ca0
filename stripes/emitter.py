"""
Map side of the stripes pattern.

For every token of a line, count the tokens that fall inside a symmetric window
of ``radius`` positions around it and emit one partial stripe per occurrence.
"""

from typing import List, Sequence

from stripes.errors import InvalidConfiguration
from stripes.stripe import PartialStripeRecord

DEFAULT_RADIUS = 1


def check_radius(radius) -> int:
    """
    Validate a window radius.

    Radius 0 is accepted and yields empty stripes; negative values and
    non-integers are rejected.

    Raises:
        InvalidConfiguration: If radius is not a non-negative integer
    """
    if isinstance(radius, bool) or not isinstance(radius, int):
        raise InvalidConfiguration(f"Window radius must be an integer, got {radius!r}")
    if radius < 0:
        raise InvalidConfiguration(f"Window radius must be >= 0, got {radius}")
    return radius


def emit(tokens: Sequence[str], radius: int = DEFAULT_RADIUS) -> List[PartialStripeRecord]:
    """
    Build one partial stripe per token occurrence.

    Args:
        tokens: Tokens of a single line, in order
        radius: Number of neighbors counted on each side of the central token

    Returns:
        List of PartialStripeRecord in token order. A token without neighbors
        still produces a record with an empty stripe.

    Raises:
        InvalidConfiguration: If radius is negative
    """
    check_radius(radius)

    records = []
    length = len(tokens)
    for i, word in enumerate(tokens):
        if not word:
            continue

        stripe = {}
        for j in range(i - radius, i + radius + 1):
            # The window is cut at the end of the line, not wrapped
            if j >= length:
                break
            if j == i or j < 0:
                continue
            neighbor = tokens[j]
            if not neighbor:
                continue
            stripe[neighbor] = stripe.get(neighbor, 0) + 1

        records.append(PartialStripeRecord(word, stripe))

    return records
