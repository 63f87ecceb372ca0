"""
Reduce side of the stripes pattern.

Merging is an element-wise sum over neighbor counts. The fold is commutative
and associative, so partial stripes may be merged in any order and any
grouping (including a map-side combiner pass) with the same result.
"""

from collections import defaultdict
from functools import reduce
from typing import Dict, Iterable, List, Optional

from stripes.stripe import AggregatedRecord, PartialStripeRecord, Stripe


def _add_stripe(total: Dict[str, int], stripe: Stripe) -> Dict[str, int]:
    for neighbor, count in stripe.items():
        total[neighbor] += count
    return total


def merge_stripes(stripes: Iterable[Stripe]) -> Stripe:
    """Sum a collection of stripes into a fresh stripe."""
    return dict(reduce(_add_stripe, stripes, defaultdict(int)))


def merge(records: Iterable[PartialStripeRecord], word: Optional[str] = None) -> AggregatedRecord:
    """
    Fold every partial stripe of one word into an aggregated record.

    Args:
        records: Partial (or already aggregated) records sharing one word
        word: The shared word. Taken from the first record when omitted;
            required when ``records`` may be empty.

    Returns:
        AggregatedRecord whose stripe is the sum of the input stripes

    Raises:
        ValueError: If records carry different words, or records is empty
            and no word was given
    """
    stripes = []
    for record in records:
        if word is None:
            word = record.word
        elif record.word != word:
            raise ValueError(f"Cannot merge stripe of {record.word!r} into {word!r}")
        stripes.append(record.stripe)

    if word is None:
        raise ValueError("merge() of an empty collection needs an explicit word")

    return AggregatedRecord(word, merge_stripes(stripes))


def combine(records: Iterable[PartialStripeRecord]) -> List[AggregatedRecord]:
    """
    Pre-merge the records of one partition, one output record per word.

    Words keep the order of their first appearance.
    """
    grouped = defaultdict(list)
    for record in records:
        grouped[record.word].append(record.stripe)
    return [AggregatedRecord(word, merge_stripes(stripes)) for word, stripes in grouped.items()]
