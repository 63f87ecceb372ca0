"""
Stripes co-occurrence job.
Map, reduce and combiner functions in the form the local engine loads.
"""

from stripes.emitter import DEFAULT_RADIUS, emit
from stripes.merger import merge_stripes
from stripes.tokenizer import tokenize


def map_function(key, value, radius=DEFAULT_RADIUS):
    """
    Map function: emit (word, stripe) for each word occurrence in the line.

    Args:
        key: Line identifier (unused)
        value: Text line
        radius: Window radius

    Yields:
        (word, stripe) tuples
    """
    for word, stripe in emit(tokenize(value), radius):
        yield (word, stripe)


def reduce_function(key, values):
    """
    Reduce function: sum all stripes of a word.

    Args:
        key: Word
        values: List of stripes (partial or combined)

    Yields:
        (word, merged stripe) tuple
    """
    yield (key, merge_stripes(values))


def combiner_function(key, values):
    """
    Combiner function: pre-merge the stripes of a word within one map task.
    Safe because stripe addition is associative and commutative.
    """
    yield (key, merge_stripes(values))
