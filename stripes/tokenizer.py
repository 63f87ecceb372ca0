"""
Line tokenizer: lowercase, drop everything but ASCII letters and spaces, split.
"""

import re
from typing import List

_NON_LETTER = re.compile(r'[^a-z ]')


def tokenize(line: str) -> List[str]:
    """Return the lowercase alphabetic tokens of ``line`` in order."""
    # Removed characters do not introduce a boundary: "don't" -> "dont"
    cleaned = _NON_LETTER.sub('', line.lower())
    return [token for token in cleaned.split() if token]
