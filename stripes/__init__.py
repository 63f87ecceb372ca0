"""
Stripes word co-occurrence counting.

Each word occurrence emits a sparse neighbor -> count map (a stripe) built from
a sliding window over the tokens of its line; stripes are then merged per word.
"""

from stripes.errors import StripesError, InvalidConfiguration, InvalidStripe, JobFailed
from stripes.stripe import Stripe, PartialStripeRecord, AggregatedRecord, validate_stripe
from stripes.tokenizer import tokenize
from stripes.emitter import emit
from stripes.merger import merge, merge_stripes, combine

__version__ = "0.1.0"

__all__ = [
    'StripesError',
    'InvalidConfiguration',
    'InvalidStripe',
    'JobFailed',
    'Stripe',
    'PartialStripeRecord',
    'AggregatedRecord',
    'validate_stripe',
    'tokenize',
    'emit',
    'merge',
    'merge_stripes',
    'combine',
]
