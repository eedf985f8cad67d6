"""Reference search engine, strategies and duplicate detection."""

from .duplicates import DuplicateDetector
from .engine import ReferenceSearchEngine
from .patterns import extract_amount, extract_patterns
from .similarity import levenshtein_distance, similarity
from .strategies import (
    MatchingStrategy,
    ExactReferenceStrategy,
    PartialDescriptionStrategy,
    AmountStrategy,
    CounterpartyStrategy,
    SearchQuery,
)

__all__ = [
    "DuplicateDetector",
    "ReferenceSearchEngine",
    "extract_amount",
    "extract_patterns",
    "levenshtein_distance",
    "similarity",
    "MatchingStrategy",
    "ExactReferenceStrategy",
    "PartialDescriptionStrategy",
    "AmountStrategy",
    "CounterpartyStrategy",
    "SearchQuery",
]
