"""
Reference search and duplicate detection for bank reconciliation.

The module-level functions run with the default configuration; build a
ReferenceSearchEngine or DuplicateDetector from a ReconConfig to tune them.
"""

from typing import Optional

from .config import ReconConfig, load_config
from .matching import (
    DuplicateDetector,
    ReferenceSearchEngine,
    extract_patterns,
    similarity,
)
from .models import (
    Counterparty,
    DuplicateGroup,
    MatchType,
    Money,
    PatternType,
    ReferencePattern,
    SearchResult,
    Transaction,
    TransactionMatch,
)

__version__ = "0.1.0"


def search(query: str, transactions: list[Transaction]) -> SearchResult:
    """Search transactions for a reference, amount or counterparty."""
    return ReferenceSearchEngine().search(query, transactions)


def fuzzy_search(
    query: str, transactions: list[Transaction], threshold: float = 0.6
) -> list[TransactionMatch]:
    """Rank transactions by description similarity to the query."""
    return ReferenceSearchEngine().fuzzy_search(query, transactions, threshold)


def find_duplicates(
    transactions: list[Transaction], tolerance_hours: Optional[float] = 24
) -> list[DuplicateGroup]:
    """Group probable duplicate transactions."""
    return DuplicateDetector().find_duplicates(transactions, tolerance_hours)


__all__ = [
    "Counterparty",
    "DuplicateDetector",
    "DuplicateGroup",
    "MatchType",
    "Money",
    "PatternType",
    "ReconConfig",
    "ReferencePattern",
    "ReferenceSearchEngine",
    "SearchResult",
    "Transaction",
    "TransactionMatch",
    "extract_patterns",
    "find_duplicates",
    "fuzzy_search",
    "load_config",
    "search",
    "similarity",
]
