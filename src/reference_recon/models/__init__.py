"""Data models for reference matching."""

from .transaction import (
    CreditDebitIndicator,
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

__all__ = [
    "CreditDebitIndicator",
    "Counterparty",
    "DuplicateGroup",
    "MatchType",
    "Money",
    "PatternType",
    "ReferencePattern",
    "SearchResult",
    "Transaction",
    "TransactionMatch",
]
