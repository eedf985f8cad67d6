"""
Matching strategies for reference search.
Each strategy implements a specific way a transaction can answer a query.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..models.transaction import (
    MatchType,
    ReferencePattern,
    Transaction,
)
from .patterns import extract_amount, extract_patterns


@dataclass
class SearchQuery:
    """A search query with everything the strategies derive from it."""

    text: str
    normalized: str
    patterns: list[ReferencePattern]
    amount: Optional[Decimal]

    @classmethod
    def from_text(cls, text: str) -> "SearchQuery":
        """Tokenize a raw query once for all transactions."""
        return cls(
            text=text,
            normalized=text.lower(),
            patterns=extract_patterns(text),
            amount=extract_amount(text),
        )


class MatchingStrategy(ABC):
    """Abstract base class for matching strategies."""

    match_type: MatchType

    def __init__(self, confidence: float):
        """
        Initialize with the confidence assigned to a hit.

        Args:
            confidence: Score reported for matches of this strategy (0.0-1.0)
        """
        self.confidence = confidence

    @abstractmethod
    def is_match(self, query: SearchQuery, transaction: Transaction) -> bool:
        """
        Check whether a transaction answers the query.

        Args:
            query: Tokenized search query
            transaction: Candidate transaction

        Returns:
            True if the strategy fires for this transaction
        """
        pass

    @abstractmethod
    def calculate_match_score(
        self, query: SearchQuery, transaction: Transaction
    ) -> tuple[float, str]:
        """
        Calculate the confidence score and reason for a match.

        Args:
            query: Tokenized search query
            transaction: Matched transaction

        Returns:
            Tuple of (score 0.0-1.0, reason string)
        """
        pass


class ExactReferenceStrategy(MatchingStrategy):
    """
    Exact reference match - a token from the query equals a token
    extracted from the transaction description.
    Highest confidence strategy.
    """

    match_type = MatchType.EXACT

    def __init__(self, confidence: float = 0.95):
        super().__init__(confidence)

    def is_match(self, query: SearchQuery, transaction: Transaction) -> bool:
        return self._find_shared_pattern(query, transaction) is not None

    def calculate_match_score(
        self, query: SearchQuery, transaction: Transaction
    ) -> tuple[float, str]:
        pattern = self._find_shared_pattern(query, transaction)
        if pattern is None:
            return 0.0, "No match"
        return self.confidence, f"Exact {pattern.type.value} match: {pattern.value}"

    def _find_shared_pattern(
        self, query: SearchQuery, transaction: Transaction
    ) -> Optional[ReferencePattern]:
        """Return the first query pattern whose value the description also yields."""
        if not query.text:
            return None

        transaction_values = {
            p.value.lower() for p in extract_patterns(transaction.description) if p.value
        }
        for pattern in query.patterns:
            if pattern.value and pattern.value.lower() in transaction_values:
                return pattern
        return None


class PartialDescriptionStrategy(MatchingStrategy):
    """Partial match - the description contains the query text."""

    match_type = MatchType.PARTIAL

    def __init__(self, confidence: float = 0.7):
        super().__init__(confidence)

    def is_match(self, query: SearchQuery, transaction: Transaction) -> bool:
        if not query.normalized:
            return False
        return query.normalized in transaction.description.lower()

    def calculate_match_score(
        self, query: SearchQuery, transaction: Transaction
    ) -> tuple[float, str]:
        return self.confidence, f'Description contains: "{query.text}"'


class AmountStrategy(MatchingStrategy):
    """
    Amount match - the query carries a number equal to the transaction
    amount within a small tolerance.
    """

    match_type = MatchType.PATTERN

    def __init__(
        self, confidence: float = 0.8, tolerance: Decimal = Decimal("0.01")
    ):
        """
        Initialize with amount tolerance.

        Args:
            confidence: Score reported for a hit
            tolerance: Absolute difference below which amounts are equal
        """
        super().__init__(confidence)
        self.tolerance = tolerance

    def is_match(self, query: SearchQuery, transaction: Transaction) -> bool:
        if query.amount is None:
            return False
        return abs(transaction.amount.value - query.amount) < self.tolerance

    def calculate_match_score(
        self, query: SearchQuery, transaction: Transaction
    ) -> tuple[float, str]:
        return (
            self.confidence,
            f"Amount match: {transaction.amount.currency} {query.amount}",
        )


class CounterpartyStrategy(MatchingStrategy):
    """Counterparty match - the counterparty name contains the query text."""

    match_type = MatchType.PATTERN

    def __init__(self, confidence: float = 0.85):
        super().__init__(confidence)

    def is_match(self, query: SearchQuery, transaction: Transaction) -> bool:
        if not query.normalized:
            return False
        return query.normalized in transaction.counterparty.name.lower()

    def calculate_match_score(
        self, query: SearchQuery, transaction: Transaction
    ) -> tuple[float, str]:
        return self.confidence, f"Counterparty match: {transaction.counterparty.name}"
