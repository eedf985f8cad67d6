"""
Reference search engine for reconciliation lookups.
Runs configurable matching strategies in priority order against a
transaction pool and ranks the hits.
"""

from collections import Counter
from datetime import datetime
from decimal import Decimal
from typing import Optional
import logging
import math

from ..config import ReconConfig, StrategyConfig
from ..models.transaction import (
    MatchType,
    PatternType,
    ReferencePattern,
    SearchResult,
    Transaction,
    TransactionMatch,
)
from ..utils.dates import to_datetime
from .patterns import extract_patterns
from .similarity import similarity
from .strategies import (
    AmountStrategy,
    CounterpartyStrategy,
    ExactReferenceStrategy,
    MatchingStrategy,
    PartialDescriptionStrategy,
    SearchQuery,
)

logger = logging.getLogger(__name__)


def _percent(score: float) -> int:
    """Score as a whole percentage, halves rounded up."""
    return math.floor(score * 100 + 0.5)


class ReferenceSearchEngine:
    """
    Searches a transaction pool for entries related to a query.

    Strategies are tried in priority order for every transaction and the
    first one that fires decides the match, so each transaction appears at
    most once in a result.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the search engine.

        Args:
            config: Application configuration, defaults if omitted
        """
        self.config = config or ReconConfig()
        self.settings = self.config.matching.settings
        self.strategies = self._build_strategies()

    def _build_strategies(self) -> list[tuple[str, MatchingStrategy]]:
        """
        Build matching strategies from configuration.

        Returns:
            List of (name, strategy) tuples ordered by priority
        """
        strategies: list[tuple[str, MatchingStrategy]] = []

        enabled = [s for s in self.config.matching.strategies if s.enabled]
        for strategy_config in sorted(enabled, key=lambda s: s.priority):
            strategy = self._create_strategy(strategy_config)
            if strategy:
                strategies.append((strategy_config.name, strategy))
                logger.debug(f"Loaded matching strategy: {strategy_config.name}")

        return strategies

    def _create_strategy(self, strategy_config: StrategyConfig) -> Optional[MatchingStrategy]:
        """
        Create a matching strategy from its configuration entry.

        Args:
            strategy_config: Strategy configuration

        Returns:
            Matching strategy, or None for an unknown name
        """
        name = strategy_config.name
        confidence = strategy_config.confidence

        if name == "exact_reference":
            return ExactReferenceStrategy(confidence)
        if name == "partial_description":
            return PartialDescriptionStrategy(confidence)
        if name == "amount":
            tolerance = Decimal(str(self.settings.amount_tolerance))
            return AmountStrategy(confidence, tolerance=tolerance)
        if name == "counterparty":
            return CounterpartyStrategy(confidence)

        logger.warning(f"Unknown matching strategy ignored: {name}")
        return None

    def search(self, query: str, transactions: list[Transaction]) -> SearchResult:
        """
        Search for transactions related to a query.

        Args:
            query: Free-text query (reference, amount, counterparty, ...)
            transactions: Transaction pool, not modified

        Returns:
            Ranked matches, the query's patterns and follow-up suggestions
        """
        start_time = datetime.now()

        search_query = SearchQuery.from_text(query)
        matches: list[TransactionMatch] = []

        # The empty string would be a substring of everything
        if query:
            for transaction in transactions:
                match = self._match_transaction(search_query, transaction)
                if match:
                    matches.append(match)

        # sorted() is stable, so ties keep transaction order
        ranked = sorted(matches, key=lambda m: m.confidence, reverse=True)
        ranked = ranked[: self.settings.max_matches]

        suggestions = self._generate_suggestions(search_query.patterns, transactions)

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        logger.debug(
            f"Search '{query}': {len(matches)} matches over {len(transactions)} "
            f"transactions in {elapsed_ms:.1f}ms"
        )

        return SearchResult(
            query=query,
            patterns=search_query.patterns,
            matches=ranked,
            suggestions=suggestions,
            search_time_ms=elapsed_ms,
        )

    def _match_transaction(
        self, query: SearchQuery, transaction: Transaction
    ) -> Optional[TransactionMatch]:
        """Return the match from the first strategy that fires, if any."""
        for name, strategy in self.strategies:
            if strategy.is_match(query, transaction):
                score, reason = strategy.calculate_match_score(query, transaction)
                logger.debug(f"Transaction {transaction.id} matched by {name}")
                return TransactionMatch(
                    transaction=transaction,
                    match_reason=reason,
                    confidence=score,
                    match_type=strategy.match_type,
                )
        return None

    def fuzzy_search(
        self,
        query: str,
        transactions: list[Transaction],
        threshold: Optional[float] = None,
    ) -> list[TransactionMatch]:
        """
        Rank transactions by description similarity to the query.

        Intended as a fallback when search() finds nothing.

        Args:
            query: Free-text query
            transactions: Transaction pool, not modified
            threshold: Minimum similarity (0.0-1.0), configured default if None

        Returns:
            FUZZY matches at or above the threshold, best first
        """
        if threshold is None:
            threshold = self.config.matching.fuzzy.threshold

        query_lower = query.lower()
        matches: list[TransactionMatch] = []

        for transaction in transactions:
            score = similarity(query_lower, transaction.description.lower())
            if score >= threshold:
                matches.append(
                    TransactionMatch(
                        transaction=transaction,
                        match_reason=f"Fuzzy match ({_percent(score)}% similarity)",
                        confidence=score,
                        match_type=MatchType.FUZZY,
                    )
                )

        logger.debug(f"Fuzzy search '{query}': {len(matches)} matches >= {threshold}")
        return sorted(matches, key=lambda m: m.confidence, reverse=True)

    def _generate_suggestions(
        self, query_patterns: list[ReferencePattern], transactions: list[Transaction]
    ) -> list[str]:
        """
        Build follow-up search suggestions.

        Combines variants of the query's own references, the most frequent
        counterparties and references seen in recent transactions.
        """
        suggestions: list[str] = []

        for pattern in query_patterns:
            if pattern.type == PatternType.INVOICE:
                suggestions.extend(
                    [f"{pattern.value}*", f"*{pattern.value}", f"INV-{pattern.value}"]
                )
            elif pattern.type == PatternType.PO:
                suggestions.extend([f"PO-{pattern.value}", f"P.O.{pattern.value}"])

        suggestions.extend(
            self._frequent_counterparties(transactions)[
                : self.settings.suggestion_counterparties
            ]
        )
        suggestions.extend(
            self._recent_reference_values(transactions)[: self.settings.recent_patterns]
        )

        # dict keeps first-seen order
        unique = list(dict.fromkeys(suggestions))
        return unique[: self.settings.max_suggestions]

    def _frequent_counterparties(self, transactions: list[Transaction]) -> list[str]:
        """Counterparty names by descending frequency, ties in first-seen order."""
        counts = Counter(t.counterparty.name for t in transactions)
        return [name for name, _ in counts.most_common()]

    def _recent_reference_values(self, transactions: list[Transaction]) -> list[str]:
        """Confident reference values from the most recent transactions."""
        recent = sorted(
            transactions, key=lambda t: to_datetime(t.value_date), reverse=True
        )[: self.settings.recent_window]

        values: dict[str, None] = {}
        for transaction in recent:
            for pattern in extract_patterns(transaction.description):
                if (
                    pattern.confidence > self.settings.recent_min_confidence
                    and len(pattern.value) >= self.settings.recent_min_length
                ):
                    values.setdefault(pattern.value, None)

        return list(values)

