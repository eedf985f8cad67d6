"""Tests for the reference search engine."""

from datetime import date, timedelta

import pytest

from reference_recon.config import ReconConfig, StrategyConfig
from reference_recon.matching import ReferenceSearchEngine
from reference_recon.matching.similarity import similarity
from reference_recon.models import MatchType, PatternType


@pytest.fixture
def engine():
    """Engine with the default configuration."""
    return ReferenceSearchEngine()


def match_summary(result_or_matches):
    matches = getattr(result_or_matches, "matches", result_or_matches)
    return [(m.transaction.id, m.match_type, m.confidence) for m in matches]


class TestSearchStrategies:
    """Each strategy on its own."""

    def test_exact_reference_match(self, engine, statement):
        result = engine.search("INV-2024-00123", statement)

        assert match_summary(result) == [("T1", MatchType.EXACT, 0.95)]
        assert result.matches[0].match_reason == "Exact INVOICE match: 2024-00123"

    def test_exact_match_ignores_case(self, engine, statement):
        result = engine.search("inv-2024-00123", statement)

        assert match_summary(result) == [("T1", MatchType.EXACT, 0.95)]

    def test_partial_description_match(self, engine, statement):
        result = engine.search("consulting", statement)

        assert match_summary(result) == [("T2", MatchType.PARTIAL, 0.7)]
        assert result.matches[0].match_reason == 'Description contains: "consulting"'

    def test_amount_match(self, engine, statement):
        result = engine.search("15000", statement)

        assert match_summary(result) == [("T2", MatchType.PATTERN, 0.8)]
        assert result.matches[0].match_reason == "Amount match: USD 15000"

    def test_amount_with_thousands_separator(self, engine, statement):
        result = engine.search("15,000.00", statement)

        assert match_summary(result) == [("T2", MatchType.PATTERN, 0.8)]

    def test_amount_outside_tolerance(self, engine, make_transaction):
        transactions = [make_transaction("A", "Settlement", amount="15000.01")]

        result = engine.search("15000", transactions)

        assert result.matches == []

    def test_counterparty_match(self, engine, statement):
        result = engine.search("acme", statement)

        assert match_summary(result) == [
            ("T2", MatchType.PATTERN, 0.85),
            ("T4", MatchType.PATTERN, 0.85),
        ]
        assert result.matches[0].match_reason == "Counterparty match: ACME Corp"


class TestSearchRanking:
    """Merging, ordering and limits."""

    def test_first_strategy_wins(self, engine, make_transaction):
        # Description and counterparty both contain the query
        transactions = [
            make_transaction("A", "ACME monthly retainer", counterparty="ACME Corp")
        ]

        result = engine.search("ACME", transactions)

        assert match_summary(result) == [("A", MatchType.PARTIAL, 0.7)]

    def test_sorted_by_confidence(self, engine, make_transaction):
        transactions = [
            make_transaction("A", "Globex retainer", counterparty="Initech"),
            make_transaction("B", "Hosting", counterparty="Globex Ltd"),
        ]

        result = engine.search("globex", transactions)

        assert match_summary(result) == [
            ("B", MatchType.PATTERN, 0.85),
            ("A", MatchType.PARTIAL, 0.7),
        ]

    def test_matches_capped_and_ties_keep_order(self, engine, make_transaction):
        transactions = [
            make_transaction(f"T{i}", "Monthly payment", counterparty=f"Vendor {i}")
            for i in range(30)
        ]

        result = engine.search("monthly", transactions)

        assert len(result.matches) == 20
        assert [m.transaction.id for m in result.matches] == [f"T{i}" for i in range(20)]

    @pytest.mark.parametrize(
        "query", ["INV-2024-00123", "acme", "15000", "Consulting fee March", "a", "0"]
    )
    def test_transaction_appears_once(self, engine, statement, query):
        result = engine.search(query, statement)

        ids = [m.transaction.id for m in result.matches]
        assert len(ids) == len(set(ids))

    def test_no_match(self, engine, statement):
        result = engine.search("Wayne Enterprises", statement)

        assert result.matches == []
        assert result.query == "Wayne Enterprises"
        assert result.search_time_ms >= 0.0

    def test_input_not_reordered(self, engine, statement):
        before = [t.id for t in statement]

        engine.search("INV-2024-00123", statement)

        assert [t.id for t in statement] == before


class TestEmptyQuery:
    """Empty and whitespace queries."""

    def test_empty_query_matches_nothing(self, engine, statement):
        result = engine.search("", statement)

        assert result.matches == []
        assert len(result.patterns) == 1
        assert result.patterns[0].type == PatternType.UNKNOWN
        assert result.patterns[0].confidence == 0.1

    def test_empty_query_matches_nothing_even_for_empty_descriptions(
        self, engine, make_transaction
    ):
        result = engine.search("", [make_transaction("A", "")])

        assert result.matches == []

    def test_whitespace_query_is_a_substring_search(
        self, engine, statement, make_transaction
    ):
        transactions = statement + [make_transaction("T5", "Rent", counterparty="Oak Estates")]

        result = engine.search(" ", transactions)

        # T5 has no space in its description, only in its counterparty
        assert match_summary(result) == [
            ("T5", MatchType.PATTERN, 0.85),
            ("T1", MatchType.PARTIAL, 0.7),
            ("T2", MatchType.PARTIAL, 0.7),
            ("T3", MatchType.PARTIAL, 0.7),
            ("T4", MatchType.PARTIAL, 0.7),
        ]

    def test_empty_query_suggestions(self, engine, statement):
        result = engine.search("", statement)

        assert result.suggestions == ["ACME Corp", "Globex Ltd", "Initech", "2024-00123"]


class TestSuggestions:
    """Suggestion generation."""

    def test_invoice_variants_counterparties_and_recent(self, engine, statement):
        result = engine.search("INV-2024-00123", statement)

        assert result.suggestions == [
            "2024-00123*",
            "*2024-00123",
            "INV-2024-00123",
            "ACME Corp",
            "Globex Ltd",
            "Initech",
            "2024-00123",
        ]

    def test_po_variants(self, engine, statement):
        result = engine.search("PO 4500123", statement)

        assert result.suggestions[:2] == ["PO-4500123", "P.O.4500123"]

    def test_counterparty_ties_keep_first_seen(self, engine, make_transaction):
        transactions = [
            make_transaction("A", counterparty="Zeta"),
            make_transaction("B", counterparty="Alpha"),
            make_transaction("C", counterparty="Alpha"),
            make_transaction("D", counterparty="Mu"),
            make_transaction("E", counterparty="Beta"),
        ]

        result = engine.search("nothing", transactions)

        assert result.suggestions == ["Alpha", "Zeta", "Mu"]

    def test_recent_references_use_newest_transactions(self, engine, make_transaction):
        transactions = [
            make_transaction("old", "INV-OLD0001", value_date=date(2023, 1, 1)),
        ] + [
            make_transaction(
                f"new{i}",
                f"INV-NEW{i:04d}",
                value_date=date(2024, 1, 1) + timedelta(days=i),
                counterparty="Same",
            )
            for i in range(50)
        ]

        result = engine.search("zzz", transactions)

        recent = [s for s in result.suggestions if s.startswith(("OLD", "NEW"))]
        assert recent == ["NEW0049", "NEW0048", "NEW0047"]

    def test_suggestions_deduplicated_and_capped(self, engine, make_transaction):
        transactions = [
            make_transaction(f"T{i}", f"INV-{i:06d}", counterparty=f"Vendor {i}")
            for i in range(20)
        ]

        result = engine.search("INV-000001 PO 4500123 INV-000002", transactions)

        assert len(result.suggestions) <= 10
        assert len(result.suggestions) == len(set(result.suggestions))


class TestStrategyConfiguration:
    """Strategies built from configuration."""

    def test_default_strategy_order(self, engine):
        assert [name for name, _ in engine.strategies] == [
            "exact_reference",
            "partial_description",
            "amount",
            "counterparty",
        ]

    def test_disabled_strategy_is_skipped(self, make_transaction):
        config = ReconConfig()
        for strategy in config.matching.strategies:
            if strategy.name == "partial_description":
                strategy.enabled = False
        engine = ReferenceSearchEngine(config)
        transactions = [make_transaction("A", "ACME retainer", counterparty="ACME Corp")]

        result = engine.search("acme", transactions)

        assert match_summary(result) == [("A", MatchType.PATTERN, 0.85)]

    def test_unknown_strategy_ignored(self):
        config = ReconConfig()
        config.matching.strategies.append(
            StrategyConfig(name="telepathy", priority=0, confidence=1.0)
        )

        engine = ReferenceSearchEngine(config)

        assert "telepathy" not in [name for name, _ in engine.strategies]

    def test_max_matches_setting(self, make_transaction):
        config = ReconConfig()
        config.matching.settings.max_matches = 2
        engine = ReferenceSearchEngine(config)
        transactions = [make_transaction(f"T{i}", "rent") for i in range(5)]

        result = engine.search("rent", transactions)

        assert len(result.matches) == 2


class TestFuzzySearch:
    """Fuzzy description search."""

    def test_only_results_above_threshold(self, engine, statement):
        matches = engine.fuzzy_search("consulting fee", statement, 0.6)

        assert match_summary(matches) == [("T2", MatchType.FUZZY, pytest.approx(0.7))]
        assert matches[0].match_reason == "Fuzzy match (70% similarity)"

    def test_sorted_descending(self, engine, statement, make_transaction):
        transactions = statement + [make_transaction("T5", "Consulting fees")]

        matches = engine.fuzzy_search("consulting fee", transactions, 0.6)

        assert [m.transaction.id for m in matches] == ["T5", "T2"]
        assert all(
            m.confidence == similarity("consulting fee", m.transaction.description.lower())
            for m in matches
        )

    def test_default_threshold_from_config(self, engine, statement):
        assert [m.transaction.id for m in engine.fuzzy_search("consulting fee", statement)] == [
            "T2"
        ]

    def test_threshold_one_requires_identical_text(self, engine, statement):
        matches = engine.fuzzy_search("OFFICE SUPPLIES", statement, 1.0)

        assert match_summary(matches) == [("T4", MatchType.FUZZY, 1.0)]

    def test_not_part_of_search(self, engine, statement):
        result = engine.search("consulting fees", statement)

        assert result.matches == []

    def test_reason_rounds_half_up(self, engine, make_transaction):
        # 3 edits over 8 characters is exactly 62.5%
        matches = engine.fuzzy_search("abcdefgh", [make_transaction("A", "abcdexyz")], 0.6)

        assert matches[0].confidence == 0.625
        assert matches[0].match_reason == "Fuzzy match (63% similarity)"
