"""Data models for transactions and reference matching results."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class CreditDebitIndicator(Enum):
    """Booking direction as reported on the bank statement."""

    CREDIT = "CRDT"
    DEBIT = "DBIT"


class PatternType(Enum):
    """Kind of reference token found in remittance text."""

    INVOICE = "INVOICE"
    PO = "PO"
    CONTRACT = "CONTRACT"
    BANK_REF = "BANK_REF"
    CUSTOMER_REF = "CUSTOMER_REF"
    BATCH = "BATCH"
    UNKNOWN = "UNKNOWN"


class MatchType(Enum):
    """How a transaction was matched to a query."""

    EXACT = "EXACT"
    PARTIAL = "PARTIAL"
    PATTERN = "PATTERN"
    FUZZY = "FUZZY"


@dataclass(frozen=True)
class Money:
    """Amount in a single currency."""

    value: Decimal
    currency: str


@dataclass(frozen=True)
class Counterparty:
    """Other party of a transaction."""

    name: str
    account: Optional[str] = None
    bic: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """
    A booked statement entry as seen by the matching engine.

    Transactions are owned by whatever loaded them; matching and duplicate
    detection only read them.
    """

    id: str

    # Free-text remittance information
    description: str

    amount: Money

    # Either a date or a datetime; duration comparisons treat a date as midnight
    value_date: date

    counterparty: Counterparty

    # Optional statement fields carried through from the source
    entry_ref: Optional[str] = None
    booking_date: Optional[date] = None
    credit_debit_indicator: Optional[CreditDebitIndicator] = None


@dataclass
class ReferencePattern:
    """A typed reference token extracted from free text."""

    type: PatternType
    value: str
    confidence: float  # 0.0 to 1.0
    description: str = ""


@dataclass
class TransactionMatch:
    """A transaction that matched a search query."""

    transaction: Transaction
    match_reason: str
    confidence: float  # 0.0 to 1.0
    match_type: MatchType


@dataclass
class SearchResult:
    """Outcome of a single reference search."""

    query: str
    patterns: list[ReferencePattern] = field(default_factory=list)
    matches: list[TransactionMatch] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    # Wall-clock duration, diagnostics only
    search_time_ms: float = 0.0

    @property
    def matches_by_type(self) -> dict[str, int]:
        """Number of matches per match type."""
        counts: dict[str, int] = {}
        for match in self.matches:
            counts[match.match_type.value] = counts.get(match.match_type.value, 0) + 1
        return counts


@dataclass
class DuplicateGroup:
    """A transaction and the later entries judged to duplicate it."""

    original: Transaction
    duplicates: list[Transaction] = field(default_factory=list)

    @property
    def transaction_ids(self) -> list[str]:
        """Ids of every transaction in the group, original first."""
        return [self.original.id] + [t.id for t in self.duplicates]

    @property
    def total_duplicated_amount(self) -> Decimal:
        """Sum of the duplicate entries' amounts (original excluded)."""
        return sum((t.amount.value for t in self.duplicates), Decimal("0"))
