"""
Duplicate transaction detection.

Groups transactions that probably record the same real-world payment:
equal amount and currency, value dates close together, and either a
similar description or the same counterparty.
"""

from decimal import Decimal
from typing import Optional
import logging

from ..config import ReconConfig
from ..models.transaction import DuplicateGroup, Transaction
from ..utils.dates import hours_between
from .similarity import similarity

logger = logging.getLogger(__name__)


class DuplicateDetector:
    """
    Single-pass duplicate finder.

    Transactions are visited in input order. Each one not yet placed in a
    group seeds a scan of the remaining unplaced transactions; once a group
    is formed its members are never considered again. Grouping is therefore
    order dependent: a transaction can only end up as a duplicate of a seed
    that comes before it.

    The pairwise scan is O(n^2), which is fine for a few thousand
    transactions but not for full-ledger volumes.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the detector.

        Args:
            config: Application configuration, defaults if omitted
        """
        self.config = config or ReconConfig()
        settings = self.config.duplicates
        self.tolerance_hours = settings.tolerance_hours
        self.similarity_threshold = settings.description_similarity_threshold
        self.amount_tolerance = Decimal(str(settings.amount_tolerance))

    def find_duplicates(
        self,
        transactions: list[Transaction],
        tolerance_hours: Optional[float] = None,
    ) -> list[DuplicateGroup]:
        """
        Find groups of probable duplicates.

        Args:
            transactions: Transactions to scan, not modified
            tolerance_hours: Maximum value-date distance (>= 0), configured
                default if None

        Returns:
            Non-overlapping duplicate groups in seed order
        """
        if tolerance_hours is None:
            tolerance_hours = self.tolerance_hours

        groups: list[DuplicateGroup] = []
        processed: set[str] = set()

        for transaction in transactions:
            if transaction.id in processed:
                continue

            duplicates = [
                other
                for other in transactions
                if other.id != transaction.id
                and other.id not in processed
                and self.is_duplicate(transaction, other, tolerance_hours)
            ]

            if duplicates:
                groups.append(DuplicateGroup(original=transaction, duplicates=duplicates))
                processed.add(transaction.id)
                processed.update(d.id for d in duplicates)

        logger.info(
            f"Duplicate scan complete: {len(groups)} groups across "
            f"{len(transactions)} transactions"
        )
        return groups

    def is_duplicate(
        self, original: Transaction, other: Transaction, tolerance_hours: float
    ) -> bool:
        """Check the composite duplicate rule for one pair."""
        same_amount = (
            abs(original.amount.value - other.amount.value) < self.amount_tolerance
            and original.amount.currency == other.amount.currency
        )
        if not same_amount:
            return False

        if hours_between(original.value_date, other.value_date) > tolerance_hours:
            return False

        if original.counterparty.name == other.counterparty.name:
            return True

        return similarity(original.description, other.description) > self.similarity_threshold
