"""
Reference pattern extraction from free-text remittance information.

Scans a text for common banking reference shapes (invoice, purchase order,
contract, bank and customer references, batch numbers) and returns typed
tokens ranked by confidence.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional
import re

from ..models.transaction import PatternType, ReferencePattern

UNKNOWN_CONFIDENCE = 0.1
ENTERPRISE_CONFIDENCE = 0.7
UNKNOWN_VALUE_LENGTH = 50

# Word prefixes must not continue a word ("REPORT" is not a PO reference).
# A "#" prefix may follow anything.
_NOT_AFTER_LETTER = r"(?<![^\W\d_])"

# Word characters with inner hyphens, starting and ending on a word character
_TOKEN_2_20 = r"(\w[\w-]{0,18}\w)"
_TOKEN_3_20 = r"(\w[\w-]{1,18}\w)"


@dataclass(frozen=True)
class PatternMatcher:
    """A single entry of the extraction table."""

    type: PatternType
    regex: re.Pattern
    description: str


REFERENCE_MATCHERS: tuple[PatternMatcher, ...] = (
    PatternMatcher(
        PatternType.INVOICE,
        re.compile(_NOT_AFTER_LETTER + r"(?:INVOICE|INV)[-\s]*" + _TOKEN_2_20, re.IGNORECASE),
        "Invoice reference pattern",
    ),
    PatternMatcher(
        PatternType.PO,
        re.compile(
            _NOT_AFTER_LETTER + r"(?:PURCHASE[-\s]ORDER|P\.O\.|PO)[-\s]*" + _TOKEN_2_20,
            re.IGNORECASE,
        ),
        "Purchase order reference pattern",
    ),
    PatternMatcher(
        PatternType.CONTRACT,
        re.compile(
            _NOT_AFTER_LETTER + r"(?:CONTRACT|CONTR|CNT)[-\s]*" + _TOKEN_2_20, re.IGNORECASE
        ),
        "Contract reference pattern",
    ),
    PatternMatcher(
        PatternType.BANK_REF,
        re.compile(r"\b(\d{8,})\b"),
        "Bank reference number (8+ digits)",
    ),
    PatternMatcher(
        PatternType.CUSTOMER_REF,
        re.compile(
            r"(?:" + _NOT_AFTER_LETTER + r"(?:REFERENCE|REF)|#)[-\s]*" + _TOKEN_3_20,
            re.IGNORECASE,
        ),
        "Customer reference pattern",
    ),
    PatternMatcher(
        PatternType.BATCH,
        re.compile(_NOT_AFTER_LETTER + r"(?:BATCH|BTH|B)[-\s]*(\d{3,10})", re.IGNORECASE),
        "Batch processing reference",
    ),
)

# Document number layouts seen in ERP exports
ENTERPRISE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\b\d{10}\b"),
    re.compile(r"\b[A-Z]{2}\d{8}\b"),
    re.compile(r"\b\d{4}-\d{4}-\d{4}\b"),
    re.compile(r"\b[A-Z]{3}\d{6}\b"),
    re.compile(r"\b\d{4}[A-Z]{2}\d{4}\b"),
)

AMOUNT_PATTERN = re.compile(r"\b(\d{1,3}(?:,\d{3})+(?:\.\d{2})?|\d+(?:\.\d{2})?)\b")


def calculate_pattern_confidence(pattern_type: PatternType, value: str) -> float:
    """
    Confidence for a token of the given type.

    Longer tokens score higher where length is a useful signal.
    """
    length = len(value)

    if pattern_type == PatternType.INVOICE:
        return 0.9 if length >= 6 else 0.7
    if pattern_type == PatternType.PO:
        return 0.85 if length >= 4 else 0.6
    if pattern_type == PatternType.BANK_REF:
        return 0.95 if length >= 10 else 0.8
    if pattern_type == PatternType.CONTRACT:
        return 0.8
    if pattern_type == PatternType.CUSTOMER_REF:
        return 0.75 if length >= 5 else 0.5
    if pattern_type == PatternType.BATCH:
        return 0.7
    return 0.3


def extract_patterns(text: str) -> list[ReferencePattern]:
    """
    Extract reference patterns from a text.

    Args:
        text: Description or search query, may be empty

    Returns:
        Patterns sorted by descending confidence. Never empty: when nothing
        is recognized a single UNKNOWN pattern is returned.
    """
    patterns: list[ReferencePattern] = []

    for matcher in REFERENCE_MATCHERS:
        for match in matcher.regex.finditer(text):
            value = match.group(1)
            patterns.append(
                ReferencePattern(
                    type=matcher.type,
                    value=value,
                    confidence=calculate_pattern_confidence(matcher.type, value),
                    description=matcher.description,
                )
            )

    for regex in ENTERPRISE_PATTERNS:
        for match in regex.finditer(text):
            patterns.append(
                ReferencePattern(
                    type=PatternType.CUSTOMER_REF,
                    value=match.group(0),
                    confidence=ENTERPRISE_CONFIDENCE,
                    description="Enterprise reference format",
                )
            )

    if not patterns:
        patterns.append(
            ReferencePattern(
                type=PatternType.UNKNOWN,
                value=text[:UNKNOWN_VALUE_LENGTH],
                confidence=UNKNOWN_CONFIDENCE,
                description="No recognizable reference pattern",
            )
        )

    # sorted() is stable, so ties keep table order
    return sorted(patterns, key=lambda p: p.confidence, reverse=True)


def extract_amount(text: str) -> Optional[Decimal]:
    """
    Parse the first amount-looking number out of a text.

    Thousands separators are stripped. Returns None when there is no
    number or it does not parse.
    """
    match = AMOUNT_PATTERN.search(text)
    if not match:
        return None

    try:
        return Decimal(match.group(1).replace(",", ""))
    except InvalidOperation:
        return None
