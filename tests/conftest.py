"""
Pytest Configuration and Shared Fixtures

Provides transaction factories and a small statement used across the suite.
"""

from datetime import date
from decimal import Decimal

import pytest

from reference_recon.models import Counterparty, Money, Transaction


def build_transaction(
    id: str,
    description: str = "",
    amount: str = "100.00",
    currency: str = "USD",
    value_date: date = date(2024, 3, 1),
    counterparty: str = "ACME Corp",
) -> Transaction:
    """Helper to create a Transaction with minimal fields."""
    return Transaction(
        id=id,
        description=description,
        amount=Money(value=Decimal(amount), currency=currency),
        value_date=value_date,
        counterparty=Counterparty(name=counterparty),
    )


@pytest.fixture
def make_transaction():
    """Factory fixture for ad-hoc transactions."""
    return build_transaction


@pytest.fixture
def statement() -> list[Transaction]:
    """Four statement entries with distinct reference shapes."""
    return [
        build_transaction(
            "T1",
            "Payment INV-2024-00123 for services",
            amount="5000.00",
            value_date=date(2024, 3, 1),
            counterparty="Globex Ltd",
        ),
        build_transaction(
            "T2",
            "Consulting fee March",
            amount="15000.00",
            value_date=date(2024, 3, 5),
            counterparty="ACME Corp",
        ),
        build_transaction(
            "T3",
            "Wire transfer BATCH 00042",
            amount="250.00",
            currency="EUR",
            value_date=date(2024, 2, 20),
            counterparty="Initech",
        ),
        build_transaction(
            "T4",
            "Office supplies",
            amount="120.50",
            value_date=date(2024, 3, 10),
            counterparty="ACME Corp",
        ),
    ]


@pytest.fixture
def statement_records() -> list[dict]:
    """The statement above in the JSON export layout."""
    return [
        {
            "id": "T1",
            "entryRef": "E-001",
            "bookingDate": "2024-03-01",
            "valueDate": "2024-03-01",
            "amount": {"original": 5000.0, "currency": "USD"},
            "creditDebitIndicator": "CRDT",
            "counterparty": {"name": "Globex Ltd", "bic": "GLBXUS33"},
            "description": "Payment INV-2024-00123 for services",
        },
        {
            "id": "T2",
            "valueDate": "2024-03-05T10:30:00Z",
            "amount": {"original": 15000.0, "currency": "USD"},
            "creditDebitIndicator": "DBIT",
            "counterparty": {"name": "ACME Corp"},
            "description": "Consulting fee March",
        },
        {
            "id": "T3",
            "valueDate": "2024-02-20",
            "amount": {"original": 250.0, "currency": "EUR"},
            "counterparty": {"name": "Initech"},
            "description": "Wire transfer BATCH 00042",
        },
        {
            "id": "T4",
            "valueDate": "2024-03-10",
            "amount": {"original": 120.5, "currency": "USD"},
            "counterparty": {"name": "ACME Corp"},
            "description": "Office supplies",
        },
    ]
