"""Parsers for transaction exports."""

from .transaction_parser import TransactionParser

__all__ = ["TransactionParser"]
