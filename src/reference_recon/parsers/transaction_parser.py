"""
Transaction file parser.
Loads statement transactions from JSON or CSV exports into the models
used by the search engine and duplicate detector.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional
import json
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.transaction import (
    Counterparty,
    CreditDebitIndicator,
    Money,
    Transaction,
)
from ..utils.exceptions import TransactionParseError

logger = logging.getLogger(__name__)


class TransactionParser:
    """
    Parser for transaction exports.

    JSON files hold a list of records (or an object with a ``transactions``
    list) in the statement layout: ``amount`` is an object with
    ``original``/``value`` and ``currency``, ``counterparty`` an object with
    ``name``. CSV files use flat columns named by the configured mappings.
    Records that cannot be read are logged and skipped.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config or ReconConfig()
        self.encoding = self.config.input.encoding
        csv_config = self.config.input.csv
        self.delimiter = csv_config.get("delimiter", ",")
        self.date_format = csv_config.get("date_format", "%Y-%m-%d")
        self.column_mappings = csv_config.get("column_mappings", {})

    def parse_file(self, file_path: Path) -> list[Transaction]:
        """
        Parse a transaction file, choosing the format by extension.

        Args:
            file_path: Path to a .json or .csv file

        Returns:
            List of transactions in file order

        Raises:
            TransactionParseError: If the file cannot be read
        """
        logger.info(f"Parsing transaction file: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix == ".json":
            transactions = self._parse_json(file_path)
        elif suffix == ".csv":
            transactions = self._parse_csv(file_path)
        else:
            raise TransactionParseError(f"Unsupported transaction file type: {file_path}")

        logger.info(f"Extracted {len(transactions)} transactions from {file_path.name}")
        return transactions

    def _parse_json(self, file_path: Path) -> list[Transaction]:
        """Read a JSON export."""
        try:
            with open(file_path, "r", encoding=self.encoding) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read JSON file: {e}")
            raise TransactionParseError(f"Failed to read JSON file: {e}") from e

        if isinstance(data, dict):
            data = data.get("transactions", [])
        if not isinstance(data, list):
            raise TransactionParseError(f"No transaction list found in {file_path}")

        return self.parse_records(data)

    def parse_records(self, records: list[dict[str, Any]]) -> list[Transaction]:
        """
        Convert already-deserialized JSON records to transactions.

        Args:
            records: Records in the statement JSON layout

        Returns:
            List of transactions, invalid records skipped
        """
        transactions: list[Transaction] = []

        for idx, record in enumerate(records):
            try:
                txn = self._normalize_record(record, idx)
            except (AttributeError, KeyError, TypeError, ValueError, InvalidOperation) as e:
                logger.warning(f"Failed to process record {idx}: {e}")
                continue
            if txn:
                transactions.append(txn)

        return transactions

    def _normalize_record(self, record: dict[str, Any], idx: int) -> Optional[Transaction]:
        """
        Convert a JSON record to a Transaction.

        Args:
            record: Single transaction record
            idx: Record index, used for generated ids and logging

        Returns:
            Transaction or None if the record is unusable
        """
        value_date = self._parse_date(record.get("valueDate") or record.get("value_date"))
        if value_date is None:
            logger.warning(f"Record {idx}: Invalid value date, skipping")
            return None

        raw_amount = record.get("amount")
        if isinstance(raw_amount, dict):
            value = raw_amount.get("original", raw_amount.get("value"))
            currency = raw_amount.get("currency", "")
        else:
            value = raw_amount
            currency = record.get("currency", "")

        amount = self._parse_amount(value)
        if amount is None:
            logger.warning(f"Record {idx}: No valid amount found, skipping")
            return None

        raw_counterparty = record.get("counterparty") or {}
        if isinstance(raw_counterparty, dict):
            counterparty = Counterparty(
                name=str(raw_counterparty.get("name", "")),
                account=raw_counterparty.get("account"),
                bic=raw_counterparty.get("bic"),
            )
        else:
            counterparty = Counterparty(name=str(raw_counterparty))

        indicator = record.get("creditDebitIndicator")

        return Transaction(
            id=str(record.get("id") or f"TXN-{idx:05d}"),
            description=str(record.get("description") or ""),
            amount=Money(value=amount, currency=str(currency).upper()),
            value_date=value_date,
            counterparty=counterparty,
            entry_ref=record.get("entryRef"),
            booking_date=self._parse_date(record.get("bookingDate")),
            credit_debit_indicator=CreditDebitIndicator(indicator) if indicator else None,
        )

    def _parse_csv(self, file_path: Path) -> list[Transaction]:
        """Read a CSV export."""
        try:
            df = pd.read_csv(
                file_path,
                encoding=self.encoding,
                delimiter=self.delimiter,
                dtype=str,
                keep_default_na=False,
            )
        except Exception as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise TransactionParseError(f"Failed to read CSV file: {e}") from e

        return self._process_dataframe(df)

    def _process_dataframe(self, df: pd.DataFrame) -> list[Transaction]:
        """
        Process the DataFrame and convert rows to transactions.

        Args:
            df: Pandas DataFrame containing CSV data

        Returns:
            List of transactions
        """
        id_col = self.column_mappings.get("id", "id")
        desc_col = self.column_mappings.get("description", "description")
        amount_col = self.column_mappings.get("amount", "amount")
        currency_col = self.column_mappings.get("currency", "currency")
        date_col = self.column_mappings.get("value_date", "valueDate")
        counterparty_col = self.column_mappings.get("counterparty", "counterparty")

        transactions: list[Transaction] = []

        for idx, row in df.iterrows():
            value_date = self._parse_date(row.get(date_col))
            if value_date is None:
                logger.warning(f"Row {idx}: Invalid value date, skipping")
                continue

            amount = self._parse_amount(row.get(amount_col))
            if amount is None:
                logger.warning(f"Row {idx}: No valid amount found, skipping")
                continue

            transactions.append(
                Transaction(
                    id=row.get(id_col) or f"TXN-{int(idx):05d}",
                    description=row.get(desc_col, ""),
                    amount=Money(value=amount, currency=row.get(currency_col, "").upper()),
                    value_date=value_date,
                    counterparty=Counterparty(name=row.get(counterparty_col, "")),
                )
            )

        return transactions

    def _parse_date(self, date_value) -> Optional[date]:
        """
        Parse a value date.

        ISO dates stay dates; ISO timestamps become datetimes. Anything else
        goes through the configured format and then pandas.

        Args:
            date_value: Date value (string, date or None)

        Returns:
            date/datetime or None
        """
        if date_value is None or date_value == "":
            return None

        if isinstance(date_value, date):
            return date_value

        text = str(date_value).strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass

        try:
            return datetime.strptime(text, self.date_format).date()
        except ValueError:
            # Try pandas parser as fallback
            try:
                return pd.to_datetime(text).to_pydatetime()
            except (ValueError, TypeError):
                return None

    def _parse_amount(self, amount_value) -> Optional[Decimal]:
        """
        Parse an amount value.

        Args:
            amount_value: Amount value (string, number, or None)

        Returns:
            Decimal amount or None
        """
        if amount_value is None or amount_value == "":
            return None

        try:
            # Remove any currency symbols and thousands separators
            if isinstance(amount_value, str):
                amount_value = amount_value.replace("$", "").replace(",", "").strip()

            amount = Decimal(str(amount_value))
        except (InvalidOperation, ValueError):
            return None

        return amount if amount.is_finite() else None
