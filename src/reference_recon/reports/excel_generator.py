"""
Excel report generator for reference search and duplicate review.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig
from ..models.transaction import (
    DuplicateGroup,
    MatchType,
    SearchResult,
    Transaction,
    TransactionMatch,
)
from ..utils.dates import to_datetime
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
VARIANCE_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
DUPLICATE_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

TRANSACTION_HEADERS = [
    "Transaction ID",
    "Value Date",
    "Amount",
    "Currency",
    "Counterparty",
    "Description",
]


class ExcelReportGenerator:
    """Generates Excel reports for search results and duplicate groups."""

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config or ReconConfig()
        self.sheet_config = self.config.output.sheets

    def generate_report(
        self,
        output_path: Path,
        search_result: Optional[SearchResult] = None,
        fuzzy_matches: Optional[list[TransactionMatch]] = None,
        duplicate_groups: Optional[list[DuplicateGroup]] = None,
    ) -> Path:
        """
        Generate the report workbook.

        Sheets are only written for the results that were supplied.

        Args:
            output_path: Path for output file, or an existing directory to
                write a file named from the configured template into
            search_result: Result of a reference search
            fuzzy_matches: Result of a fuzzy search
            duplicate_groups: Result of a duplicate scan

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        if output_path.is_dir():
            output_path = output_path / self.default_filename()

        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        if self.sheet_config.summary.enabled:
            self._create_summary_sheet(wb, search_result, fuzzy_matches, duplicate_groups)

        if search_result is not None and self.sheet_config.patterns.enabled:
            self._create_patterns_sheet(wb, search_result)

        if self.sheet_config.matches.enabled:
            matches: list[TransactionMatch] = []
            if search_result is not None:
                matches.extend(search_result.matches)
            if fuzzy_matches:
                matches.extend(fuzzy_matches)
            if search_result is not None or fuzzy_matches is not None:
                self._create_matches_sheet(wb, matches)

        if search_result is not None and self.sheet_config.suggestions.enabled:
            self._create_suggestions_sheet(wb, search_result)

        if duplicate_groups is not None and self.sheet_config.duplicates.enabled:
            self._create_duplicates_sheet(wb, duplicate_groups)

        # openpyxl refuses to save a workbook without sheets
        if not wb.sheetnames:
            wb.create_sheet(self.sheet_config.summary.name)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def default_filename(self) -> str:
        """Report file name from the configured template, stamped with the current time."""
        now = datetime.now()
        return self.config.output.excel.filename_template.format(
            date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
        )

    def _create_summary_sheet(
        self,
        wb: Workbook,
        search_result: Optional[SearchResult],
        fuzzy_matches: Optional[list[TransactionMatch]],
        duplicate_groups: Optional[list[DuplicateGroup]],
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Reference Search Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        rows: list[tuple[str, object]] = [
            ("Generated At:", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            ("Config File:", self.config.config_file_path or "Default"),
        ]

        if search_result is not None:
            rows.extend(
                [
                    ("", ""),
                    ("Query:", search_result.query),
                    ("Patterns Found:", len(search_result.patterns)),
                    ("Matches:", len(search_result.matches)),
                    ("Suggestions:", len(search_result.suggestions)),
                    ("Search Time:", f"{search_result.search_time_ms:.1f} ms"),
                ]
            )
            for match_type, count in search_result.matches_by_type.items():
                rows.append((f"  {match_type}:", count))

        if fuzzy_matches is not None:
            rows.extend([("", ""), ("Fuzzy Matches:", len(fuzzy_matches))])

        if duplicate_groups is not None:
            duplicate_count = sum(len(g.duplicates) for g in duplicate_groups)
            rows.extend(
                [
                    ("", ""),
                    ("Duplicate Groups:", len(duplicate_groups)),
                    ("Duplicate Transactions:", duplicate_count),
                ]
            )

        for i, (label, value) in enumerate(rows, start=3):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_patterns_sheet(self, wb: Workbook, search_result: SearchResult) -> None:
        """Create the sheet listing the query's reference patterns."""
        ws = wb.create_sheet(self.sheet_config.patterns.name)
        self._write_headers(ws, ["Type", "Value", "Confidence", "Description"])

        for row_num, pattern in enumerate(search_result.patterns, start=2):
            row_data = [
                pattern.type.value,
                pattern.value,
                f"{pattern.confidence:.2f}",
                pattern.description,
            ]
            self._write_row(ws, row_num, row_data)

        self._auto_fit_columns(ws)

    def _create_matches_sheet(self, wb: Workbook, matches: list[TransactionMatch]) -> None:
        """Create the ranked matches sheet."""
        ws = wb.create_sheet(self.sheet_config.matches.name)
        self._write_headers(ws, ["Match Type", "Confidence", "Reason"] + TRANSACTION_HEADERS)

        for row_num, match in enumerate(matches, start=2):
            row_data = [
                match.match_type.value,
                f"{match.confidence:.2f}",
                match.match_reason,
            ] + self._transaction_cells(match.transaction)

            fill = VARIANCE_FILL if match.match_type == MatchType.FUZZY else MATCH_FILL
            self._write_row(ws, row_num, row_data, fill)

        self._auto_fit_columns(ws)

    def _create_suggestions_sheet(self, wb: Workbook, search_result: SearchResult) -> None:
        """Create the follow-up suggestions sheet."""
        ws = wb.create_sheet(self.sheet_config.suggestions.name)
        self._write_headers(ws, ["Suggestion"])

        for row_num, suggestion in enumerate(search_result.suggestions, start=2):
            self._write_row(ws, row_num, [suggestion])

        self._auto_fit_columns(ws)

    def _create_duplicates_sheet(
        self, wb: Workbook, duplicate_groups: list[DuplicateGroup]
    ) -> None:
        """Create the duplicate groups sheet, one row per transaction."""
        ws = wb.create_sheet(self.sheet_config.duplicates.name)
        self._write_headers(ws, ["Group", "Role"] + TRANSACTION_HEADERS)

        row_num = 2
        for group_num, group in enumerate(duplicate_groups, start=1):
            self._write_row(
                ws,
                row_num,
                [group_num, "Original"] + self._transaction_cells(group.original),
            )
            row_num += 1

            for duplicate in group.duplicates:
                self._write_row(
                    ws,
                    row_num,
                    [group_num, "Duplicate"] + self._transaction_cells(duplicate),
                    DUPLICATE_FILL,
                )
                row_num += 1

        self._auto_fit_columns(ws)

    def _transaction_cells(self, txn: Transaction) -> list:
        """Common transaction columns."""
        # Excel cannot store timezone-aware datetimes
        value_date = txn.value_date
        if isinstance(value_date, datetime):
            value_date = to_datetime(value_date)

        return [
            txn.id,
            value_date,
            float(txn.amount.value),
            txn.amount.currency,
            txn.counterparty.name,
            txn.description,
        ]

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        """Write a styled header row."""
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _write_row(
        self,
        ws: Worksheet,
        row_num: int,
        row_data: list,
        fill: Optional[PatternFill] = None,
    ) -> None:
        """Write a bordered data row, optionally filled."""
        for col, value in enumerate(row_data, start=1):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.border = THIN_BORDER
            if fill:
                cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = 0
            column = column_cells[0].column_letter

            for cell in column_cells:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))

            ws.column_dimensions[column].width = min(max_length + 2, 50)
