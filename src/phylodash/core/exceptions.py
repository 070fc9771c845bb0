"""
Custom exceptions with actionable guidance.

Provides specific error types for the failure scenarios of loading a
dashboard dataset (metadata CSV, Newick tree, descriptor lookups), each
with a helpful suggestion for resolution.
"""

from __future__ import annotations


class PhylodashError(Exception):
    """Base exception for phylodash errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class EmptyInputError(PhylodashError):
    """Raised when a required input (CSV rows or Newick text) is empty."""


class CsvError(PhylodashError):
    """Base class for metadata CSV errors."""


class EmptyCsvError(CsvError, EmptyInputError):
    """Raised when the CSV has no header or no data rows."""

    def __init__(self, source: str = "CSV data"):
        super().__init__(
            message=f"{source} is empty",
            suggestion=(
                "The metadata table needs a header row and at least one data row:\n"
                "  accession,pmid,<descriptor>,...\n"
                "  MN908947,32015507,..."
            ),
        )
        self.source = source


class MalformedCsvError(CsvError):
    """Raised when the CSV text cannot be read as a table."""

    def __init__(self, detail: str):
        super().__init__(
            message=f"CSV data could not be parsed: {detail}",
            suggestion=(
                "Check that the file is comma-delimited, that every row has the "
                "same number of fields as the header and that header names are unique."
            ),
        )
        self.detail = detail


class MissingColumnError(CsvError):
    """Raised in strict mode when identifier columns are absent."""

    def __init__(self, missing: list[str], available: list[str]):
        available_str = ", ".join(available[:10])
        if len(available) > 10:
            available_str += f"... and {len(available) - 10} more"
        super().__init__(
            message=f"CSV is missing required column(s): {', '.join(missing)}",
            suggestion=(
                f"Available columns: {available_str}\n\n"
                "Add an 'accession' column matching the tree leaf names and a "
                "'pmid' (or 'paperId') column, or disable strict column checks."
            ),
        )
        self.missing = missing
        self.available = available


class TreeError(PhylodashError):
    """Base class for Newick tree errors."""


class EmptyTreeError(TreeError, EmptyInputError):
    """Raised when the Newick text is empty."""

    def __init__(self, source: str = "Tree data"):
        super().__init__(
            message=f"{source} is empty",
            suggestion=(
                "Provide a Newick string with at least one node, "
                "e.g. '(A:0.1,B:0.2)root;'."
            ),
        )
        self.source = source


class NewickFormatError(TreeError):
    """Raised when Newick text cannot be parsed into a consistent tree."""

    def __init__(self, reason: str, position: int):
        super().__init__(
            message=f"Malformed Newick tree at position {position}: {reason}",
            suggestion=(
                "Check that every '(' has a matching ')', that sibling subtrees "
                "are separated by ',' and that the tree ends with a single ';'."
            ),
        )
        self.reason = reason
        self.position = position


class DescriptorError(PhylodashError):
    """Base class for descriptor lookup errors."""


class UnknownDescriptorError(DescriptorError):
    """Raised when a descriptor name is not a column of the dataset."""

    def __init__(self, name: str, available: list[str]):
        super().__init__(
            message=f"Unknown descriptor: {name}",
            suggestion=f"Choose one of: {', '.join(available) or '(none)'}",
        )
        self.name = name
        self.available = available


class DescriptorTypeError(DescriptorError):
    """Raised when a view needs a descriptor of a different type."""

    def __init__(self, name: str, actual: str, expected: str):
        super().__init__(
            message=f"Descriptor '{name}' is {actual}, expected {expected}",
            suggestion=(
                "Pyramid plots require categorical data for both X and Y axes. "
                "Columns with more than 6 distinct numeric values are numerical."
            ),
        )
        self.name = name
        self.actual = actual
        self.expected = expected


class ConfigurationError(PhylodashError):
    """Raised when configuration is invalid."""

    def __init__(self, path: str, detail: str):
        super().__init__(
            message=f"Invalid configuration in {path}: {detail}",
            suggestion="Run 'phylodash config init' to write a valid default file.",
        )
        self.path = path
        self.detail = detail
