"""
Unit tests for custom exceptions.

Tests message formatting, suggestions and the exception hierarchy.
"""

from __future__ import annotations

import pytest

from phylodash.core.exceptions import (
    ConfigurationError,
    CsvError,
    DescriptorError,
    DescriptorTypeError,
    EmptyCsvError,
    EmptyInputError,
    EmptyTreeError,
    MalformedCsvError,
    MissingColumnError,
    NewickFormatError,
    PhylodashError,
    TreeError,
    UnknownDescriptorError,
)


class TestPhylodashError:
    """Tests for the base exception."""

    def test_basic_message(self):
        error = PhylodashError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.suggestion is None

    def test_message_with_suggestion(self):
        error = PhylodashError("Something went wrong", suggestion="Try again")

        assert error.message == "Something went wrong"
        assert "Suggestion: Try again" in str(error)
        assert error.full_message == str(error)


class TestInputErrors:
    """Tests for CSV and tree errors."""

    def test_empty_csv(self):
        error = EmptyCsvError()

        assert error.message == "CSV data is empty"
        assert "accession,pmid" in error.suggestion

    def test_empty_csv_custom_source(self):
        assert EmptyCsvError("metadata.csv").message == "metadata.csv is empty"

    def test_empty_tree(self):
        error = EmptyTreeError()

        assert error.message == "Tree data is empty"
        assert "Newick" in error.suggestion

    def test_malformed_csv(self):
        error = MalformedCsvError("found more fields than defined")

        assert "could not be parsed" in error.message
        assert error.detail == "found more fields than defined"

    def test_missing_column_lists_available(self):
        available = [f"col{i}" for i in range(12)]

        error = MissingColumnError(["accession"], available)

        assert "accession" in error.message
        assert "col9" in error.suggestion
        assert "and 2 more" in error.suggestion

    def test_newick_format(self):
        error = NewickFormatError("unbalanced ')'", 7)

        assert error.message == "Malformed Newick tree at position 7: unbalanced ')'"
        assert error.position == 7
        assert error.reason == "unbalanced ')'"


class TestDescriptorErrors:
    """Tests for descriptor lookup errors."""

    def test_unknown_descriptor(self):
        error = UnknownDescriptorError("colour", ["genotype", "host"])

        assert error.message == "Unknown descriptor: colour"
        assert "genotype, host" in error.suggestion

    def test_unknown_descriptor_empty_table(self):
        assert "(none)" in UnknownDescriptorError("x", []).suggestion

    def test_type_error(self):
        error = DescriptorTypeError("length", "numerical", "categorical")

        assert error.message == "Descriptor 'length' is numerical, expected categorical"

    def test_configuration_error(self):
        error = ConfigurationError("cfg.yaml", "bad value")

        assert error.message == "Invalid configuration in cfg.yaml: bad value"
        assert "config init" in error.suggestion


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    @pytest.mark.parametrize(
        ("error", "bases"),
        [
            (EmptyCsvError(), (CsvError, EmptyInputError)),
            (MalformedCsvError("x"), (CsvError,)),
            (MissingColumnError(["a"], []), (CsvError,)),
            (EmptyTreeError(), (TreeError, EmptyInputError)),
            (NewickFormatError("x", 0), (TreeError,)),
            (UnknownDescriptorError("x", []), (DescriptorError,)),
            (DescriptorTypeError("x", "a", "b"), (DescriptorError,)),
            (ConfigurationError("p", "d"), ()),
        ],
    )
    def test_hierarchy(self, error, bases):
        assert isinstance(error, PhylodashError)
        for base in bases:
            assert isinstance(error, base)

    def test_catchable_as_base(self):
        with pytest.raises(PhylodashError):
            raise NewickFormatError("x", 0)
