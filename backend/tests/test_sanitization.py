"""
Tests for input sanitization utilities.
"""
from app.core.sanitization import sanitize_for_logging, sanitize_project_name, validate_column_name


def test_sanitize_for_logging():
    """Newlines and control characters never reach the log."""
    assert sanitize_for_logging("test\nlog") == "test log"
    assert "\r" not in sanitize_for_logging("test\rlog")
    assert "\x00" not in sanitize_for_logging("test\x00log")

    long_string = "a" * 600
    sanitized = sanitize_for_logging(long_string)
    assert len(sanitized) == 503
    assert sanitized.endswith("...")


def test_sanitize_for_logging_non_strings():
    assert sanitize_for_logging(None) == ""
    assert sanitize_for_logging(["Region", "Sales\n"]) == "['Region', 'Sales\\n']"
    assert sanitize_for_logging(42) == "42"


def test_sanitize_project_name():
    assert sanitize_project_name("  Sales\x07 Overview  ") == "Sales Overview"
    assert sanitize_project_name("") == ""
    assert len(sanitize_project_name("x" * 500)) == 200


def test_validate_column_name():
    assert validate_column_name("Revenue") is True
    assert validate_column_name("Net\nSales") is True
    assert validate_column_name("col\tname") is True

    assert validate_column_name("") is False
    assert validate_column_name("bad\x00name") is False
    assert validate_column_name("a" * 1001) is False
    assert validate_column_name(None) is False
