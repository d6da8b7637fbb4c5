"""Tests for the naive statement splitter."""

from sqlrunner.engines.sql import split_statements


def test_single() -> None:
    assert split_statements("SELECT 1") == ["SELECT 1"]


def test_two_statements() -> None:
    assert split_statements("SELECT 1; SELECT 2") == ["SELECT 1", "SELECT 2"]


def test_trailing_semicolon() -> None:
    assert split_statements("SELECT 1;") == ["SELECT 1"]


def test_empty() -> None:
    assert split_statements("") == []
    assert split_statements("  ;  ;\n\t;  ") == []


def test_whitespace_is_trimmed() -> None:
    script = "\n  CREATE TABLE t(id INT)  ;\n\n  INSERT INTO t VALUES (1)\n"
    assert split_statements(script) == ["CREATE TABLE t(id INT)", "INSERT INTO t VALUES (1)"]


def test_semicolon_in_literal_still_splits() -> None:
    """Known limitation: the split does not understand string literals."""
    assert split_statements("SELECT 'a;b'") == ["SELECT 'a", "b'"]


def test_semicolon_in_comment_still_splits() -> None:
    assert split_statements("SELECT 1 -- x; y\n") == ["SELECT 1 -- x", "y"]
