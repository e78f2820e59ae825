"""Unit tests for display formatters."""

import pytest

from syncops_lifecycle.formatting import (
    format_storage_currency,
    format_storage_file_size,
    parse_storage_currency,
)


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (int(1.25 * 1024**3), "1.25 GB"),
        (5 * 1024**4, "5 TB"),
    ],
)
def test_format_file_size(size: int, expected: str) -> None:
    assert format_storage_file_size(size) == expected


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (0, "$0.00"),
        (45.5, "$45.50"),
        (1234.567, "$1,234.57"),
        (-3.1, "-$3.10"),
        (0.0036, "$0.0036"),
    ],
)
def test_format_currency(amount: float, expected: str) -> None:
    assert format_storage_currency(amount) == expected


@pytest.mark.parametrize("amount", [0.0, 12.5, 312.4, 1234.56, -42.1, 0.023, 987654.32])
def test_currency_round_trip(amount: float) -> None:
    assert parse_storage_currency(format_storage_currency(amount)) == pytest.approx(amount)


@pytest.mark.parametrize("text", ["", "$", "abc", "$1.2.3"])
def test_parse_currency_rejects_garbage(text: str) -> None:
    with pytest.raises(ValueError):
        parse_storage_currency(text)


@pytest.mark.parametrize(("amount", "parsed"), [(1234.5678, 1234.57), (0.123456, 0.1235)])
def test_currency_round_trip_keeps_only_displayed_precision(amount: float, parsed: float) -> None:
    assert parse_storage_currency(format_storage_currency(amount)) == pytest.approx(parsed)
