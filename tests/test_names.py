"""Tests for name normalization."""

import pytest

from roster.common.exceptions import UnparsableNameError
from roster.common.names import normalize


class TestNormalize:
    """Tests for normalize()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Smith, John", "John Smith"),
            ("Smith, John Q.", "John Q. Smith"),
            ("Smith, John (Independent)", "John Smith"),
            ("  Smith,   John  ", "John Smith"),
            ("Smith,John", "John Smith"),
            ("Smith,    John", "John Smith"),
            ("Van  Loan, Peter", "Peter Van Loan"),
            ("Chrétien, Jean", "Jean Chrétien"),
            ("Laurier, Wilfrid (Sir) ", "Wilfrid Laurier"),
            ("Smith,\n    John\n    (Liberal)", "John Smith"),
        ],
    )
    def test_swaps_last_first(self, raw, expected):
        """normalize shall return 'First Last' with whitespace collapsed."""
        assert normalize(raw) == expected

    def test_annotation_with_nested_text(self):
        """normalize shall drop the whole trailing annotation."""
        assert (
            normalize("May, Elizabeth (Saanich, Gulf Islands)")
            == "Elizabeth May"
        )

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            "John Smith",
            "Smith,",
            ", John",
            "Smith, John (unterminated",
        ],
    )
    def test_rejects_malformed(self, raw):
        """normalize shall raise UnparsableNameError carrying the raw input."""
        with pytest.raises(UnparsableNameError) as exc_info:
            normalize(raw)

        assert exc_info.value.raw == raw

    def test_not_idempotent(self):
        """normalize shall reject its own output, which has no comma."""
        normalized = normalize("Smith, John")

        with pytest.raises(UnparsableNameError):
            normalize(normalized)

    def test_unparsable_name_is_value_error(self):
        """UnparsableNameError shall be a ValueError."""
        with pytest.raises(ValueError, match="Expected 'Last, First'"):
            normalize("Nobody")
