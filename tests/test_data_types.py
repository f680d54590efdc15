"""Tests for shared data types."""

import pytest
from pydantic import ValidationError

from roster.data_types import (
    Completed,
    ConnectionDescriptor,
    Failed,
    Person,
    RowErrorPolicy,
    ScrapeConfig,
)


class TestPerson:
    """Tests for the Person record."""

    def test_defaults(self):
        """Person shall default parliament to None and sources to empty."""
        person = Person(name="John Smith")

        assert person.parliament is None
        assert person.sources == ()

    @pytest.mark.parametrize("name", ["", "   "])
    def test_rejects_blank_name(self, name):
        """Person shall reject an empty or whitespace-only name."""
        with pytest.raises(ValidationError):
            Person(name=name)

    def test_is_frozen(self):
        """Person shall be immutable."""
        person = Person(name="John Smith")

        with pytest.raises(ValidationError):
            person.name = "Jane Smith"

    def test_fingerprint(self):
        """fingerprint shall identify a record by name and parliament."""
        person = Person(
            name="John Smith", parliament="37", sources=("http://a",)
        )

        assert person.fingerprint() == {
            "name": "John Smith",
            "parliament": "37",
        }

    def test_json_round_trip(self):
        """Person shall survive a JSON round trip unchanged."""
        person = Person(
            name="Jean Chrétien", parliament="35", sources=("http://a",)
        )

        assert Person.model_validate_json(person.model_dump_json()) == person


class TestScrapeConfig:
    """Tests for ScrapeConfig."""

    def test_mapping_behavior(self):
        """ScrapeConfig shall behave as a read-only str->str mapping."""
        config = ScrapeConfig({"parliament": 37, "extra": "x"})

        assert config["parliament"] == "37"
        assert dict(config) == {"parliament": "37", "extra": "x"}
        assert len(config) == 2
        assert config.get("missing") is None

    def test_read_only(self):
        """ScrapeConfig shall not support item assignment."""
        config = ScrapeConfig({"parliament": "37"})

        with pytest.raises(TypeError):
            config["parliament"] = "38"  # type: ignore[index]

    def test_empty_by_default(self):
        """ScrapeConfig() shall be empty."""
        assert len(ScrapeConfig()) == 0

    def test_from_pairs(self):
        """from_pairs shall read a flat key/value sequence."""
        config = ScrapeConfig.from_pairs(["parliament", "12", "base", "x"])

        assert dict(config) == {"parliament": "12", "base": "x"}

    def test_from_pairs_odd_count(self):
        """from_pairs shall reject a key without a value."""
        with pytest.raises(ValueError, match="key/value pairs"):
            ScrapeConfig.from_pairs(["parliament"])

    def test_repr(self):
        """repr shall show the options."""
        assert repr(ScrapeConfig({"a": "1"})) == "ScrapeConfig({'a': '1'})"


class TestRunTypes:
    """Tests for RunResult variants and small value types."""

    def test_completed_defaults(self):
        """Completed shall default to no skipped rows and not cancelled."""
        result = Completed(count=3)

        assert result.skipped_rows == 0
        assert result.cancelled is False

    def test_failed_defaults(self):
        """Failed shall default strategy to None and context to empty."""
        error = RuntimeError("boom")
        result = Failed(error=error, task="people")

        assert result.strategy is None
        assert result.count == 0
        assert result.context == {}

    def test_results_match(self):
        """RunResult variants shall be distinguishable with match."""

        def describe(result):
            match result:
                case Completed(cancelled=True):
                    return "cancelled"
                case Completed():
                    return "completed"
                case Failed():
                    return "failed"

        assert describe(Completed(1)) == "completed"
        assert describe(Completed(1, cancelled=True)) == "cancelled"
        assert describe(Failed(RuntimeError(), "people")) == "failed"

    def test_row_error_policy_values(self):
        """RowErrorPolicy shall have ABORT and SKIP."""
        assert RowErrorPolicy("abort") is RowErrorPolicy.ABORT
        assert RowErrorPolicy("skip") is RowErrorPolicy.SKIP

    def test_connection_descriptor_defaults(self):
        """ConnectionDescriptor shall default options to an empty dict."""
        descriptor = ConnectionDescriptor("mongodb", "localhost:27017")

        assert descriptor.options == {}
