"""Tests for the people extraction strategies.

Strategies run against the mock parliament site, so every test goes through
real HTTP: the modern strategy's form postback and the legacy strategy's
criteria lookup followed by the filtered listing.
"""

import logging
from unittest.mock import MagicMock

import pytest

from roster.common.document import ParsedDocument
from roster.common.exceptions import (
    FetchError,
    HTMLStructuralAssumptionException,
    InvalidConfigError,
    RowParseError,
)
from roster.data_types import RowErrorPolicy, ScrapeConfig
from roster.strategies import (
    Parl1stTo35thStrategy,
    Parl36thToDateStrategy,
    PeopleStrategy,
)
from roster.strategies.legacy import listing_path
from tests.mock_server import (
    CURRENT_PARLIAMENT,
    LEGACY_MEMBERS,
    MODERN_MEMBERS,
    expected_names,
)


class TestModernStrategy:
    """Tests for Parl36thToDateStrategy."""

    def test_current_members(self, fetch_client, site_config):
        """Without a parliament, the current members shall be scraped."""
        strategy = Parl36thToDateStrategy(fetch_client)

        people = list(strategy.scrape(site_config()))

        assert [p.name for p in people] == expected_names(
            MODERN_MEMBERS[CURRENT_PARLIAMENT]
        )
        assert all(p.parliament is None for p in people)

    def test_parliament_postback(self, fetch_client, site_config):
        """With a parliament, the listing shall come from the form postback."""
        strategy = Parl36thToDateStrategy(fetch_client)

        people = list(strategy.scrape(site_config(parliament="37")))

        assert [p.name for p in people] == ["Jean Chrétien", "Paul Martin"]
        assert {p.parliament for p in people} == {"37"}
        assert people[0].sources[0].endswith(
            "MainMPsCompleteList.aspx?TimePeriod=Historical&Language=E"
        )

    def test_server_error(self, fetch_client, site_config):
        """A failed postback shall propagate FetchError."""
        strategy = Parl36thToDateStrategy(fetch_client)

        with pytest.raises(FetchError) as exc_info:
            list(strategy.scrape(site_config(parliament="38")))

        assert exc_info.value.status_code == 500


class TestLegacyStrategy:
    """Tests for Parl1stTo35thStrategy."""

    def test_parliament_listing(self, fetch_client, site_config):
        """The members of the requested parliament shall be scraped."""
        strategy = Parl1stTo35thStrategy(fetch_client)

        people = list(strategy.scrape(site_config(parliament="12")))

        assert [p.name for p in people] == [
            "Robert Laird Borden",
            "Wilfrid Laurier",
        ]
        assert {p.parliament for p in people} == {"12"}
        assert "Parliament=b7c2" in people[0].sources[0]

    def test_first_parliament(self, fetch_client, site_config):
        """Parliament 1 shall resolve to the first option starting with '1'."""
        strategy = Parl1stTo35thStrategy(fetch_client)

        people = list(strategy.scrape(site_config(parliament="1")))

        assert [p.name for p in people] == expected_names(
            LEGACY_MEMBERS["a1f0"]
        )

    def test_prefix_matches_longer_label(self, fetch_client, site_config):
        """A parliament that prefixes a later label shall resolve to it."""
        strategy = Parl1stTo35thStrategy(fetch_client)

        people = list(strategy.scrape(site_config(parliament="3")))

        assert [p.name for p in people] == expected_names(
            LEGACY_MEMBERS["d4e8"]
        )

    def test_unknown_parliament(self, fetch_client, site_config):
        """A parliament with no option shall raise a structural exception."""
        strategy = Parl1stTo35thStrategy(fetch_client)

        with pytest.raises(HTMLStructuralAssumptionException):
            list(strategy.scrape(site_config(parliament="7")))

    def test_parliament_required(self, fetch_client, site_config):
        """The legacy strategy shall require a parliament."""
        strategy = Parl1stTo35thStrategy(fetch_client)

        with pytest.raises(InvalidConfigError) as exc_info:
            list(strategy.scrape(site_config()))

        assert exc_info.value.key == "parliament"

    def test_bad_row_aborts(self, fetch_client, site_config):
        """Under ABORT, an unparsable row shall end extraction."""
        strategy = Parl1stTo35thStrategy(fetch_client)
        names = []

        with pytest.raises(RowParseError) as exc_info:
            for person in strategy.scrape(site_config(parliament="20")):
                names.append(person.name)

        assert names == ["William Lyon Mackenzie King"]
        assert exc_info.value.row_index == 3
        assert exc_info.value.raw_text == "Bracken John"
        assert "Parliament=c3d9" in exc_info.value.request_url

    def test_bad_row_skipped(self, fetch_client, site_config):
        """Under SKIP, an unparsable row shall be recorded and passed over."""
        strategy = Parl1stTo35thStrategy(
            fetch_client, row_error_policy=RowErrorPolicy.SKIP
        )

        people = list(strategy.scrape(site_config(parliament="20")))

        assert [p.name for p in people] == [
            "William Lyon Mackenzie King",
            "Major James Coldwell",
        ]
        assert [e.row_index for e in strategy.skipped_rows] == [3]

    def test_listing_path(self):
        """listing_path shall carry the parliament id in the query string."""
        path = listing_path("b7c2")

        assert path.startswith("/Parlinfo/Lists/Members.aspx?Language=E&")
        assert "Parliament=b7c2" in path
        assert "Riding=&" in path


class TestPeopleStrategyBase:
    """Tests for the shared row handling in PeopleStrategy."""

    LISTING = """<html><body><table>
    <tr><th>Members</th></tr>
    <tr><th>Name</th></tr>
    {rows}
    </table></body></html>"""

    def _document(self, rows: str) -> ParsedDocument:
        return ParsedDocument.from_html(
            self.LISTING.format(rows=rows), "http://example.com/list"
        )

    def test_header_rows_skipped(self):
        """The first header_offset rows shall never become records."""
        strategy = PeopleStrategy(MagicMock())
        document = self._document("<tr><td>Smith, John</td></tr>")

        people = list(
            strategy.extract_people(document, "//tr", ScrapeConfig())
        )

        assert [p.name for p in people] == ["John Smith"]
        assert people[0].sources == ("http://example.com/list",)

    def test_no_data_rows(self, caplog):
        """A listing with only header rows shall yield nothing."""
        strategy = PeopleStrategy(
            MagicMock(), logger=logging.getLogger("tests.strategy")
        )

        with caplog.at_level(logging.WARNING, logger="tests.strategy"):
            people = list(
                strategy.extract_people(
                    self._document(""), "//tr", ScrapeConfig()
                )
            )

        assert people == []
        assert "has no data rows" in caplog.text

    def test_missing_header_rows(self):
        """A listing without its header rows shall raise a structural error."""
        strategy = PeopleStrategy(MagicMock())
        document = ParsedDocument.from_html(
            "<html><body><table><tr><th>Members</th></tr></table></body>"
            "</html>",
            "http://example.com/list",
        )

        with pytest.raises(HTMLStructuralAssumptionException) as exc_info:
            list(strategy.extract_people(document, "//tr", ScrapeConfig()))

        assert exc_info.value.expected_min == 2

    def test_row_without_cells(self):
        """A data row without a name cell shall raise RowParseError."""
        strategy = PeopleStrategy(MagicMock())
        document = self._document("<tr><th>Totals</th></tr>")

        with pytest.raises(RowParseError) as exc_info:
            list(strategy.extract_people(document, "//tr", ScrapeConfig()))

        assert exc_info.value.row_index == 2
        assert isinstance(
            exc_info.value.__cause__, HTMLStructuralAssumptionException
        )

    def test_scrape_is_lazy(self):
        """scrape shall not fetch anything until iterated."""
        client = MagicMock()
        strategy = Parl36thToDateStrategy(client)

        people = strategy.scrape(ScrapeConfig())

        client.fetch.assert_not_called()
        people.close()

    def test_url_for_override(self):
        """The base_url option shall replace the default origin."""
        strategy = PeopleStrategy(MagicMock())

        assert strategy.url_for(ScrapeConfig(), "/a") == (
            "http://www.parl.gc.ca/a"
        )
        assert strategy.url_for(
            ScrapeConfig({"base_url": "http://localhost:8000/"}), "/a"
        ) == ("http://localhost:8000/a")

    def test_logger_defaults_to_client_logger(self):
        """Without a logger, the strategy shall log through the client's."""
        client = MagicMock()

        assert PeopleStrategy(client).logger is client.logger
