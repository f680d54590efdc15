"""Members of the 1st to 35th parliaments.

Historical members come from the Parlinfo lists. The criteria page has a
select whose option labels start with the parliament number ("12 (1911-...)")
and whose values are opaque ids; the members listing is a plain GET
parameterized by that id.
"""

from __future__ import annotations

from collections.abc import Generator
from urllib.parse import urlencode

from roster.data_types import Person, ScrapeConfig
from roster.strategies.base import PeopleStrategy

CRITERIA_PATH = "/Parlinfo/Lists/Members.aspx?Language=E"

PARLIAMENT_SELECT = "//select[@id='ctl00_cphContent_cboParliamentCriteria']"

ROWS_SELECTOR = "//tr"


def listing_path(parliament_id: str) -> str:
    """Path of the members listing filtered to one parliament id."""
    query = urlencode(
        {
            "Language": "E",
            "Parliament": parliament_id,
            "Riding": "",
            "Name": "",
            "Party": "",
            "Province": "",
            "Gender": "",
            "New": "False",
            "Current": "False",
            "First": "False",
            "Picture": "False",
            "Section": "False",
            "ElectionDate": "",
        }
    )
    return f"/Parlinfo/Lists/Members.aspx?{query}"


class Parl1stTo35thStrategy(PeopleStrategy):
    """Scrapes the Parlinfo members lists for parliaments before the 36th."""

    identifier = "people_1st_to_35th"

    def scrape(self, config: ScrapeConfig) -> Generator[Person, None, None]:
        parliament = self.require_parliament(config)

        criteria = self.client.fetch(self.url_for(config, CRITERIA_PATH))
        # Labels like "1" and "12" share prefixes; the first option wins.
        parliament_id = criteria.select_option_value(
            PARLIAMENT_SELECT, parliament, "parliament criteria"
        )
        self.logger.info(
            f"Listing members of parliament {parliament} "
            f"(id {parliament_id})"
        )

        document = self.client.fetch(
            self.url_for(config, listing_path(parliament_id))
        )
        yield from self.extract_people(document, ROWS_SELECTOR, config)
