"""Members of the 36th parliament onward.

The complete list of members is a single ASP.NET page. Without a parliament
it shows the current members; to list another parliament the page's form is
posted back with the parliament combo box set.
"""

from __future__ import annotations

from collections.abc import Generator

from roster.data_types import Person, ScrapeConfig
from roster.strategies.base import PARLIAMENT_KEY, PeopleStrategy

LISTING_PATH = (
    "/MembersOfParliament/MainMPsCompleteList.aspx"
    "?TimePeriod=Historical&Language=E"
)

PARLIAMENT_FIELD = (
    "MasterPage$MasterPage$BodyContent$PageContent$Content"
    "$ListCriteriaContent$ListCriteriaContent$ucComboParliament"
    "$cboParliaments"
)

ROWS_SELECTOR = (
    "#MasterPage_MasterPage_BodyContent_PageContent_Content_ListContent"
    "_ListContent_grdCompleteList tr"
)


class Parl36thToDateStrategy(PeopleStrategy):
    """Scrapes the complete members list used since the 36th parliament."""

    identifier = "people_36th_to_date"

    def scrape(self, config: ScrapeConfig) -> Generator[Person, None, None]:
        url = self.url_for(config, LISTING_PATH)

        if PARLIAMENT_KEY in config:
            parliament = self.require_parliament(config)
            self.logger.info(f"Listing members of parliament {parliament}")
            document = self.client.fetch_with_form(
                url, {PARLIAMENT_FIELD: parliament}
            )
        else:
            self.logger.info("Listing current members")
            document = self.client.fetch(url)

        yield from self.extract_people(document, ROWS_SELECTOR, config)
