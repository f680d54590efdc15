"""ParsedDocument: the page model strategies extract rows from.

ParsedDocument wraps CheckedHtmlElement and exposes only what strategies
need: checked queries, text and attributes, form discovery, and select
option lookup. Selector syntax stays inside this module and the strategies;
the fetch client only hands out ParsedDocuments.
"""

from __future__ import annotations

from urllib.parse import urljoin

from lxml import html

from roster.common.checked_html import CheckedHtmlElement
from roster.common.exceptions import HTMLStructuralAssumptionException
from roster.common.page_element import Form, FormField

# Input types that are never sent by a form submitted without a button.
_UNSENT_INPUT_TYPES = {"submit", "button", "image", "reset", "file"}


def _looks_like_xpath(selector: str) -> bool:
    return selector.startswith("/") or selector.startswith(".")


class ParsedDocument:
    """A parsed HTML page (or element within one) with checked queries.

    Attributes:
        url: The URL the page was fetched from, used to resolve relative URLs
            and reported in structural errors.
    """

    def __init__(self, element: CheckedHtmlElement, url: str = "") -> None:
        self._element = element
        self.url = url

    @classmethod
    def from_html(
        cls,
        text: str | bytes,
        url: str = "",
        encoding: str | None = None,
    ) -> ParsedDocument:
        """Parse page source into a ParsedDocument.

        Args:
            text: HTML source. Pass bytes for pages that may start with an
                XML declaration.
            url: URL the source was fetched from.
            encoding: Charset of ``text`` when it is bytes. If omitted, lxml
                reads it from the document's own declarations.
        """
        parser = None
        if encoding and isinstance(text, bytes):
            parser = html.HTMLParser(encoding=encoding)
        root = html.fromstring(text, parser=parser)
        return cls(CheckedHtmlElement(root, url), url)

    def _wrap(
        self, elements: list[CheckedHtmlElement]
    ) -> list[ParsedDocument]:
        return [ParsedDocument(elem, self.url) for elem in elements]

    def query_xpath(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[ParsedDocument]:
        """Query elements by XPath selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        return self._wrap(
            self._element.checked_xpath(
                selector, description, min_count, max_count
            )
        )

    def query_xpath_strings(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[str]:
        """Query string values (text nodes, attributes) by XPath selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        return self._element.checked_xpath(
            selector, description, min_count, max_count, type=str
        )

    def query_css(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[ParsedDocument]:
        """Query elements by CSS selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        return self._wrap(
            self._element.checked_css(
                selector, description, min_count, max_count
            )
        )

    def query(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[ParsedDocument]:
        """Query by XPath if the selector looks like XPath, otherwise CSS."""
        if _looks_like_xpath(selector):
            return self.query_xpath(
                selector, description, min_count, max_count
            )
        return self.query_css(selector, description, min_count, max_count)

    def text_content(self) -> str:
        """Visible text content of the element and its descendants."""
        return self._element.text_content()

    def get_attribute(self, name: str) -> str | None:
        return self._element.get(name)

    def tag_name(self) -> str:
        return self._element.tag.lower()

    def find_form(self, selector: str, description: str) -> Form:
        """Find a form and read its successful fields.

        Submit-type inputs and unchecked checkboxes/radios are left out, as a
        browser would when the form is submitted without clicking a button.

        Args:
            selector: XPath or CSS selector matching exactly one <form>.
            description: Human-readable description of the form.

        Raises:
            HTMLStructuralAssumptionException: If the selector doesn't match
                exactly one element.
        """
        form_elem = self.query(
            selector, description, min_count=1, max_count=1
        )[0]

        action = form_elem.get_attribute("action") or ""
        method = (form_elem.get_attribute("method") or "GET").upper()
        action = urljoin(self.url, action) if action else self.url

        fields: list[FormField] = []
        controls = form_elem.query_xpath(
            ".//input | .//select | .//textarea", "form controls", min_count=0
        )
        for control in controls:
            name = control.get_attribute("name")
            if not name or control.get_attribute("disabled") is not None:
                continue

            tag = control.tag_name()
            if tag == "input":
                field_type = (control.get_attribute("type") or "text").lower()
                if field_type in _UNSENT_INPUT_TYPES:
                    continue
                if (
                    field_type in ("checkbox", "radio")
                    and control.get_attribute("checked") is None
                ):
                    continue
                value = control.get_attribute("value")
                if value is None and field_type in ("checkbox", "radio"):
                    value = "on"
                fields.append(
                    FormField(name=name, field_type=field_type, value=value)
                )
            elif tag == "select":
                fields.append(control._select_field(name))
            else:
                fields.append(
                    FormField(
                        name=name,
                        field_type="textarea",
                        value=control.text_content(),
                    )
                )

        return Form(
            action=action,
            method=method,
            fields=fields,
            selector=selector,
            request_url=self.url,
        )

    def _select_field(self, name: str) -> FormField:
        options = self.query_xpath(".//option", "select options", min_count=0)
        option_values = [_option_value(opt) for opt in options]

        selected = [
            opt for opt in options if opt.get_attribute("selected") is not None
        ]
        if selected:
            value: str | None = _option_value(selected[0])
        elif options:
            value = option_values[0]
        else:
            value = None

        return FormField(
            name=name, field_type="select", value=value, options=option_values
        )

    def select_option_value(
        self, select_selector: str, label_prefix: str, description: str
    ) -> str:
        """Resolve the value of the first option whose label starts with a prefix.

        The match is case-sensitive and runs in document order. When several
        labels share the prefix ("1" matches "1st" and "12th"), the first one
        wins.

        Args:
            select_selector: Selector matching exactly one <select>.
            label_prefix: Prefix the option label must start with.
            description: Human-readable description of the select.

        Returns:
            The matching option's value.

        Raises:
            HTMLStructuralAssumptionException: If the select is missing or no
                option label starts with ``label_prefix``.
        """
        select = self.query(
            select_selector, description, min_count=1, max_count=1
        )[0]
        options = select.query_xpath(
            ".//option", f"{description} options", min_count=0
        )
        for option in options:
            if option.text_content().strip().startswith(label_prefix):
                return _option_value(option)

        raise HTMLStructuralAssumptionException(
            selector=(
                f"{select_selector} option"
                f"[starts-with(., '{label_prefix}')]"
            ),
            selector_type="xpath",
            description=f"{description} option starting with '{label_prefix}'",
            expected_min=1,
            expected_max=None,
            actual_count=0,
            request_url=self.url,
        )


def _option_value(option: ParsedDocument) -> str:
    value = option.get_attribute("value")
    if value is None:
        return option.text_content().strip()
    return value
