"""Form value objects parsed from listing pages.

Older listing pages are ASP.NET postback forms: the filtered listing is only
reachable by submitting the page's form with one select changed. Form and
FormField capture what the page rendered; Form.fill() produces the
FormSubmission the fetch client sends.
"""

from __future__ import annotations

from dataclasses import dataclass

from roster.common.exceptions import HTMLStructuralAssumptionException


@dataclass(frozen=True)
class FormField:
    """Represents a single form field.

    Attributes:
        name: The field's name attribute.
        field_type: Type of field (text, hidden, select, textarea, etc).
        value: Current/default value.
        options: For select elements, list of option values.
    """

    name: str
    field_type: str
    value: str | None
    options: list[str] | None = None


@dataclass(frozen=True)
class FormSubmission:
    """A filled-in form ready to send.

    Attributes:
        method: "GET" or "POST".
        url: Resolved absolute action URL.
        data: Field values to send as query string (GET) or body (POST).
    """

    method: str
    url: str
    data: dict[str, str]


@dataclass(frozen=True)
class Form:
    """Represents an HTML <form> element with its fields and submission details.

    Form is a pure value object constructed from parsed HTML; it performs no I/O.

    Attributes:
        action: Resolved absolute URL for form submission.
        method: HTTP method (GET or POST).
        fields: List of successful form fields, in document order.
        selector: The selector that found this form.
        request_url: URL of the page the form was found on.
    """

    action: str
    method: str
    fields: list[FormField]
    selector: str
    request_url: str = ""

    def get_field(self, name: str) -> FormField | None:
        """Get a specific field by name.

        Args:
            name: The field name to find.

        Returns:
            The FormField with the matching name, or None if not found.
        """
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def fill(
        self, assignments: dict[str, str] | None = None
    ) -> FormSubmission:
        """Merge field assignments over the form's defaults.

        Args:
            assignments: Field name to value. Every name must be a field of
                this form.

        Returns:
            FormSubmission with the merged field data.

        Raises:
            HTMLStructuralAssumptionException: If an assigned field is not on
                the form, which means the page layout changed.
        """
        field_data = {field.name: field.value or "" for field in self.fields}
        for name, value in (assignments or {}).items():
            if name not in field_data:
                raise HTMLStructuralAssumptionException(
                    selector=f"{self.selector} [name='{name}']",
                    selector_type="form-field",
                    description=f"form field '{name}'",
                    expected_min=1,
                    expected_max=1,
                    actual_count=0,
                    request_url=self.request_url,
                )
            field_data[name] = str(value)

        method = "POST" if self.method.upper() == "POST" else "GET"
        return FormSubmission(method=method, url=self.action, data=field_data)
