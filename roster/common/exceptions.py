"""Exception types for scraper errors.

Assumption exceptions signal that the website no longer looks the way a
strategy expects. Transient exceptions signal failures that might resolve on
retry. The remaining exceptions cover configuration and storage lookups.
"""

from typing import Any


class ScraperAssumptionException(Exception):
    """Base class for scraper assumption violations.

    Strategies make assumptions about website structure, data formats, and
    navigation patterns. When these assumptions are violated, they should
    raise clear, contextual exceptions that help diagnose the issue.
    """

    def __init__(
        self,
        message: str,
        request_url: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the assumption violation.
            request_url: The URL of the request that triggered this error.
            context: Optional dict of additional context (selector, counts, etc).
        """
        self.message = message
        self.request_url = request_url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        parts.append(f"URL: {self.request_url}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class HTMLStructuralAssumptionException(ScraperAssumptionException):
    """Raised when HTML structure doesn't match expectations.

    This exception is raised when XPath or CSS selectors return a different
    number of elements than expected. This usually indicates that the website's
    HTML structure has changed.

    Attributes:
        selector: The XPath or CSS selector that was used.
        selector_type: Type of selector ("xpath" or "css").
        is_element_query: True if querying for elements, False for strings/attributes.
    """

    def __init__(
        self,
        selector: str,
        selector_type: str,
        description: str,
        expected_min: int,
        expected_max: int | None,
        actual_count: int,
        request_url: str,
        is_element_query: bool = True,
    ) -> None:
        self.selector = selector
        self.selector_type = selector_type
        self.description = description
        self.expected_min = expected_min
        self.expected_max = expected_max
        self.actual_count = actual_count
        self.is_element_query = is_element_query

        if expected_max is None:
            expected_str = f"at least {expected_min}"
        elif expected_min == expected_max:
            expected_str = f"exactly {expected_min}"
        else:
            expected_str = f"between {expected_min} and {expected_max}"

        message = (
            f"HTML structure mismatch: Expected {expected_str} "
            f"elements for '{description}', but found {actual_count}"
        )

        context = {
            "selector": selector,
            "selector_type": selector_type,
            "expected_min": expected_min,
            "expected_max": expected_max
            if expected_max is not None
            else "unlimited",
            "actual_count": actual_count,
            "is_element_query": is_element_query,
        }

        super().__init__(message, request_url, context)


class RowParseError(ScraperAssumptionException):
    """Raised when a single listing row cannot be turned into a record.

    The error is scoped to one row: ``row_index`` is the row's position in the
    listing table (header rows included), so the offending row can be found
    in the page source without re-running the scrape. The underlying cause is
    chained as ``__cause__``.

    Attributes:
        row_index: Zero-based position of the row in the table.
        raw_text: Text of the row's name cell, if it could be read.
    """

    def __init__(
        self,
        row_index: int,
        request_url: str,
        raw_text: str | None = None,
        reason: str = "",
    ) -> None:
        self.row_index = row_index
        self.raw_text = raw_text

        message = f"Could not parse row {row_index}"
        if reason:
            message = f"{message}: {reason}"

        context: dict[str, Any] = {"row_index": row_index}
        if raw_text is not None:
            context["raw_text"] = raw_text

        super().__init__(message, request_url, context)


class UnparsableNameError(ValueError):
    """Raised when a name is not in ``Last, First (annotation)`` form.

    Attributes:
        raw: The input that failed to parse.
    """

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Expected 'Last, First' name, got {raw!r}")


class UnknownTaskError(LookupError):
    """Raised when no strategy can be resolved for a task.

    Attributes:
        task_name: The task that was requested.
        identifier: The strategy identifier that was looked up, if any.
    """

    def __init__(self, task_name: str, identifier: str | None = None) -> None:
        self.task_name = task_name
        self.identifier = identifier
        if identifier is None or identifier == task_name:
            message = f"No strategy registered for task '{task_name}'"
        else:
            message = (
                f"Task '{task_name}' selected strategy '{identifier}', "
                "which is not registered"
            )
        super().__init__(message)


class InvalidConfigError(ValueError):
    """Raised when a scrape option has a value the strategies can't use.

    Attributes:
        key: The option name.
        value: The offending value (None if the option is missing).
    """

    def __init__(self, key: str, value: str | None, reason: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid option {key}={value!r}: {reason}")


class UnsupportedBackendError(LookupError):
    """Raised when a connection scheme has no storage adapter.

    Attributes:
        scheme: The requested scheme.
        supported: Schemes that do have adapters.
    """

    def __init__(self, scheme: str, supported: list[str]) -> None:
        self.scheme = scheme
        self.supported = supported
        super().__init__(
            f"Unsupported storage backend '{scheme}' "
            f"(supported: {', '.join(supported)})"
        )


# =============================================================================
# Transient Exceptions
# =============================================================================


class TransientException(Exception):
    """Base class for transient errors that might resolve on retry.

    Transient exceptions represent temporary failures like network issues,
    server errors (5xx), or timeouts. The fetch client owns the retry policy;
    strategies and the runner never retry.
    """

    pass


class FetchError(TransientException):
    """Raised when a page could not be fetched.

    Covers transport errors, timeouts, and non-2xx responses.

    Attributes:
        url: The URL that was being fetched.
        cause: The underlying exception, if the failure was not a status code.
        status_code: HTTP status code of the response, if one was received.
        message: Human-readable error message.
    """

    def __init__(
        self,
        url: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        self.status_code = status_code

        if status_code is not None:
            self.message = f"HTTP {status_code} from {url}"
        elif cause is not None:
            self.message = (
                f"Request to {url} failed: {type(cause).__name__}: {cause}"
            )
        else:
            self.message = f"Request to {url} failed"
        super().__init__(self.message)

    @property
    def is_retryable(self) -> bool:
        """Whether retrying the same request might succeed.

        Transport failures and 5xx responses are retryable; 4xx are not.
        """
        if self.status_code is None:
            return True
        return self.status_code >= 500
