"""Fetch client for retrieving and parsing listing pages.

FetchClient encapsulates the HTTP client and turns responses into
ParsedDocuments. It supports two modes:

- fetch(): a stateless GET. Cookies left by earlier requests are dropped.
- fetch_with_form(): a navigate-then-submit sequence on one cookie jar, for
  ASP.NET pages whose filtered listings only exist as form postbacks.

The client owns the retry policy. Strategies and the runner never retry.
"""

from __future__ import annotations

import logging
import ssl
import time
from typing import Any

import httpx

from roster.common.document import ParsedDocument
from roster.common.exceptions import FetchError

DEFAULT_TIMEOUT = 30.0


class FetchClient:
    """Fetches pages over HTTP and parses them into ParsedDocuments.

    Example::

        logger = logging.getLogger("roster.fetch")
        with FetchClient(logger, timeout=30.0) as client:
            doc = client.fetch("http://example.com/members")
            doc = client.fetch_with_form(
                "http://example.com/members.aspx",
                {"cboParliaments": "37"},
            )
    """

    def __init__(
        self,
        logger: logging.Logger,
        timeout: float | None = DEFAULT_TIMEOUT,
        retries: int = 0,
        retry_delay: float = 1.0,
        ssl_context: ssl.SSLContext | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the fetch client.

        Args:
            logger: Logger that receives request/response and retry messages.
            timeout: Request timeout in seconds. None means no timeout.
            retries: Extra attempts for transport errors, timeouts, and 5xx
                responses. 4xx responses are never retried.
            retry_delay: Seconds to wait before retry n, multiplied by n.
            ssl_context: Optional SSL context for HTTPS connections.
            headers: Headers sent with every request.
            transport: Optional httpx transport (e.g. httpx.MockTransport).
        """
        if retries < 0:
            raise ValueError("retries must be >= 0")

        self.logger = logger
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay

        client_kwargs: dict[str, Any] = {
            "timeout": timeout,
            "follow_redirects": True,
            "headers": headers,
            "event_hooks": {
                "request": [self._log_request],
                "response": [self._log_response],
            },
        }
        if ssl_context:
            client_kwargs["verify"] = ssl_context
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.Client(**client_kwargs)

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> FetchClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # -- Logging hooks ------------------------------------------------------

    def _log_request(self, request: httpx.Request) -> None:
        self.logger.debug(
            f"{request.method} {request.url}",
            extra={"method": request.method, "url": str(request.url)},
        )

    def _log_response(self, response: httpx.Response) -> None:
        self.logger.debug(
            f"{response.status_code} {response.request.url}",
            extra={
                "status_code": response.status_code,
                "url": str(response.request.url),
            },
        )

    # -- Public API -----------------------------------------------------------

    def fetch(
        self, url: str, params: dict[str, str] | None = None
    ) -> ParsedDocument:
        """GET a page without carrying over session state.

        Args:
            url: Absolute URL to fetch.
            params: Optional query parameters.

        Returns:
            The parsed page.

        Raises:
            FetchError: On transport errors, timeouts, or non-2xx responses.
        """
        self._client.cookies.clear()
        response = self._send("GET", url, params=params)
        return self._parse(response)

    def fetch_with_form(
        self,
        url: str,
        field_assignments: dict[str, str],
        form_selector: str = "//form",
    ) -> ParsedDocument:
        """Load a page, fill in its form, submit it, and parse the result.

        Cookies set by the first response are sent with the submission, so
        server-side session state survives the sequence.

        Args:
            url: Absolute URL of the page holding the form.
            field_assignments: Field name to value overrides.
            form_selector: Selector matching exactly one <form> on the page.

        Returns:
            The parsed page returned by the form submission.

        Raises:
            FetchError: If either request fails.
            HTMLStructuralAssumptionException: If the form or an assigned
                field is missing.
        """
        self._client.cookies.clear()
        response = self._send("GET", url)
        page = self._parse(response)

        form = page.find_form(form_selector, "listing form")
        submission = form.fill(field_assignments)
        self.logger.info(
            f"Submitting form to {submission.url} with "
            f"{', '.join(f'{k}={v}' for k, v in field_assignments.items())}",
            extra={"url": submission.url, "method": submission.method},
        )

        if submission.method == "POST":
            result = self._send("POST", submission.url, data=submission.data)
        else:
            result = self._send("GET", submission.url, params=submission.data)
        return self._parse(result)

    # -- Internals ----------------------------------------------------------

    def _parse(self, response: httpx.Response) -> ParsedDocument:
        # lxml rejects decoded text that still carries an XML declaration,
        # so hand it bytes. A charset from the Content-Type header wins over
        # one declared in the document.
        return ParsedDocument.from_html(
            response.content,
            str(response.url),
            encoding=response.charset_encoding,
        )

    def _send(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request, retrying retryable failures up to self.retries."""
        attempt = 0
        while True:
            try:
                return self._send_once(method, url, params=params, data=data)
            except FetchError as e:
                if not e.is_retryable or attempt >= self.retries:
                    raise
                attempt += 1
                delay = self.retry_delay * attempt
                self.logger.warning(
                    f"{e.message}; retry {attempt}/{self.retries} "
                    f"in {delay:.1f}s",
                    extra={"url": url, "attempt": attempt},
                )
                time.sleep(delay)

    def _send_once(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = self._client.request(
                method, url, params=params, data=data
            )
        except httpx.HTTPError as e:
            # Timeouts are httpx.TimeoutException, a TransportError subclass
            raise FetchError(url=url, cause=e) from e

        if not response.is_success:
            raise FetchError(url=url, status_code=response.status_code)

        return response
