"""Name normalization for listing rows.

Listings print members as ``Last, First`` followed by an optional
parenthesized annotation (party, riding). Records store ``First Last``.
"""

import re

from roster.common.exceptions import UnparsableNameError

_LAST_FIRST_RE = re.compile(
    r"\A(?P<last>[^,]+?),\s*(?P<first>[^(]+?)(?:\s+\(.+\))?\Z",
    re.DOTALL,
)


def _squeeze(component: str) -> str:
    return " ".join(component.split())


def normalize(raw: str) -> str:
    """Convert ``"Last, First (annotation)"`` to ``"First Last"``.

    Args:
        raw: Name text as printed in the listing.

    Returns:
        The name in ``First Last`` order with whitespace runs collapsed.

    Raises:
        UnparsableNameError: If ``raw`` is not comma-separated ``Last, First``.
            Already-normalized names have no comma, so this function is not
            idempotent.

    Example::

        >>> normalize("Smith, John Q. (Independent)")
        'John Q. Smith'
    """
    match = _LAST_FIRST_RE.match(raw.strip())
    if match is None:
        raise UnparsableNameError(raw)

    last = _squeeze(match.group("last"))
    first = _squeeze(match.group("first"))
    if not last or not first:
        raise UnparsableNameError(raw)

    return f"{first} {last}"
