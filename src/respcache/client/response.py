"""Response unwrapping and display.

:func:`extract_response_data` turns an :class:`httpx.Response` into the
payload that callers receive and that the cache stores.
:func:`format_api_response` renders such a payload through the output
system for the CLI.

See Also:
    :mod:`respcache.output` -- the output manager that renders data.
"""

from __future__ import annotations

from typing import Any

import httpx

from respcache.output import get_output


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first.  If that fails (e.g. the
    response is HTML or plain text), returns the raw text.  Returns
    ``None`` for responses with no content, such as ``HEAD``.

    Args:
        response: The :class:`httpx.Response` to extract data from.

    Returns:
        A JSON-decoded object (``dict``, ``list``, etc.), a ``str`` of raw
        text, or ``None`` if the body is empty.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        pass

    return response.text


def format_api_response(data: Any, content_type: str = "application/json") -> None:
    """Print a response payload using the global output system.

    Args:
        data: The payload returned by the cached client.
        content_type: MIME type hint for syntax highlighting.
    """
    if data is None:
        get_output().info("(empty response)")
        return
    get_output().format_response(data, content_type)
