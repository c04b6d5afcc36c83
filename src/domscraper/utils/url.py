"""
URL utilities - Query decoding and scheme handling for domscraper.
"""

from urllib.parse import unquote, urlparse

from domscraper.exceptions import InvalidRequestError


ALLOWED_SCHEMES = ("http", "https")


def decode_param(value: str) -> str:
    """
    Percent-decode a query value once more.

    Query parsing already decodes once; callers frequently encode twice.
    """
    return unquote(value)


def decode_selector(value: str) -> str:
    """
    Decode a selector query value.

    Callers write ``$`` instead of ``#`` so id selectors survive URLs:
        decode_selector("div$main")  # "div#main"
    """
    return decode_param(value).replace("$", "#")


def split_selectors(selector: str) -> list[str]:
    """
    Split a comma-separated selector list into independently converted pieces.

    Each piece is stripped of surrounding whitespace, and the stripped piece is
    what results echo back: ``"h1, h2"`` yields ``["h1", "h2"]``. Blank pieces
    are kept and match nothing.
    """
    return [piece.strip() for piece in selector.split(",")]


def validate_url(url: str) -> str:
    """
    Check that a URL is an absolute http(s) URL.

    Args:
        url: The URL to check

    Returns:
        The URL, stripped of surrounding whitespace

    Raises:
        InvalidRequestError: If the URL is empty, relative or uses another scheme
    """
    url = url.strip()
    if not url:
        raise InvalidRequestError("Missing url parameter")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidRequestError(f"Malformed url: {url}") from e

    if parsed.scheme not in ALLOWED_SCHEMES or not parsed.netloc:
        raise InvalidRequestError(f"Expected an absolute http(s) url, got: {url}")

    return url


def is_https(url: str) -> bool:
    """True when the URL is fetched over TLS."""
    return "https:" in url


def downgrade_to_http(url: str) -> str:
    """Rewrite the first ``https:`` in a URL to ``http:``."""
    return url.replace("https:", "http:", 1)
