"""Redirect target validation for the sign-in flow."""

from urllib.parse import urlparse


def safe_redirect_url(url: str, fallback: str = "/") -> str:
    """Return ``url`` if it is a local path, otherwise ``fallback``.

    Absolute URLs, protocol-relative URLs (``//host``) and anything with a
    scheme or host are rejected, as is the sign-in page itself.
    """
    if not url or not isinstance(url, str):
        return fallback

    url = url.strip()

    if not url.startswith("/") or url.startswith("//"):
        return fallback

    parsed = urlparse(url)
    if parsed.scheme or parsed.netloc:
        return fallback

    if parsed.path in ("/login", "/logout"):
        return fallback

    return url
