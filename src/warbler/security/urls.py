"""Redirect target validation.

Post-login redirects come from a query parameter the visitor controls,
so only same-origin relative paths are followed.

Usage::

    from warbler.security.urls import is_safe_url

    target = request.query.get("redirect", "/feed")
    return Redirect(target if is_safe_url(target) else "/feed")
"""


def is_safe_url(url: str | None) -> bool:
    """Check whether *url* is a same-origin relative path.

    Examples::

        >>> is_safe_url("/tr/feed")
        True
        >>> is_safe_url("//evil.com")
        False
        >>> is_safe_url("https://evil.com")
        False
        >>> is_safe_url("/\\\\evil.com")
        False
        >>> is_safe_url("")
        False
    """
    if not url or not isinstance(url, str):
        return False
    if not url.startswith("/") or url.startswith("//"):
        return False
    if "\\" in url or any(ord(ch) < 32 for ch in url):
        return False
    return "://" not in url
