"""Security utilities: redirect target validation.

    from warbler.security import is_safe_url
"""

from warbler.security.urls import is_safe_url

__all__ = ["is_safe_url"]
