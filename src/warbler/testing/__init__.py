"""Test utilities for warbler applications.

    from warbler.testing import TestClient
"""

from warbler.testing.client import TestClient

__all__ = ["TestClient"]
