"""HTTP surface for the SnipIt UI layer."""

from .server import create_app

__all__ = ["create_app"]
