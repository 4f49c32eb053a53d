"""HTTP API for the concierge."""

from concierge.api.main import create_app

__all__ = ["create_app"]
