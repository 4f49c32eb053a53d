"""Command line interface for the concierge."""
