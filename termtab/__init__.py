"""termtab - open, track and close terminal tabs for background tasks."""

__version__ = "0.1.0"
