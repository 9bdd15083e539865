"""Daily recommendation and completion-tracking service."""

__version__ = "0.1.0"
