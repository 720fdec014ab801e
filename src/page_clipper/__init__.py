"""Capture webpages into typed document-collection records."""

__version__ = "0.1.0"
