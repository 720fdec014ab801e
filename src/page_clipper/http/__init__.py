"""Outbound HTTP execution with retry."""

from page_clipper.http.executor import ResilientExecutor

__all__ = [
    "ResilientExecutor",
]
