"""
widgetboard kernel — error taxonomy.

Every layer raises from this set so callers never have to know which
persistence backend or resolution strategy produced a failure.
"""

from __future__ import annotations


class ValidationError(Exception):
    """Missing required name/code, or a duplicate id on create."""
    pass


class DecodeError(Exception):
    """Encoded URL config is malformed. Always a fall-through, never fatal."""
    pass


class ExecutionError(Exception):
    """A widget script failed to compile or run."""
    pass


class PersistenceError(Exception):
    """Transaction or I/O failure in a LocationStore."""
    pass
