"""Typed failures raised by the catalog and allocation engine."""

from __future__ import annotations


class AllocationError(Exception):
    """Base class for caller-correctable allocation failures."""


class ValidationError(AllocationError, ValueError):
    """Raised when a resource, member or tool is malformed at construction."""


class NotFoundError(AllocationError, LookupError):
    """Raised when an operation references an unknown member, resource or tool."""
