"""Domain error taxonomy for the order workflow.

Every error carries a human-readable message naming the offending entity and
an HTTP status used by the request boundary in ``coop_api.main``.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for recoverable business errors."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WorkflowError):
    """Malformed or missing input, rejected before any store access."""


class NotFoundError(WorkflowError):
    """Referenced product or order does not exist."""

    status_code = 404


class ConflictError(WorkflowError):
    """Product is inactive or has insufficient stock."""


class StateError(WorkflowError):
    """Invalid target status, forbidden transition or missing rejection notes."""
