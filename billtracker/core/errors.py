"""Domain errors raised by the service layer.

Routers never catch these; exception handlers registered in
``billtracker.main`` turn them into HTTP responses.
"""

from typing import Any


class BillTrackerError(Exception):
    """Base class for expected, caller-facing failures."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(BillTrackerError):
    """Entity is absent or belongs to another company.

    The two cases are indistinguishable to the caller.
    """

    def __init__(self, entity: str) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity


class ConflictError(BillTrackerError):
    """Write would violate a uniqueness or referential rule."""


class InvalidDataError(BillTrackerError):
    """Input is well-formed but semantically wrong."""

    def __init__(self, detail: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(detail)
        self.errors = errors or []
