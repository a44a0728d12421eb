"""
Typed failures for the periodization hierarchy.

Each error carries a stable ``code`` so the API layer can map it to an
HTTP status without inspecting messages.
"""

from typing import Optional
from uuid import UUID


class PeriodError(Exception):
    """Base class for rejected planning operations."""
    code = "PERIOD_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRangeError(PeriodError):
    """Start is not strictly before end, or a boundary is unparsable."""
    code = "INVALID_RANGE"


class OutOfParentRangeError(InvalidRangeError):
    """A child period falls outside its parent's range (containment enabled)."""
    code = "OUT_OF_PARENT_RANGE"


class OverlapError(PeriodError):
    """The range collides with a sibling period of the same owner and parent."""
    code = "OVERLAP"

    def __init__(self, message: str, conflicting_id: Optional[UUID] = None) -> None:
        super().__init__(message)
        self.conflicting_id = conflicting_id


class PeriodNotFoundError(PeriodError):
    """No period with this id exists for the owner."""
    code = "NOT_FOUND"


class InvalidParentError(PeriodError):
    """The parent is of the wrong level for the period being created."""
    code = "INVALID_PARENT"


class InvalidTagError(PeriodError):
    """The classification tag is not valid for the period's level."""
    code = "INVALID_TAG"
