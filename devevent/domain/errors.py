"""Error taxonomy for event and booking writes."""

from __future__ import annotations


class DevEventError(Exception):
    """Base class for every error the service raises on purpose."""


class ValidationFailure(DevEventError, ValueError):
    """A candidate record failed a pre-write guard; nothing was persisted."""


class RequiredFieldEmpty(ValidationFailure):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} is required and must be a non-empty string")


class EmptyCollection(ValidationFailure):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(
            f"{field.capitalize()} must contain at least one non-empty string"
        )


class InvalidFormat(ValidationFailure):
    """Date or time text could not be parsed."""


class InvalidValue(ValidationFailure):
    """Date or time parsed but is out of range."""


class InvalidEmailFormat(ValidationFailure):
    def __init__(self, message: str = "Invalid email format") -> None:
        super().__init__(message)


class MissingReference(ValidationFailure):
    def __init__(self, message: str = "eventId is required") -> None:
        super().__init__(message)


class DanglingReference(ValidationFailure):
    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__("Referenced event does not exist")


class UniquenessConflict(DevEventError):
    """The store rejected a write because of a unique index."""


class ConnectionFailure(DevEventError):
    """The document store could not be reached."""


class NotFound(DevEventError):
    """The addressed record does not exist."""
