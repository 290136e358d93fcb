"""Exception hierarchy for taskman."""
from typing import Optional


class TaskmanError(Exception):
    """Base class for all taskman errors."""


class MalformedInput(TaskmanError):
    """Raised when persisted task data cannot be decoded.

    Attributes:
        field: Name of the offending field, or None when the document as a
            whole is unusable (bad JSON, wrong top-level shape)
        reason: Human-readable description of the problem
        index: Position of the offending task document inside a task set,
            if known
    """

    def __init__(self, field: Optional[str], reason: str, index: Optional[int] = None):
        self.field = field
        self.reason = reason
        self.index = index
        super().__init__(self._message())

    def _message(self) -> str:
        where = ""
        if self.index is not None:
            where = f"task #{self.index}: "
        if self.field is None:
            return f"{where}{self.reason}"
        return f"{where}field '{self.field}': {self.reason}"

    def at_index(self, index: int) -> "MalformedInput":
        """Return a copy of this error annotated with a document index."""
        return type(self)(self.field, self.reason, index)


class MissingField(MalformedInput):
    """A required field is absent."""

    def __init__(self, field: str, reason: str = "missing field", index: Optional[int] = None):
        super().__init__(field, reason, index)


class DuplicateField(MalformedInput):
    """The same field appears more than once in one document."""

    def __init__(self, field: str, reason: str = "duplicate field", index: Optional[int] = None):
        super().__init__(field, reason, index)


class UnknownField(MalformedInput):
    """A field that the schema does not define."""

    def __init__(self, field: str, reason: str = "unknown field", index: Optional[int] = None):
        super().__init__(field, reason, index)


class InvalidField(MalformedInput):
    """A field value has the wrong type or shape."""


class InvalidStateTransition(TaskmanError):
    """A task reached a state its lifecycle cannot produce.

    Only possible when ``finished`` is set while ``started`` is not, which
    means the state machine was bypassed or stored data was tampered with.
    """


class StorageError(TaskmanError):
    """Reading or writing persisted data failed.

    Attributes:
        reason: Opaque failure description suitable for display
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
