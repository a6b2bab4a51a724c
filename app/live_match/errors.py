"""
Error taxonomy for match operations.

Every precondition failure in the core is raised to the immediate caller
as one of these. The transport maps ``status_code`` onto its response.
"""


class MatchError(Exception):
    """Base class for all match operation failures."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class ValidationError(MatchError):
    """Missing or malformed required input."""
    status_code = 400


class NotFoundError(MatchError):
    """Referenced match id does not exist."""
    status_code = 404


class InvalidTransitionError(MatchError):
    """Status lifecycle violation (start a non-pending or end a non-ongoing match)."""
    status_code = 409


class InvalidStateError(MatchError):
    """Event recorded on a match that is not ongoing."""
    status_code = 409
