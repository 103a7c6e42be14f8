"""
Errors raised by the bracket engine.

Every error is raised synchronously to the caller. Only ConflictError is
meant to be retried, and only by the caller.
"""


class TournamentError(Exception):
    """Base class for all engine errors."""
    http_status = 400
    retryable = False

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        data = {'error': type(self).__name__, 'message': self.message}
        if self.details:
            data['details'] = self.details
        return data


class InvalidRosterError(TournamentError):
    """Fewer than two participants, or a participant listed twice."""


class AlreadyBuiltError(TournamentError):
    """The tournament already has a bracket or fixture list."""
    http_status = 409


class NotFoundError(TournamentError):
    """Unknown tournament, match or participant."""
    http_status = 404


class NotReadyError(TournamentError):
    """A match side is still a bye or an unresolved placeholder."""
    http_status = 409


class AlreadyRecordedError(TournamentError):
    """The match already has a result; results are immutable."""
    http_status = 409


class InvalidScoreError(TournamentError):
    """Negative, non-integer or tied scores."""


class InvalidStateTransitionError(TournamentError):
    """The lifecycle does not allow the requested move."""
    http_status = 409


class WrongFormatError(TournamentError):
    """Operation only applies to the other tournament format."""


class ConflictError(TournamentError):
    """Concurrent write collision. Retry the whole operation."""
    http_status = 409
    retryable = True


class DuplicateTournamentError(TournamentError):
    """A tournament with this id already exists."""
    http_status = 409
