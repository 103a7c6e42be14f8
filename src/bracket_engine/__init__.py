"""
Knockout bracket and round-robin standings engine for club tournaments.
"""
from .errors import (
    TournamentError, InvalidRosterError, AlreadyBuiltError, NotFoundError, NotReadyError,
    AlreadyRecordedError, InvalidScoreError, InvalidStateTransitionError, WrongFormatError,
    ConflictError, DuplicateTournamentError,
)
from .models import (
    KNOCKOUT, ROUND_ROBIN, UPCOMING, IN_PROGRESS, COMPLETED, Participant, Tournament,
)
from .service import TournamentEngine
from .store import MemoryStore, YamlStore
