"""
Tournament lifecycle: UPCOMING -> IN_PROGRESS -> COMPLETED.

No transition moves backward or skips a state. Knockout tournaments
complete automatically when the final is decided; round-robin
tournaments complete on an explicit command once every fixture has a
result.
"""
import logging

from .errors import InvalidStateTransitionError
from .models import COMPLETED, IN_PROGRESS, KNOCKOUT, ROUND_ROBIN, STATUSES, UPCOMING

logger = logging.getLogger(__name__)

TRANSITIONS = {
    UPCOMING: (IN_PROGRESS,),
    IN_PROGRESS: (COMPLETED,),
    COMPLETED: (),
}


def check_transition(tournament, new_status: str):
    """Raise InvalidStateTransitionError unless `new_status` is a legal next state."""
    current = tournament.status
    if new_status not in STATUSES:
        raise InvalidStateTransitionError(f"Unknown status {new_status!r}",
                                          current=current, requested=new_status)
    if new_status not in TRANSITIONS[current]:
        raise InvalidStateTransitionError(f"Cannot move from {current} to {new_status}",
                                          current=current, requested=new_status)

    if new_status == IN_PROGRESS and tournament.has_results():
        raise InvalidStateTransitionError("Results already recorded", current=current,
                                          requested=new_status)

    if new_status == COMPLETED:
        if tournament.format == KNOCKOUT:
            raise InvalidStateTransitionError(
                "Knockout tournaments complete when the final is decided",
                current=current, requested=new_status)
        if tournament.format == ROUND_ROBIN and not completion_ready(tournament):
            raise InvalidStateTransitionError("Not every fixture has a result",
                                              current=current, requested=new_status)


def transition(tournament, new_status: str):
    check_transition(tournament, new_status)
    logger.info("Tournament %s: %s -> %s", tournament.tournament_id, tournament.status, new_status)
    tournament.status = new_status
    return tournament


def completion_ready(tournament) -> bool:
    """True when a round-robin tournament has every fixture resolved."""
    if tournament.format != ROUND_ROBIN or tournament.draw is None:
        return False
    return tournament.draw.all_resolved()


def ensure_accepts_results(tournament):
    if tournament.status == COMPLETED:
        raise InvalidStateTransitionError("Tournament is completed; no further results accepted",
                                          current=tournament.status)


def mark_started(tournament):
    """The first recorded result implicitly starts an UPCOMING tournament."""
    if tournament.status == UPCOMING:
        logger.info("Tournament %s started by its first result", tournament.tournament_id)
        tournament.status = IN_PROGRESS


def mark_completed(tournament):
    """Set by the recorder once the knockout final is decided."""
    logger.info("Tournament %s completed", tournament.tournament_id)
    tournament.status = COMPLETED
