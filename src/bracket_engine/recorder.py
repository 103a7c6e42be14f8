"""
Match result recording.

record_result mutates a loaded tournament in memory; the caller commits
it as one unit (see TournamentEngine). Every check runs before the first
mutation, so a rejected result leaves the tournament untouched.
"""
import logging

from .bracket import advance_winner
from .errors import AlreadyRecordedError, InvalidScoreError, NotFoundError, NotReadyError
from .lifecycle import ensure_accepts_results, mark_completed, mark_started
from .models import KNOCKOUT

logger = logging.getLogger(__name__)


def validate_scores(score1, score2):
    """Scores must be non-negative integers and must differ."""
    for label, score in (('score1', score1), ('score2', score2)):
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidScoreError(f"{label} must be an integer, got {score!r}")
        if score < 0:
            raise InvalidScoreError(f"{label} must not be negative, got {score}")
    if score1 == score2:
        raise InvalidScoreError(f"Tied score {score1}-{score2}; a match needs a winner")


def find_match(tournament, match_id):
    match = tournament.get_match(match_id)
    if match is None:
        raise NotFoundError(f"Match {match_id} not found in tournament {tournament.tournament_id}",
                            match_id=match_id)
    return match


def record_result(tournament, match_id, score1, score2) -> dict:
    """
    Record one match outcome and apply its effects.

    Knockout: sets scores and winner, moves the winner into the downstream
    slot (auto-advancing past byes) and completes the tournament when the
    final is decided. Round robin: sets the fixture scores only.

    Returns a summary with the winner, the matches resolved by propagation,
    the matches that became ready, and whether the tournament completed.
    """
    match = find_match(tournament, match_id)
    ensure_accepts_results(tournament)

    if match.is_resolved:
        raise AlreadyRecordedError(f"Match {match_id} already has a result",
                                   match_id=match_id, winner=match.winner)

    if tournament.format == KNOCKOUT and not match.is_ready:
        raise NotReadyError(f"Match {match_id} does not have two players yet", match_id=match_id)

    validate_scores(score1, score2)

    draw = tournament.draw
    ready_before = set(draw.ready_match_ids())
    mark_started(tournament)

    match.score1 = score1
    match.score2 = score2

    if tournament.format == KNOCKOUT:
        match.winner = match.slot1.participant_id if score1 > score2 else match.slot2.participant_id
        match.resolved = True
        propagated = advance_winner(draw, match)
        final = draw.final
        completed = final is not None and final.is_resolved
        if completed:
            mark_completed(tournament)
    else:
        propagated = []
        completed = False

    newly_ready = [m for m in draw.ready_match_ids() if m not in ready_before]
    logger.info("Recorded %s %d-%d in %s (winner %s)", match_id, score1, score2,
                tournament.tournament_id, match.winner)

    return {
        'match_id': match_id,
        'score1': score1,
        'score2': score2,
        'winner': match.winner,
        'propagated': propagated,
        'newly_ready': newly_ready,
        'completed': completed,
        'status': tournament.status,
    }


def schedule_match(tournament, match_id, scheduled_date=None, court=None):
    """Attach a date and court to a match that has not been played."""
    match = find_match(tournament, match_id)
    if match.is_resolved:
        raise AlreadyRecordedError(f"Match {match_id} is already decided", match_id=match_id)
    match.scheduled_date = scheduled_date
    match.court = court
    return match
