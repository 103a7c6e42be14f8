"""
TournamentEngine: the inbound operations over a caller-supplied store.

Writes run as one unit per tournament: take the tournament lock, load,
apply the change, save against the loaded version. Any error before the
save leaves the stored tournament as it was. Reads load a snapshot
without locking.
"""
import logging
from datetime import datetime
from typing import Dict, List, Sequence

from .bracket import build_draw, normalize_roster
from .errors import AlreadyBuiltError, WrongFormatError
from .lifecycle import transition
from .models import FORMATS, UPCOMING, Tournament
from .recorder import record_result, schedule_match
from .store import MemoryStore, TournamentStore
from .views import bracket_view, player_stats, ready_matches, standings_view

logger = logging.getLogger(__name__)


class TournamentEngine:
    def __init__(self, store: TournamentStore = None):
        self.store = store if store is not None else MemoryStore()

    def _mutate(self, tournament_id, operation):
        with self.store.lock(tournament_id):
            tournament = self.store.load(tournament_id)
            loaded_version = tournament.version
            result = operation(tournament)
            self.store.save(tournament, loaded_version)
        return tournament, result

    def create_tournament(self, tournament_id, name: str, format: str) -> Tournament:
        if format not in FORMATS:
            raise WrongFormatError(f"Unknown tournament format: {format}", format=format)
        tournament = Tournament(tournament_id, name, format, status=UPCOMING,
                                created_at=datetime.now().isoformat())
        self.store.create(tournament)
        logger.info("Created %s tournament %s", format, tournament.tournament_id)
        return tournament

    def delete_tournament(self, tournament_id):
        """Remove the tournament together with its bracket nodes or fixtures."""
        self.store.delete(tournament_id)
        logger.info("Deleted tournament %s", tournament_id)

    def list_tournaments(self) -> List[Dict]:
        return [t.summary() for t in self.store.list()]

    def get_tournament(self, tournament_id) -> Tournament:
        return self.store.load(tournament_id)

    def build_bracket(self, tournament_id, participants: Sequence) -> Dict:
        """Build the knockout bracket or round-robin fixture list, once."""
        def build(tournament):
            if tournament.is_built:
                raise AlreadyBuiltError(f"Tournament {tournament.tournament_id} already has a draw",
                                        tournament_id=tournament.tournament_id)
            roster = normalize_roster(participants)
            tournament.participants = roster
            tournament.draw = build_draw(tournament.format, roster)

        tournament, _ = self._mutate(tournament_id, build)
        return bracket_view(tournament)

    def record_result(self, tournament_id, match_id, score1, score2) -> Dict:
        """Record a match result; returns the updated view with a `last_result` summary."""
        tournament, summary = self._mutate(
            tournament_id, lambda t: record_result(t, match_id, score1, score2))
        view = bracket_view(tournament)
        view['last_result'] = summary
        return view

    def transition_status(self, tournament_id, new_status: str) -> Tournament:
        tournament, _ = self._mutate(tournament_id, lambda t: transition(t, new_status))
        return tournament

    def schedule_match(self, tournament_id, match_id, scheduled_date=None, court=None) -> Dict:
        tournament, _ = self._mutate(
            tournament_id, lambda t: schedule_match(t, match_id, scheduled_date, court))
        return bracket_view(tournament)

    def get_bracket_view(self, tournament_id) -> Dict:
        return bracket_view(self.store.load(tournament_id))

    def get_standings(self, tournament_id) -> List[Dict]:
        return standings_view(self.store.load(tournament_id))

    def get_ready_matches(self, tournament_id) -> List[str]:
        return ready_matches(self.store.load(tournament_id))

    def get_player_stats(self, tournament_id, participant_id) -> Dict:
        return player_stats(self.store.load(tournament_id), str(participant_id))
