"""
Read-side projections of a tournament.

Nothing in this module mutates the tournament it is given.
"""
from typing import Dict, List, Optional

from .errors import NotFoundError, WrongFormatError
from .models import ROUND_ROBIN, KnockoutDraw, RoundRobinDraw, Slot
from .lifecycle import completion_ready
from .pairing import get_round_name
from .standings import calculate_standings

PENDING = 'PENDING'
SCHEDULED = 'SCHEDULED'
COMPLETED = 'COMPLETED'
BYE = 'BYE'


def match_status(match) -> str:
    if getattr(match, 'auto_advanced', False):
        return BYE
    if match.is_resolved:
        return COMPLETED
    if match.is_ready:
        return SCHEDULED
    return PENDING


def _participant_view(tournament, participant_id) -> Optional[Dict]:
    if participant_id is None:
        return None
    participant = tournament.participant(participant_id)
    if participant is None:
        return {'id': participant_id, 'name': participant_id, 'seed': None}
    return {'id': participant.participant_id, 'name': participant.name, 'seed': participant.seed}


def _slot_view(tournament, slot: Slot) -> Dict:
    view = {'kind': slot.kind, 'source': slot.source, 'participant': None}
    if slot.is_concrete:
        view['participant'] = _participant_view(tournament, slot.participant_id)
        view['label'] = view['participant']['name']
    elif slot.is_bye:
        view['label'] = 'BYE'
    else:
        view['label'] = f'Winner {slot.source}'
    return view


def _node_view(tournament, node) -> Dict:
    return {
        'match_id': node.match_id,
        'round': node.round,
        'position': node.position,
        'player1': _slot_view(tournament, node.slot1),
        'player2': _slot_view(tournament, node.slot2),
        'score1': node.score1,
        'score2': node.score2,
        'winner': _participant_view(tournament, node.winner),
        'status': match_status(node),
        'next_match': node.next_match,
        'next_slot': node.next_slot,
        'scheduled_date': node.scheduled_date,
        'court': node.court,
    }


def _fixture_view(tournament, fixture) -> Dict:
    return {
        'match_id': fixture.match_id,
        'round': fixture.round,
        'player1': _participant_view(tournament, fixture.participant1),
        'player2': _participant_view(tournament, fixture.participant2),
        'score1': fixture.score1,
        'score2': fixture.score2,
        'winner': _participant_view(tournament, fixture.winner),
        'status': match_status(fixture),
        'scheduled_date': fixture.scheduled_date,
        'court': fixture.court,
    }


def _header(tournament) -> Dict:
    return {
        'tournament_id': tournament.tournament_id,
        'name': tournament.name,
        'format': tournament.format,
        'status': tournament.status,
        'version': tournament.version,
        'built': tournament.is_built,
        'total_players': len(tournament.participants),
    }


def knockout_view(tournament) -> Dict:
    """Round-indexed bracket: a list of rounds, each a list of node views."""
    draw = tournament.draw
    view = _header(tournament)

    rounds = []
    matches_per_round = {}
    for round_index in range(draw.total_rounds):
        nodes = draw.round_nodes(round_index)
        round_name = get_round_name(draw.bracket_size // (2 ** round_index))
        rounds.append({
            'index': round_index,
            'name': round_name,
            'matches': [_node_view(tournament, n) for n in nodes],
        })
        matches_per_round[round_name] = sum(1 for n in nodes if not n.auto_advanced)

    final = draw.final
    view.update({
        'bracket_size': draw.bracket_size,
        'total_rounds': draw.total_rounds,
        'byes': sum(1 for n in draw.round_nodes(0) for s in (n.slot1, n.slot2) if s.is_bye),
        'matches_per_round': matches_per_round,
        'champion': _participant_view(tournament, final.winner) if final else None,
        'rounds': rounds,
        'ready_matches': draw.ready_match_ids(),
    })
    return view


def round_robin_view(tournament) -> Dict:
    """Fixtures grouped by schedule round, with the current standings."""
    draw = tournament.draw
    view = _header(tournament)

    rounds = []
    for round_index in range(draw.total_rounds):
        fixtures = [f for f in draw.fixtures if f.round == round_index]
        rounds.append({
            'index': round_index,
            'name': f'Round {round_index + 1}',
            'matches': [_fixture_view(tournament, f) for f in fixtures],
        })

    view.update({
        'total_fixtures': len(draw.fixtures),
        'played_fixtures': sum(1 for f in draw.fixtures if f.is_resolved),
        'all_fixtures_played': completion_ready(tournament),
        'rounds': rounds,
        'standings': calculate_standings(tournament.participants, draw.fixtures),
        'ready_matches': draw.ready_match_ids(),
    })
    return view


def bracket_view(tournament) -> Dict:
    """Current bracket (knockout) or fixture list (round robin)."""
    if isinstance(tournament.draw, KnockoutDraw):
        return knockout_view(tournament)
    if isinstance(tournament.draw, RoundRobinDraw):
        return round_robin_view(tournament)

    view = _header(tournament)
    view.update({'rounds': [], 'ready_matches': []})
    return view


def standings_view(tournament) -> List[Dict]:
    if tournament.format != ROUND_ROBIN:
        raise WrongFormatError("Standings are only kept for round-robin tournaments",
                               format=tournament.format)
    fixtures = tournament.draw.fixtures if tournament.draw else []
    return calculate_standings(tournament.participants, fixtures)


def ready_matches(tournament) -> List[str]:
    """Match ids with both sides concrete and no winner yet."""
    if tournament.draw is None:
        return []
    return tournament.draw.ready_match_ids()


def _sides(match):
    if hasattr(match, 'slot1'):
        p1 = match.slot1.participant_id if match.slot1.is_concrete else None
        p2 = match.slot2.participant_id if match.slot2.is_concrete else None
        return p1, p2
    return match.participant1, match.participant2


def player_stats(tournament, participant_id) -> Dict:
    """Match history and record for one participant."""
    participant = tournament.participant(participant_id)
    if participant is None:
        raise NotFoundError(f"Participant {participant_id} is not in tournament "
                            f"{tournament.tournament_id}", participant_id=participant_id)

    matches = []
    wins = losses = points_for = points_against = 0
    for match in (tournament.draw.matches() if tournament.draw else []):
        p1, p2 = _sides(match)
        if participant_id not in (p1, p2) or match_status(match) == BYE:
            continue

        is_first = p1 == participant_id
        opponent_id = p2 if is_first else p1
        own_score = match.score1 if is_first else match.score2
        opponent_score = match.score2 if is_first else match.score1
        won = None
        if match.is_resolved:
            won = match.winner == participant_id
            wins += 1 if won else 0
            losses += 0 if won else 1
            points_for += own_score
            points_against += opponent_score

        matches.append({
            'match_id': match.match_id,
            'round': match.round,
            'opponent': _participant_view(tournament, opponent_id),
            'own_score': own_score,
            'opponent_score': opponent_score,
            'won': won,
            'status': match_status(match),
            'scheduled_date': match.scheduled_date,
            'court': match.court,
        })

    played = wins + losses
    return {
        'participant': _participant_view(tournament, participant_id),
        'matches_played': played,
        'wins': wins,
        'losses': losses,
        'points_for': points_for,
        'points_against': points_against,
        'win_rate': round(wins / played * 100, 1) if played else 0.0,
        'matches': matches,
    }
