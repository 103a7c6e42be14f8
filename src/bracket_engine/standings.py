"""
Round-robin standings.

Standings are a projection of the resolved fixtures and are recomputed on
every call; nothing here is stored.
"""
from itertools import groupby
from typing import Dict, List, Sequence

WIN_POINTS = 3
DRAW_POINTS = 1
LOSS_POINTS = 0


def _empty_stats(participant) -> Dict:
    return {
        'participant_id': participant.participant_id,
        'name': participant.name,
        'seed': participant.seed,
        'enrollment': participant.enrollment,
        'matches_played': 0,
        'wins': 0,
        'draws': 0,
        'losses': 0,
        'points': 0,
        'points_for': 0,
        'points_against': 0,
    }


def tally(participants: Sequence, fixtures: Sequence) -> Dict[str, Dict]:
    """Per-participant counts over every resolved fixture."""
    stats = {p.participant_id: _empty_stats(p) for p in participants}

    for fixture in fixtures:
        if not fixture.is_resolved:
            continue
        first = stats.get(fixture.participant1)
        second = stats.get(fixture.participant2)
        if first is None or second is None:
            continue

        for own, other, scored, conceded in ((first, second, fixture.score1, fixture.score2),
                                             (second, first, fixture.score2, fixture.score1)):
            own['matches_played'] += 1
            own['points_for'] += scored
            own['points_against'] += conceded
            if scored > conceded:
                own['wins'] += 1
                own['points'] += WIN_POINTS
            elif scored < conceded:
                own['losses'] += 1
                own['points'] += LOSS_POINTS
            else:
                own['draws'] += 1
                own['points'] += DRAW_POINTS

    for entry in stats.values():
        entry['point_diff'] = entry['points_for'] - entry['points_against']

    return stats


def head_to_head(fixtures: Sequence) -> Dict[frozenset, str]:
    """Winner of each decided pairing, keyed by the unordered pair."""
    return {f.pair(): f.winner for f in fixtures if f.is_resolved and f.winner is not None}


def _order_tied_group(group: List[Dict], h2h: Dict[frozenset, str]) -> List[Dict]:
    if len(group) == 2:
        a, b = group
        winner = h2h.get(frozenset((a['participant_id'], b['participant_id'])))
        if winner is not None:
            return [a, b] if winner == a['participant_id'] else [b, a]
    return sorted(group, key=lambda x: (-x['point_diff'], x['enrollment']))


def calculate_standings(participants: Sequence, fixtures: Sequence) -> List[Dict]:
    """
    Ranked standings table.

    Ranking: points -> wins -> head-to-head (exactly two tied, and they
    played) -> point differential -> enrollment order. The last key is
    unique per participant, so ranks are always a strict order.
    """
    stats = tally(participants, fixtures)
    h2h = head_to_head(fixtures)

    primary = sorted(stats.values(), key=lambda x: (-x['points'], -x['wins'], x['enrollment']))

    ranked = []
    for _, group in groupby(primary, key=lambda x: (x['points'], x['wins'])):
        ranked.extend(_order_tied_group(list(group), h2h))

    for rank, entry in enumerate(ranked, start=1):
        entry['rank'] = rank

    return ranked
