"""
Pairing utilities: bracket sizing, bye placement and round-robin fixtures.
"""
import math
from typing import List, Dict, Optional, Sequence


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 2 ** math.ceil(math.log2(n))


def calculate_byes(num_participants: int) -> int:
    """Calculate number of byes needed."""
    return next_power_of_two(num_participants) - num_participants


def total_rounds(bracket_size: int) -> int:
    return int(math.log2(bracket_size)) if bracket_size > 1 else 0


def get_round_name(players_in_round: int) -> str:
    """Get the name of a round based on number of players."""
    if players_in_round == 2:
        return "Final"
    elif players_in_round == 4:
        return "Semifinal"
    elif players_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {players_in_round}"


def _generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 slots: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    """
    if bracket_size <= 1:
        return [1]
    if bracket_size == 2:
        return [1, 2]

    half_size = bracket_size // 2
    upper_half = _generate_bracket_order(half_size)

    # Pair each upper seed with its complement
    lower_half = [bracket_size + 1 - seed for seed in upper_half]

    result = []
    for u, l in zip(upper_half, lower_half):
        result.extend([u, l])

    return result


def seeding_order(participants: Sequence) -> List:
    """
    Order participants for seeding.

    Seeded participants come first by seed rank; unseeded ones follow.
    Enrollment order breaks every remaining tie.
    """
    indexed = list(enumerate(participants))
    indexed.sort(key=lambda item: (
        getattr(item[1], 'seed', None) is None,
        getattr(item[1], 'seed', None) or 0,
        getattr(item[1], 'enrollment', item[0]),
        item[0],
    ))
    return [p for _, p in indexed]


def assign_byes(participants: Sequence) -> List[Optional[object]]:
    """
    Lay participants out over the first-round slots of the bracket.

    Returns bracket_size entries; consecutive pairs form first-round
    matches and None marks a bye. Participants take the seed numbers
    1..k in seeding order and the missing seeds k+1..s become byes, so
    the byes go to the top seeds. Standard bracket order then spreads
    those seeds over alternating halves of the draw (1 top, 2 bottom,
    3 and 4 in the remaining quarters) instead of clustering them.
    """
    ordered = seeding_order(participants)
    bracket_size = next_power_of_two(len(ordered))
    seed_to_participant = {seed: p for seed, p in enumerate(ordered, start=1)}

    return [seed_to_participant.get(seed) for seed in _generate_bracket_order(bracket_size)]


def generate_round_robin_fixtures(participants: Sequence) -> List[Dict]:
    """
    All-pairs schedule using the circle method.

    Returns one dict per unordered pair: {'participants': (a, b), 'round': r}.
    With an odd count a phantom entry is added and whoever meets it sits
    that round out; those pairings are dropped. Within a pair the
    earlier-enrolled participant comes first.
    """
    entries = list(participants)
    if len(entries) < 2:
        return []

    position = {id(p): i for i, p in enumerate(entries)}
    rotation = entries + [None] if len(entries) % 2 else list(entries)
    n = len(rotation)

    fixtures = []
    for round_index in range(n - 1):
        for i in range(n // 2):
            a, b = rotation[i], rotation[n - 1 - i]
            if a is None or b is None:
                continue
            if position[id(a)] > position[id(b)]:
                a, b = b, a
            fixtures.append({'participants': (a, b), 'round': round_index})
        # Keep the first entry fixed and rotate the rest clockwise
        rotation = [rotation[0], rotation[-1]] + rotation[1:-1]

    return fixtures
