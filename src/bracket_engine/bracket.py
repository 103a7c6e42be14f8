"""
Knockout bracket and round-robin schedule construction.

The whole knockout tree is created up front: round 0 from the seeded
first-round slots, later rounds as placeholders that name the match
feeding each side. Byes are resolved immediately and their winners
pushed downstream, which may in turn resolve further nodes.
"""
import logging
from typing import List, Sequence

from .errors import InvalidRosterError
from .models import (
    KNOCKOUT, ROUND_ROBIN, BracketNode, KnockoutDraw, Participant, RoundRobinDraw,
    RoundRobinFixture, Slot, fixture_match_id, knockout_match_id,
)
from .pairing import assign_byes, generate_round_robin_fixtures, next_power_of_two, total_rounds

logger = logging.getLogger(__name__)


def normalize_roster(participants: Sequence) -> List[Participant]:
    """
    Turn a roster into Participant objects with a stable enrollment order.

    Accepts Participant instances, dicts with 'id' / 'name' / 'seed' keys,
    or bare identifiers. Raises InvalidRosterError for fewer than two
    entries or a repeated identifier.
    """
    roster = []
    seen = set()
    for index, entry in enumerate(participants or []):
        if isinstance(entry, Participant):
            participant = Participant(entry.participant_id, entry.name, entry.seed, index)
        elif isinstance(entry, dict):
            if entry.get('id') is None or str(entry.get('id')).strip() == '':
                raise InvalidRosterError(f"Roster entry {index} has no id")
            participant = Participant(entry['id'], entry.get('name') or str(entry['id']),
                                      entry.get('seed'), index)
        else:
            participant = Participant(entry, str(entry), None, index)

        if participant.seed is not None and (isinstance(participant.seed, bool)
                                             or not isinstance(participant.seed, int)):
            raise InvalidRosterError(f"Seed for {participant.participant_id} must be an integer",
                                     participant=participant.participant_id)
        if participant.participant_id in seen:
            raise InvalidRosterError(f"Duplicate participant {participant.participant_id}",
                                     participant=participant.participant_id)
        seen.add(participant.participant_id)
        roster.append(participant)

    if len(roster) < 2:
        raise InvalidRosterError(f"Need at least 2 participants, got {len(roster)}")
    return roster


def auto_resolve(draw: KnockoutDraw, node: BracketNode) -> List[str]:
    """
    Resolve `node` without a played match if one side is a bye.

    One bye: the other side advances, as soon as it is concrete.
    Two byes: the node resolves with no winner and a bye moves downstream.
    Returns the match ids resolved, in order.
    """
    if node.resolved:
        return []

    if node.slot1.is_bye and node.slot2.is_bye:
        node.resolved = True
        node.auto_advanced = True
        logger.debug("Double bye at %s", node.match_id)
        return [node.match_id] + _push_downstream(draw, node, Slot.bye(source=node.match_id))

    for bye_slot, other in ((node.slot1, node.slot2), (node.slot2, node.slot1)):
        if bye_slot.is_bye and other.is_concrete:
            node.winner = other.participant_id
            node.resolved = True
            node.auto_advanced = True
            logger.debug("Bye at %s: %s advances", node.match_id, node.winner)
            return [node.match_id] + advance_winner(draw, node)

    return []


def advance_winner(draw: KnockoutDraw, node: BracketNode) -> List[str]:
    """Move a resolved node's winner into its downstream slot."""
    if node.next_match is None or node.winner is None:
        return []
    return _push_downstream(draw, node, Slot.player(node.winner, source=node.match_id))


def _push_downstream(draw, node, slot) -> List[str]:
    if node.next_match is None:
        return []
    downstream = draw.get(node.next_match)
    downstream.set_slot(node.next_slot, slot)
    return auto_resolve(draw, downstream)


def build_knockout_draw(participants: Sequence[Participant]) -> KnockoutDraw:
    """
    Build the full single-elimination tree.

    Produces next_power_of_two(k) - 1 nodes; every node except the final
    names its downstream node and side. Bye nodes come back already
    resolved, with their winners propagated.
    """
    first_round_slots = assign_byes(participants)
    bracket_size = len(first_round_slots)
    rounds = total_rounds(bracket_size)

    nodes = []
    for round_index in range(rounds):
        matches_in_round = bracket_size // (2 ** (round_index + 1))
        for position in range(matches_in_round):
            if round_index == 0:
                p1 = first_round_slots[position * 2]
                p2 = first_round_slots[position * 2 + 1]
                slot1 = Slot.player(p1.participant_id) if p1 is not None else Slot.bye()
                slot2 = Slot.player(p2.participant_id) if p2 is not None else Slot.bye()
            else:
                slot1 = Slot.winner_of(knockout_match_id(round_index - 1, position * 2))
                slot2 = Slot.winner_of(knockout_match_id(round_index - 1, position * 2 + 1))

            if round_index < rounds - 1:
                next_match = knockout_match_id(round_index + 1, position // 2)
                next_slot = 1 if position % 2 == 0 else 2
            else:
                next_match, next_slot = None, None

            nodes.append(BracketNode(knockout_match_id(round_index, position), round_index, position,
                                     slot1, slot2, next_match=next_match, next_slot=next_slot))

    draw = KnockoutDraw(bracket_size, nodes)

    resolved = []
    for node in draw.round_nodes(0):
        resolved.extend(auto_resolve(draw, node))

    logger.info("Built knockout bracket: %d players, size %d, %d rounds, %d auto-resolved",
                len(participants), bracket_size, rounds, len(resolved))
    return draw


def build_round_robin_draw(participants: Sequence[Participant]) -> RoundRobinDraw:
    """One fixture per unordered pair, numbered in schedule order."""
    pairings = generate_round_robin_fixtures(participants)
    pairings.sort(key=lambda f: (f['round'], f['participants'][0].enrollment))

    fixtures = []
    for number, pairing in enumerate(pairings, start=1):
        a, b = pairing['participants']
        fixtures.append(RoundRobinFixture(fixture_match_id(number), pairing['round'],
                                          a.participant_id, b.participant_id))

    logger.info("Built round-robin schedule: %d players, %d fixtures over %d rounds",
                len(participants), len(fixtures), max((f.round for f in fixtures), default=-1) + 1)
    return RoundRobinDraw(fixtures)


def build_draw(format: str, participants: Sequence[Participant]):
    """Build the draw variant for `format`."""
    if format == KNOCKOUT:
        return build_knockout_draw(participants)
    if format == ROUND_ROBIN:
        return build_round_robin_draw(participants)
    raise ValueError(f"Unknown tournament format: {format}")


def expected_node_count(num_participants: int) -> int:
    return next_power_of_two(num_participants) - 1
