"""
Unit tests for bracket sizing, bye placement and round-robin fixtures.
"""
import pytest
import sys
import os
from itertools import combinations

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine.models import Participant
from bracket_engine.pairing import (
    next_power_of_two,
    calculate_byes,
    total_rounds,
    get_round_name,
    seeding_order,
    assign_byes,
    generate_round_robin_fixtures,
    _generate_bracket_order
)


def participants(count, seeds=None):
    seeds = seeds or {}
    return [Participant(f'p{i}', f'Player {i}', seeds.get(i), i - 1) for i in range(1, count + 1)]


class TestBracketHelpers:
    """Tests for bracket helper functions."""

    def test_next_power_of_two_exact_power(self):
        """Test bracket size for exact power of 2."""
        assert next_power_of_two(2) == 2
        assert next_power_of_two(4) == 4
        assert next_power_of_two(16) == 16

    def test_next_power_of_two_rounds_up(self):
        """Test bracket size rounds up to next power of 2."""
        assert next_power_of_two(3) == 4
        assert next_power_of_two(5) == 8
        assert next_power_of_two(7) == 8
        assert next_power_of_two(9) == 16
        assert next_power_of_two(33) == 64

    def test_next_power_of_two_small(self):
        assert next_power_of_two(1) == 1
        assert next_power_of_two(0) == 1

    def test_calculate_byes(self):
        assert calculate_byes(8) == 0
        assert calculate_byes(5) == 3  # 8 - 5
        assert calculate_byes(6) == 2
        assert calculate_byes(12) == 4  # 16 - 12

    def test_total_rounds(self):
        assert total_rounds(2) == 1
        assert total_rounds(8) == 3
        assert total_rounds(64) == 6

    def test_round_names(self):
        assert get_round_name(2) == "Final"
        assert get_round_name(4) == "Semifinal"
        assert get_round_name(8) == "Quarterfinal"
        assert get_round_name(16) == "Round of 16"


class TestBracketOrder:
    """Tests for bracket ordering (seeding)."""

    def test_bracket_order_2(self):
        assert _generate_bracket_order(2) == [1, 2]

    def test_bracket_order_4(self):
        # 1v4, 2v3 and winners meet in final
        assert _generate_bracket_order(4) == [1, 4, 2, 3]

    def test_bracket_order_8(self):
        # Standard bracket: 1v8, 4v5, 2v7, 3v6
        assert _generate_bracket_order(8) == [1, 8, 4, 5, 2, 7, 3, 6]

    def test_top_two_seeds_in_opposite_halves(self):
        order = _generate_bracket_order(16)
        assert order.index(1) < 8
        assert order.index(2) >= 8


class TestSeedingOrder:
    """Tests for seed / enrollment ordering."""

    def test_enrollment_order_without_seeds(self):
        roster = participants(4)
        assert [p.participant_id for p in seeding_order(roster)] == ['p1', 'p2', 'p3', 'p4']

    def test_seeded_before_unseeded(self):
        roster = participants(4, seeds={3: 1, 4: 2})
        assert [p.participant_id for p in seeding_order(roster)] == ['p3', 'p4', 'p1', 'p2']

    def test_seed_rank_order(self):
        roster = participants(3, seeds={1: 3, 2: 1, 3: 2})
        assert [p.participant_id for p in seeding_order(roster)] == ['p2', 'p3', 'p1']


class TestAssignByes:
    """Tests for first-round slot layout."""

    def test_slot_count_is_bracket_size(self):
        for count in range(2, 20):
            assert len(assign_byes(participants(count))) == next_power_of_two(count)

    def test_no_byes_for_power_of_two(self):
        slots = assign_byes(participants(8))
        assert None not in slots

    def test_five_players_bye_positions(self):
        """Seeds 6, 7 and 8 are missing, so their slots are byes."""
        slots = assign_byes(participants(5))
        assert [i for i, s in enumerate(slots) if s is None] == [1, 5, 7]

    def test_byes_go_to_earliest_enrolled(self):
        slots = assign_byes(participants(5))
        pairs = [(slots[i], slots[i + 1]) for i in range(0, len(slots), 2)]
        with_bye = [a.participant_id for a, b in pairs if b is None]
        assert with_bye == ['p1', 'p2', 'p3']

    def test_byes_alternate_between_halves(self):
        """Top seed's bye is in the top half, the second seed's in the bottom half."""
        slots = assign_byes(participants(6))
        top_half, bottom_half = slots[:4], slots[4:]
        assert top_half[0].participant_id == 'p1' and top_half[1] is None
        assert bottom_half[0].participant_id == 'p2' and bottom_half[1] is None

    def test_no_match_has_two_byes(self):
        for count in range(2, 33):
            slots = assign_byes(participants(count))
            for i in range(0, len(slots), 2):
                assert not (slots[i] is None and slots[i + 1] is None)

    def test_seeded_player_gets_bye(self):
        slots = assign_byes(participants(3, seeds={3: 1}))
        assert slots[0].participant_id == 'p3'
        assert slots[1] is None


class TestRoundRobinFixtures:
    """Tests for circle-method fixture generation."""

    def test_every_pair_exactly_once(self):
        for count in range(2, 11):
            roster = participants(count)
            fixtures = generate_round_robin_fixtures(roster)
            pairs = [frozenset(p.participant_id for p in f['participants']) for f in fixtures]
            expected = {frozenset((a.participant_id, b.participant_id)) for a, b in combinations(roster, 2)}
            assert len(pairs) == len(expected)
            assert set(pairs) == expected

    def test_round_count(self):
        assert max(f['round'] for f in generate_round_robin_fixtures(participants(4))) == 2
        assert max(f['round'] for f in generate_round_robin_fixtures(participants(5))) == 4

    def test_nobody_plays_twice_in_a_round(self):
        fixtures = generate_round_robin_fixtures(participants(6))
        rounds = {}
        for f in fixtures:
            rounds.setdefault(f['round'], []).extend(p.participant_id for p in f['participants'])
        for names in rounds.values():
            assert len(names) == len(set(names))

    def test_earlier_enrolled_listed_first(self):
        for f in generate_round_robin_fixtures(participants(7)):
            a, b = f['participants']
            assert a.enrollment < b.enrollment

    def test_too_few_participants(self):
        assert generate_round_robin_fixtures(participants(1)) == []
        assert generate_round_robin_fixtures([]) == []
