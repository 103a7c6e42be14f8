"""
Tests for round-robin standings and tiebreakers.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine import WrongFormatError, NotFoundError
from bracket_engine.models import Participant, RoundRobinFixture
from bracket_engine.standings import (
    DRAW_POINTS,
    WIN_POINTS,
    calculate_standings,
    head_to_head,
    tally,
)


def order(standings):
    return [entry['participant_id'] for entry in standings]


class TestTally:
    """Tests for the per-participant counters."""

    def test_win_and_loss(self):
        roster = [Participant('a', 'A', enrollment=0), Participant('b', 'B', enrollment=1)]
        fixtures = [RoundRobinFixture('RR-1', 0, 'a', 'b', 21, 17)]
        stats = tally(roster, fixtures)

        assert stats['a']['wins'] == 1
        assert stats['a']['points'] == WIN_POINTS
        assert stats['a']['point_diff'] == 4
        assert stats['b']['losses'] == 1
        assert stats['b']['points'] == 0
        assert stats['b']['points_against'] == 21

    def test_unplayed_fixtures_ignored(self):
        roster = [Participant('a', 'A', enrollment=0), Participant('b', 'B', enrollment=1)]
        stats = tally(roster, [RoundRobinFixture('RR-1', 0, 'a', 'b')])
        assert stats['a']['matches_played'] == 0
        assert stats['b']['matches_played'] == 0

    def test_draw_scores_one_point(self):
        """Draws cannot be recorded, but a stored draw still counts."""
        roster = [Participant('a', 'A', enrollment=0), Participant('b', 'B', enrollment=1)]
        stats = tally(roster, [RoundRobinFixture('RR-1', 0, 'a', 'b', 15, 15)])
        assert stats['a']['draws'] == 1
        assert stats['a']['points'] == DRAW_POINTS
        assert stats['b']['points'] == DRAW_POINTS

    def test_head_to_head_skips_unplayed(self):
        fixtures = [RoundRobinFixture('RR-1', 0, 'a', 'b', 21, 10),
                    RoundRobinFixture('RR-2', 0, 'c', 'd')]
        assert head_to_head(fixtures) == {frozenset(('a', 'b')): 'a'}


class TestStandings:
    """Tests for ranking through the engine."""

    def test_zero_standings_before_any_result(self, engine, round_robin, abc_roster):
        league = round_robin(abc_roster)
        standings = engine.get_standings(league)

        assert order(standings) == ['a', 'b', 'c']
        assert [s['rank'] for s in standings] == [1, 2, 3]
        assert all(s['points'] == 0 and s['matches_played'] == 0 for s in standings)

    def test_points_rank_first(self, engine, round_robin, abc_roster, play_fixture):
        league = round_robin(abc_roster)
        play_fixture(league, 'c', 'a')
        play_fixture(league, 'c', 'b')

        standings = engine.get_standings(league)
        assert standings[0]['participant_id'] == 'c'
        assert standings[0]['points'] == 2 * WIN_POINTS
        assert standings[0]['name'] == 'Cara'

    def test_three_way_cycle_uses_point_differential(self, engine, round_robin, abc_roster,
                                                     play_fixture):
        """A beats B, B beats C, C beats A: head-to-head is skipped for three."""
        league = round_robin(abc_roster)
        play_fixture(league, 'a', 'b', 21, 15)
        play_fixture(league, 'b', 'c', 21, 10)
        play_fixture(league, 'c', 'a', 21, 19)

        standings = engine.get_standings(league)
        assert order(standings) == ['b', 'a', 'c']
        assert [s['point_diff'] for s in standings] == [5, 4, -9]
        assert all(s['points'] == WIN_POINTS for s in standings)

    def test_equal_differential_falls_back_to_enrollment(self, engine, round_robin, abc_roster,
                                                         play_fixture):
        league = round_robin(abc_roster)
        play_fixture(league, 'c', 'a', 21, 19)
        play_fixture(league, 'a', 'b', 21, 19)
        play_fixture(league, 'b', 'c', 21, 19)

        assert order(engine.get_standings(league)) == ['a', 'b', 'c']

    def test_head_to_head_breaks_two_way_tie(self, engine, round_robin, make_roster,
                                             play_fixture):
        roster = [{'id': pid, 'name': pid.upper()} for pid in ('a', 'b', 'c', 'd')]
        league = round_robin(roster)
        play_fixture(league, 'a', 'b', 21, 19)
        play_fixture(league, 'b', 'c', 21, 0)
        play_fixture(league, 'b', 'd', 21, 0)
        play_fixture(league, 'c', 'a', 21, 15)
        play_fixture(league, 'a', 'd', 21, 19)
        play_fixture(league, 'd', 'c', 21, 19)

        standings = engine.get_standings(league)
        # b has the better differential but lost to a; c likewise over d
        assert order(standings) == ['a', 'b', 'd', 'c']
        assert standings[1]['point_diff'] > standings[0]['point_diff']
        assert standings[3]['point_diff'] > standings[2]['point_diff']

    def test_ranks_are_strict(self, engine, round_robin, make_roster, play_fixture):
        league = round_robin(make_roster(6))
        play_fixture(league, 'p6', 'p1')
        play_fixture(league, 'p5', 'p2')
        ranks = [s['rank'] for s in engine.get_standings(league)]
        assert ranks == list(range(1, 7))

    def test_standings_are_recomputed(self, engine, round_robin, abc_roster, play_fixture):
        league = round_robin(abc_roster)
        first = engine.get_standings(league)
        play_fixture(league, 'c', 'b')
        second = engine.get_standings(league)

        assert first[0]['participant_id'] == 'a'
        assert second[0]['participant_id'] == 'c'

    def test_knockout_has_no_standings(self, engine, knockout, make_roster):
        cup = knockout(make_roster(4))
        with pytest.raises(WrongFormatError):
            engine.get_standings(cup)

    def test_unknown_tournament(self, engine):
        with pytest.raises(NotFoundError):
            engine.get_standings('missing')

    def test_unbuilt_round_robin(self, engine):
        engine.create_tournament('empty', 'Empty League', 'ROUND_ROBIN')
        assert engine.get_standings('empty') == []

    def test_direct_calculation(self):
        roster = [Participant(pid, pid, enrollment=i) for i, pid in enumerate('xyz')]
        fixtures = [RoundRobinFixture('RR-1', 0, 'x', 'y', 10, 21),
                    RoundRobinFixture('RR-2', 1, 'x', 'z', 10, 21),
                    RoundRobinFixture('RR-3', 2, 'y', 'z', 21, 18)]
        assert order(calculate_standings(roster, fixtures)) == ['y', 'z', 'x']
