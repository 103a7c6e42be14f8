"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine import KNOCKOUT, ROUND_ROBIN, MemoryStore, TournamentEngine


def _make_roster(count, seeds=None):
    seeds = seeds or {}
    return [
        {'id': f'p{i}', 'name': f'Player {i}', 'seed': seeds.get(f'p{i}')}
        for i in range(1, count + 1)
    ]


@pytest.fixture
def make_roster():
    """Factory for rosters p1..pN with display names 'Player N'."""
    return _make_roster


@pytest.fixture
def engine():
    """Engine over a fresh in-memory store."""
    return TournamentEngine(MemoryStore())


@pytest.fixture
def knockout(engine):
    """Factory: create and build a knockout tournament, return its id."""
    def _build(roster, tournament_id='cup'):
        engine.create_tournament(tournament_id, 'Club Cup', KNOCKOUT)
        engine.build_bracket(tournament_id, roster)
        return tournament_id
    return _build


@pytest.fixture
def round_robin(engine):
    """Factory: create and build a round-robin tournament, return its id."""
    def _build(roster, tournament_id='league'):
        engine.create_tournament(tournament_id, 'Club League', ROUND_ROBIN)
        engine.build_bracket(tournament_id, roster)
        return tournament_id
    return _build


@pytest.fixture
def abc_roster():
    return [
        {'id': 'a', 'name': 'Alice'},
        {'id': 'b', 'name': 'Bob'},
        {'id': 'c', 'name': 'Cara'},
    ]


def find_fixture(engine, tournament_id, first, second):
    """Match id of the round-robin fixture between two participants."""
    tournament = engine.get_tournament(tournament_id)
    for fixture in tournament.draw.fixtures:
        if fixture.pair() == frozenset((first, second)):
            return fixture.match_id
    raise AssertionError(f"No fixture between {first} and {second}")


def play(engine, tournament_id, winner, loser, winner_score=21, loser_score=15):
    """Record a round-robin result with `winner` taking the match."""
    match_id = find_fixture(engine, tournament_id, winner, loser)
    fixture = engine.get_tournament(tournament_id).get_match(match_id)
    if fixture.participant1 == winner:
        return engine.record_result(tournament_id, match_id, winner_score, loser_score)
    return engine.record_result(tournament_id, match_id, loser_score, winner_score)


@pytest.fixture
def play_fixture(engine):
    """Record a round-robin result by participant ids instead of match id."""
    def _play(tournament_id, winner, loser, winner_score=21, loser_score=15):
        return play(engine, tournament_id, winner, loser, winner_score, loser_score)
    return _play
