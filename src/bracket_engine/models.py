"""
Data model for tournaments, bracket nodes and round-robin fixtures.

Everything here serializes to plain dicts (see to_dict / from_dict) so a
store can keep a tournament as one YAML or JSON document.
"""
from typing import Dict, List, Optional

KNOCKOUT = 'KNOCKOUT'
ROUND_ROBIN = 'ROUND_ROBIN'
FORMATS = (KNOCKOUT, ROUND_ROBIN)

UPCOMING = 'UPCOMING'
IN_PROGRESS = 'IN_PROGRESS'
COMPLETED = 'COMPLETED'
STATUSES = (UPCOMING, IN_PROGRESS, COMPLETED)


def knockout_match_id(round_index: int, position: int) -> str:
    """Match code for a bracket node, e.g. round 0 position 2 -> 'R1-M3'."""
    return f"R{round_index + 1}-M{position + 1}"


def fixture_match_id(number: int) -> str:
    return f"RR-{number}"


class Participant:
    def __init__(self, participant_id, name, seed=None, enrollment=0):
        self.participant_id = str(participant_id)
        self.name = name
        self.seed = seed
        self.enrollment = enrollment

    def to_dict(self):
        return {
            'id': self.participant_id,
            'name': self.name,
            'seed': self.seed,
            'enrollment': self.enrollment,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data['id'], data.get('name'), data.get('seed'), data.get('enrollment', 0))

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Participant(id={self.participant_id}, name={self.name}, seed={self.seed})"


class Slot:
    """One side of a bracket node.

    A slot is either a concrete participant, a permanent bye, or a
    placeholder waiting for the winner of an earlier node. When that winner
    is known the placeholder turns into a participant slot; `source` keeps
    the feeding match code either way.
    """
    PLAYER = 'player'
    BYE = 'bye'
    WINNER_OF = 'winner_of'

    def __init__(self, kind, participant_id=None, source=None):
        self.kind = kind
        self.participant_id = participant_id
        self.source = source

    @classmethod
    def player(cls, participant_id, source=None):
        return cls(cls.PLAYER, participant_id=participant_id, source=source)

    @classmethod
    def bye(cls, source=None):
        return cls(cls.BYE, source=source)

    @classmethod
    def winner_of(cls, match_id):
        return cls(cls.WINNER_OF, source=match_id)

    @property
    def is_concrete(self) -> bool:
        return self.kind == self.PLAYER

    @property
    def is_bye(self) -> bool:
        return self.kind == self.BYE

    @property
    def is_placeholder(self) -> bool:
        return self.kind == self.WINNER_OF

    def to_dict(self):
        return {'kind': self.kind, 'participant_id': self.participant_id, 'source': self.source}

    @classmethod
    def from_dict(cls, data):
        return cls(data['kind'], data.get('participant_id'), data.get('source'))

    def __repr__(self):
        if self.is_concrete:
            return f"Slot(player={self.participant_id})"
        if self.is_bye:
            return "Slot(BYE)"
        return f"Slot(winner_of={self.source})"


class BracketNode:
    """A knockout match at (round, position).

    `next_match` / `next_slot` point at the downstream node and the side
    (1 or 2) the winner moves into. The final has no downstream node.
    """

    def __init__(self, match_id, round_index, position, slot1, slot2,
                 next_match=None, next_slot=None, score1=None, score2=None,
                 winner=None, resolved=False, auto_advanced=False,
                 scheduled_date=None, court=None):
        self.match_id = match_id
        self.round = round_index
        self.position = position
        self.slot1 = slot1
        self.slot2 = slot2
        self.next_match = next_match
        self.next_slot = next_slot
        self.score1 = score1
        self.score2 = score2
        self.winner = winner
        self.resolved = resolved
        self.auto_advanced = auto_advanced
        self.scheduled_date = scheduled_date
        self.court = court

    @property
    def is_resolved(self) -> bool:
        return self.resolved

    @property
    def is_ready(self) -> bool:
        return not self.resolved and self.slot1.is_concrete and self.slot2.is_concrete

    @property
    def is_final(self) -> bool:
        return self.next_match is None

    def set_slot(self, side: int, slot: Slot):
        if side == 1:
            self.slot1 = slot
        else:
            self.slot2 = slot

    def to_dict(self):
        return {
            'match_id': self.match_id,
            'round': self.round,
            'position': self.position,
            'slot1': self.slot1.to_dict(),
            'slot2': self.slot2.to_dict(),
            'next_match': self.next_match,
            'next_slot': self.next_slot,
            'score1': self.score1,
            'score2': self.score2,
            'winner': self.winner,
            'resolved': self.resolved,
            'auto_advanced': self.auto_advanced,
            'scheduled_date': self.scheduled_date,
            'court': self.court,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            data['match_id'], data['round'], data['position'],
            Slot.from_dict(data['slot1']), Slot.from_dict(data['slot2']),
            next_match=data.get('next_match'),
            next_slot=data.get('next_slot'),
            score1=data.get('score1'),
            score2=data.get('score2'),
            winner=data.get('winner'),
            resolved=data.get('resolved', False),
            auto_advanced=data.get('auto_advanced', False),
            scheduled_date=data.get('scheduled_date'),
            court=data.get('court'),
        )

    def __repr__(self):
        return (f"BracketNode({self.match_id}, {self.slot1!r} vs {self.slot2!r}, "
                f"winner={self.winner})")


class RoundRobinFixture:
    def __init__(self, match_id, round_index, participant1, participant2,
                 score1=None, score2=None, scheduled_date=None, court=None):
        self.match_id = match_id
        self.round = round_index
        self.participant1 = participant1
        self.participant2 = participant2
        self.score1 = score1
        self.score2 = score2
        self.scheduled_date = scheduled_date
        self.court = court

    @property
    def is_resolved(self) -> bool:
        return self.score1 is not None and self.score2 is not None

    @property
    def is_ready(self) -> bool:
        return not self.is_resolved

    @property
    def winner(self) -> Optional[str]:
        if not self.is_resolved or self.score1 == self.score2:
            return None
        return self.participant1 if self.score1 > self.score2 else self.participant2

    def involves(self, participant_id) -> bool:
        return participant_id in (self.participant1, self.participant2)

    def pair(self) -> frozenset:
        return frozenset((self.participant1, self.participant2))

    def to_dict(self):
        return {
            'match_id': self.match_id,
            'round': self.round,
            'participant1': self.participant1,
            'participant2': self.participant2,
            'score1': self.score1,
            'score2': self.score2,
            'scheduled_date': self.scheduled_date,
            'court': self.court,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            data['match_id'], data.get('round', 0),
            data['participant1'], data['participant2'],
            score1=data.get('score1'),
            score2=data.get('score2'),
            scheduled_date=data.get('scheduled_date'),
            court=data.get('court'),
        )

    def __repr__(self):
        return (f"RoundRobinFixture({self.match_id}, {self.participant1} vs {self.participant2}, "
                f"score={self.score1}-{self.score2})")


class KnockoutDraw:
    """Arena of bracket nodes, ordered by (round, position)."""
    format = KNOCKOUT

    def __init__(self, bracket_size: int, nodes: List[BracketNode]):
        self.bracket_size = bracket_size
        self.nodes = sorted(nodes, key=lambda n: (n.round, n.position))
        self._index = {node.match_id: node for node in self.nodes}

    @property
    def total_rounds(self) -> int:
        return max((n.round for n in self.nodes), default=-1) + 1

    @property
    def final(self) -> Optional[BracketNode]:
        finals = [n for n in self.nodes if n.is_final]
        return finals[0] if finals else None

    def get(self, match_id) -> Optional[BracketNode]:
        return self._index.get(match_id)

    def node_at(self, round_index: int, position: int) -> Optional[BracketNode]:
        return self._index.get(knockout_match_id(round_index, position))

    def round_nodes(self, round_index: int) -> List[BracketNode]:
        return [n for n in self.nodes if n.round == round_index]

    def matches(self) -> List[BracketNode]:
        return list(self.nodes)

    def ready_match_ids(self) -> List[str]:
        return [n.match_id for n in self.nodes if n.is_ready]

    def has_results(self) -> bool:
        return any(n.score1 is not None for n in self.nodes)

    def to_dict(self):
        return {
            'format': self.format,
            'bracket_size': self.bracket_size,
            'nodes': [n.to_dict() for n in self.nodes],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data['bracket_size'], [BracketNode.from_dict(n) for n in data.get('nodes', [])])


class RoundRobinDraw:
    format = ROUND_ROBIN

    def __init__(self, fixtures: List[RoundRobinFixture]):
        self.fixtures = list(fixtures)
        self._index = {f.match_id: f for f in self.fixtures}

    @property
    def total_rounds(self) -> int:
        return max((f.round for f in self.fixtures), default=-1) + 1

    def get(self, match_id) -> Optional[RoundRobinFixture]:
        return self._index.get(match_id)

    def matches(self) -> List[RoundRobinFixture]:
        return list(self.fixtures)

    def ready_match_ids(self) -> List[str]:
        return [f.match_id for f in self.fixtures if f.is_ready]

    def has_results(self) -> bool:
        return any(f.is_resolved for f in self.fixtures)

    def all_resolved(self) -> bool:
        return all(f.is_resolved for f in self.fixtures)

    def to_dict(self):
        return {
            'format': self.format,
            'fixtures': [f.to_dict() for f in self.fixtures],
        }

    @classmethod
    def from_dict(cls, data):
        return cls([RoundRobinFixture.from_dict(f) for f in data.get('fixtures', [])])


_DRAW_TYPES = {KNOCKOUT: KnockoutDraw, ROUND_ROBIN: RoundRobinDraw}


def draw_from_dict(data):
    if not data:
        return None
    return _DRAW_TYPES[data['format']].from_dict(data)


class Tournament:
    def __init__(self, tournament_id, name, format, status=UPCOMING,
                 participants=None, draw=None, version=0, created_at=None):
        self.tournament_id = str(tournament_id)
        self.name = name
        self.format = format
        self.status = status
        self.participants = participants if participants else []
        self.draw = draw
        self.version = version
        self.created_at = created_at

    @property
    def is_built(self) -> bool:
        return self.draw is not None

    def participant(self, participant_id) -> Optional[Participant]:
        for p in self.participants:
            if p.participant_id == participant_id:
                return p
        return None

    def participant_names(self) -> Dict[str, str]:
        return {p.participant_id: p.name for p in self.participants}

    def get_match(self, match_id):
        if self.draw is None:
            return None
        return self.draw.get(match_id)

    def has_results(self) -> bool:
        return self.draw is not None and self.draw.has_results()

    def to_dict(self):
        return {
            'id': self.tournament_id,
            'name': self.name,
            'format': self.format,
            'status': self.status,
            'version': self.version,
            'created_at': self.created_at,
            'participants': [p.to_dict() for p in self.participants],
            'draw': self.draw.to_dict() if self.draw else None,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            data['id'], data.get('name'), data['format'],
            status=data.get('status', UPCOMING),
            participants=[Participant.from_dict(p) for p in data.get('participants', [])],
            draw=draw_from_dict(data.get('draw')),
            version=data.get('version', 0),
            created_at=data.get('created_at'),
        )

    def summary(self):
        return {
            'id': self.tournament_id,
            'name': self.name,
            'format': self.format,
            'status': self.status,
            'participants': len(self.participants),
            'built': self.is_built,
            'version': self.version,
        }

    def __repr__(self):
        return f"Tournament(id={self.tournament_id}, format={self.format}, status={self.status})"
