from dataclasses import dataclass, field
from typing import List, Optional


DEFAULT_PLAYER_NAME = 'Anonymous'


class PartyState:
    LOBBY = 'lobby'
    READY = 'ready'
    PREPARING = 'preparing'  # reserved, never entered
    STARTING = 'starting'
    RUNNING = 'running'
    FINISHED = 'finished'


@dataclass
class Connection:
    """Identity of a live socket connection.

    Holds no gameplay fields; once the connection joins a room, the
    room's Player record is the only place those live.
    """
    conn_id: str
    name: str = DEFAULT_PLAYER_NAME
    room: Optional[str] = None

    def to_dict(self):
        # Shape matches a Player record so clients can render it before joining
        return {
            'conn_id': self.conn_id,
            'name': self.name,
            'score': 0,
            'is_ready': False,
            'room': self.room,
        }


@dataclass
class Player:
    conn_id: str
    room: str
    name: str = DEFAULT_PLAYER_NAME
    score: int = 0  # reserved, not computed from gameplay
    progress: int = 0
    place: Optional[int] = None
    is_ready: bool = False

    def to_dict(self):
        return {
            'conn_id': self.conn_id,
            'name': self.name,
            'score': self.score,
            'progress': self.progress,
            'place': self.place,
            'is_ready': self.is_ready,
            'room': self.room,
        }


@dataclass
class Party:
    name: str
    players: List[Player] = field(default_factory=list)
    state: str = PartyState.LOBBY
    target_string: Optional[str] = None
    timer_ms: Optional[int] = None

    def find_player(self, conn_id: str) -> Optional[Player]:
        for player in self.players:
            if player.conn_id == conn_id:
                return player
        return None

    def all_ready(self) -> bool:
        return bool(self.players) and all(p.is_ready for p in self.players)

    def to_dict(self, include_players=True):
        data = {
            'name': self.name,
            'state': self.state,
            'targetString': self.target_string,
            'timer': self.timer_ms,
        }
        if include_players:
            data['players'] = [p.to_dict() for p in self.players]
        else:
            data['player_count'] = len(self.players)
        return data
