import logging
from typing import Dict, List, Optional, Tuple

from typerace.models import Connection, Party, Player


class ConnectionRegistry:
    """Live connections by id, plus which room each one is in."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def register(self, conn_id: str) -> Connection:
        connection = Connection(conn_id=conn_id)
        self._connections[conn_id] = connection
        return connection

    def unregister(self, conn_id: str) -> Optional[Connection]:
        return self._connections.pop(conn_id, None)

    def lookup(self, conn_id: str) -> Optional[Connection]:
        return self._connections.get(conn_id)


class PartyRegistry:
    """Parties by room id. A party exists only while it has players."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._parties: Dict[str, Party] = {}
        self.logger = logger or logging.getLogger(__name__)

    def get(self, room_id: str) -> Optional[Party]:
        return self._parties.get(room_id)

    def all(self) -> List[Party]:
        return list(self._parties.values())

    def join(self, room_id: str, connection: Connection) -> Tuple[Party, Player]:
        """Add the connection to the room, creating the party if needed.

        Joining a room the connection is already in returns the existing
        record (with the display name refreshed).
        """
        party = self._parties.get(room_id)
        if party is None:
            party = Party(name=room_id)
            self._parties[room_id] = party
            self.logger.info(f"[party-create] room={room_id}")

        player = party.find_player(connection.conn_id)
        if player is None:
            player = Player(conn_id=connection.conn_id, room=room_id, name=connection.name)
            party.players.append(player)
        else:
            player.name = connection.name
        connection.room = room_id
        return party, player

    def leave(self, room_id: str, conn_id: str) -> Optional[Party]:
        """Remove the player from the room.

        Returns the party if it still has players, otherwise None (the party
        is deleted, or never existed).
        """
        party = self._parties.get(room_id)
        if party is None:
            return None
        party.players = [p for p in party.players if p.conn_id != conn_id]
        if not party.players:
            del self._parties[room_id]
            self.logger.info(f"[party-delete] room={room_id}")
            return None
        return party

    def find_in_room(self, room_id: str, conn_id: str) -> Optional[Player]:
        party = self._parties.get(room_id)
        return party.find_player(conn_id) if party else None
