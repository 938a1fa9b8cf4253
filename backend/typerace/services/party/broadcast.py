import json
from typing import Any, Optional

from typerace.models import Party


GAME_UPDATE = 'game-update'
JOIN_SUCCESS = 'join-room-success'
CONNECTED = 'res_conn'


class Broadcaster:
    """Publishes party snapshots to everyone subscribed to a room.

    Fire-and-forget: delivery is left to Socket.IO.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def emit(self, event: str, payload: Any, to: Optional[str] = None) -> None:
        self.socketio.emit(event, payload, to=to, namespace=self.namespace)

    def publish(self, party: Party) -> None:
        # Existing clients JSON.parse the snapshot, so it goes out as text
        self.emit(GAME_UPDATE, json.dumps(party.to_dict()), to=party.name)
