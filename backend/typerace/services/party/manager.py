import logging
import threading
from typing import Callable, List, Optional

from typerace.models import Party, PartyState, Player
from . import messages
from .broadcast import Broadcaster
from .challenge import ChallengeGenerator
from .ranking import record_progress
from .registry import ConnectionRegistry, PartyRegistry
from .state_machine import PartyStateMachine
from .timers import RoomTimers


class SessionManager:
    """Owns every connection, party and round timer of one server process.

    Each public operation runs read-mutate-broadcast under a single
    re-entrant lock, which the round timers share.
    """

    def __init__(self, broadcaster: Broadcaster, spawn: Callable,
                 sleep: Optional[Callable[[float], None]] = None,
                 challenge: Optional[Callable[[], str]] = None,
                 round_duration_ms: int = 30000,
                 allow_forced_start: bool = True,
                 logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.broadcaster = broadcaster
        self.lock = threading.RLock()
        self.connections = ConnectionRegistry()
        self.parties = PartyRegistry(logger=self.logger)
        timer_kwargs = {'sleep': sleep} if sleep is not None else {}
        self.timers = RoomTimers(spawn, lock=self.lock, logger=self.logger, **timer_kwargs)
        if challenge is None:
            challenge = ChallengeGenerator()
        self.machine = PartyStateMachine(
            challenge=challenge,
            schedule_round=self._schedule_round,
            round_duration_ms=round_duration_ms,
            allow_forced_start=allow_forced_start,
            logger=self.logger,
        )

    # ---- connections ----

    def connect(self, conn_id: str) -> dict:
        with self.lock:
            # A reconnect under a live id drops the old record and its room seat
            if self.connections.lookup(conn_id) is not None:
                self.leave(conn_id)
            connection = self.connections.register(conn_id)
            return connection.to_dict()

    def disconnect(self, conn_id: str) -> None:
        with self.lock:
            self.leave(conn_id)
            self.connections.unregister(conn_id)

    # ---- rooms ----

    def room_of(self, conn_id: str) -> Optional[str]:
        with self.lock:
            connection = self.connections.lookup(conn_id)
            return connection.room if connection else None

    def join(self, conn_id: str, room_id: str, name: str = '') -> Optional[Player]:
        with self.lock:
            connection = self.connections.lookup(conn_id)
            if connection is None:
                self.logger.info(f"[drop] join from unknown connection {conn_id}")
                return None
            if name:
                connection.name = name
            if connection.room and connection.room != room_id:
                self.leave(conn_id)
            party, player = self.parties.join(room_id, connection)
            self.logger.info(f"[join] room={room_id} conn={conn_id} name={connection.name} players={len(party.players)}")
            self.machine.membership_changed(party)
            self.broadcaster.publish(party)
            return player

    def leave(self, conn_id: str) -> None:
        with self.lock:
            connection = self.connections.lookup(conn_id)
            if connection is None or not connection.room:
                return
            room_id = connection.room
            connection.room = None
            party = self.parties.leave(room_id, conn_id)
            self.logger.info(f"[leave] room={room_id} conn={conn_id}")
            if party is None:
                self.timers.cancel(room_id)
                return
            self.machine.membership_changed(party)
            self.broadcaster.publish(party)

    def find_in_room(self, room_id: str, conn_id: str) -> Optional[Player]:
        with self.lock:
            return self.parties.find_in_room(room_id, conn_id)

    def get_party(self, room_id: str) -> Optional[Party]:
        with self.lock:
            return self.parties.get(room_id)

    def snapshot(self, room_id: str) -> Optional[dict]:
        with self.lock:
            party = self.parties.get(room_id)
            return party.to_dict() if party else None

    def list_parties(self) -> List[dict]:
        with self.lock:
            return [p.to_dict(include_players=False) for p in self.parties.all()]

    # ---- gameplay ----

    def update_progress(self, conn_id: str, room_id: str, progress: int) -> bool:
        with self.lock:
            party = self.parties.get(room_id)
            player = party.find_player(conn_id) if party else None
            if player is None:
                return False
            if party.state != PartyState.RUNNING:
                self.logger.debug(f"[drop] room={room_id} progress while {party.state}")
                return False
            if record_progress(party.players, player, progress):
                self.logger.info(f"[finish] room={room_id} conn={conn_id} place={player.place}")
            self.broadcaster.publish(party)
            return True

    def update_ready(self, conn_id: str, room_id: str, is_ready: bool) -> bool:
        with self.lock:
            party = self.parties.get(room_id)
            player = party.find_player(conn_id) if party else None
            if player is None:
                return False
            player.is_ready = is_ready
            self.machine.evaluate_readiness(party)
            self.broadcaster.publish(party)
            return True

    def start_game(self, conn_id: str, room_id: str) -> bool:
        with self.lock:
            party = self.parties.get(room_id)
            if party is None or party.find_player(conn_id) is None:
                return False
            if not self.machine.start(party):
                return False
            self.broadcaster.publish(party)
            return True

    def handle(self, conn_id: str, envelope: messages.Envelope) -> bool:
        """Route a parsed `message` envelope. Raises MalformedMessage on bad fields."""
        if envelope.event == messages.UPDATE_PROGRESS:
            return self.update_progress(conn_id, envelope.room, messages.parse_progress(envelope.message))
        if envelope.event == messages.UPDATE_READY:
            return self.update_ready(conn_id, envelope.room, messages.parse_ready(envelope.message))
        if envelope.event == messages.START_GAME:
            return self.start_game(conn_id, envelope.room)
        self.logger.info(f"[drop] unknown event {envelope.event!r} from {conn_id}")
        return False

    # ---- round timer ----

    def _schedule_round(self, room_id: str, delay_ms: int) -> None:
        self.timers.schedule(room_id, delay_ms, self._on_round_expired)

    def _on_round_expired(self, room_id: str) -> None:
        with self.lock:
            party = self.parties.get(room_id)
            if party is None:
                self.logger.info(f"[timer-abort] room={room_id} no longer exists")
                return
            if self.machine.expire_round(party):
                self.broadcaster.publish(party)
