from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from typerace import socketio
from typerace.services.party import SessionManager
from typerace.services.party import messages
from typerace.services.party.broadcast import CONNECTED, JOIN_SUCCESS
import json


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _sessions() -> SessionManager:
    return current_app.extensions['party_sessions']


def handle_connect(auth=None):
    player = _sessions().connect(_get_sid())
    emit(CONNECTED, {'party_state': 'lobby', 'player': player})


def handle_disconnect(reason=None):
    _sessions().disconnect(_get_sid())


def handle_join_room(data):
    try:
        req = messages.parse_join(data)
    except messages.MalformedMessage as exc:
        current_app.logger.warning(f"[drop] join-room from {_get_sid()}: {exc}")
        return
    sid = _get_sid()
    sessions = _sessions()
    previous = sessions.room_of(sid)
    if previous and previous != req.room:
        leave_room(previous)
    # Subscribe first so the joiner receives the snapshot broadcast
    join_room(req.room)
    player = sessions.join(sid, req.room, req.name)
    if player is None:
        leave_room(req.room)
        return
    emit(JOIN_SUCCESS, json.dumps(player.to_dict()))


def handle_message(data):
    try:
        envelope = messages.parse_envelope(data)
        _sessions().handle(_get_sid(), envelope)
    except messages.MalformedMessage as exc:
        current_app.logger.warning(f"[drop] message from {_get_sid()}: {exc}")


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join-room', handle_join_room, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
