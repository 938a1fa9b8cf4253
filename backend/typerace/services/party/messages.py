"""Parsing of inbound Socket.IO payloads.

Clients send either JSON text or already-decoded objects. Anything that
does not parse into the expected shape raises MalformedMessage, which the
socket handlers log and drop.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict


UPDATE_PROGRESS = 'update_user_progress'
UPDATE_READY = 'update_user_state'
START_GAME = 'start-game'


class MalformedMessage(ValueError):
    pass


@dataclass
class JoinRequest:
    room: str
    name: str


@dataclass
class Envelope:
    event: str
    room: str
    message: Dict[str, Any]


def _decode(raw) -> Dict[str, Any]:
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise MalformedMessage(f"invalid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise MalformedMessage(f"expected an object, got {type(raw).__name__}")
    return raw


def _room(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MalformedMessage('room is required')
    return value


def parse_join(raw) -> JoinRequest:
    data = _decode(raw)
    room = _room(data.get('room'))
    name = data.get('name')
    if name is None:
        name = ''
    if not isinstance(name, str):
        raise MalformedMessage('name must be a string')
    return JoinRequest(room=room, name=name.strip())


def parse_envelope(raw) -> Envelope:
    data = _decode(raw)
    event = data.get('event')
    if not isinstance(event, str) or not event:
        raise MalformedMessage('event is required')
    message = data.get('message')
    if not isinstance(message, dict):
        raise MalformedMessage('message must be an object')
    return Envelope(event=event, room=_room(message.get('room')), message=message)


def parse_progress(message: Dict[str, Any]) -> int:
    value = message.get('progress')
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or value is None:
        raise MalformedMessage('progress must be a number')
    try:
        progress = int(float(value))
    except (TypeError, ValueError, OverflowError) as exc:
        raise MalformedMessage('progress must be a number') from exc
    return max(0, min(100, progress))


def parse_ready(message: Dict[str, Any]) -> bool:
    value = message.get('is_ready')
    if not isinstance(value, bool):
        raise MalformedMessage('is_ready must be a boolean')
    return value
