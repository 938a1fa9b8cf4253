import logging
import threading
import time
from typing import Callable, Dict, Optional


class _TimerHandle:
    __slots__ = ('room_id', 'delay_ms', 'deadline', 'task', 'cancelled')

    def __init__(self, room_id: str, delay_ms: int, task: Callable[[str], None]):
        self.room_id = room_id
        self.delay_ms = delay_ms
        self.deadline = time.time() + delay_ms / 1000.0
        self.task = task
        self.cancelled = False


class RoomTimers:
    """One pending one-shot task per room.

    `spawn` starts a background task (socketio.start_background_task) and
    `sleep` is the matching cooperative sleep (socketio.sleep). The worker
    only runs its task if its handle is still the current one for the room,
    checked under `lock`. Pass the lock that guards room state so that
    cancel/replace and expiry cannot interleave.
    """

    def __init__(self, spawn: Callable, sleep: Callable[[float], None] = time.sleep,
                 lock=None, logger: Optional[logging.Logger] = None):
        self._spawn = spawn
        self._sleep = sleep
        self._lock = lock if lock is not None else threading.RLock()
        self._handles: Dict[str, _TimerHandle] = {}
        self.logger = logger or logging.getLogger(__name__)

    def schedule(self, room_id: str, delay_ms: int, task: Callable[[str], None]) -> None:
        with self._lock:
            self.cancel(room_id)
            handle = _TimerHandle(room_id, delay_ms, task)
            self._handles[room_id] = handle
            self.logger.info(f"[timer-set] room={room_id} duration={delay_ms}ms deadline={handle.deadline:.3f}")
        self._spawn(self._worker, handle)

    def cancel(self, room_id: str) -> bool:
        with self._lock:
            handle = self._handles.pop(room_id, None)
            if handle is None:
                return False
            handle.cancelled = True
            self.logger.info(f"[timer-cancel] room={room_id}")
            return True

    def pending(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._handles

    def deadline(self, room_id: str) -> Optional[float]:
        with self._lock:
            handle = self._handles.get(room_id)
            return handle.deadline if handle else None

    def _worker(self, handle: _TimerHandle) -> None:
        self._sleep(handle.delay_ms / 1000.0)
        with self._lock:
            if handle.cancelled or self._handles.get(handle.room_id) is not handle:
                self.logger.info(f"[timer-abort] room={handle.room_id} superseded or cancelled")
                return
            del self._handles[handle.room_id]
            self.logger.info(f"[timer-fire] room={handle.room_id}")
            try:
                handle.task(handle.room_id)
            except Exception:
                # Background task: nothing upstream to propagate to
                self.logger.exception(f"[timer-error] room={handle.room_id}")
