"""Party lifecycle: lobby -> ready -> starting -> running -> finished.

Transitions are driven by readiness changes, an explicit start command and
round timer expiry. Side effects of a transition live in on-enter hooks so
the lifecycle can be exercised without a socket server.
"""
import logging
from typing import Callable, Optional

from typerace.models import Party, PartyState
from .ranking import finalize_ranking, reset_round_state


class PartyStateMachine:

    def __init__(self, challenge: Callable[[], str],
                 schedule_round: Callable[[str, int], None],
                 round_duration_ms: int = 30000,
                 allow_forced_start: bool = True,
                 logger: Optional[logging.Logger] = None):
        self.challenge = challenge
        self.schedule_round = schedule_round
        self.round_duration_ms = round_duration_ms
        self.allow_forced_start = allow_forced_start
        self.logger = logger or logging.getLogger(__name__)
        self._on_enter = {
            PartyState.READY: self._enter_ready,
            PartyState.STARTING: self._enter_starting,
            PartyState.RUNNING: self._enter_running,
            PartyState.FINISHED: self._enter_finished,
        }

    def evaluate_readiness(self, party: Party) -> bool:
        """Move between lobby and ready according to the players' flags.

        A round in flight (starting/running) is never interrupted. Flags set
        meanwhile are recorded but discarded when the round finishes, so the
        next round needs a fresh readiness cycle. Returns True if the state
        changed.
        """
        if party.state in (PartyState.STARTING, PartyState.RUNNING):
            return False
        target = PartyState.READY if party.all_ready() else PartyState.LOBBY
        if target == party.state:
            return False
        self._enter(party, target)
        return True

    def membership_changed(self, party: Party) -> bool:
        """Re-check readiness after a join or leave, but only in the lobby/ready phase."""
        if party.state not in (PartyState.LOBBY, PartyState.READY):
            return False
        return self.evaluate_readiness(party)

    def start(self, party: Party) -> bool:
        if party.state != PartyState.READY and not self.allow_forced_start:
            self.logger.info(f"[drop] room={party.name} start-game rejected in state={party.state}")
            return False
        self._enter(party, PartyState.STARTING)
        return True

    def expire_round(self, party: Party) -> bool:
        if party.state != PartyState.RUNNING:
            self.logger.info(f"[timer-abort] room={party.name} state={party.state} is not running")
            return False
        self._enter(party, PartyState.FINISHED)
        return True

    def _enter(self, party: Party, state: str) -> None:
        previous = party.state
        party.state = state
        self.logger.info(f"[state] room={party.name} {previous} -> {state}")
        hook = self._on_enter.get(state)
        if hook:
            hook(party, previous)

    def _prepare_round(self, party: Party) -> None:
        reset_round_state(party.players)
        party.target_string = self.challenge()
        party.timer_ms = self.round_duration_ms

    def _enter_ready(self, party: Party, previous: str) -> None:
        self._prepare_round(party)

    def _enter_starting(self, party: Party, previous: str) -> None:
        # A forced start skipped the ready preparation
        if previous != PartyState.READY:
            self._prepare_round(party)
        self._enter(party, PartyState.RUNNING)

    def _enter_running(self, party: Party, previous: str) -> None:
        self.schedule_round(party.name, self.round_duration_ms)

    def _enter_finished(self, party: Party, previous: str) -> None:
        finalize_ranking(party.players)
        for player in party.players:
            player.is_ready = False
