from typerace.models import Party, PartyState, Player
from typerace.services.party.state_machine import PartyStateMachine


def _machine(scheduled, **kwargs):
    return PartyStateMachine(
        challenge=lambda: 'alpha beta gamma',
        schedule_round=lambda room, ms: scheduled.append((room, ms)),
        round_duration_ms=5000,
        **kwargs
    )


def _party(*names, ready=False):
    party = Party(name='R')
    for n in names:
        party.players.append(Player(conn_id=n, room='R', name=n, is_ready=ready))
    return party


def test_all_ready_enters_ready_with_challenge():
    scheduled = []
    machine = _machine(scheduled)
    party = _party('a', 'b', ready=True)
    party.players[0].progress = 55
    party.players[0].place = 1

    assert machine.evaluate_readiness(party)
    assert party.state == PartyState.READY
    assert party.target_string == 'alpha beta gamma'
    assert party.timer_ms == 5000
    assert party.players[0].progress == 0
    assert party.players[0].place is None
    assert scheduled == []


def test_one_not_ready_reverts_to_lobby():
    machine = _machine([])
    party = _party('a', 'b', ready=True)
    machine.evaluate_readiness(party)
    party.players[1].is_ready = False
    assert machine.evaluate_readiness(party)
    assert party.state == PartyState.LOBBY


def test_start_runs_and_schedules():
    scheduled = []
    machine = _machine(scheduled)
    party = _party('a', ready=True)
    machine.evaluate_readiness(party)
    assert machine.start(party)
    assert party.state == PartyState.RUNNING
    assert scheduled == [('R', 5000)]


def test_forced_start_from_lobby_prepares_round():
    scheduled = []
    machine = _machine(scheduled)
    party = _party('a', 'b')
    party.players[0].place = 2
    assert machine.start(party)
    assert party.state == PartyState.RUNNING
    assert party.target_string == 'alpha beta gamma'
    assert party.players[0].place is None


def test_strict_start_requires_ready():
    scheduled = []
    machine = _machine(scheduled, allow_forced_start=False)
    party = _party('a', 'b')
    assert not machine.start(party)
    assert party.state == PartyState.LOBBY
    assert scheduled == []


def test_readiness_does_not_interrupt_running_round():
    machine = _machine([])
    party = _party('a', 'b', ready=True)
    machine.evaluate_readiness(party)
    machine.start(party)
    party.players[0].is_ready = False
    assert not machine.evaluate_readiness(party)
    assert party.state == PartyState.RUNNING


def test_expiry_finishes_and_ranks():
    machine = _machine([])
    party = _party('a', 'b', ready=True)
    machine.evaluate_readiness(party)
    machine.start(party)
    party.players[1].progress = 80
    party.players[0].progress = 10

    assert machine.expire_round(party)
    assert party.state == PartyState.FINISHED
    assert party.players[1].place == 1
    assert party.players[0].place == 2
    assert not any(p.is_ready for p in party.players)


def test_expiry_outside_running_is_ignored():
    machine = _machine([])
    party = _party('a')
    assert not machine.expire_round(party)
    assert party.state == PartyState.LOBBY


def test_membership_change_leaves_finished_alone():
    machine = _machine([])
    party = _party('a', ready=True)
    machine.start(party)
    machine.expire_round(party)
    party.players.append(Player(conn_id='b', room='R'))
    assert not machine.membership_changed(party)
    assert party.state == PartyState.FINISHED
