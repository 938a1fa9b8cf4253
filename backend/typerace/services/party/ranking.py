from typing import Iterable, List

from typerace.models import Player


def _next_place(players: Iterable[Player]) -> int:
    return sum(1 for p in players if p.place) + 1


def record_progress(players: List[Player], player: Player, progress: int) -> bool:
    """Store a progress report and place the player if they just finished.

    The first player to reach 100 gets place 1, the next place 2, and so on.
    A player who already holds a place keeps it. Returns True when a place
    was assigned by this call.
    """
    player.progress = progress
    if progress >= 100 and not player.place:
        player.place = _next_place(players)
        return True
    return False


def finalize_ranking(players: List[Player]) -> None:
    """Place everyone who did not finish, by descending progress.

    Finishers keep their places; the rest continue the sequence after them.
    Equal progress keeps list (join) order.
    """
    place = _next_place(players)
    unfinished = [p for p in players if not p.place]
    # sorted() is stable, so ties stay in join order
    for player in sorted(unfinished, key=lambda p: p.progress or 0, reverse=True):
        player.place = place
        place += 1


def reset_round_state(players: Iterable[Player]) -> None:
    for player in players:
        player.place = None
        player.progress = 0
