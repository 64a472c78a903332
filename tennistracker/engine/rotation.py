"""
Tiebreak serve rotation — the 1-2-2 pattern.

The starting server serves one point, then each side serves two in turn:
S, O, O, S, S, O, O, S, ... Ends change after every six points.
"""

from __future__ import annotations

from tennistracker.models.match import MatchState
from tennistracker.models.player import PlayerSide

CHANGE_ENDS_EVERY = 6


def tiebreak_server(start: PlayerSide, points_played: int) -> PlayerSide:
    """Server of the next tiebreak point given how many have been played."""
    if points_played < 0:
        raise ValueError(f"points_played must be >= 0, got {points_played}")
    if points_played % 4 in (0, 3):
        return start
    return start.opponent


def is_change_of_ends(points_played: int) -> bool:
    return points_played > 0 and points_played % CHANGE_ENDS_EVERY == 0


def sync_tiebreak_server(match: MatchState) -> PlayerSide:
    """Point match.server at the legal tiebreak server. No-op outside tiebreaks."""
    if match.in_tiebreak and match.tiebreak_start_server is not None:
        match.server = tiebreak_server(match.tiebreak_start_server, match.tiebreak_points_played)
    return match.server
