"""
Point context — break / game / set / match point tagging.

Evaluated before a point is resolved, from the pre-point score only.
Tiebreak points are never tagged.
"""

from __future__ import annotations

from dataclasses import dataclass

from tennistracker.models.match import MatchState
from tennistracker.models.player import PlayerSide


@dataclass(frozen=True)
class PointContext:
    is_break_point: bool = False
    is_game_point: bool = False
    is_set_point: bool = False
    is_match_point: bool = False


def is_game_point_for(points: int, opponent_points: int) -> bool:
    """At 40 against less than 40, or holding advantage."""
    return points >= 3 and (opponent_points <= 2 or points == opponent_points + 1)


def is_break_point(match: MatchState) -> bool:
    if match.in_tiebreak:
        return False
    receiver = match.server.opponent
    return is_game_point_for(match.game_points(receiver), match.game_points(match.server))


def is_game_point(match: MatchState) -> bool:
    if match.in_tiebreak:
        return False
    p1 = match.game_points(PlayerSide.PLAYER1)
    p2 = match.game_points(PlayerSide.PLAYER2)
    return is_game_point_for(p1, p2) or is_game_point_for(p2, p1)


def is_set_point_for(match: MatchState, side: PlayerSide) -> bool:
    if match.in_tiebreak:
        return False
    if not is_game_point_for(match.game_points(side), match.game_points(side.opponent)):
        return False
    current = match.current_set
    games_after = current.games(side) + 1
    return (
        games_after >= match.match_format.games_to_win_set
        and games_after - current.games(side.opponent) >= 2
    )


def is_match_point_for(match: MatchState, side: PlayerSide) -> bool:
    return (
        is_set_point_for(match, side)
        and match.sets_won(side) == match.match_format.sets_to_win - 1
    )


def classify_point(match: MatchState) -> PointContext:
    if match.in_tiebreak:
        return PointContext()
    sides = (PlayerSide.PLAYER1, PlayerSide.PLAYER2)
    return PointContext(
        is_break_point=is_break_point(match),
        is_game_point=is_game_point(match),
        is_set_point=any(is_set_point_for(match, s) for s in sides),
        is_match_point=any(is_match_point_for(match, s) for s in sides),
    )
