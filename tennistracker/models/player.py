"""
Player data models — Sides of the net and point-level statistics.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel


class PlayerSide(str, Enum):
    PLAYER1 = "player1"
    PLAYER2 = "player2"

    @property
    def opponent(self) -> "PlayerSide":
        return PlayerSide.PLAYER2 if self is PlayerSide.PLAYER1 else PlayerSide.PLAYER1


def _pct(num: int, den: int) -> Optional[float]:
    if den <= 0:
        return None
    return 100.0 * num / den


class PlayerStatistics(BaseModel):
    """
    Counters for one player over one scope (the whole match or a single set).
    Percentages are derived and return None when nothing has been played.
    """

    # ── Serve attempts ───────────────────────────────────
    first_serves_attempted: int = 0
    first_serves_in: int = 0
    second_serves_attempted: int = 0
    second_serves_in: int = 0

    # ── Serve results ────────────────────────────────────
    aces_first: int = 0
    aces_second: int = 0
    service_winners_first: int = 0
    service_winners_second: int = 0
    double_faults: int = 0
    points_won_on_first_serve: int = 0
    points_won_on_second_serve: int = 0

    # ── Return ───────────────────────────────────────────
    return_points_won_vs_first: int = 0
    return_points_won_vs_second: int = 0
    return_winners: int = 0
    return_unforced_errors: int = 0
    return_forced_errors: int = 0

    # ── Rally ────────────────────────────────────────────
    rally_winners: int = 0
    unforced_errors: int = 0
    forced_errors_drawn: int = 0

    # ── Net ──────────────────────────────────────────────
    net_points_won: int = 0
    net_points_total: int = 0

    # ── Pressure ─────────────────────────────────────────
    break_points_won: int = 0
    break_points_total: int = 0

    # ── Totals ───────────────────────────────────────────
    points_won: int = 0
    points_played: int = 0

    def increment(self, *counters: str) -> None:
        for name in counters:
            setattr(self, name, getattr(self, name) + 1)

    @classmethod
    def total(cls, records: Iterable["PlayerStatistics"]) -> "PlayerStatistics":
        """Sum a sequence of records counter by counter."""
        combined = cls()
        for record in records:
            for name in cls.model_fields:
                setattr(combined, name, getattr(combined, name) + getattr(record, name))
        return combined

    @property
    def aces(self) -> int:
        return self.aces_first + self.aces_second

    @property
    def first_serve_pct(self) -> Optional[float]:
        return _pct(self.first_serves_in, self.first_serves_attempted)

    @property
    def second_serve_pct(self) -> Optional[float]:
        return _pct(self.second_serves_in, self.second_serves_attempted)

    @property
    def first_serve_points_won_pct(self) -> Optional[float]:
        return _pct(self.points_won_on_first_serve, self.first_serves_in)

    @property
    def second_serve_points_won_pct(self) -> Optional[float]:
        return _pct(self.points_won_on_second_serve, self.second_serves_in)

    @property
    def net_points_won_pct(self) -> Optional[float]:
        return _pct(self.net_points_won, self.net_points_total)

    @property
    def break_point_conversion_pct(self) -> Optional[float]:
        return _pct(self.break_points_won, self.break_points_total)

    @property
    def points_won_pct(self) -> Optional[float]:
        return _pct(self.points_won, self.points_played)


class StatsPair(BaseModel):
    """Both players' statistics for the same scope."""
    player1_name: str
    player2_name: str
    player1: PlayerStatistics
    player2: PlayerStatistics
    set_index: Optional[int] = None  # None = whole match

    def for_side(self, side: PlayerSide) -> PlayerStatistics:
        return self.player1 if side is PlayerSide.PLAYER1 else self.player2
