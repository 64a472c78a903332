"""
Match data models — Formats, set records and the full match state.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from tennistracker.models.events import PointRecord, PointStage
from tennistracker.models.player import PlayerSide, PlayerStatistics

logger = logging.getLogger(__name__)


# ── Enums ────────────────────────────────────────────────────────────────────

class DecidingPolicy(str, Enum):
    REGULAR_THIRD_SET = "regular_third_set"
    MATCH_TIEBREAK_10 = "match_tiebreak_10"


class FormatChoice(str, Enum):
    BEST_OF_3 = "best_of_3"
    BEST_OF_3_MATCH_TIEBREAK = "best_of_3_match_tiebreak"
    SHORT_SETS_4 = "short_sets_4"


class MatchPhase(str, Enum):
    REGULAR_GAME = "regular_game"
    SET_TIEBREAK = "set_tiebreak"
    MATCH_TIEBREAK = "match_tiebreak"
    SET_COMPLETE = "set_complete"  # transient, only reported on results
    MATCH_COMPLETE = "match_complete"


class MatchStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ENDED_EARLY = "ended_early"


# ── Format ───────────────────────────────────────────────────────────────────

class MatchFormat(BaseModel):
    """Scoring parameters for one best-of-three format."""
    model_config = ConfigDict(frozen=True)

    choice: FormatChoice
    description: str = ""
    games_to_win_set: int = Field(default=6, ge=1)
    tiebreak_at_games: int = Field(default=6, ge=1, description="Games each at which a set tiebreak begins")
    set_tiebreak_target: int = Field(default=7, ge=1, description="Points to win a set tiebreak, win by 2")
    deciding_policy: DecidingPolicy = DecidingPolicy.REGULAR_THIRD_SET
    deciding_tiebreak_target: int = Field(default=10, ge=1, description="Points to win the match tiebreak")
    sets_to_win: int = 2


FORMAT_PRESETS: dict[FormatChoice, MatchFormat] = {
    FormatChoice.BEST_OF_3: MatchFormat(
        choice=FormatChoice.BEST_OF_3,
        description="Best-of-3 full sets (to 6, TB7 at 6-6)",
    ),
    FormatChoice.BEST_OF_3_MATCH_TIEBREAK: MatchFormat(
        choice=FormatChoice.BEST_OF_3_MATCH_TIEBREAK,
        description="Best-of-3 with match TB10 instead of 3rd set",
        deciding_policy=DecidingPolicy.MATCH_TIEBREAK_10,
    ),
    FormatChoice.SHORT_SETS_4: MatchFormat(
        choice=FormatChoice.SHORT_SETS_4,
        description="Best-of-3 short sets to 4 (TB7 at 4-4)",
        games_to_win_set=4,
        tiebreak_at_games=4,
    ),
}

_MENU_NUMBERS = {
    1: FormatChoice.BEST_OF_3,
    2: FormatChoice.BEST_OF_3_MATCH_TIEBREAK,
    3: FormatChoice.SHORT_SETS_4,
}


def format_for_choice(choice: Union[int, str, FormatChoice, None]) -> MatchFormat:
    """
    Resolve a menu number (1-3), preset name or FormatChoice to a MatchFormat.
    Anything unrecognized falls back to short sets.
    """
    if isinstance(choice, FormatChoice):
        return FORMAT_PRESETS[choice]
    if isinstance(choice, str):
        text = choice.strip()
        if text.isdigit():
            choice = int(text)
        else:
            try:
                return FORMAT_PRESETS[FormatChoice(text.lower())]
            except ValueError:
                pass
    if isinstance(choice, int) and not isinstance(choice, bool) and choice in _MENU_NUMBERS:
        return FORMAT_PRESETS[_MENU_NUMBERS[choice]]
    logger.warning("Unrecognized format choice %r, using short sets to 4", choice)
    return FORMAT_PRESETS[FormatChoice.SHORT_SETS_4]


# ── Core Models ──────────────────────────────────────────────────────────────

class SetRecord(BaseModel):
    """Score of one set. The decider row of a match tiebreak is synthetic."""
    games_player1: int = Field(default=0, ge=0)
    games_player2: int = Field(default=0, ge=0)
    is_complete: bool = False
    tiebreak_played: bool = False
    tiebreak_points_player1: int = Field(default=0, ge=0)
    tiebreak_points_player2: int = Field(default=0, ge=0)
    is_match_tiebreak: bool = False
    winner: Optional[PlayerSide] = None

    def games(self, side: PlayerSide) -> int:
        return getattr(self, f"games_{side.value}")

    def add_game(self, side: PlayerSide) -> None:
        name = f"games_{side.value}"
        setattr(self, name, getattr(self, name) + 1)


class Scoreboard(BaseModel):
    """Read-only snapshot of what a scoreboard shows."""
    location: str = ""
    player1_name: str
    player2_name: str
    server: PlayerSide
    sets_player1: int = 0
    sets_player2: int = 0
    games_player1: int = 0
    games_player2: int = 0
    points_player1: str = "0"
    points_player2: str = "0"
    set_number: int = 1
    phase: MatchPhase = MatchPhase.REGULAR_GAME
    status: MatchStatus = MatchStatus.IN_PROGRESS
    winner: Optional[PlayerSide] = None


class SubmissionResult(BaseModel):
    """What the controller reports back after each submitted event."""
    resolved: bool = False
    awaiting: Optional[PointStage] = None
    phase: MatchPhase
    record: Optional[PointRecord] = None
    set_completed: bool = False


POINT_LABELS = ("0", "15", "30", "40")


class MatchState(BaseModel):
    """Complete match state."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    match_format: MatchFormat = Field(default_factory=lambda: FORMAT_PRESETS[FormatChoice.BEST_OF_3])
    player1_name: str = "Player 1"
    player2_name: str = "Player 2"
    location: str = ""
    status: MatchStatus = MatchStatus.NOT_STARTED
    phase: MatchPhase = MatchPhase.REGULAR_GAME

    # ── Sets ─────────────────────────────────────────────
    sets: list[SetRecord] = Field(default_factory=list)
    set_stats_player1: list[PlayerStatistics] = Field(default_factory=list)
    set_stats_player2: list[PlayerStatistics] = Field(default_factory=list)
    current_set_index: int = 0
    sets_player1: int = 0
    sets_player2: int = 0

    # ── Current game / tiebreak ──────────────────────────
    points_player1: int = 0
    points_player2: int = 0
    tiebreak_points_player1: int = 0
    tiebreak_points_player2: int = 0
    tiebreak_start_server: Optional[PlayerSide] = None

    # ── Serve ────────────────────────────────────────────
    first_server: PlayerSide = PlayerSide.PLAYER1
    server: PlayerSide = PlayerSide.PLAYER1

    # ── Totals & log ─────────────────────────────────────
    match_stats_player1: PlayerStatistics = Field(default_factory=PlayerStatistics)
    match_stats_player2: PlayerStatistics = Field(default_factory=PlayerStatistics)
    points_log: list[PointRecord] = Field(default_factory=list)
    winner: Optional[PlayerSide] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # ── Accessors ────────────────────────────────────────

    @property
    def current_set(self) -> SetRecord:
        return self.sets[self.current_set_index]

    @property
    def in_tiebreak(self) -> bool:
        return self.phase in (MatchPhase.SET_TIEBREAK, MatchPhase.MATCH_TIEBREAK)

    @property
    def tiebreak_points_played(self) -> int:
        return self.tiebreak_points_player1 + self.tiebreak_points_player2

    @property
    def completed_sets(self) -> int:
        return sum(1 for s in self.sets if s.is_complete and not s.is_match_tiebreak)

    def name_of(self, side: PlayerSide) -> str:
        return getattr(self, f"{side.value}_name")

    def game_points(self, side: PlayerSide) -> int:
        return getattr(self, f"points_{side.value}")

    def tiebreak_points(self, side: PlayerSide) -> int:
        return getattr(self, f"tiebreak_points_{side.value}")

    def sets_won(self, side: PlayerSide) -> int:
        return getattr(self, f"sets_{side.value}")

    def match_stats(self, side: PlayerSide) -> PlayerStatistics:
        return getattr(self, f"match_stats_{side.value}")

    def set_stats(self, side: PlayerSide, set_index: Optional[int] = None) -> PlayerStatistics:
        index = self.current_set_index if set_index is None else set_index
        return getattr(self, f"set_stats_{side.value}")[index]

    def bump(self, counter: str, side: PlayerSide) -> int:
        """Increment a per-player integer field such as points_player1."""
        name = f"{counter}_{side.value}"
        value = getattr(self, name) + 1
        setattr(self, name, value)
        return value

    # ── Display ──────────────────────────────────────────

    def point_labels(self) -> tuple[str, str]:
        """Current points as shown on a scoreboard (0/15/30/40/Ad, or tiebreak counts)."""
        if self.in_tiebreak:
            return str(self.tiebreak_points_player1), str(self.tiebreak_points_player2)
        p1, p2 = self.points_player1, self.points_player2
        if p1 >= 3 and p2 >= 3:
            if p1 == p2:
                return "40", "40"
            if p1 == p2 + 1:
                return "Ad", ""
            if p2 == p1 + 1:
                return "", "Ad"
        return POINT_LABELS[min(p1, 3)], POINT_LABELS[min(p2, 3)]

    def scoreboard(self) -> Scoreboard:
        current = self.current_set if self.sets else SetRecord()
        points1, points2 = self.point_labels()
        return Scoreboard(
            location=self.location,
            player1_name=self.player1_name,
            player2_name=self.player2_name,
            server=self.server,
            sets_player1=self.sets_player1,
            sets_player2=self.sets_player2,
            games_player1=current.games_player1,
            games_player2=current.games_player2,
            points_player1=points1,
            points_player2=points2,
            set_number=self.current_set_index + 1,
            phase=self.phase,
            status=self.status,
            winner=self.winner,
        )

    @property
    def score_display(self) -> str:
        """Human-readable score string."""
        parts = []
        for s in self.sets:
            text = f"{s.games_player1}-{s.games_player2}"
            if s.tiebreak_played and s.is_complete:
                text += f" ({s.tiebreak_points_player1}-{s.tiebreak_points_player2})"
            if s.is_match_tiebreak:
                text = f"[{s.tiebreak_points_player1}-{s.tiebreak_points_player2}]"
            parts.append(text)
        if self.status == MatchStatus.IN_PROGRESS:
            points1, points2 = self.point_labels()
            label = "TB " if self.in_tiebreak else ""
            parts.append(f"{label}{points1 or '-'}:{points2 or '-'}")
        return " | ".join(parts) if parts else "0-0"
