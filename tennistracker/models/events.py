"""
Event data models — The serve / return / rally taxonomy of a single point
and the immutable point log entry built from it.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tennistracker.models.player import PlayerSide


# ── Enums ────────────────────────────────────────────────────────────────────

class Role(str, Enum):
    SERVER = "server"
    RETURNER = "returner"


class ServeType(str, Enum):
    NONE = "-"
    FIRST = "1st"
    SECOND = "2nd"


class ServeOutcome(str, Enum):
    FIRST_IN = "first_in"
    FIRST_FAULT = "first_fault"
    SECOND_IN = "second_in"
    DOUBLE_FAULT = "double_fault"
    ACE_FIRST = "ace_first"
    ACE_SECOND = "ace_second"
    SERVICE_WINNER_FIRST = "service_winner_first"
    SERVICE_WINNER_SECOND = "service_winner_second"

    @property
    def serve_type(self) -> ServeType:
        if self in (ServeOutcome.FIRST_IN, ServeOutcome.FIRST_FAULT,
                    ServeOutcome.ACE_FIRST, ServeOutcome.SERVICE_WINNER_FIRST):
            return ServeType.FIRST
        return ServeType.SECOND

    @property
    def is_in(self) -> bool:
        return self not in (ServeOutcome.FIRST_FAULT, ServeOutcome.DOUBLE_FAULT)

    @property
    def winning_role(self) -> Optional[Role]:
        """Who wins the point outright on this serve, or None if play goes on."""
        if self is ServeOutcome.DOUBLE_FAULT:
            return Role.RETURNER
        if self in (ServeOutcome.ACE_FIRST, ServeOutcome.ACE_SECOND,
                    ServeOutcome.SERVICE_WINNER_FIRST, ServeOutcome.SERVICE_WINNER_SECOND):
            return Role.SERVER
        return None


SECOND_SERVE_OUTCOMES = frozenset({ServeOutcome.SECOND_IN, ServeOutcome.DOUBLE_FAULT})


class ReturnOutcome(str, Enum):
    RETURN_WINNER = "return_winner"
    RETURN_UNFORCED_ERROR = "return_unforced_error"
    RETURN_FORCED_ERROR = "return_forced_error"
    RETURN_IN = "return_in"

    @property
    def winning_role(self) -> Optional[Role]:
        if self is ReturnOutcome.RETURN_WINNER:
            return Role.RETURNER
        if self is ReturnOutcome.RETURN_IN:
            return None
        return Role.SERVER


class RallyOutcome(str, Enum):
    SERVER_WINNER = "server_winner"
    RETURNER_WINNER = "returner_winner"
    SERVER_UNFORCED_ERROR = "server_unforced_error"
    RETURNER_UNFORCED_ERROR = "returner_unforced_error"
    SERVER_FORCED_ERROR_DRAWN = "server_forced_error_drawn"      # server erred, drawn by returner
    RETURNER_FORCED_ERROR_DRAWN = "returner_forced_error_drawn"  # returner erred, drawn by server

    @property
    def winning_role(self) -> Role:
        if self in (RallyOutcome.SERVER_WINNER, RallyOutcome.RETURNER_UNFORCED_ERROR,
                    RallyOutcome.RETURNER_FORCED_ERROR_DRAWN):
            return Role.SERVER
        return Role.RETURNER


class PointStage(str, Enum):
    """What the controller expects next."""
    SERVE = "serve"
    SECOND_SERVE = "second_serve"
    RETURN = "return"
    RALLY = "rally"
    MATCH_TIEBREAK_SERVER = "match_tiebreak_server"


# ── Point models ─────────────────────────────────────────────────────────────

class PointEvents(BaseModel):
    """Structured event chain of one point, in submission order."""
    serves: list[ServeOutcome] = Field(default_factory=list)
    return_outcome: Optional[ReturnOutcome] = None
    rally_outcome: Optional[RallyOutcome] = None
    net_player: Optional[PlayerSide] = None

    @property
    def serve_type(self) -> ServeType:
        if not self.serves:
            return ServeType.NONE
        return self.serves[-1].serve_type

    @property
    def terminal(self) -> Optional[ServeOutcome | ReturnOutcome | RallyOutcome]:
        """The outcome that decided the point, if it has been decided."""
        if self.rally_outcome is not None:
            return self.rally_outcome
        if self.return_outcome is not None and self.return_outcome.winning_role is not None:
            return self.return_outcome
        if self.serves and self.serves[-1].winning_role is not None:
            return self.serves[-1]
        return None

    @property
    def winning_role(self) -> Optional[Role]:
        terminal = self.terminal
        return terminal.winning_role if terminal is not None else None


class PointRecord(BaseModel):
    """Immutable log entry for one resolved point."""
    model_config = ConfigDict(frozen=True)

    set_index: int
    game_index: int
    in_tiebreak: bool = False
    point_number: int = Field(ge=1, description="1-based, within the game or tiebreak")
    server: PlayerSide
    serve_type: ServeType = ServeType.NONE
    events: PointEvents
    winner: PlayerSide
    was_break_point: bool = False
    was_game_point: bool = False
    was_set_point: bool = False
    was_match_point: bool = False
