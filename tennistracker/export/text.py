"""
Text renderings — scoreboard, statistics blocks, point log and match summary.
Read-only views over MatchState; no scoring happens here.
"""

from __future__ import annotations

from typing import Optional

from tennistracker.config import settings
from tennistracker.models.events import (
    PointEvents,
    PointRecord,
    RallyOutcome,
    ReturnOutcome,
    ServeOutcome,
)
from tennistracker.models.match import DecidingPolicy, MatchState, Scoreboard
from tennistracker.models.player import PlayerSide, PlayerStatistics

SERVE_TEXT = {
    ServeOutcome.FIRST_IN: "1st in; ",
    ServeOutcome.FIRST_FAULT: "1st fault -> ",
    ServeOutcome.SECOND_IN: "2nd in; ",
    ServeOutcome.DOUBLE_FAULT: "double fault.",
    ServeOutcome.ACE_FIRST: "Ace (1st).",
    ServeOutcome.ACE_SECOND: "Ace (2nd).",
    ServeOutcome.SERVICE_WINNER_FIRST: "Service winner (1st).",
    ServeOutcome.SERVICE_WINNER_SECOND: "Service winner (2nd).",
}

RETURN_TEXT = {
    ReturnOutcome.RETURN_WINNER: "Return winner.",
    ReturnOutcome.RETURN_UNFORCED_ERROR: "Return UE.",
    ReturnOutcome.RETURN_FORCED_ERROR: "Return FE (drawn by server).",
    ReturnOutcome.RETURN_IN: "Return in; ",
}

RALLY_TEXT = {
    RallyOutcome.SERVER_WINNER: "Rally: server winner.",
    RallyOutcome.RETURNER_WINNER: "Rally: returner winner.",
    RallyOutcome.SERVER_UNFORCED_ERROR: "Rally: server UE.",
    RallyOutcome.RETURNER_UNFORCED_ERROR: "Rally: returner UE.",
    RallyOutcome.SERVER_FORCED_ERROR_DRAWN: "Rally: server FE (drawn by returner).",
    RallyOutcome.RETURNER_FORCED_ERROR_DRAWN: "Rally: returner FE (drawn by server).",
}

LOG_HEADER = "# | Set | Game | TB | Server | Serve | Winner | BP/GP/SP/MP | Event"


# ── Small helpers ────────────────────────────────────────────────────────────

def format_percent(num: int, den: int) -> str:
    if den <= 0:
        return "--"
    return f"{100.0 * num / den:.1f}%"


def format_ratio(num: int, den: int) -> str:
    return f"{num}/{den}"


def _ratio_pct(num: int, den: int) -> str:
    return f"{format_ratio(num, den)} ({format_percent(num, den)})"


def serving_dot(color: Optional[bool] = None) -> str:
    if color is None:
        color = settings.color_enabled()
    return "\033[1;32m●\033[0m" if color else "●"


def describe_events(events: PointEvents, names: Optional[dict[PlayerSide, str]] = None) -> str:
    """Human-readable event chain, e.g. '1st fault -> 2nd in; Return in; Rally: server UE.'"""
    text = "".join(SERVE_TEXT[s] for s in events.serves)
    if events.return_outcome is not None:
        text += RETURN_TEXT[events.return_outcome]
    if events.rally_outcome is not None:
        text += RALLY_TEXT[events.rally_outcome]
    if events.net_player is not None:
        who = names[events.net_player] if names else events.net_player.value
        text += f" [net: {who}]"
    return text


def pressure_flags(record: PointRecord) -> str:
    flags = []
    if record.was_break_point:
        flags.append("BP")
    if record.was_game_point:
        flags.append("GP")
    if record.was_set_point:
        flags.append("SP")
    if record.was_match_point:
        flags.append("MP")
    return " ".join(flags)


def _names(match: MatchState) -> dict[PlayerSide, str]:
    return {PlayerSide.PLAYER1: match.player1_name, PlayerSide.PLAYER2: match.player2_name}


# ── Scoreboard ───────────────────────────────────────────────────────────────

def render_scoreboard(board: Scoreboard, color: Optional[bool] = None) -> str:
    dot = serving_dot(color)
    name1 = f"{dot} {board.player1_name}" if board.server is PlayerSide.PLAYER1 else f"  {board.player1_name}"
    name2 = f"{dot} {board.player2_name}" if board.server is PlayerSide.PLAYER2 else f"  {board.player2_name}"
    rule = "+" + "-" * 50 + "+"
    lines = [
        rule,
        f"| Location: {board.location:<39}|",
        f"| {name1:<22}| {name2:<25}|",
        f"| Sets:           {board.sets_player1:>10}  | {board.sets_player2:>10}         |",
        f"| Games:          {board.games_player1:>10}  | {board.games_player2:>10}         |",
        f"| Points:         {board.points_player1:>10}  | {board.points_player2:>10}         |",
        rule,
    ]
    return "\n".join(lines)


# ── Statistics ───────────────────────────────────────────────────────────────

def render_player_stats(s: PlayerStatistics, title: str) -> str:
    lines = [
        title,
        "-" * 40,
        "Serving:",
        f"  First serve:        {_ratio_pct(s.first_serves_in, s.first_serves_attempted)}",
        f"  1st pts won:        {_ratio_pct(s.points_won_on_first_serve, s.first_serves_in)}",
        f"  Second serve:       {_ratio_pct(s.second_serves_in, s.second_serves_attempted)}",
        f"  2nd pts won:        {_ratio_pct(s.points_won_on_second_serve, s.second_serves_in)}",
        f"  Aces (1st/2nd):     {s.aces_first} / {s.aces_second}",
        f"  Service winners:    {s.service_winners_first} / {s.service_winners_second}",
        f"  Double faults:      {s.double_faults}",
        "Returning:",
        f"  vs 1st won:         {s.return_points_won_vs_first}",
        f"  vs 2nd won:         {s.return_points_won_vs_second}",
        f"  Return W/UE/FE:     {s.return_winners} / {s.return_unforced_errors} / {s.return_forced_errors}",
        "Rallies:",
        f"  Winners:            {s.rally_winners}",
        f"  Unforced errors:    {s.unforced_errors}",
        f"  Forced drawn:       {s.forced_errors_drawn}",
        "Net play:",
        f"  Net points:         {_ratio_pct(s.net_points_won, s.net_points_total)}",
        "Pressure:",
        f"  Break points:       {format_ratio(s.break_points_won, s.break_points_total)}",
        "Overall:",
        f"  Total points:       {_ratio_pct(s.points_won, s.points_played)}",
    ]
    return "\n".join(lines)


def _comparison_rows(s: PlayerStatistics) -> list[str]:
    return [
        f"First serve:  {_ratio_pct(s.first_serves_in, s.first_serves_attempted)}",
        f"1st pts won:  {_ratio_pct(s.points_won_on_first_serve, s.first_serves_in)}",
        f"Second srv:   {_ratio_pct(s.second_serves_in, s.second_serves_attempted)}",
        f"2nd pts won:  {_ratio_pct(s.points_won_on_second_serve, s.second_serves_in)}",
        f"Aces (1/2):   {s.aces_first} / {s.aces_second}",
        f"Srv winners:  {s.service_winners_first} / {s.service_winners_second}",
        f"Double faults: {s.double_faults}",
        f"Return vs1st: {s.return_points_won_vs_first}",
        f"Return vs2nd: {s.return_points_won_vs_second}",
        f"Return W/UE/FE: {s.return_winners}/{s.return_unforced_errors}/{s.return_forced_errors}",
        f"Rally winners:{s.rally_winners}",
        f"Unforced err: {s.unforced_errors}",
        f"Forced drawn: {s.forced_errors_drawn}",
        f"Net:          {_ratio_pct(s.net_points_won, s.net_points_total)}",
        f"Break points: {format_ratio(s.break_points_won, s.break_points_total)}",
        f"Total points: {_ratio_pct(s.points_won, s.points_played)}",
    ]


def render_side_by_side(a: PlayerStatistics, b: PlayerStatistics, name_a: str, name_b: str, width: int = 32) -> str:
    lines = [f"{name_a:<{width}}   {name_b:<{width}}", f"{'-' * 32:<{width}}   {'-' * 32:<{width}}"]
    for left, right in zip(_comparison_rows(a), _comparison_rows(b)):
        lines.append(f"{left:<{width}}   {right:<{width}}")
    return "\n".join(lines)


# ── Point log ────────────────────────────────────────────────────────────────

def render_point_log(match: MatchState) -> str:
    names = _names(match)
    lines = [LOG_HEADER]
    for i, e in enumerate(match.points_log, start=1):
        lines.append(
            f"{i} | {e.set_index + 1} | {e.game_index + 1} | {'Y' if e.in_tiebreak else 'N'} | "
            f"{names[e.server]} | {e.serve_type.value} | {names[e.winner]} | "
            f"{pressure_flags(e)} | {describe_events(e.events, names)}"
        )
    return "\n".join(lines)


# ── Summaries ────────────────────────────────────────────────────────────────

def render_set_scores(match: MatchState) -> str:
    lines = []
    for i, s in enumerate(match.sets, start=1):
        line = f"  Set {i}: {s.games_player1}-{s.games_player2}"
        if s.tiebreak_played and s.is_complete:
            line += f" (TB {s.tiebreak_points_player1}-{s.tiebreak_points_player2})"
        lines.append(line)
    return "\n".join(lines)


def render_final_summary(match: MatchState) -> str:
    lines = []
    if match.winner is not None:
        lines.append(f"Match finished! Winner: {match.name_of(match.winner)}")
    else:
        lines.append("Match not finished.")
    lines.append(
        f"Final sets won: {match.player1_name} {match.sets_player1} - "
        f"{match.player2_name} {match.sets_player2}"
    )
    lines.append("Final set scores:")
    lines.append(render_set_scores(match))
    return "\n".join(lines)


def describe_format(match: MatchState) -> str:
    fmt = match.match_format
    text = (
        f"Best-of-3; sets to {fmt.games_to_win_set} "
        f"(TB{fmt.set_tiebreak_target} at {fmt.tiebreak_at_games}-{fmt.tiebreak_at_games})"
    )
    if fmt.deciding_policy == DecidingPolicy.MATCH_TIEBREAK_10:
        text += f"; deciding TB{fmt.deciding_tiebreak_target}"
    return text


def render_match_summary(match: MatchState) -> str:
    """Full text report: format, set scores, totals, per-set stats and point log."""
    parts = [
        "Match Summary\n=============",
        f"Players: {match.player1_name} vs {match.player2_name}",
        f"Location: {match.location}",
        f"Format: {describe_format(match)}",
        "",
        "Final Set Scores:",
        render_set_scores(match),
        "",
        render_player_stats(match.match_stats_player1, f"Player: {match.player1_name} (Match Totals)"),
        "",
        render_player_stats(match.match_stats_player2, f"Player: {match.player2_name} (Match Totals)"),
        "",
        "Per-set stats\n-------------",
    ]
    for i in range(len(match.sets)):
        parts.append(f"Set {i + 1}:")
        parts.append(render_player_stats(match.set_stats(PlayerSide.PLAYER1, i), f"  {match.player1_name}"))
        parts.append(render_player_stats(match.set_stats(PlayerSide.PLAYER2, i), f"  {match.player2_name}"))
    parts += ["", "Point-by-point log\n-------------------", render_point_log(match)]
    return "\n".join(parts) + "\n"
