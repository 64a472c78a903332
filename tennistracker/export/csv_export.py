"""
CSV export — match totals, per-set statistics and the point log as pandas frames.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import pandas as pd

from tennistracker.export.text import describe_events, format_percent, format_ratio
from tennistracker.models.match import MatchState
from tennistracker.models.player import PlayerSide, PlayerStatistics, StatsPair

STATS_COLUMNS = {
    "FirstServIn": "first_serves_in",
    "FirstServAtt": "first_serves_attempted",
    "FirstPtsWon": "points_won_on_first_serve",
    "SecondServIn": "second_serves_in",
    "SecondServAtt": "second_serves_attempted",
    "SecondPtsWon": "points_won_on_second_serve",
    "Aces1": "aces_first",
    "Aces2": "aces_second",
    "SrvW1": "service_winners_first",
    "SrvW2": "service_winners_second",
    "DF": "double_faults",
    "RetWonV1": "return_points_won_vs_first",
    "RetWonV2": "return_points_won_vs_second",
    "RetW": "return_winners",
    "RetUE": "return_unforced_errors",
    "RetFE": "return_forced_errors",
    "RallyW": "rally_winners",
    "UE": "unforced_errors",
    "FEdrawn": "forced_errors_drawn",
    "NetWon": "net_points_won",
    "NetTot": "net_points_total",
    "BPWon": "break_points_won",
    "BPTot": "break_points_total",
    "PtsWon": "points_won",
    "PtsPlayed": "points_played",
}

COMPARISON_ROWS = [
    ("First serve in", "first_serves_in", "first_serves_attempted"),
    ("1st serve pts won", "points_won_on_first_serve", "first_serves_in"),
    ("Second serve in", "second_serves_in", "second_serves_attempted"),
    ("2nd serve pts won", "points_won_on_second_serve", "second_serves_in"),
    ("Aces (1st)", "aces_first", None),
    ("Aces (2nd)", "aces_second", None),
    ("Service winners (1st)", "service_winners_first", None),
    ("Service winners (2nd)", "service_winners_second", None),
    ("Double faults", "double_faults", None),
    ("Return pts won vs 1st", "return_points_won_vs_first", None),
    ("Return pts won vs 2nd", "return_points_won_vs_second", None),
    ("Return winners", "return_winners", None),
    ("Return UE", "return_unforced_errors", None),
    ("Return FE", "return_forced_errors", None),
    ("Rally winners", "rally_winners", None),
    ("Unforced errors", "unforced_errors", None),
    ("Forced errors drawn", "forced_errors_drawn", None),
    ("Net points won", "net_points_won", "net_points_total"),
    ("Break points won", "break_points_won", "break_points_total"),
    ("Total points won", "points_won", "points_played"),
]

POINT_COLUMNS =["Idx", "Set", "Game", "TB", "Server", "ServeType", "Winner", "BP", "GP", "SP", "MP", "Event"]


def _stats_row(name: str, stats: PlayerStatistics) -> dict:
    row = {"Player": name}
    row.update({col: getattr(stats, attr) for col, attr in STATS_COLUMNS.items()})
    return row


def match_totals_frame(match: MatchState) -> pd.DataFrame:
    rows = [
        _stats_row(match.player1_name, match.match_stats_player1),
        _stats_row(match.player2_name, match.match_stats_player2),
    ]
    return pd.DataFrame(rows, columns=["Player", *STATS_COLUMNS])


def per_set_frame(match: MatchState) -> pd.DataFrame:
    rows = []
    for i in range(len(match.sets)):
        for side in PlayerSide:
            rows.append({"Set": i + 1, **_stats_row(match.name_of(side), match.set_stats(side, i))})
    return pd.DataFrame(rows, columns=["Set", "Player", *STATS_COLUMNS])


def points_frame(match: MatchState) -> pd.DataFrame:
    names = {side: match.name_of(side) for side in PlayerSide}
    rows = [
        {
            "Idx": i,
            "Set": e.set_index + 1,
            "Game": e.game_index + 1,
            "TB": "Y" if e.in_tiebreak else "N",
            "Server": names[e.server],
            "ServeType": e.serve_type.value,
            "Winner": names[e.winner],
            "BP": int(e.was_break_point),
            "GP": int(e.was_game_point),
            "SP": int(e.was_set_point),
            "MP": int(e.was_match_point),
            "Event": describe_events(e.events, names),
        }
        for i, e in enumerate(match.points_log, start=1)
    ]
    return pd.DataFrame(rows, columns=POINT_COLUMNS)


def comparison_frame(pair: StatsPair) -> pd.DataFrame:
    """One row per statistic, one column per player; ratios shown as 'n/d (pct)'."""
    rows = []
    for label, num, den in COMPARISON_ROWS:
        row = {"Stat": label}
        for name, stats in ((pair.player1_name, pair.player1), (pair.player2_name, pair.player2)):
            value = getattr(stats, num)
            row[name] = f"{format_ratio(value, getattr(stats, den))} ({format_percent(value, getattr(stats, den))})" if den else value
        rows.append(row)
    return pd.DataFrame(rows)


def write_csvs(match: MatchState, base_path: Union[str, Path]) -> list[Path]:
    """Write <base>_match_totals.csv, <base>_per_set_stats.csv and <base>_points.csv."""
    base = Path(base_path)
    frames = {
        "_match_totals.csv": match_totals_frame(match),
        "_per_set_stats.csv": per_set_frame(match),
        "_points.csv": points_frame(match),
    }
    written = []
    for suffix, df in frames.items():
        path = base.with_name(base.name + suffix)
        df.to_csv(path, index=False)
        written.append(path)
    return written
