"""
Tests for match exports — text views, JSON and CSV files.
"""

import json
from datetime import datetime

import pandas as pd
import pytest
from tennistracker.engine.controller import MatchController
from tennistracker.export import export_base_name, save_match_files
from tennistracker.export.csv_export import (
    STATS_COLUMNS, comparison_frame, match_totals_frame, per_set_frame, points_frame,
)
from tennistracker.export.json_export import match_to_dict
from tennistracker.export.text import (
    LOG_HEADER, describe_events, format_percent, format_ratio, render_final_summary,
    render_match_summary, render_player_stats, render_point_log, render_scoreboard,
    render_side_by_side,
)
from tennistracker.models.events import PointEvents, RallyOutcome, ReturnOutcome, ServeOutcome
from tennistracker.models.match import FormatChoice
from tennistracker.models.player import PlayerSide, PlayerStatistics

P1 = PlayerSide.PLAYER1
P2 = PlayerSide.PLAYER2
WHEN = datetime(2024, 5, 17, 14, 3, 9)


def _played_match():
    ctl = MatchController()
    ctl.start_match(FormatChoice.BEST_OF_3, "Ana Lopez", "Bea Kim", "Court 2", P1)
    ctl.submit_serve(ServeOutcome.ACE_FIRST)
    ctl.submit_serve(ServeOutcome.FIRST_FAULT)
    ctl.submit_serve(ServeOutcome.SECOND_IN)
    ctl.submit_return(ReturnOutcome.RETURN_IN)
    ctl.submit_rally(RallyOutcome.RETURNER_WINNER, net_player=P2)
    ctl.submit_serve(ServeOutcome.DOUBLE_FAULT)
    return ctl


class TestTextViews:

    def test_format_percent(self):
        assert format_percent(0, 0) == "--"
        assert format_percent(1, 3) == "33.3%"
        assert format_percent(2, 2) == "100.0%"

    def test_format_ratio(self):
        assert format_ratio(3, 5) == "3/5"

    def test_describe_serve_only(self):
        assert describe_events(PointEvents(serves=[ServeOutcome.ACE_FIRST])) == "Ace (1st)."
        events = PointEvents(serves=[ServeOutcome.FIRST_FAULT, ServeOutcome.DOUBLE_FAULT])
        assert describe_events(events) == "1st fault -> double fault."

    def test_describe_rally_with_net(self):
        events = PointEvents(
            serves=[ServeOutcome.FIRST_IN],
            return_outcome=ReturnOutcome.RETURN_IN,
            rally_outcome=RallyOutcome.SERVER_FORCED_ERROR_DRAWN,
            net_player=P1,
        )
        text = describe_events(events, {P1: "Ana", P2: "Bea"})
        assert text == "1st in; Return in; Rally: server FE (drawn by returner). [net: Ana]"

    def test_scoreboard_marks_server(self):
        ctl = _played_match()
        text = render_scoreboard(ctl.scoreboard(), color=False)
        assert "● Ana Lopez" in text
        assert "● Bea Kim" not in text
        assert "Court 2" in text

    def test_scoreboard_colour(self):
        ctl = _played_match()
        assert "\033[1;32m" in render_scoreboard(ctl.scoreboard(), color=True)

    def test_player_stats_block(self):
        text = render_player_stats(PlayerStatistics(first_serves_in=2, first_serves_attempted=3), "Ana")
        assert text.startswith("Ana")
        assert "2/3 (66.7%)" in text
        assert "0/0 (--)" in text

    def test_side_by_side(self):
        text = render_side_by_side(PlayerStatistics(), PlayerStatistics(double_faults=2), "Ana", "Bea")
        lines = text.splitlines()
        assert lines[0].startswith("Ana")
        assert "Bea" in lines[0]
        assert any("Double faults: 2" in line for line in lines)

    def test_point_log(self):
        ctl = _played_match()
        lines = render_point_log(ctl.state).splitlines()
        assert lines[0] == LOG_HEADER
        assert len(lines) == 4
        assert lines[1].startswith("1 | 1 | 1 | N | Ana Lopez | 1st | Ana Lopez")
        assert "[net: Bea Kim]" in lines[2]

    def test_final_summary(self):
        ctl = _played_match()
        text = render_final_summary(ctl.state)
        assert "Match not finished." in text
        assert "Set 1: 0-0" in text

    def test_match_summary(self):
        text = render_match_summary(_played_match().state)
        assert "Players: Ana Lopez vs Bea Kim" in text
        assert "Per-set stats" in text
        assert LOG_HEADER in text


class TestFrames:

    def test_match_totals_columns(self):
        df = match_totals_frame(_played_match().state)
        assert list(df.columns) == ["Player", *STATS_COLUMNS]
        assert list(df["Player"]) == ["Ana Lopez", "Bea Kim"]
        assert df.loc[0, "Aces1"] == 1
        assert df.loc[0, "DF"] == 1

    def test_per_set_frame(self):
        df = per_set_frame(_played_match().state)
        assert list(df.columns[:2]) == ["Set", "Player"]
        assert len(df) == 2

    def test_points_frame(self):
        df = points_frame(_played_match().state)
        assert len(df) == 3
        assert list(df["Winner"]) == ["Ana Lopez", "Bea Kim", "Bea Kim"]
        assert list(df["ServeType"]) == ["1st", "2nd", "2nd"]

    def test_comparison_frame(self):
        ctl = _played_match()
        df = comparison_frame(ctl.statistics())
        assert list(df.columns) == ["Stat", "Ana Lopez", "Bea Kim"]
        row = df[df["Stat"] == "Total points won"].iloc[0]
        assert row["Ana Lopez"] == "1/3 (33.3%)"


class TestSaveMatchFiles:

    def test_base_name(self):
        ctl = _played_match()
        assert export_base_name(ctl.state, WHEN) == "Ana_Lopez_vs_Bea_Kim_2024-05-17_14-03-09"

    def test_writes_all_files(self, tmp_path):
        ctl = _played_match()
        paths = save_match_files(ctl.state, tmp_path, when=WHEN)
        names = sorted(p.name for p in paths)
        base = "Ana_Lopez_vs_Bea_Kim_2024-05-17_14-03-09"
        assert names == sorted([
            f"{base}.txt",
            f"{base}.json",
            f"{base}_match_totals.csv",
            f"{base}_per_set_stats.csv",
            f"{base}_points.csv",
        ])
        assert all(p.exists() for p in paths)

    def test_json_contents(self, tmp_path):
        ctl = _played_match()
        save_match_files(ctl.state, tmp_path, when=WHEN)
        data = json.loads(next(tmp_path.glob("*.json")).read_text(encoding="utf-8"))
        assert data["players"] == ["Ana Lopez", "Bea Kim"]
        assert data["sets_won"] == [0, 0]
        assert len(data["log"]) == 3
        assert data["log"][0]["server"] == "P1"
        assert data["sets"][0]["complete"] is False
        assert data["sets"][0]["winner"] is None
        assert data["match_stats"]["p1"]["aces_first"] == 1
        assert data == json.loads(json.dumps(match_to_dict(ctl.state)))

    def test_json_set_rows_carry_winner(self):
        ctl = MatchController()
        ctl.start_match(FormatChoice.BEST_OF_3, "Ana Lopez", "Bea Kim", "Court 2", P1)
        for _ in range(24):
            if ctl.state.server == P1:
                ctl.submit_serve(ServeOutcome.ACE_FIRST)
            else:
                ctl.submit_serve(ServeOutcome.DOUBLE_FAULT)
        rows = match_to_dict(ctl.state)["sets"]
        assert rows[0]["complete"] is True
        assert rows[0]["winner"] == "P1"
        assert (rows[0]["p1"], rows[0]["p2"]) == (6, 0)
        assert rows[1]["complete"] is False
        assert rows[1]["winner"] is None

    def test_points_csv_round_trip(self, tmp_path):
        ctl = _played_match()
        save_match_files(ctl.state, tmp_path, when=WHEN)
        df = pd.read_csv(next(tmp_path.glob("*_points.csv")))
        assert list(df.columns) == ["Idx", "Set", "Game", "TB", "Server", "ServeType", "Winner",
                                    "BP", "GP", "SP", "MP", "Event"]
        assert len(df) == 3

    def test_creates_directory(self, tmp_path):
        target = tmp_path / "nested" / "out"
        paths = save_match_files(_played_match().state, target, when=WHEN)
        assert target.is_dir()
        assert len(paths) == 5
