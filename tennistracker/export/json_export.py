"""
JSON export — the complete match as plain data.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from tennistracker.export.text import describe_events
from tennistracker.models.match import MatchState
from tennistracker.models.player import PlayerSide


def match_to_dict(match: MatchState) -> dict[str, Any]:
    names = {PlayerSide.PLAYER1: match.player1_name, PlayerSide.PLAYER2: match.player2_name}
    short = {PlayerSide.PLAYER1: "P1", PlayerSide.PLAYER2: "P2"}
    return {
        "players": [match.player1_name, match.player2_name],
        "location": match.location,
        "status": match.status.value,
        "winner": short[match.winner] if match.winner else None,
        "format": match.match_format.model_dump(mode="json"),
        "sets_won": [match.sets_player1, match.sets_player2],
        "sets": [
            {
                "p1": s.games_player1,
                "p2": s.games_player2,
                "tb": s.tiebreak_played,
                "tb_p1": s.tiebreak_points_player1,
                "tb_p2": s.tiebreak_points_player2,
                "match_tiebreak": s.is_match_tiebreak,
                "complete": s.is_complete,
                "winner": short[s.winner] if s.winner else None,
            }
            for s in match.sets
        ],
        "match_stats": {
            "p1": match.match_stats_player1.model_dump(),
            "p2": match.match_stats_player2.model_dump(),
        },
        "set_stats": [
            {"set": i + 1, "p1": p1.model_dump(), "p2": p2.model_dump()}
            for i, (p1, p2) in enumerate(zip(match.set_stats_player1, match.set_stats_player2))
        ],
        "log": [
            {
                "idx": i,
                "set": e.set_index + 1,
                "game": e.game_index + 1,
                "tb": e.in_tiebreak,
                "point": e.point_number,
                "server": short[e.server],
                "serve_type": e.serve_type.value,
                "winner": short[e.winner],
                "bp": e.was_break_point,
                "gp": e.was_game_point,
                "sp": e.was_set_point,
                "mp": e.was_match_point,
                "event": describe_events(e.events, names),
                "events": e.events.model_dump(mode="json"),
            }
            for i, e in enumerate(match.points_log, start=1)
        ],
    }


def write_json(match: MatchState, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(json.dumps(match_to_dict(match), indent=2, ensure_ascii=False), encoding="utf-8")
    return path
