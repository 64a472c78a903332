"""
Match exports — text summary, JSON and CSV files written side by side.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from tennistracker.config import settings
from tennistracker.export.csv_export import write_csvs
from tennistracker.export.json_export import write_json
from tennistracker.export.text import render_match_summary
from tennistracker.models.match import MatchState

logger = logging.getLogger(__name__)


def export_base_name(match: MatchState, when: Optional[datetime] = None) -> str:
    """<p1>_vs_<p2>_<YYYY-mm-dd_HH-MM-SS>, spaces replaced by underscores."""
    stamp = (when or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return f"{match.player1_name}_vs_{match.player2_name}_{stamp}".replace(" ", "_")


def save_match_files(
    match: MatchState,
    directory: Union[str, Path, None] = None,
    when: Optional[datetime] = None,
) -> list[Path]:
    """Write the .txt summary, .json document and three CSV tables. Returns the paths written."""
    out_dir = Path(directory if directory is not None else settings.EXPORT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    base = out_dir / export_base_name(match, when)

    txt_path = base.with_name(base.name + ".txt")
    txt_path.write_text(render_match_summary(match), encoding="utf-8")
    paths = [txt_path, write_json(match, base.with_name(base.name + ".json"))]
    paths.extend(write_csvs(match, base))

    logger.info("Saved match files: %s", ", ".join(p.name for p in paths))
    return paths


__all__ = ["export_base_name", "save_match_files"]
