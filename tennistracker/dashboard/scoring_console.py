"""
TennisTracker Scoring Console — Streamlit front end for live point entry.

Views:
- Setup: players, location, format and first server
- Scoring: scoreboard, event buttons for the stage being awaited, abort / undo / end
- Statistics: match or per-set comparison table and chart, point log, export

Run with:  streamlit run tennistracker/dashboard/scoring_console.py
"""

import logging

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from tennistracker.config import configure_logging, settings
from tennistracker.engine.controller import MatchController
from tennistracker.engine.errors import ScoringError
from tennistracker.export import save_match_files
from tennistracker.export.csv_export import comparison_frame, points_frame
from tennistracker.export.text import render_final_summary
from tennistracker.models.events import PointStage, RallyOutcome, ReturnOutcome, ServeOutcome
from tennistracker.models.match import FORMAT_PRESETS, FormatChoice, MatchStatus, format_for_choice
from tennistracker.models.player import PlayerSide

configure_logging()
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="TennisTracker",
    page_icon="",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ── Custom CSS ───────────────────────────────────────────────────────────────
st.markdown("""
<style>
    .stApp { background-color: #0a0a0a; }
    .score-display {
        background: linear-gradient(135deg, #1a1a2e, #0f3460);
        border-radius: 20px; padding: 24px; text-align: center;
        border: 2px solid #2a2a4a;
    }
    .score-display h1 { color: #00ff88; margin: 0; font-size: 2.6em; letter-spacing: 10px; }
    .score-display h3 { color: #c9d1d9; margin: 0 0 10px 0; }
    .serve-dot { color: #00ff88; }
    .section-header {
        color: #c9d1d9; font-size: 1.1em; font-weight: 600;
        border-bottom: 2px solid #00ff88; padding-bottom: 8px; margin: 20px 0 10px 0;
    }
</style>
""", unsafe_allow_html=True)

SERVE_BUTTONS = [
    ("1st serve in", ServeOutcome.FIRST_IN),
    ("1st serve fault", ServeOutcome.FIRST_FAULT),
    ("Ace (1st)", ServeOutcome.ACE_FIRST),
    ("Service winner (1st)", ServeOutcome.SERVICE_WINNER_FIRST),
    ("2nd serve in", ServeOutcome.SECOND_IN),
    ("Double fault", ServeOutcome.DOUBLE_FAULT),
    ("Ace (2nd)", ServeOutcome.ACE_SECOND),
    ("Service winner (2nd)", ServeOutcome.SERVICE_WINNER_SECOND),
]
SECOND_SERVE_BUTTONS = [
    ("2nd serve in", ServeOutcome.SECOND_IN),
    ("Double fault", ServeOutcome.DOUBLE_FAULT),
]
RETURN_BUTTONS = [
    ("Return winner", ReturnOutcome.RETURN_WINNER),
    ("Return UE", ReturnOutcome.RETURN_UNFORCED_ERROR),
    ("Return FE (drawn by server)", ReturnOutcome.RETURN_FORCED_ERROR),
    ("Return in", ReturnOutcome.RETURN_IN),
]
RALLY_BUTTONS = [
    ("Server winner", RallyOutcome.SERVER_WINNER),
    ("Returner winner", RallyOutcome.RETURNER_WINNER),
    ("Server UE", RallyOutcome.SERVER_UNFORCED_ERROR),
    ("Returner UE", RallyOutcome.RETURNER_UNFORCED_ERROR),
    ("Server FE (drawn by returner)", RallyOutcome.SERVER_FORCED_ERROR_DRAWN),
    ("Returner FE (drawn by server)", RallyOutcome.RETURNER_FORCED_ERROR_DRAWN),
]


def _notify_change_ends(points_played: int) -> None:
    st.session_state["notice"] = f"Change ends (tiebreak, {points_played} points played)"


if "controller" not in st.session_state:
    st.session_state["controller"] = MatchController(on_change_ends=_notify_change_ends)
    st.session_state["started"] = False
    st.session_state["notice"] = ""

ctl: MatchController = st.session_state["controller"]


def _submit(action, *args, **kwargs) -> None:
    try:
        action(*args, **kwargs)
    except ScoringError as exc:
        st.session_state["notice"] = f"Rejected: {exc}"
        logger.warning("Rejected input: %s", exc)
    st.rerun()


def _button_row(buttons, handler, key_prefix: str, **kwargs) -> None:
    cols = st.columns(len(buttons))
    for col, (label, outcome) in zip(cols, buttons):
        if col.button(label, key=f"{key_prefix}_{outcome.value}", use_container_width=True):
            _submit(handler, outcome, **kwargs)


# ── Sidebar ──────────────────────────────────────────────────────────────────

st.sidebar.title("TennisTracker")
st.sidebar.caption("Point-by-point match scoring")
st.sidebar.markdown("---")
view = st.sidebar.radio("View", ["Scoring", "Statistics"], label_visibility="collapsed")

# ── Setup ────────────────────────────────────────────────────────────────────

if not st.session_state["started"]:
    st.markdown("## New Match")
    choices = list(FormatChoice)
    default_format = format_for_choice(settings.DEFAULT_FORMAT_CHOICE).choice
    with st.form("setup"):
        c1, c2 = st.columns(2)
        name1 = c1.text_input("Player 1", "Player 1")
        name2 = c2.text_input("Player 2", "Player 2")
        location = st.text_input("Location", settings.DEFAULT_LOCATION)
        choice = st.selectbox(
            "Format",
            choices,
            index=choices.index(default_format),
            format_func=lambda c: FORMAT_PRESETS[c].description,
        )
        first = st.radio("First server", ["Player 1", "Player 2"], horizontal=True)
        if st.form_submit_button("Start match"):
            ctl.start_match(
                FORMAT_PRESETS[choice], name1.strip() or "Player 1", name2.strip() or "Player 2",
                location.strip(),
                PlayerSide.PLAYER1 if first == "Player 1" else PlayerSide.PLAYER2,
            )
            st.session_state["started"] = True
            st.rerun()
    st.stop()

match = ctl.state
st.sidebar.markdown("---")
st.sidebar.subheader("Current Match")
st.sidebar.text(f"{match.player1_name} vs {match.player2_name}")
st.sidebar.text(match.location or "-")
st.sidebar.text(match.match_format.description)

if st.session_state["notice"]:
    st.info(st.session_state["notice"])
    st.session_state["notice"] = ""

# ── Scoring ──────────────────────────────────────────────────────────────────
if "Scoring" in view:
    board = ctl.scoreboard()
    col1, col2, col3 = st.columns([2, 1, 2])
    for col, side, games, points, sets in (
        (col1, PlayerSide.PLAYER1, board.games_player1, board.points_player1, board.sets_player1),
        (col3, PlayerSide.PLAYER2, board.games_player2, board.points_player2, board.sets_player2),
    ):
        dot = '<span class="serve-dot">●</span> ' if board.server is side else ""
        with col:
            st.markdown(f"""
            <div class="score-display">
                <h3>{dot}{match.name_of(side)}</h3>
                <h1>{sets} {games} {points or "-"}</h1>
            </div>
            """, unsafe_allow_html=True)
    with col2:
        label = {
            "set_tiebreak": "TIEBREAK",
            "match_tiebreak": "MATCH TB",
        }.get(board.phase.value, f"SET {board.set_number}")
        if board.status != MatchStatus.IN_PROGRESS:
            label = "FINAL" if board.status == MatchStatus.COMPLETED else "ENDED"
        st.markdown(f"""
        <div style="text-align:center; padding:40px 0;">
            <span style="color:#00ff88; font-size:1.5em; font-weight:bold;">{label}</span><br>
            <span style="color:#c9d1d9; font-size:1em;">sets · games · points</span>
        </div>
        """, unsafe_allow_html=True)
    st.caption(f"Score: {match.score_display}")

    awaiting = ctl.awaiting
    st.markdown('<div class="section-header">Point Entry</div>', unsafe_allow_html=True)
    if awaiting is None:
        st.text(render_final_summary(match))
    elif awaiting == PointStage.MATCH_TIEBREAK_SERVER:
        st.markdown("**Match tiebreak to 10.** Who serves first?")
        c1, c2 = st.columns(2)
        if c1.button(match.player1_name, key="tb10_p1", use_container_width=True):
            _submit(ctl.set_match_tiebreak_server, PlayerSide.PLAYER1)
        if c2.button(match.player2_name, key="tb10_p2", use_container_width=True):
            _submit(ctl.set_match_tiebreak_server, PlayerSide.PLAYER2)
    elif awaiting == PointStage.SERVE:
        st.markdown(f"Serving: **{match.name_of(match.server)}**")
        _button_row(SERVE_BUTTONS[:4], ctl.submit_serve, "serve1")
        _button_row(SERVE_BUTTONS[4:], ctl.submit_serve, "serve2")
    elif awaiting == PointStage.SECOND_SERVE:
        st.markdown("First serve fault. Second serve:")
        _button_row(SECOND_SERVE_BUTTONS, ctl.submit_serve, "second")
    elif awaiting == PointStage.RETURN:
        st.markdown("Return:")
        _button_row(RETURN_BUTTONS, ctl.submit_return, "return")
    elif awaiting == PointStage.RALLY:
        net_player = st.radio(
            "Net approach",
            [None, PlayerSide.PLAYER1, PlayerSide.PLAYER2],
            format_func=lambda side: "None" if side is None else match.name_of(side),
            horizontal=True,
        )
        st.markdown("Rally ending:")
        _button_row(RALLY_BUTTONS[:3], ctl.submit_rally, "rally1", net_player=net_player)
        _button_row(RALLY_BUTTONS[3:], ctl.submit_rally, "rally2", net_player=net_player)

    st.markdown("---")
    c1, c2, c3, c4 = st.columns(4)
    if c1.button("Abort point", disabled=not ctl.point_in_progress, use_container_width=True):
        ctl.abort_point()
        st.rerun()
    if c2.button("Undo last point", disabled=ctl.history.is_empty and not ctl.point_in_progress, use_container_width=True):
        if not ctl.undo():
            st.session_state["notice"] = "Nothing to undo"
        st.rerun()
    if c3.button("End match", disabled=match.status != MatchStatus.IN_PROGRESS, use_container_width=True):
        ctl.end_match()
        st.rerun()
    if c4.button("New match", use_container_width=True):
        st.session_state["started"] = False
        st.rerun()

# ── Statistics ───────────────────────────────────────────────────────────────
elif "Statistics" in view:
    st.markdown("## Statistics")

    scopes = ["Match totals"] + [f"Set {i + 1}" for i in range(len(match.sets))]
    scope = st.radio("Scope", scopes, horizontal=True)
    pair = ctl.statistics(None if scope == "Match totals" else scopes.index(scope) - 1)

    st.markdown('<div class="section-header">Comparison</div>', unsafe_allow_html=True)
    st.dataframe(comparison_frame(pair), use_container_width=True, hide_index=True)

    chart_df = pd.DataFrame({
        "Stat": ["1st serve %", "2nd serve %", "1st pts won %", "2nd pts won %", "Net won %", "Points won %"],
        pair.player1_name: [
            pair.player1.first_serve_pct, pair.player1.second_serve_pct,
            pair.player1.first_serve_points_won_pct, pair.player1.second_serve_points_won_pct,
            pair.player1.net_points_won_pct, pair.player1.points_won_pct,
        ],
        pair.player2_name: [
            pair.player2.first_serve_pct, pair.player2.second_serve_pct,
            pair.player2.first_serve_points_won_pct, pair.player2.second_serve_points_won_pct,
            pair.player2.net_points_won_pct, pair.player2.points_won_pct,
        ],
    })
    fig = go.Figure()
    fig.add_trace(go.Bar(x=chart_df["Stat"], y=chart_df[pair.player1_name], name=pair.player1_name, marker_color='#00ff88'))
    fig.add_trace(go.Bar(x=chart_df["Stat"], y=chart_df[pair.player2_name], name=pair.player2_name, marker_color='#ff6b6b'))
    fig.update_layout(
        barmode='group', paper_bgcolor='#0a0a0a', plot_bgcolor='#0d1117',
        font_color='#c9d1d9', height=350, yaxis=dict(range=[0, 100], title="%"),
    )
    st.plotly_chart(fig, use_container_width=True)

    st.markdown('<div class="section-header">Point Log</div>', unsafe_allow_html=True)
    log_df = points_frame(match)
    if log_df.empty:
        st.caption("No points played yet")
    else:
        st.dataframe(log_df, use_container_width=True, hide_index=True)

    st.markdown('<div class="section-header">Export</div>', unsafe_allow_html=True)
    if st.button("Save match files"):
        paths = save_match_files(match)
        st.success("Saved: " + ", ".join(p.name for p in paths))

# ── Footer ───────────────────────────────────────────────────────────────────
st.sidebar.markdown("---")
st.sidebar.caption(f"{settings.APP_NAME} v{settings.APP_VERSION}")
