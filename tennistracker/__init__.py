"""
TennisTracker — Point-by-point tennis match scoring and statistics
===================================================================
Single-operator live scoring: score state machine, 1-2-2 tiebreak serve
rotation, pressure-point tagging, per-set statistics and undo.
"""

__version__ = "1.0.0"
__app_name__ = "TennisTracker"
