"""Scoring engine — rules, rotation, pressure-point tagging, statistics and undo."""
