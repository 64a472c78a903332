"""TennisTracker data models — Pydantic schemas for match state, events and statistics."""

from tennistracker.models.player import *
from tennistracker.models.events import *
from tennistracker.models.match import *
