"""Tournament orchestration: drives hands, seats and decision making around the table engine."""

from .runner import TournamentRunner

__all__ = ["TournamentRunner"]
