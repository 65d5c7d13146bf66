from __future__ import annotations


class PokerError(Exception):
    """Base class for every error raised by the table engine."""


class IllegalAction(PokerError, ValueError):
    # Raised before any chips move; the caller decides whether to re-prompt.
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


class DealingError(PokerError, RuntimeError):
    """Card accounting went wrong; the current hand cannot continue."""


class InsufficientCards(DealingError):
    pass


class EmptyDeck(InsufficientCards):
    pass


class ProviderFailure(PokerError):
    """External decision provider timed out or answered with garbage."""


class InvariantViolation(PokerError, RuntimeError):
    """Chip or pot bookkeeping no longer adds up. Halt and inspect."""
