# brainmatch/errors.py
"""
Game exceptions.

All rule violations raised by the game derive from GameError so the HTTP
layer can map them in one place. Ignored flips are not errors; see
game.FlipResult.
"""
from __future__ import annotations


class GameError(Exception):
    """Base class for every game error."""
    pass


class InvalidDeck(GameError, ValueError):
    """Deck is not a multiset of pairs (each symbol exactly twice, size >= 2)."""
    pass


class InvalidIndex(GameError, IndexError):
    """Flip index outside the board."""
    def __init__(self, index, size: int):
        self.index = index
        self.size = size
        super().__init__(f"index {index} out of range for board of {size} tiles")


class NotResumable(GameError):
    """resume() called with no completed game saved."""
    def __init__(self):
        super().__init__("no completed game to resume")
