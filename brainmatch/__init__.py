from .board import Board, Tile, shuffle_deck, validate_deck
from .errors import GameError, InvalidDeck, InvalidIndex, NotResumable
from .game import FlipKind, FlipResult, GameSnapshot, GameStatus, MatchGame, RULES

__all__ = [
    "Board",
    "Tile",
    "shuffle_deck",
    "validate_deck",
    "GameError",
    "InvalidDeck",
    "InvalidIndex",
    "NotResumable",
    "FlipKind",
    "FlipResult",
    "GameSnapshot",
    "GameStatus",
    "MatchGame",
    "RULES",
]
