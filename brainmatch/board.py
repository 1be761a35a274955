# brainmatch/board.py
from __future__ import annotations
import random
from collections import Counter
from dataclasses import dataclass
from typing import Hashable, List, Optional, Sequence

from .errors import InvalidDeck, InvalidIndex

Symbol = Hashable


@dataclass(frozen=True)
class Tile:
    index: int
    symbol: Symbol
    revealed: bool = False
    matched: bool = False


def validate_deck(deck: Sequence[Symbol]) -> List[Symbol]:
    """Return the deck as a list, or raise InvalidDeck if it is not made of pairs."""
    values = list(deck)
    if len(values) < 2:
        raise InvalidDeck("deck needs at least one pair")
    try:
        counts = Counter(values)
    except TypeError as e:
        raise InvalidDeck(f"symbols must be hashable: {e}") from e
    odd = sorted(repr(s) for s, n in counts.items() if n != 2)
    if odd:
        raise InvalidDeck(f"every symbol must appear exactly twice, got: {', '.join(odd)}")
    return values


def shuffle_deck(deck: Sequence[Symbol], rng: Optional[random.Random] = None) -> List[Symbol]:
    """Uniform random permutation of the deck. The input is not modified."""
    values = list(deck)
    (rng or random).shuffle(values)
    return values


class Board:
    """
    Ordered tiles of one game.

    Rep:
      - tiles[i].index == i for every i
      - every symbol occurs exactly twice
      - matched => revealed
    Not thread-safe on its own: the owning MatchGame holds its lock around
    every call.
    """

    def __init__(self, symbols: Sequence[Symbol]):
        values = validate_deck(symbols)
        self._tiles: List[Tile] = [Tile(index=i, symbol=v) for i, v in enumerate(values)]
        self._check_rep()

    @classmethod
    def shuffled(cls, deck: Sequence[Symbol], rng: Optional[random.Random] = None) -> "Board":
        return cls(shuffle_deck(validate_deck(deck), rng))

    def _check_rep(self) -> None:
        counts = Counter(t.symbol for t in self._tiles)
        assert all(n == 2 for n in counts.values())
        for i, tile in enumerate(self._tiles):
            assert tile.index == i
            if tile.matched:
                assert tile.revealed is True

    def __len__(self) -> int:
        return len(self._tiles)

    def tiles(self) -> List[Tile]:
        return list(self._tiles)

    def symbols(self) -> List[Symbol]:
        return [t.symbol for t in self._tiles]

    def peek(self, index: int) -> Tile:
        self._validate_index(index)
        return self._tiles[index]

    def flip_up(self, index: int) -> Symbol:
        """Reveal a hidden tile and return its symbol."""
        self._validate_index(index)
        tile = self._tiles[index]
        if tile.revealed:
            raise ValueError("already face up")

        self._tiles[index] = Tile(index, tile.symbol, revealed=True)
        self._check_rep()
        return tile.symbol

    def flip_down(self, index: int) -> None:
        self._validate_index(index)
        tile = self._tiles[index]
        if tile.matched:
            raise ValueError("cannot flip down a matched tile")
        if not tile.revealed:
            return
        self._tiles[index] = Tile(index, tile.symbol, revealed=False)
        self._check_rep()

    def mark_matched(self, first: int, second: int) -> None:
        """Mark two revealed tiles with equal symbols as permanently matched."""
        self._validate_index(first)
        self._validate_index(second)
        t1 = self._tiles[first]
        t2 = self._tiles[second]
        if first == second:
            raise ValueError("a tile cannot match itself")
        if not t1.revealed or not t2.revealed:
            raise ValueError("both must be face up to match")
        if t1.symbol != t2.symbol:
            raise ValueError("symbols do not match")

        self._tiles[first] = Tile(first, t1.symbol, revealed=True, matched=True)
        self._tiles[second] = Tile(second, t2.symbol, revealed=True, matched=True)
        self._check_rep()

    def all_matched(self) -> bool:
        return all(t.matched for t in self._tiles)

    def _validate_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._tiles):
            raise InvalidIndex(index, len(self._tiles))
