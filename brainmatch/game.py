# brainmatch/game.py
from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field
from threading import RLock
from typing import List, Optional, Sequence, Tuple

from .board import Board, Symbol, validate_deck
from .config import get_config
from .errors import InvalidDeck, InvalidIndex, NotResumable
from .scheduler import TimerScheduler
from .storage import MemoryStore, SavedGame

logger = logging.getLogger(__name__)

RULES = (
    "1. Match pairs of identical cards by flipping them over.\n"
    "2. You can only flip two cards at a time.\n"
    "3. If the cards match, they stay flipped; otherwise, they will flip back.\n"
    "4. Your goal is to match all pairs before the game ends.\n"
    "5. The game ends when all pairs are matched successfully."
)


class GameStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WON = "won"
    INCOMPLETE = "incomplete"


class FlipKind(str, enum.Enum):
    IGNORED = "ignored"
    FIRST_FLIP = "first_flip"
    SECOND_FLIP = "second_flip"


@dataclass(frozen=True)
class FlipResult:
    kind: FlipKind
    index: int
    symbol: Optional[Symbol] = None
    # Only set on SECOND_FLIP
    matched: Optional[bool] = None
    pair: Optional[Tuple[int, int]] = None
    # Only set on IGNORED: "ended", "submitted", "revealed" or "selection_full"
    reason: Optional[str] = None

    @classmethod
    def ignored(cls, index: int, reason: str) -> "FlipResult":
        return cls(FlipKind.IGNORED, index, reason=reason)

    def to_dict(self) -> dict:
        return {
            "result": self.kind.value,
            "index": self.index,
            "symbol": self.symbol,
            "matched": self.matched,
            "pair": list(self.pair) if self.pair else None,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class TileView:
    index: int
    symbol: Optional[Symbol]  # None while face down
    revealed: bool
    matched: bool


@dataclass(frozen=True)
class GameSnapshot:
    tiles: Tuple[TileView, ...]
    matched_pairs: int
    total_pairs: int
    started: bool
    submitted: bool
    ended: bool
    resumable: bool
    rules_open: bool
    pending: bool
    status: GameStatus
    selection: Tuple[Optional[int], Optional[int]] = field(default=(None, None))

    def to_dict(self) -> dict:
        return {
            "tiles": [
                {"index": t.index, "symbol": t.symbol, "revealed": t.revealed, "matched": t.matched}
                for t in self.tiles
            ],
            "matched_pairs": self.matched_pairs,
            "total_pairs": self.total_pairs,
            "started": self.started,
            "submitted": self.submitted,
            "ended": self.ended,
            "resumable": self.resumable,
            "rules_open": self.rules_open,
            "pending": self.pending,
            "game_status": self.status.value,
            "selection": list(self.selection),
        }


class MatchGame:
    """
    Single-player memory game.

    Lifecycle: not started -> in progress -> won (all pairs matched) or
    incomplete (submitted early). Commands are serialized by an internal
    lock; the deferred mismatch unflip takes the same lock.

    A mismatched pair stays face up until the scheduler fires the unflip.
    new_game(), resume() and restart() cancel an outstanding unflip and bump
    the generation counter, so a callback that already escaped cancellation
    sees a stale generation and does nothing.
    """

    def __init__(
        self,
        deck: Optional[Sequence[Symbol]] = None,
        scheduler=None,
        store=None,
        delay: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        if deck is None or delay is None:
            config = get_config()
            deck = config.deck if deck is None else deck
            delay = config.unflip_delay if delay is None else delay

        self._lock = RLock()
        self._deck: List[Symbol] = validate_deck(deck)
        self._scheduler = scheduler if scheduler is not None else TimerScheduler()
        self._store = store if store is not None else MemoryStore()
        self._delay = float(delay)
        self._rng = rng or random.Random()

        self._board: Optional[Board] = None
        self._first: Optional[int] = None
        self._second: Optional[int] = None
        self._matched_pairs = 0
        self._submitted = False
        self._ended = False
        self._started = False
        self._rules_open = False

        self._pending = None
        self._generation = 0

        self._resume_deck: Optional[List[Symbol]] = self._load_saved_deck()
        self._resumable = self._resume_deck is not None

    def _load_saved_deck(self) -> Optional[List[Symbol]]:
        saved = self._store.load()
        if saved is None:
            return None
        try:
            return validate_deck(saved.deck)
        except InvalidDeck as e:
            logger.warning(f"Discarding saved game with invalid deck: {e}")
            return None

    # ---- queries ----

    @property
    def deck(self) -> List[Symbol]:
        return list(self._deck)

    @property
    def total_pairs(self) -> int:
        return len(self._deck) // 2

    @property
    def matched_pairs(self) -> int:
        return self._matched_pairs

    @property
    def started(self) -> bool:
        return self._started

    @property
    def submitted(self) -> bool:
        return self._submitted

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def resumable(self) -> bool:
        return self._resumable

    @property
    def rules_open(self) -> bool:
        return self._rules_open

    @property
    def selection(self) -> Tuple[Optional[int], Optional[int]]:
        return (self._first, self._second)

    @property
    def has_pending_unflip(self) -> bool:
        return self._pending is not None

    @property
    def board(self) -> Optional[Board]:
        return self._board

    def is_won(self) -> bool:
        return self._ended and self._matched_pairs == self.total_pairs

    @property
    def status(self) -> GameStatus:
        if not self._started:
            return GameStatus.NOT_STARTED
        if self.is_won():
            return GameStatus.WON
        if self._submitted:
            return GameStatus.INCOMPLETE
        return GameStatus.IN_PROGRESS

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            tiles = self._board.tiles() if self._board is not None else []
            return GameSnapshot(
                tiles=tuple(
                    TileView(t.index, t.symbol if t.revealed else None, t.revealed, t.matched)
                    for t in tiles
                ),
                matched_pairs=self._matched_pairs,
                total_pairs=self.total_pairs,
                started=self._started,
                submitted=self._submitted,
                ended=self._ended,
                resumable=self._resumable,
                rules_open=self._rules_open,
                pending=self._pending is not None,
                status=self.status,
                selection=(self._first, self._second),
            )

    # ---- commands ----

    def new_game(self, deck: Optional[Sequence[Symbol]] = None) -> None:
        values = validate_deck(deck) if deck is not None else list(self._deck)
        with self._lock:
            self._store.clear()
            self._reset(values)
            self._started = True
            self._resumable = False
            self._resume_deck = None
            logger.info(f"New game with {self.total_pairs} pairs")

    def resume(self) -> None:
        with self._lock:
            if not self._resumable:
                logger.warning("Resume requested with no completed game saved")
                raise NotResumable()
            self._reset(self._resume_deck or self._deck)
            self._started = True
            logger.info(f"Resumed game with {self.total_pairs} pairs")

    def restart(self) -> None:
        with self._lock:
            if not self._started:
                logger.warning("Restart requested before any game was started")
                return
            self._reset(self._deck)
            logger.info("Game restarted")

    def submit(self) -> None:
        with self._lock:
            if self._submitted:
                return
            self._submitted = True
            self._ended = self._ended or self._matched_pairs == self.total_pairs
            logger.info(
                f"Game submitted with {self._matched_pairs}/{self.total_pairs} pairs "
                f"({self.status.value})"
            )

    def flip(self, index: int) -> FlipResult:
        with self._lock:
            if self._board is None:
                raise InvalidIndex(index, 0)
            tile = self._board.peek(index)

            reason = None
            if self._ended:
                reason = "ended"
            elif self._submitted:
                reason = "submitted"
            elif tile.revealed:
                reason = "revealed"
            elif self._second is not None:
                reason = "selection_full"
            if reason is not None:
                logger.debug(f"Flip {index} ignored: {reason}")
                return FlipResult.ignored(index, reason)

            if self._first is None:
                symbol = self._board.flip_up(index)
                self._first = index
                logger.debug(f"Flipped {index}")
                return FlipResult(FlipKind.FIRST_FLIP, index, symbol)

            return self._check_for_match(index)

    def open_rules(self) -> None:
        self._rules_open = True

    def close_rules(self) -> None:
        self._rules_open = False

    # ---- internals ----

    def _reset(self, deck: Sequence[Symbol]) -> None:
        self._cancel_pending()
        self._board = Board.shuffled(deck, self._rng)
        self._deck = list(deck)
        self._first = None
        self._second = None
        self._matched_pairs = 0
        self._submitted = False
        self._ended = False

    def _check_for_match(self, second: int) -> FlipResult:
        first = self._first
        board = self._board
        symbol = board.peek(second).symbol

        if board.peek(first).symbol == symbol:
            board.flip_up(second)
            board.mark_matched(first, second)
            self._matched_pairs += 1
            self._first = None
            self._second = None
            logger.debug(f"Flipped {second}, matched {first}")
            self._check_game_over()
            return FlipResult(FlipKind.SECOND_FLIP, second, symbol, matched=True, pair=(first, second))

        # Schedule first: a failing scheduler must leave the board untouched.
        generation = self._generation + 1
        pending = self._scheduler.call_later(
            self._delay, lambda: self._unflip(generation, first, second)
        )
        self._generation = generation
        self._pending = pending

        # Both stay face up until the unflip fires.
        board.flip_up(second)
        self._second = second
        logger.debug(f"Flipped {second}, no match with {first}")
        return FlipResult(FlipKind.SECOND_FLIP, second, symbol, matched=False, pair=(first, second))

    def _unflip(self, generation: int, first: int, second: int) -> None:
        with self._lock:
            if generation != self._generation or self._pending is None:
                logger.debug(f"Dropping stale unflip of {first} and {second}")
                return
            self._pending = None
            self._board.flip_down(first)
            self._board.flip_down(second)
            self._first = None
            self._second = None
            logger.debug(f"Unflipped {first} and {second}")

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._generation += 1

    def _check_game_over(self) -> None:
        if self._matched_pairs != self.total_pairs:
            return
        self._ended = True
        self._resumable = True
        self._resume_deck = list(self._deck)
        logger.info(f"All {self.total_pairs} pairs matched")
        try:
            self._store.save(SavedGame(deck=tuple(self._deck)))
        except Exception as e:
            # The win stands; only persistence across restarts is lost.
            logger.error(f"Failed to save completed game: {e}", exc_info=True)
