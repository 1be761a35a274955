# brainmatch/config.py
"""Settings read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

DEFAULT_SYMBOLS = ("🧠", "💡", "🔒", "🔋", "📱", "🍎", "🌟", "🚀")


@dataclass(frozen=True)
class Config:
    symbols: Tuple[str, ...] = DEFAULT_SYMBOLS
    unflip_delay: float = 1.0
    state_file: str = ""
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False

    @property
    def deck(self) -> list:
        """Each configured symbol twice, in order."""
        return [s for s in self.symbols for _ in range(2)]


def load_config(environ=None) -> Config:
    env = os.environ if environ is None else environ

    raw_symbols = env.get("BRAINMATCH_SYMBOLS", "")
    symbols = tuple(s.strip() for s in raw_symbols.split(",") if s.strip()) or DEFAULT_SYMBOLS

    delay = float(env.get("BRAINMATCH_UNFLIP_DELAY", "1.0"))
    if delay < 0:
        raise ValueError("BRAINMATCH_UNFLIP_DELAY must be >= 0")

    return Config(
        symbols=symbols,
        unflip_delay=delay,
        state_file=env.get("BRAINMATCH_STATE_FILE", ""),
        log_level=env.get("BRAINMATCH_LOG_LEVEL", "INFO").upper(),
        host=env.get("BRAINMATCH_HOST", "127.0.0.1"),
        port=int(env.get("BRAINMATCH_PORT", "5000")),
        debug=env.get("BRAINMATCH_DEBUG", "0").lower() in ("1", "true", "yes"),
    )


@lru_cache
def get_config() -> Config:
    return load_config()
