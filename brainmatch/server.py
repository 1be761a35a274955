# brainmatch/server.py
from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .config import get_config
from .errors import GameError, NotResumable
from .game import RULES, MatchGame
from .storage import open_store

logger = logging.getLogger(__name__)


def create_app(game: Optional[MatchGame] = None) -> Flask:
    """
    JSON adapter between a presentation layer and one MatchGame.

    Every response carries the current snapshot so the client can redraw
    after each command.
    """
    app = Flask(__name__)

    if game is None:
        config = get_config()
        game = MatchGame(
            deck=config.deck,
            store=open_store(config.state_file),
            delay=config.unflip_delay,
        )
    app.config["GAME"] = game

    def ok(**extra):
        body = {"status": "ok"}
        body.update(extra)
        body["state"] = game.snapshot().to_dict()
        return jsonify(body)

    def error(message: str, code: int):
        return jsonify({"status": "error", "message": message}), code

    @app.errorhandler(GameError)
    def handle_game_error(e: GameError):
        code = 409 if isinstance(e, NotResumable) else 400
        logger.warning(f"{request.path} rejected: {e}")
        return error(str(e), code)

    @app.get("/state")
    def api_state():
        return ok()

    @app.post("/new")
    def api_new():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        deck = data.get("deck")
        if deck is not None and not isinstance(deck, list):
            return error("deck must be a list", 400)
        game.new_game(deck)
        return ok()

    @app.post("/resume")
    def api_resume():
        game.resume()
        return ok()

    @app.post("/flip")
    def api_flip():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        index = data.get("index")
        if isinstance(index, bool) or not isinstance(index, int):
            return error("body must contain an integer 'index'", 400)

        result = game.flip(index)
        return ok(**result.to_dict())

    @app.post("/submit")
    def api_submit():
        game.submit()
        return ok()

    @app.post("/restart")
    def api_restart():
        game.restart()
        return ok()

    @app.get("/rules")
    def api_rules():
        return ok(rules=RULES)

    @app.post("/rules/open")
    def api_rules_open():
        game.open_rules()
        return ok(rules=RULES)

    @app.post("/rules/close")
    def api_rules_close():
        game.close_rules()
        return ok()

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # Let Flask render its own HTTP errors (404, 405, ...)
        if isinstance(e, HTTPException):
            return e
        logger.error(f"{request.path} failed: {e}", exc_info=True)
        return error("internal error", 500)

    return app


if __name__ == "__main__":
    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # debug=True only for development
    create_app().run(host=config.host, port=config.port, debug=config.debug)
