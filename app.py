import logging
import os

import redis
from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify, render_template, request, session
from flask_session import Session
from flask_socketio import SocketIO, emit

from game_logic import MAX_GUESSES, GameState, GuessError, new_game, reset_game, submit_guess
from word_source import DEFAULT_WORDS_FILE, WORD_LENGTH, EmptyWordList, WordSource

load_dotenv()

bp = Blueprint("game", __name__)

# Socket.IO is bound to the app in create_app(). Events read and write the
# same server-side session as the HTTP routes.
socketio = SocketIO(manage_session=False)


# Flask app setup
def create_app(test_config=None, word_source=None):
    """Factory function to create and configure Flask app."""
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")
    app.config["REDIS_URL"] = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    app.config["SESSION_TYPE"] = os.environ.get("SESSION_TYPE", "redis")
    app.config["SESSION_PERMANENT"] = False
    app.config["WORD_LIST_PATH"] = os.environ.get("WORD_LIST_PATH", DEFAULT_WORDS_FILE)
    app.config["WORD_LIST_LIMIT"] = int(os.environ.get("WORD_LIST_LIMIT", 10000))
    app.config["SOCKETIO_MESSAGE_QUEUE"] = os.environ.get("SOCKETIO_MESSAGE_QUEUE")
    app.config["SOCKETIO_CORS_ORIGINS"] = os.environ.get("SOCKETIO_CORS_ORIGINS", "*")
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO")

    if test_config is not None:
        app.config.update(test_config)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Redis-backed server-side sessions
    if app.config["SESSION_TYPE"] == "redis" and "SESSION_REDIS" not in app.config:
        app.config["SESSION_REDIS"] = redis.from_url(app.config["REDIS_URL"])
    Session(app)

    if word_source is None:
        word_source = WordSource.from_file(
            app.config["WORD_LIST_PATH"], limit=app.config["WORD_LIST_LIMIT"]
        )
    # No game can be played without words, so refuse to start
    if not word_source.candidate_words():
        raise EmptyWordList(f"No playable words in {app.config['WORD_LIST_PATH']}")
    app.extensions["word_source"] = word_source

    app.register_blueprint(bp)
    socketio.init_app(
        app,
        cors_allowed_origins=app.config["SOCKETIO_CORS_ORIGINS"],
        message_queue=app.config["SOCKETIO_MESSAGE_QUEUE"],
    )
    return app


def get_words() -> WordSource:
    return current_app.extensions["word_source"]


def load_game():
    """Return the session's game, or None if no game was started."""
    data = session.get("game")
    if not data:
        return None
    return GameState.from_dict(data)


def save_game(state: GameState):
    session["game"] = state.to_dict()
    session.modified = True


def game_payload(state: GameState) -> dict:
    """What the browser is allowed to see. The secret stays hidden until the game ends."""
    return {
        "success": True,
        "status": state.status.value,
        "guesses": [g.to_dict() for g in state.history],
        "attempts_left": state.attempts_left,
        "max_guesses": MAX_GUESSES,
        "word_length": WORD_LENGTH,
        "message": state.message(),
        "secret": state.secret if state.is_over else None,
    }


def guess_from(data):
    """Pull the raw guess out of a request body or event payload of any shape."""
    if not isinstance(data, dict):
        return None
    return data.get("guess")


def play(raw):
    """
    Run one guess against the session's game and store the result.

    Returns (state, outcome) where outcome is a Guess or a GuessError,
    or (None, None) when there is no game to play.
    """
    state = load_game()
    if state is None:
        return None, None

    state, outcome = submit_guess(state, raw, get_words())
    if not isinstance(outcome, GuessError):
        save_game(state)
    return state, outcome


def start_game(previous=None) -> GameState:
    if previous is None:
        state = new_game(get_words())
    else:
        state = reset_game(previous, get_words())
    save_game(state)
    current_app.logger.info("Started game, %s playable words", len(get_words()))
    return state


# --------------------
# Basic routes
# --------------------
@bp.route("/")
def index():
    """Serve the game page."""
    return render_template("index.html", max_guesses=MAX_GUESSES, word_length=WORD_LENGTH)


# --------------------
# Single-player game API
# --------------------
@bp.route("/api/new-game", methods=["POST"])
def api_new_game():
    """Start a game with a freshly drawn secret word."""
    state = start_game()
    return jsonify(game_payload(state)), 200


@bp.route("/api/state", methods=["GET"])
def api_state():
    """Current game, as seen by the player."""
    state = load_game()
    if state is None:
        return jsonify({"success": False, "error": "No active game"}), 404
    return jsonify(game_payload(state)), 200


@bp.route("/api/guess", methods=["POST"])
def api_guess():
    """Score a guess and update the game."""
    state, outcome = play(guess_from(request.get_json(silent=True)))

    if state is None:
        return jsonify({"success": False, "error": "No active game"}), 400

    if isinstance(outcome, GuessError):
        payload = game_payload(state)
        payload.update({"success": False, "error": outcome.message, "code": outcome.code})
        return jsonify(payload), 400

    payload = game_payload(state)
    payload["guess"] = outcome.to_dict()
    return jsonify(payload), 200


@bp.route("/api/reset", methods=["POST"])
def api_reset():
    """Throw away the current game and start another one."""
    state = start_game(load_game())
    return jsonify(game_payload(state)), 200


# --------------------
# Socket.IO events
# --------------------
@socketio.on("connect")
def on_connect():
    """Handle new WebSocket connection."""
    emit("connected", {"max_guesses": MAX_GUESSES, "word_length": WORD_LENGTH})


@socketio.on("new_game")
def on_new_game(data=None):
    emit("game_state", game_payload(start_game()))


@socketio.on("reset_game")
def on_reset_game(data=None):
    emit("game_state", game_payload(start_game(load_game())))


@socketio.on("submit_guess")
def on_submit_guess(data):
    """Process player's word guess."""
    state, outcome = play(guess_from(data))

    if state is None:
        emit("guess_error", {"error": "No active game", "code": "no_game"})
        return

    if isinstance(outcome, GuessError):
        emit("guess_error", {"error": outcome.message, "code": outcome.code})
        return

    payload = game_payload(state)
    payload["guess"] = outcome.to_dict()
    emit("guess_feedback", payload)


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_DEBUG", "0").lower() in ("1", "true", "yes")
    socketio.run(app, host="0.0.0.0", port=port, debug=debug, allow_unsafe_werkzeug=True)
